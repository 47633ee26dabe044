from __future__ import annotations

from datetime import datetime
from functools import lru_cache
from pathlib import Path

from domain.models import Booking, Part, Resource

DAY = datetime(2024, 3, 4)


@lru_cache(maxsize=1)
def repo_root() -> Path:
    for parent in Path(__file__).resolve().parents:
        if (parent / "pyproject.toml").exists():
            return parent
    raise RuntimeError("Repository root not found")


def at(clock: str, day: datetime = DAY) -> datetime:
    hours, minutes = (int(token) for token in clock.split(":"))
    return day.replace(hour=hours, minute=minutes)


def booking(
    booking_id: str,
    start: str,
    end: str,
    part_id: str | None = None,
    *,
    facility_id: str = "court-a",
    status: str = "approved",
) -> Booking:
    return Booking(
        id=booking_id,
        start=at(start),
        end=at(end),
        facility_id=facility_id,
        part_id=part_id,
        status=status,
    )


def make_resource(*, allow_whole_booking: bool = True) -> Resource:
    """Court A: two halves, Half A split into two quarters."""
    return Resource(
        id="court-a",
        name="Court A",
        allow_whole_booking=allow_whole_booking,
        parts=[
            Part(id="half-b", name="Half B"),
            Part(id="quarter-a2", name="Quarter A2", parent_id="half-a"),
            Part(id="half-a", name="Half A"),
            Part(id="quarter-a1", name="Quarter A1", parent_id="half-a"),
        ],
    )
