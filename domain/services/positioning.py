from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Tuple

from domain.models import DAY_LENGTH, Booking, ColumnAssignment, DayBounds


@dataclass(frozen=True)
class PositioningConfig:
    min_width_fraction: float = 0.003
    gap_fraction: float = 0.002
    adjacency_threshold: timedelta = timedelta(minutes=10)
    adjacency_tolerance: timedelta = timedelta(minutes=1)
    pixels_per_minute: float = 1.0
    min_height_px: float = 20.0


@dataclass(frozen=True)
class FractionBox:
    left: float
    width: float
    margin_right: float = 0.0


@dataclass(frozen=True)
class PixelBox:
    top: float
    height: float


def clamp_to_day(start: datetime, end: datetime, bounds: DayBounds) -> Tuple[datetime, datetime]:
    clamped_start = min(max(start, bounds.start), bounds.end)
    clamped_end = max(min(end, bounds.end), clamped_start)
    return clamped_start, clamped_end


def to_fraction(
    start: datetime,
    end: datetime,
    bounds: DayBounds,
    *,
    following_start: datetime | None = None,
    config: PositioningConfig | None = None,
) -> FractionBox:
    """Horizontal placement of an interval as fractions of the day.

    When `following_start` begins within the adjacency threshold after this interval
    ends, a small trailing gap is carved out of the width so back-to-back bookings
    stay visually separate.
    """
    config = config or PositioningConfig()
    clamped_start, clamped_end = clamp_to_day(start, end, bounds)
    left = (clamped_start - bounds.start) / DAY_LENGTH
    width = (clamped_end - clamped_start) / DAY_LENGTH

    gap = 0.0
    if following_start is not None:
        distance = following_start - clamped_end
        if timedelta(0) <= distance < config.adjacency_threshold:
            gap = config.gap_fraction

    return FractionBox(
        left=left,
        width=max(config.min_width_fraction, width - gap),
        margin_right=gap,
    )


def to_pixels(
    start: datetime,
    end: datetime,
    bounds: DayBounds,
    *,
    config: PositioningConfig | None = None,
) -> PixelBox:
    """Vertical placement on a 1440-minute day scale."""
    config = config or PositioningConfig()
    clamped_start, clamped_end = clamp_to_day(start, end, bounds)
    start_minutes = (clamped_start - bounds.start) / timedelta(minutes=1)
    end_minutes = (clamped_end - bounds.start) / timedelta(minutes=1)
    height = (end_minutes - start_minutes) * config.pixels_per_minute
    return PixelBox(
        top=start_minutes * config.pixels_per_minute,
        height=max(config.min_height_px, height),
    )


def column_box(assignment: ColumnAssignment) -> Tuple[float, float]:
    width = 1.0 / assignment.total_columns
    return assignment.column * width, width


def next_adjacent_start(
    booking: Booking,
    others: Iterable[Booking],
    *,
    threshold: timedelta = timedelta(minutes=10),
    end: datetime | None = None,
) -> datetime | None:
    """Earliest start of another booking beginning less than `threshold` after `end`."""
    reference = end if end is not None else booking.end
    candidates = [
        other.start
        for other in others
        if other.id != booking.id and timedelta(0) <= other.start - reference < threshold
    ]
    return min(candidates, default=None)
