from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, tzinfo
from enum import Enum
from typing import List, Optional, Set

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

DAY_LENGTH = timedelta(hours=24)


class BookingStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"
    COMPETITION = "competition"


NON_OCCUPYING_STATUSES: Set[str] = {BookingStatus.CANCELLED.value}


class Part(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., min_length=1)
    name: str
    parent_id: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("parent_id", "parentId")
    )

    @property
    def is_root(self) -> bool:
        return self.parent_id is None


class Resource(BaseModel):
    """A bookable facility and its ordered list of parts."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., min_length=1)
    name: str
    allow_whole_booking: bool = Field(
        default=True,
        validation_alias=AliasChoices("allow_whole_booking", "allowWholeBooking"),
    )
    parts: List[Part] = Field(default_factory=list)

    @field_validator("parts", mode="after")
    @classmethod
    def ensure_unique_part_ids(cls, parts: List[Part]) -> List[Part]:
        seen: Set[str] = set()
        for part in parts:
            if part.id in seen:
                msg = f"Duplicate part id found: {part.id}"
                raise ValueError(msg)
            seen.add(part.id)
        return parts

    def part(self, part_id: str) -> Part | None:
        for part in self.parts:
            if part.id == part_id:
                return part
        return None


class Booking(BaseModel):
    """A booking as supplied by the store. `part_id=None` targets the whole facility.

    Intervals are half-open `[start, end)`. The model accepts inverted intervals;
    the engines reject them so callers get a `MalformedIntervalError` instead of a
    pydantic error deep inside the store adapter.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., min_length=1)
    start: datetime = Field(validation_alias=AliasChoices("start", "startTime", "start_time"))
    end: datetime = Field(validation_alias=AliasChoices("end", "endTime", "end_time"))
    facility_id: str = Field(
        validation_alias=AliasChoices("facility_id", "facilityId", "resourceId", "resource_id")
    )
    part_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("part_id", "partId", "resourcePartId", "resource_part_id"),
    )
    status: str = BookingStatus.APPROVED.value
    title: str = ""

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, value: object) -> str:
        if isinstance(value, BookingStatus):
            return value.value
        return str(value or BookingStatus.APPROVED.value).strip().lower()

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    @property
    def occupies(self) -> bool:
        return self.status not in NON_OCCUPYING_STATUSES

    @property
    def is_whole_facility(self) -> bool:
        return self.part_id is None

    def overlaps(self, other: Booking) -> bool:
        return self.start < other.end and self.end > other.start


@dataclass(frozen=True)
class BlockedSlot:
    start: datetime
    end: datetime
    part_id: str | None
    blocked_by: str
    booking_id: str


@dataclass(frozen=True)
class ColumnAssignment:
    column: int
    total_columns: int


@dataclass(frozen=True)
class DayBounds:
    start: datetime

    @classmethod
    def for_date(cls, day: date, tz: tzinfo | None = None) -> DayBounds:
        return cls(datetime.combine(day, time.min, tzinfo=tz))

    @property
    def end(self) -> datetime:
        return self.start + DAY_LENGTH

    @property
    def day(self) -> date:
        return self.start.date()

    def contains_start(self, booking: Booking) -> bool:
        return self.start <= booking.start < self.end

    def intersects(self, booking: Booking) -> bool:
        return booking.start < self.end and booking.end > self.start


@dataclass(frozen=True)
class BookingPlacement:
    booking_id: str
    column: int
    total_columns: int
    left: float
    width: float
    top: float
    height: float
    joins_above: bool = False
    joins_below: bool = False


@dataclass(frozen=True)
class DayLayoutPlan:
    day: date
    total_columns: int
    placements: List[BookingPlacement]

    def placement(self, booking_id: str) -> BookingPlacement | None:
        for placement in self.placements:
            if placement.booking_id == booking_id:
                return placement
        return None
