from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from domain.models import Booking


class BookingInputError(ValueError):
    """Input handed to the calendar engines is inconsistent."""


class MalformedIntervalError(BookingInputError):
    def __init__(self, booking_id: str, start: datetime, end: datetime) -> None:
        self.booking_id = booking_id
        self.start = start
        self.end = end
        super().__init__(
            f"Booking {booking_id} has an empty or inverted interval: "
            f"{start.isoformat()} -> {end.isoformat()}"
        )


class DanglingReferenceError(BookingInputError):
    def __init__(self, facility_id: str, missing_id: str, referenced_by: str) -> None:
        self.facility_id = facility_id
        self.missing_id = missing_id
        self.referenced_by = referenced_by
        super().__init__(
            f"Facility {facility_id} has no part {missing_id} (referenced by {referenced_by})"
        )


class DuplicateBookingError(BookingInputError):
    def __init__(self, booking_id: str) -> None:
        self.booking_id = booking_id
        super().__init__(f"Booking id {booking_id} appears more than once")


class TimezoneMismatchError(BookingInputError):
    def __init__(self, booking_id: str) -> None:
        self.booking_id = booking_id
        super().__init__(
            f"Booking {booking_id} mixes timezone-aware and naive timestamps with the rest"
            " of the calendar input"
        )


def _is_aware(moment: datetime) -> bool:
    return moment.tzinfo is not None and moment.utcoffset() is not None


def validate_timezones(bookings: Iterable[Booking], reference: datetime | None = None) -> None:
    """All timestamps must agree with `reference` (or the first booking) on awareness."""
    expected = _is_aware(reference) if reference is not None else None
    for booking in bookings:
        if expected is None:
            expected = _is_aware(booking.start)
        if _is_aware(booking.start) != expected or _is_aware(booking.end) != expected:
            raise TimezoneMismatchError(booking.id)


def validate_intervals(bookings: Iterable[Booking]) -> None:
    bookings = list(bookings)
    validate_timezones(bookings)
    for booking in bookings:
        if booking.end <= booking.start:
            raise MalformedIntervalError(booking.id, booking.start, booking.end)


def validate_unique_ids(bookings: Iterable[Booking]) -> None:
    seen: set[str] = set()
    for booking in bookings:
        if booking.id in seen:
            raise DuplicateBookingError(booking.id)
        seen.add(booking.id)
