from __future__ import annotations

import logging
from datetime import datetime, timezone, tzinfo
from pathlib import Path
from typing import List

from adapters.filesystem.json_utils import load_records
from domain.models import Booking, BookingStatus
from domain.ports.repositories import BookingSource

logger = logging.getLogger(__name__)

# Rejected requests never reach the calendar; the engines only drop cancelled bookings.
HIDDEN_STATUSES = frozenset({BookingStatus.REJECTED.value})


class FileSystemBookingSource(BookingSource):
    """Read-only booking store backed by a single JSON file.

    Timestamps are normalised to `zone` on load: aware values are converted into it and
    naive values are read as local to it. Without a zone, aware values become naive UTC,
    which matches day bounds built without a zone.
    """

    def __init__(self, path: Path, zone: tzinfo | None = None) -> None:
        self.path = path
        self.zone = zone

    def load_all(self) -> List[Booking]:
        bookings = [
            self._normalise(Booking.model_validate(item))
            for item in load_records(self.path, "bookings")
        ]
        logger.debug("Loaded %d bookings from %s", len(bookings), self.path)
        return bookings

    def load_window(
        self, start: datetime, end: datetime, facility_id: str | None = None
    ) -> List[Booking]:
        return [
            booking
            for booking in self.load_all()
            if booking.status not in HIDDEN_STATUSES
            and booking.start < end
            and booking.end > start
            and (facility_id is None or booking.facility_id == facility_id)
        ]

    def _normalise(self, booking: Booking) -> Booking:
        start = self._to_zone(booking.start)
        end = self._to_zone(booking.end)
        if start is booking.start and end is booking.end:
            return booking
        return booking.model_copy(update={"start": start, "end": end})

    def _to_zone(self, moment: datetime) -> datetime:
        aware = moment.tzinfo is not None and moment.utcoffset() is not None
        if self.zone is None:
            return moment.astimezone(timezone.utc).replace(tzinfo=None) if aware else moment
        return moment.astimezone(self.zone) if aware else moment.replace(tzinfo=self.zone)
