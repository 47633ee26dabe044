from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Protocol

from domain.models import Booking, Resource


class BookingSource(Protocol):
    def load_window(
        self, start: datetime, end: datetime, facility_id: str | None = None
    ) -> Sequence[Booking]: ...


class FacilityCatalog(Protocol):
    def load_all(self) -> Sequence[Resource]: ...

    def get(self, facility_id: str) -> Resource: ...
