from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from domain.models import Booking, DayBounds, DayLayoutPlan


class DayLayoutEngine(Protocol):
    def build_plan(self, bookings: Sequence[Booking], bounds: DayBounds) -> DayLayoutPlan:
        ...
