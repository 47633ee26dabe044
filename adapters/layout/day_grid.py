from __future__ import annotations

from collections.abc import Sequence
from typing import Dict, List

from domain.errors import validate_timezones
from domain.models import Booking, BookingPlacement, ColumnAssignment, DayBounds, DayLayoutPlan
from domain.ports.layout import DayLayoutEngine
from domain.services.column_layout import assign_columns, sort_bookings
from domain.services.positioning import PositioningConfig, clamp_to_day, column_box, to_pixels


class DayGridLayoutEngine(DayLayoutEngine):
    """Vertical day column: time runs top to bottom, overlaps sit side by side."""

    def __init__(self, config: PositioningConfig | None = None) -> None:
        self.config = config or PositioningConfig()

    def build_plan(self, bookings: Sequence[Booking], bounds: DayBounds) -> DayLayoutPlan:
        validate_timezones(bookings, bounds.start)
        day_bookings = [booking for booking in bookings if bounds.contains_start(booking)]
        columns = assign_columns(day_bookings)
        if not columns:
            return DayLayoutPlan(day=bounds.day, total_columns=0, placements=[])

        placements: List[BookingPlacement] = []
        for booking in sort_bookings(day_bookings):
            assignment = columns[booking.id]
            left, width = column_box(assignment)
            box = to_pixels(booking.start, booking.end, bounds, config=self.config)
            joins_above = self._has_neighbour(booking, day_bookings, columns, bounds, above=True)
            joins_below = self._has_neighbour(booking, day_bookings, columns, bounds, above=False)
            placements.append(
                BookingPlacement(
                    booking_id=booking.id,
                    column=assignment.column,
                    total_columns=assignment.total_columns,
                    left=left,
                    width=width,
                    top=box.top,
                    height=box.height,
                    joins_above=joins_above,
                    joins_below=joins_below,
                )
            )

        total_columns = next(iter(columns.values())).total_columns
        return DayLayoutPlan(day=bounds.day, total_columns=total_columns, placements=placements)

    def _has_neighbour(
        self,
        booking: Booking,
        day_bookings: Sequence[Booking],
        columns: Dict[str, ColumnAssignment],
        bounds: DayBounds,
        *,
        above: bool,
    ) -> bool:
        clamped_start, clamped_end = clamp_to_day(booking.start, booking.end, bounds)
        column = columns[booking.id].column
        tolerance = self.config.adjacency_tolerance
        for other in day_bookings:
            if other.id == booking.id or columns[other.id].column != column:
                continue
            edge, reference = (other.end, clamped_start) if above else (other.start, clamped_end)
            if abs(edge - reference) < tolerance:
                return True
        return False
