from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import List

from domain.errors import validate_intervals, validate_timezones
from domain.hierarchy import PartHierarchy
from domain.models import BlockedSlot, Booking, DayBounds, Part, Resource
from domain.services.blocked_slots import (
    WHOLE_FACILITY_LABEL,
    Propagation,
    compute_blocked_slots,
)
from domain.services.positioning import (
    FractionBox,
    PositioningConfig,
    clamp_to_day,
    next_adjacent_start,
    to_fraction,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TimelineEntry:
    booking: Booking
    box: FractionBox


@dataclass(frozen=True)
class TimelineBlock:
    slot: BlockedSlot
    box: FractionBox


@dataclass(frozen=True)
class TimelineRow:
    part: Part | None
    label: str
    is_child: bool = False
    entries: List[TimelineEntry] = field(default_factory=list)
    blocks: List[TimelineBlock] = field(default_factory=list)

    @property
    def part_id(self) -> str | None:
        return self.part.id if self.part else None


class FacilityTimelineBuilder:
    """Horizontal per-facility timeline: one row per bookable target of a facility.

    The whole-facility row comes first when the facility allows whole bookings,
    followed by the parts in hierarchical display order. Each row carries its own
    bookings and the slots blocked for it by bookings elsewhere in the hierarchy.
    """

    def __init__(
        self,
        config: PositioningConfig | None = None,
        *,
        propagation: Propagation = "direct",
        whole_label_template: str = WHOLE_FACILITY_LABEL,
    ) -> None:
        self.config = config or PositioningConfig()
        self.propagation = propagation
        self.whole_label_template = whole_label_template

    def build(
        self, resource: Resource, bookings: Sequence[Booking], bounds: DayBounds
    ) -> List[TimelineRow]:
        hierarchy = PartHierarchy.from_resource(resource)
        validate_timezones(bookings, bounds.start)
        day_bookings = [
            booking
            for booking in bookings
            if booking.facility_id == resource.id and bounds.intersects(booking)
        ]
        validate_intervals(day_bookings)

        rows: List[TimelineRow] = []
        if resource.allow_whole_booking:
            rows.append(self._row(resource, None, resource.name, False, day_bookings, bounds))
        for part_row in hierarchy.display_order():
            rows.append(
                self._row(
                    resource,
                    part_row.part,
                    part_row.part.name,
                    part_row.is_child,
                    day_bookings,
                    bounds,
                )
            )
        logger.debug(
            "Timeline for %s on %s: %d rows, %d bookings",
            resource.id,
            bounds.day.isoformat(),
            len(rows),
            len(day_bookings),
        )
        return rows

    def _row(
        self,
        resource: Resource,
        part: Part | None,
        label: str,
        is_child: bool,
        day_bookings: Sequence[Booking],
        bounds: DayBounds,
    ) -> TimelineRow:
        part_id = part.id if part else None
        own = sorted(
            (booking for booking in day_bookings if booking.part_id == part_id),
            key=lambda booking: (booking.start, booking.id),
        )
        entries: List[TimelineEntry] = []
        for booking in own:
            _, clamped_end = clamp_to_day(booking.start, booking.end, bounds)
            following = next_adjacent_start(
                booking, own, threshold=self.config.adjacency_threshold, end=clamped_end
            )
            box = to_fraction(
                booking.start, booking.end, bounds, following_start=following, config=self.config
            )
            entries.append(TimelineEntry(booking=booking, box=box))

        slots = compute_blocked_slots(
            resource,
            part_id,
            day_bookings,
            propagation=self.propagation,
            whole_label_template=self.whole_label_template,
        )
        blocks = [
            TimelineBlock(
                slot=slot, box=to_fraction(slot.start, slot.end, bounds, config=self.config)
            )
            for slot in slots
        ]
        return TimelineRow(
            part=part, label=label, is_child=is_child, entries=entries, blocks=blocks
        )
