from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from datetime import datetime
from typing import List, Literal, Tuple

from domain.errors import validate_intervals
from domain.hierarchy import PartHierarchy
from domain.models import BlockedSlot, Booking, Resource

logger = logging.getLogger(__name__)

Propagation = Literal["direct", "ancestry"]

WHOLE_FACILITY_LABEL = "Whole {name}"


def compute_blocked_slots(
    resource: Resource,
    target_part_id: str | None,
    bookings: Sequence[Booking],
    *,
    propagation: Propagation = "direct",
    whole_label_template: str = WHOLE_FACILITY_LABEL,
) -> List[BlockedSlot]:
    """Intervals during which `target_part_id` (None = whole facility) is unavailable.

    `bookings` must already belong to `resource`. A booking blocks the target when it
    covers the whole facility, when the target is the whole facility, or when the booked
    part is the target's parent or child. With `propagation="direct"` only one hop of the
    hierarchy is inspected; `"ancestry"` walks the full ancestor and descendant chains.
    Bookings on the target itself are not reported, they already occupy its row.
    """
    hierarchy = PartHierarchy.from_resource(resource)
    validate_intervals(bookings)
    for booking in bookings:
        if booking.part_id is not None:
            hierarchy.require(booking.part_id, f"booking {booking.id}")
    if target_part_id is not None:
        hierarchy.require(target_part_id, "blocked slot query")

    direct_only = propagation == "direct"
    slots: List[BlockedSlot] = []
    for booking in bookings:
        if not booking.occupies:
            continue
        label = _blocking_label(
            hierarchy, target_part_id, booking, direct_only, whole_label_template
        )
        if label is None:
            continue
        slots.append(
            BlockedSlot(
                start=booking.start,
                end=booking.end,
                part_id=target_part_id,
                blocked_by=label,
                booking_id=booking.id,
            )
        )

    slots.sort(key=lambda slot: (slot.start, slot.end, slot.booking_id))
    logger.debug(
        "Facility %s target %s: %d blocked slots from %d bookings",
        resource.id,
        target_part_id or "<whole>",
        len(slots),
        len(bookings),
    )
    return slots


def _blocking_label(
    hierarchy: PartHierarchy,
    target_part_id: str | None,
    booking: Booking,
    direct_only: bool,
    whole_label_template: str,
) -> str | None:
    if booking.part_id is None:
        if target_part_id is None:
            return None
        return whole_label_template.format(name=hierarchy.resource.name)

    booked_name = hierarchy.name_of(booking.part_id)
    if target_part_id is None:
        return booked_name
    if booking.part_id == target_part_id:
        return None
    if hierarchy.is_related(booking.part_id, target_part_id, direct_only=direct_only):
        return booked_name
    return None


def blocked_intervals(slots: Iterable[BlockedSlot]) -> List[Tuple[datetime, datetime]]:
    """Merge overlapping or touching blocked slots into disjoint intervals."""
    merged: List[Tuple[datetime, datetime]] = []
    for slot in sorted(slots, key=lambda item: (item.start, item.end)):
        if merged and slot.start <= merged[-1][1]:
            start, end = merged[-1]
            merged[-1] = (start, max(end, slot.end))
        else:
            merged.append((slot.start, slot.end))
    return merged


def is_blocked(
    resource: Resource,
    target_part_id: str | None,
    bookings: Sequence[Booking],
    start: datetime,
    end: datetime,
    *,
    propagation: Propagation = "direct",
) -> bool:
    """True when `[start, end)` cannot be booked on `target_part_id`.

    The range is unavailable when it intersects a slot blocked through the hierarchy
    or an occupying booking on the target itself.
    """
    slots = compute_blocked_slots(
        resource, target_part_id, bookings, propagation=propagation
    )
    if any(slot.start < end and slot.end > start for slot in slots):
        return True
    return any(
        booking.occupies
        and booking.part_id == target_part_id
        and booking.start < end
        and booking.end > start
        for booking in bookings
    )
