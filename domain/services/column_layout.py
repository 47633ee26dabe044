from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from datetime import datetime, timedelta
from typing import Dict, List, Tuple

from domain.errors import validate_intervals, validate_unique_ids
from domain.models import Booking, ColumnAssignment

logger = logging.getLogger(__name__)


def booking_sort_key(booking: Booking) -> Tuple[datetime, timedelta, str]:
    """Start ascending, then longer bookings first, then id."""
    return (booking.start, -booking.duration, booking.id)


def sort_bookings(bookings: Iterable[Booking]) -> List[Booking]:
    return sorted(bookings, key=booking_sort_key)


def greedy_columns(ordered: Sequence[Booking]) -> Dict[str, int]:
    """Place each booking in the lowest column whose last booking has ended."""
    column_ends: List[datetime] = []
    columns: Dict[str, int] = {}
    for booking in ordered:
        column = 0
        while column < len(column_ends) and column_ends[column] > booking.start:
            column += 1
        if column == len(column_ends):
            column_ends.append(booking.end)
        else:
            column_ends[column] = booking.end
        columns[booking.id] = column
    return columns


def concurrency_groups(ordered: Sequence[Booking]) -> Dict[str, List[Booking]]:
    """For every booking, the bookings (itself included) that truly overlap it."""
    return {
        booking.id: [other for other in ordered if booking.overlaps(other)]
        for booking in ordered
    }


def widen(widths: Mapping[str, int], members: Iterable[str], required: int) -> Dict[str, int]:
    """Raise the width of each member to at least `required`. Never narrows."""
    updated = dict(widths)
    for booking_id in members:
        updated[booking_id] = max(updated.get(booking_id, 1), required)
    return updated


def local_widths(ordered: Sequence[Booking], columns: Mapping[str, int]) -> Dict[str, int]:
    widths: Dict[str, int] = {booking.id: 1 for booking in ordered}
    for group in concurrency_groups(ordered).values():
        required = max(columns[member.id] for member in group) + 1
        widths = widen(widths, (member.id for member in group), required)
    return widths


def assign_columns(day_bookings: Sequence[Booking]) -> Dict[str, ColumnAssignment]:
    """Lay out one day's bookings in side-by-side columns.

    No two truly overlapping bookings share a column, and every booking receives the
    same `total_columns`: the widest concurrency group of the day. The result depends
    only on the set of bookings, not on the order they are passed in.
    """
    if not day_bookings:
        return {}
    validate_intervals(day_bookings)
    validate_unique_ids(day_bookings)

    ordered = sort_bookings(day_bookings)
    columns = greedy_columns(ordered)
    widths = local_widths(ordered, columns)
    total_columns = max(widths.values())

    logger.debug("Assigned %d bookings to %d columns", len(ordered), total_columns)
    return {
        booking.id: ColumnAssignment(column=columns[booking.id], total_columns=total_columns)
        for booking in ordered
    }


def peak_concurrency(bookings: Iterable[Booking]) -> int:
    """Largest number of bookings in progress at the same instant."""
    events: List[Tuple[datetime, int]] = []
    for booking in bookings:
        events.append((booking.start, 1))
        events.append((booking.end, -1))
    # Ends sort before starts at the same instant: touching bookings do not overlap.
    events.sort(key=lambda event: (event[0], event[1]))
    current = peak = 0
    for _, delta in events:
        current += delta
        peak = max(peak, current)
    return peak
