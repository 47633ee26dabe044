from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from domain.models import ColumnAssignment, DayBounds
from domain.services.positioning import (
    PositioningConfig,
    clamp_to_day,
    column_box,
    next_adjacent_start,
    to_fraction,
    to_pixels,
)
from tests.helpers.calendar_fixtures import DAY, at, booking

BOUNDS = DayBounds(DAY)


def test_fraction_of_a_plain_booking() -> None:
    box = to_fraction(at("06:00"), at("12:00"), BOUNDS)

    assert box.left == pytest.approx(0.25)
    assert box.width == pytest.approx(0.25)
    assert box.margin_right == 0.0


def test_fraction_clamps_to_the_day() -> None:
    box = to_fraction(DAY - timedelta(hours=2), at("06:00"), BOUNDS)
    assert box.left == 0.0
    assert box.width == pytest.approx(0.25)

    overnight = to_fraction(at("18:00"), DAY + timedelta(days=1, hours=3), BOUNDS)
    assert overnight.left == pytest.approx(0.75)
    assert overnight.width == pytest.approx(0.25)


def test_short_bookings_keep_a_minimum_width() -> None:
    box = to_fraction(at("10:00"), at("10:01"), BOUNDS)

    assert box.width == pytest.approx(0.003)


def test_gap_reserved_only_for_a_close_follower() -> None:
    close = to_fraction(at("10:00"), at("11:00"), BOUNDS, following_start=at("11:05"))
    assert close.margin_right == pytest.approx(0.002)
    assert close.width == pytest.approx(1 / 24 - 0.002)

    far = to_fraction(at("10:00"), at("11:00"), BOUNDS, following_start=at("11:10"))
    assert far.margin_right == 0.0

    earlier = to_fraction(at("10:00"), at("11:00"), BOUNDS, following_start=at("10:59"))
    assert earlier.margin_right == 0.0


def test_pixels_use_a_minute_scale() -> None:
    box = to_pixels(at("09:30"), at("11:00"), BOUNDS)
    assert box.top == pytest.approx(570)
    assert box.height == pytest.approx(90)

    tiny = to_pixels(at("09:30"), at("09:35"), BOUNDS)
    assert tiny.height == 20

    config = PositioningConfig(pixels_per_minute=2)
    scaled = to_pixels(at("01:00"), at("02:00"), BOUNDS, config=config)
    assert scaled.top == pytest.approx(120)
    assert scaled.height == pytest.approx(120)


def test_pixels_clamp_at_midnight() -> None:
    box = to_pixels(at("23:00"), DAY + timedelta(days=1, hours=1), BOUNDS)

    assert box.top == pytest.approx(1380)
    assert box.height == pytest.approx(60)


def test_clamp_outside_the_day_collapses() -> None:
    start, end = clamp_to_day(datetime(2024, 3, 6, 9), datetime(2024, 3, 6, 10), BOUNDS)

    assert start == end == BOUNDS.end


def test_column_box_splits_width_evenly() -> None:
    left, width = column_box(ColumnAssignment(column=2, total_columns=4))

    assert left == pytest.approx(0.5)
    assert width == pytest.approx(0.25)


def test_next_adjacent_start_picks_the_earliest_close_follower() -> None:
    current = booking("a", "09:00", "10:00")
    others = [
        current,
        booking("far", "10:30", "11:00"),
        booking("next", "10:05", "11:00"),
        booking("first", "10:00", "10:30"),
    ]

    assert next_adjacent_start(current, others) == at("10:00")
    assert next_adjacent_start(current, others[:2]) is None
