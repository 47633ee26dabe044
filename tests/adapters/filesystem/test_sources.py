from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from pydantic import ValidationError

from adapters.filesystem.booking_repository import FileSystemBookingSource
from adapters.filesystem.facility_catalog import FileSystemFacilityCatalog
from adapters.filesystem.json_utils import dump_json_bytes, load_records
from app.config import DataSettings


def test_booking_source_filters_by_window_and_facility(data_settings: DataSettings) -> None:
    source = FileSystemBookingSource(data_settings.bookings_path)

    day = source.load_window(datetime(2024, 3, 4), datetime(2024, 3, 5))
    assert [booking.id for booking in day] == ["b1", "b2", "b3", "b4", "b5"]

    morning = source.load_window(datetime(2024, 3, 4, 9), datetime(2024, 3, 4, 10), "court-a")
    assert [booking.id for booking in morning] == ["b1", "b2"]

    assert source.load_window(datetime(2024, 3, 4), datetime(2024, 3, 5), "hall") == []


def test_catalog_loads_resources(data_settings: DataSettings) -> None:
    catalog = FileSystemFacilityCatalog(data_settings.facilities_path)

    court = catalog.get("court-a")
    assert court.name == "Court A"
    assert [part.id for part in court.parts if part.parent_id == "half-a"] == [
        "quarter-a1",
        "quarter-a2",
    ]
    assert [resource.id for resource in catalog.load_all()] == ["court-a", "hall"]
    with pytest.raises(KeyError):
        catalog.get("missing")


def test_records_accept_bare_arrays(tmp_path: Path) -> None:
    path = tmp_path / "bookings.json"
    path.write_bytes(
        dump_json_bytes(
            [
                {
                    "id": "x",
                    "start": "2024-03-04T08:00:00",
                    "end": "2024-03-04T09:00:00",
                    "facility_id": "court-a",
                }
            ]
        )
    )

    assert [record["id"] for record in load_records(path, "bookings")] == ["x"]
    assert FileSystemBookingSource(path).load_all()[0].part_id is None


def test_records_reject_non_lists(tmp_path: Path) -> None:
    path = tmp_path / "bookings.json"
    path.write_bytes(b'{"bookings": {"id": "x"}}')

    with pytest.raises(ValueError, match="Expected a list of bookings"):
        load_records(path, "bookings")


def test_invalid_booking_record_raises_validation_error(tmp_path: Path) -> None:
    path = tmp_path / "bookings.json"
    path.write_bytes(b'[{"id": "x", "start": "not a date", "end": "2024-03-04T09:00:00"}]')

    with pytest.raises(ValidationError):
        FileSystemBookingSource(path).load_all()


def _write_bookings(path: Path, *records: dict[str, str]) -> Path:
    path.write_bytes(dump_json_bytes(list(records)))
    return path


def test_utc_store_timestamps_become_naive_without_a_zone(tmp_path: Path) -> None:
    path = _write_bookings(
        tmp_path / "bookings.json",
        {
            "id": "z",
            "startTime": "2024-03-04T09:00:00Z",
            "endTime": "2024-03-04T10:00:00.000Z",
            "resourceId": "court-a",
        },
    )

    loaded = FileSystemBookingSource(path).load_window(datetime(2024, 3, 4), datetime(2024, 3, 5))

    assert [(item.start, item.end) for item in loaded] == [
        (datetime(2024, 3, 4, 9), datetime(2024, 3, 4, 10))
    ]


def test_timestamps_are_moved_into_the_configured_zone(tmp_path: Path) -> None:
    zone = timezone(timedelta(hours=1))
    path = _write_bookings(
        tmp_path / "bookings.json",
        {
            "id": "utc",
            "start": "2024-03-04T09:00:00Z",
            "end": "2024-03-04T10:00:00Z",
            "facility_id": "court-a",
        },
        {
            "id": "local",
            "start": "2024-03-04T12:00:00",
            "end": "2024-03-04T13:00:00",
            "facility_id": "court-a",
        },
    )

    utc, local = FileSystemBookingSource(path, zone).load_all()

    assert utc.start == datetime(2024, 3, 4, 10, tzinfo=zone)
    assert utc.start.utcoffset() == timedelta(hours=1)
    assert local.start == datetime(2024, 3, 4, 12, tzinfo=zone)
    assert local.end.tzinfo is zone


def test_rejected_bookings_are_not_served(tmp_path: Path) -> None:
    base = {"start": "2024-03-04T09:00:00", "end": "2024-03-04T10:00:00", "facility_id": "court-a"}
    path = _write_bookings(
        tmp_path / "bookings.json",
        {"id": "kept", **base, "status": "cancelled"},
        {"id": "hidden", **base, "status": "rejected"},
    )
    source = FileSystemBookingSource(path)

    assert [item.id for item in source.load_all()] == ["kept", "hidden"]
    assert [item.id for item in source.load_window(datetime(2024, 3, 4), datetime(2024, 3, 5))] == [
        "kept"
    ]


def test_dump_serialises_datetimes_natively() -> None:
    payload = {"start": datetime(2024, 3, 4, 9, 30), "day": datetime(2024, 3, 4).date()}

    assert dump_json_bytes(payload) == (
        b'{\n  "start": "2024-03-04T09:30:00",\n  "day": "2024-03-04"\n}'
    )
