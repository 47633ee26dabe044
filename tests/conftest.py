from __future__ import annotations

import os
from collections.abc import Callable, Generator
from pathlib import Path

import pytest

from app.config import AppSettings, DataSettings
from domain.models import Resource
from tests.helpers.calendar_fixtures import make_resource, repo_root


def _clear_fcal_env() -> None:
    for key in list(os.environ):
        if key.startswith("FCAL_"):
            os.environ.pop(key, None)


_clear_fcal_env()


@pytest.fixture(autouse=True)
def clear_fcal_env() -> Generator[None, None, None]:
    _clear_fcal_env()
    yield
    _clear_fcal_env()


@pytest.fixture
def court() -> Resource:
    return make_resource()


@pytest.fixture
def data_settings() -> DataSettings:
    data_dir = repo_root() / "examples" / "data"
    return DataSettings(
        bookings_path=data_dir / "bookings.json",
        facilities_path=data_dir / "facilities.json",
    )


@pytest.fixture
def app_settings(data_settings: DataSettings) -> AppSettings:
    return AppSettings(data=data_settings)


@pytest.fixture
def config_file_factory(tmp_path: Path, data_settings: DataSettings) -> Callable[..., Path]:
    def _factory(extra: str = "") -> Path:
        path = tmp_path / "calendar.yaml"
        path.write_text(
            "data:\n"
            f"  bookings_path: {data_settings.bookings_path}\n"
            f"  facilities_path: {data_settings.facilities_path}\n" + extra,
            encoding="utf-8",
        )
        return path

    return _factory
