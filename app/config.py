from __future__ import annotations

import os
from datetime import timedelta, tzinfo
from pathlib import Path
from typing import ClassVar, Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import AliasChoices, BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic_settings.sources import PydanticBaseSettingsSource, YamlConfigSettingsSource

from domain.services.blocked_slots import WHOLE_FACILITY_LABEL
from domain.services.positioning import PositioningConfig

DEFAULT_CONFIG_PATH = Path("config/calendar.yaml")


class DataSettings(BaseModel):
    bookings_path: Path = Path("data/bookings.json")
    facilities_path: Path = Path("data/facilities.json")


class LayoutSettings(BaseModel):
    min_width_fraction: float = Field(default=0.003, ge=0.0, le=1.0)
    gap_fraction: float = Field(default=0.002, ge=0.0, le=1.0)
    adjacency_threshold_minutes: float = Field(default=10.0, ge=0.0)
    adjacency_tolerance_minutes: float = Field(default=1.0, ge=0.0)
    pixels_per_minute: float = Field(default=1.0, gt=0.0)
    min_height_px: float = Field(default=20.0, ge=0.0)
    timezone: str | None = None

    @field_validator("timezone", mode="before")
    @classmethod
    def normalize_timezone(cls, value: object) -> str | None:
        raw = str(value or "").strip()
        if not raw:
            return None
        try:
            ZoneInfo(raw)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            msg = f"layout.timezone is not a known IANA zone: {raw}"
            raise ValueError(msg) from exc
        return raw

    def zone(self) -> tzinfo | None:
        return ZoneInfo(self.timezone) if self.timezone else None

    def to_positioning_config(self) -> PositioningConfig:
        return PositioningConfig(
            min_width_fraction=self.min_width_fraction,
            gap_fraction=self.gap_fraction,
            adjacency_threshold=timedelta(minutes=self.adjacency_threshold_minutes),
            adjacency_tolerance=timedelta(minutes=self.adjacency_tolerance_minutes),
            pixels_per_minute=self.pixels_per_minute,
            min_height_px=self.min_height_px,
        )


class BlockingSettings(BaseModel):
    propagation: Literal["direct", "ancestry"] = "direct"
    whole_label_template: str = Field(
        default=WHOLE_FACILITY_LABEL,
        validation_alias=AliasChoices("whole_label_template", "whole_label"),
    )

    @field_validator("propagation", mode="before")
    @classmethod
    def normalize_propagation(cls, value: object) -> str:
        return str(value).strip().lower() if value else "direct"

    @field_validator("whole_label_template", mode="after")
    @classmethod
    def ensure_name_placeholder(cls, value: str) -> str:
        if "{name}" not in value:
            msg = "blocking.whole_label_template must contain a {name} placeholder"
            raise ValueError(msg)
        return value


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="FCAL_", env_nested_delimiter="__")

    log_level: str = "WARNING"
    data: DataSettings = DataSettings()
    layout: LayoutSettings = LayoutSettings()
    blocking: BlockingSettings = BlockingSettings()

    _yaml_path: ClassVar[Path | None] = None

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, value: object) -> str:
        return str(value).upper() if value else "WARNING"

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        sources: list[PydanticBaseSettingsSource] = [
            init_settings,
            env_settings,
            dotenv_settings,
            file_secret_settings,
        ]
        if cls._yaml_path:
            sources.append(YamlConfigSettingsSource(settings_cls, yaml_file=cls._yaml_path))
        return tuple(sources)


def load_settings(config_path: Path | None = None) -> AppSettings:
    env_path = os.getenv("FCAL_CONFIG_PATH")
    resolved_path: Path | None = None

    if config_path is not None:
        resolved_path = config_path
    elif env_path:
        resolved_path = Path(env_path)
    elif DEFAULT_CONFIG_PATH.exists():
        resolved_path = DEFAULT_CONFIG_PATH

    previous = AppSettings._yaml_path
    try:
        if resolved_path is not None:
            if not resolved_path.exists():
                msg = f"Config file not found: {resolved_path}"
                raise FileNotFoundError(msg)
            AppSettings._yaml_path = resolved_path
        return AppSettings()
    finally:
        AppSettings._yaml_path = previous
