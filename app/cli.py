from __future__ import annotations

import logging
from dataclasses import asdict
from datetime import date, datetime
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from adapters.filesystem.booking_repository import FileSystemBookingSource
from adapters.filesystem.facility_catalog import FileSystemFacilityCatalog
from adapters.filesystem.json_utils import dump_json_bytes
from adapters.layout.day_grid import DayGridLayoutEngine
from adapters.layout.timeline import FacilityTimelineBuilder
from app.config import AppSettings, load_settings
from app.log_setup import configure_logging
from domain.errors import BookingInputError
from domain.models import Booking, DayBounds, Resource
from domain.services.blocked_slots import compute_blocked_slots

app = typer.Typer(no_args_is_help=True)
console = Console()
logger = logging.getLogger(__name__)


@app.callback()
def main(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(None, "--config", help="YAML settings file."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output."),
) -> None:
    try:
        settings = load_settings(config)
    except FileNotFoundError as exc:
        console.print(f"[red]{exc}[/]")
        raise typer.Exit(code=1) from exc
    configure_logging("DEBUG" if verbose else settings.log_level)
    ctx.obj = settings


def _parse_day(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise typer.BadParameter(f"Expected YYYY-MM-DD, got {value!r}") from exc


def _fmt(moment: datetime) -> str:
    return moment.strftime("%Y-%m-%d %H:%M")


def _load_facility(settings: AppSettings, facility_id: str) -> Resource:
    catalog = FileSystemFacilityCatalog(settings.data.facilities_path)
    try:
        return catalog.get(facility_id)
    except FileNotFoundError as exc:
        console.print(f"[red]Facility file not found:[/] {settings.data.facilities_path}")
        raise typer.Exit(code=1) from exc
    except KeyError as exc:
        console.print(f"[red]Unknown facility:[/] {facility_id}")
        raise typer.Exit(code=1) from exc
    except ValidationError as exc:
        raise _input_error(exc) from exc


def _load_bookings(
    settings: AppSettings, bounds: DayBounds, facility_id: str | None = None
) -> list[Booking]:
    source = FileSystemBookingSource(settings.data.bookings_path, bounds.start.tzinfo)
    try:
        return source.load_window(bounds.start, bounds.end, facility_id)
    except FileNotFoundError as exc:
        console.print(f"[red]Booking file not found:[/] {settings.data.bookings_path}")
        raise typer.Exit(code=1) from exc
    except ValidationError as exc:
        raise _input_error(exc) from exc


def _input_error(exc: Exception) -> typer.Exit:
    logger.error("Rejected calendar input: %s", exc)
    console.print(f"[red]Invalid input:[/] {exc}")
    return typer.Exit(code=2)


@app.command("blocked")
def blocked(
    ctx: typer.Context,
    facility_id: str = typer.Argument(..., help="Facility id."),
    day: str = typer.Option(..., "--date", help="Day to inspect (YYYY-MM-DD)."),
    part_id: Optional[str] = typer.Option(
        None, "--part", help="Part id; omit for the whole facility."
    ),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of a table."),
) -> None:
    settings: AppSettings = ctx.obj
    bounds = DayBounds.for_date(_parse_day(day), settings.layout.zone())
    resource = _load_facility(settings, facility_id)
    bookings = _load_bookings(settings, bounds, facility_id)
    try:
        slots = compute_blocked_slots(
            resource,
            part_id,
            bookings,
            propagation=settings.blocking.propagation,
            whole_label_template=settings.blocking.whole_label_template,
        )
    except BookingInputError as exc:
        raise _input_error(exc) from exc

    if as_json:
        typer.echo(dump_json_bytes([asdict(slot) for slot in slots]).decode("utf-8"))
        return
    if not slots:
        console.print(f"[yellow]{part_id or resource.name} is not blocked on {bounds.day}[/]")
        return
    table = Table(title=f"Blocked: {resource.name} / {part_id or 'whole facility'}")
    table.add_column("Start")
    table.add_column("End")
    table.add_column("Blocked by")
    table.add_column("Booking")
    for slot in slots:
        table.add_row(_fmt(slot.start), _fmt(slot.end), slot.blocked_by, slot.booking_id)
    console.print(table)


@app.command("layout")
def layout(
    ctx: typer.Context,
    day: str = typer.Option(..., "--date", help="Day to lay out (YYYY-MM-DD)."),
    facility_id: Optional[str] = typer.Option(
        None, "--facility", help="Restrict to one facility."
    ),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of a table."),
) -> None:
    settings: AppSettings = ctx.obj
    bounds = DayBounds.for_date(_parse_day(day), settings.layout.zone())
    bookings = _load_bookings(settings, bounds, facility_id)
    engine = DayGridLayoutEngine(settings.layout.to_positioning_config())
    try:
        plan = engine.build_plan(bookings, bounds)
    except BookingInputError as exc:
        raise _input_error(exc) from exc

    if as_json:
        typer.echo(dump_json_bytes(asdict(plan)).decode("utf-8"))
        return
    if not plan.placements:
        console.print(f"[yellow]No bookings on {bounds.day}[/]")
        return
    table = Table(title=f"{bounds.day}: {plan.total_columns} column(s)")
    for header in ("Booking", "Column", "Left", "Width", "Top px", "Height px"):
        table.add_column(header)
    for placement in plan.placements:
        table.add_row(
            placement.booking_id,
            f"{placement.column + 1}/{placement.total_columns}",
            f"{placement.left:.3f}",
            f"{placement.width:.3f}",
            f"{placement.top:.0f}",
            f"{placement.height:.0f}",
        )
    console.print(table)


@app.command("timeline")
def timeline(
    ctx: typer.Context,
    facility_id: str = typer.Argument(..., help="Facility id."),
    day: str = typer.Option(..., "--date", help="Day to show (YYYY-MM-DD)."),
) -> None:
    settings: AppSettings = ctx.obj
    bounds = DayBounds.for_date(_parse_day(day), settings.layout.zone())
    resource = _load_facility(settings, facility_id)
    bookings = _load_bookings(settings, bounds)
    builder = FacilityTimelineBuilder(
        settings.layout.to_positioning_config(),
        propagation=settings.blocking.propagation,
        whole_label_template=settings.blocking.whole_label_template,
    )
    try:
        rows = builder.build(resource, bookings, bounds)
    except BookingInputError as exc:
        raise _input_error(exc) from exc

    table = Table(title=f"{resource.name} on {bounds.day}")
    table.add_column("Row", no_wrap=True)
    table.add_column("Bookings")
    table.add_column("Blocked")
    for row in rows:
        label = f"  {row.label}" if row.is_child else row.label
        own = ", ".join(
            f"{entry.booking.start:%H:%M}-{entry.booking.end:%H:%M}" for entry in row.entries
        )
        blocked_by = ", ".join(
            f"{block.slot.start:%H:%M}-{block.slot.end:%H:%M} ({block.slot.blocked_by})"
            for block in row.blocks
        )
        table.add_row(label, own or "-", blocked_by or "-")
    console.print(table)


if __name__ == "__main__":
    app()
