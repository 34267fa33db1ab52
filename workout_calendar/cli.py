"""Developer CLI for the workout calendar.

Works directly against the configured database, using the same
ScheduleService code path as the API.
"""

from __future__ import annotations

import calendar
import os
from datetime import date

import typer
import uvicorn
from loguru import logger
from rich.console import Console
from rich.table import Table

from workout_calendar.config.settings import settings
from workout_calendar.core.logger import setup_logger
from workout_calendar.db.session import create_tables
from workout_calendar.schedule.dates import format_date_key, parse_date_key
from workout_calendar.schedule.errors import ScheduleError
from workout_calendar.schedule.models import EditScope, RepeatRule, RepeatType, SeriesPayload
from workout_calendar.schedule.persistence import SqlSeriesRepository
from workout_calendar.schedule.service import ScheduleService
from workout_calendar.schedule.store import SeriesStore

console = Console()

app = typer.Typer(
    name="workout-calendar",
    help="Workout calendar CLI - inspect and edit scheduled workouts",
    add_completion=False,
)

DEFAULT_USER_ID = "cli-user"
DEFAULT_HOST = os.getenv("SERVER_HOST", "127.0.0.1")


def _service() -> ScheduleService:
    setup_logger(level=settings.log_level, log_file=settings.log_file, serialize=settings.log_serialize)
    create_tables()
    repository = SqlSeriesRepository()
    # Short-lived process: write snapshots synchronously.
    store = SeriesStore(repository.load_state(), repository)
    return ScheduleService(store, search_horizon_days=settings.schedule_search_horizon_days)


def _parse_day(value: str) -> date:
    day = parse_date_key(value)
    if day is None:
        raise typer.BadParameter(f"Expected YYYY-MM-DD, got {value!r}")
    return day


@app.command()
def month(
    year: int = typer.Argument(..., help="Year"),
    month_number: int = typer.Argument(..., min=1, max=12, help="Month (1-12)"),
    user_id: str = typer.Option(DEFAULT_USER_ID, "--user-id", help="Owner id"),
) -> None:
    """Show every scheduled occurrence in a month."""
    service = _service()
    by_day = service.occurrences_in_month(user_id, year, month_number)

    table = Table(title=f"{calendar.month_name[month_number]} {year}")
    table.add_column("Day", justify="right")
    table.add_column("Workout")
    table.add_column("Time")
    table.add_column("Repeat")
    table.add_column("Done", justify="center")
    table.add_column("Series", style="dim")
    for day, occurrences in sorted(by_day.items()):
        for occurrence in occurrences:
            series = occurrence.series
            table.add_row(
                str(day),
                series.payload.name,
                str(series.time) if series.time else "",
                str(series.repeat.type),
                "[green]✓[/green]" if occurrence.completed else "",
                series.id,
            )
    console.print(table)


@app.command()
def day(
    on: str = typer.Argument(..., help="Date (YYYY-MM-DD)"),
    user_id: str = typer.Option(DEFAULT_USER_ID, "--user-id", help="Owner id"),
) -> None:
    """List workouts scheduled on one day."""
    service = _service()
    occurrences = service.occurrences_on_date(user_id, _parse_day(on))
    if not occurrences:
        console.print(f"[yellow]Nothing scheduled on {on}[/yellow]")
        return
    for occurrence in occurrences:
        status = "[green]done[/green]" if occurrence.completed else "planned"
        console.print(f"{occurrence.series.payload.name} ({status}) [dim]{occurrence.series.id}[/dim]")


@app.command()
def add(
    name: str = typer.Argument(..., help="Workout name"),
    on: str = typer.Argument(..., help="Anchor date (YYYY-MM-DD)"),
    repeat: RepeatType = typer.Option(RepeatType.NEVER, "--repeat", help="Repeat rule"),
    days: list[int] = typer.Option([], "--day", help="Weekday for custom repeat (0 = Sunday), repeatable"),
    interval: int | None = typer.Option(None, "--interval", help="Day count for interval repeat"),
    template_id: str | None = typer.Option(None, "--template-id", help="Linked template id"),
    user_id: str = typer.Option(DEFAULT_USER_ID, "--user-id", help="Owner id"),
) -> None:
    """Schedule a workout."""
    rule = RepeatRule.coerce(str(repeat), days, interval)
    if rule.type != repeat:
        raise typer.BadParameter(f"Invalid parameters for repeat={repeat}")
    service = _service()
    series = service.create(user_id, _parse_day(on), SeriesPayload(name=name, template_id=template_id), repeat=rule)
    console.print(f"[green]Scheduled[/green] {name} on {format_date_key(series.anchor_date)} [dim]{series.id}[/dim]")


@app.command()
def toggle(
    series_id: str = typer.Argument(..., help="Series id"),
    on: str = typer.Argument(..., help="Occurrence date (YYYY-MM-DD)"),
    user_id: str = typer.Option(DEFAULT_USER_ID, "--user-id", help="Owner id"),
) -> None:
    """Toggle completion of one occurrence."""
    service = _service()
    try:
        completed = service.toggle(user_id, series_id, _parse_day(on))
    except ScheduleError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1) from e
    console.print("[green]completed[/green]" if completed else "[yellow]not completed[/yellow]")


@app.command()
def remove(
    series_id: str = typer.Argument(..., help="Series id"),
    on: str | None = typer.Option(None, "--date", help="Occurrence date; required unless scope is all"),
    scope: EditScope = typer.Option(EditScope.ALL, "--scope", help="one | forward | all"),
    user_id: str = typer.Option(DEFAULT_USER_ID, "--user-id", help="Owner id"),
) -> None:
    """Delete one occurrence, this and following, or the whole series."""
    service = _service()
    try:
        result = service.edit(user_id, series_id, scope, _parse_day(on) if on else None)
    except (ScheduleError, ValueError) as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1) from e
    console.print("[green]Series deleted[/green]" if result.deleted else "[green]Occurrences removed[/green]")


@app.command()
def server(
    host: str = typer.Option(DEFAULT_HOST, "--host", "-h", help="Host to bind to"),
    port: int = typer.Option(8000, "--port", "-p", help="Port to bind to"),
    reload: bool = typer.Option(False, "--reload", help="Enable auto-reload"),
) -> None:
    """Run the FastAPI server."""
    logger.info(f"Starting FastAPI server on {host}:{port} (reload={reload})")
    uvicorn.run("workout_calendar.main:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    app()
