"""daylog CLI - personal time log."""

import asyncio
import json
import logging
import sys
from datetime import date, datetime, time
from zoneinfo import ZoneInfo

import click

from .adapters.google_calendar import GoogleCalendarSource
from .adapters.sqlite_store import SQLiteDayStore
from .config import Config, load_config
from .core.intervals import IntervalKind
from .core.records import DayRecord
from .core.stats import format_duration
from .errors import DaylogError, ValidationError
from .manager import DayLogManager


def _manager(config: Config) -> DayLogManager:
    return DayLogManager(SQLiteDayStore(config.db_path), timezone=config.timezone)


def _calendar_source(config: Config) -> GoogleCalendarSource:
    return GoogleCalendarSource(
        config_folder=config.google_config_folder,
        calendars=config.google_calendars or None,
        client_secret_file=config.google_client_secret_file,
        timezone=config.timezone,
    )


def _target_date(value: str | None, manager: DayLogManager) -> date:
    if not value:
        return manager.today()
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise click.BadParameter(f"expected YYYY-MM-DD, got {value!r}") from None


def _parse_when(value: str, day: date, timezone: str) -> datetime:
    """Accept HH:MM (on the target day) or a full ISO timestamp."""
    tz = ZoneInfo(timezone)
    try:
        parsed = time.fromisoformat(value)
    except ValueError:
        pass
    else:
        # An offset typed by the user wins over the configured zone
        return datetime.combine(day, parsed, tzinfo=parsed.tzinfo or tz)
    try:
        dt = datetime.fromisoformat(value)
    except ValueError:
        raise click.BadParameter(f"expected HH:MM or an ISO timestamp, got {value!r}") from None
    return dt if dt.tzinfo else dt.replace(tzinfo=tz)


def _run(coro):
    """Run a manager coroutine, turning daylog errors into exit status 1."""
    try:
        return asyncio.run(coro)
    except ValidationError as e:
        for name, msg in e.errors.items():
            click.echo(f"Error: {name}: {msg}", err=True)
        sys.exit(1)
    except DaylogError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def _show_record(record: DayRecord, timezone: str, as_json: bool) -> None:
    """Shared day display logic."""
    if as_json:
        click.echo(json.dumps(record.to_dict(), indent=2))
        return

    click.echo(f"### {record.day.strftime('%A, %B %d')}")
    if record.is_empty:
        click.echo("No entries.")
        return

    tz = ZoneInfo(timezone)
    for interval in record.ordered():
        span = f"{interval.start.astimezone(tz):%H:%M}-{interval.end.astimezone(tz):%H:%M}"
        marker = "cal" if interval.kind is IntervalKind.SYNCED else "   "
        click.echo(f"  {span} [{marker}] {interval.title}  ({interval.id})")
    click.echo(f"Total: {format_duration(record.total_duration)}")


@click.group()
@click.version_option()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool):
    """daylog - personal time log."""
    if debug:
        logging.basicConfig(
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            level=logging.DEBUG,
        )


@main.command()
@click.argument("day", required=False)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def show(day: str | None, as_json: bool):
    """Show a day's entries (defaults to today)."""
    config = load_config()
    manager = _manager(config)
    target = _target_date(day, manager)
    record = _run(manager.get_day(config.owner_id, target))
    _show_record(record, config.timezone, as_json)


@main.command()
@click.argument("title")
@click.argument("start")
@click.argument("end")
@click.option("--date", "-d", "day", default=None, help="Date (YYYY-MM-DD), defaults to today")
@click.option("--description", default="", help="Free text notes")
def add(title: str, start: str, end: str, day: str | None, description: str):
    """Log a manual entry, e.g. daylog add Standup 09:00 09:15."""
    config = load_config()
    manager = _manager(config)
    target = _target_date(day, manager)
    record = _run(
        manager.add_manual_interval(
            config.owner_id,
            target,
            title=title,
            start=_parse_when(start, target, config.timezone),
            end=_parse_when(end, target, config.timezone),
            description=description,
        )
    )
    _show_record(record, config.timezone, as_json=False)


@main.command()
@click.argument("interval_id")
@click.option("--date", "-d", "day", default=None, help="Date (YYYY-MM-DD), defaults to today")
@click.option("--title", default=None)
@click.option("--start", default=None, help="HH:MM or ISO timestamp")
@click.option("--end", default=None, help="HH:MM or ISO timestamp")
@click.option("--description", default=None)
def edit(
    interval_id: str,
    day: str | None,
    title: str | None,
    start: str | None,
    end: str | None,
    description: str | None,
):
    """Change a manual entry."""
    config = load_config()
    manager = _manager(config)
    target = _target_date(day, manager)

    patch: dict = {}
    if title is not None:
        patch["title"] = title
    if description is not None:
        patch["description"] = description
    if start is not None:
        patch["start"] = _parse_when(start, target, config.timezone)
    if end is not None:
        patch["end"] = _parse_when(end, target, config.timezone)
    if not patch:
        click.echo("Nothing to change.")
        return

    record = _run(manager.edit_manual_interval(config.owner_id, target, interval_id, **patch))
    _show_record(record, config.timezone, as_json=False)


@main.command("rm")
@click.argument("interval_id")
@click.option("--date", "-d", "day", default=None, help="Date (YYYY-MM-DD), defaults to today")
def remove(interval_id: str, day: str | None):
    """Remove an entry (manual or synced)."""
    config = load_config()
    manager = _manager(config)
    target = _target_date(day, manager)
    record = _run(manager.remove_interval(config.owner_id, target, interval_id))
    _show_record(record, config.timezone, as_json=False)


@main.command()
@click.option("--date", "-d", "day", default=None, help="Date (YYYY-MM-DD), defaults to today")
def sync(day: str | None):
    """Import a day's Google Calendar events."""
    config = load_config()
    manager = _manager(config)
    target = _target_date(day, manager)
    result = _run(manager.sync_from_source(config.owner_id, target, _calendar_source(config)))
    click.echo(f"✓ Synced {result.entries_added} calendar entries")
    _show_record(result.record, config.timezone, as_json=False)


@main.command()
@click.option("--date", "-d", "day", default=None, help="Date (YYYY-MM-DD), defaults to today")
@click.confirmation_option(prompt="Delete every entry for this day?")
def clear(day: str | None):
    """Delete a day's record."""
    config = load_config()
    manager = _manager(config)
    target = _target_date(day, manager)
    _run(manager.delete_day(config.owner_id, target))
    click.echo(f"✓ Cleared {target}")


@main.command()
@click.option("--days", "-n", type=int, default=None, help="Window length (defaults to WINDOW_DAYS)")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def stats(days: int | None, as_json: bool):
    """Show statistics for the last N days."""
    config = load_config()
    manager = _manager(config)
    result = _run(manager.get_stats(config.owner_id, days or config.window_days))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    best = result.most_productive_day
    click.echo(f"Last {result.days_in_window} days")
    click.echo(f"  Total time:     {format_duration(result.total_duration)}")
    click.echo(f"  Avg/day:        {format_duration(result.average_duration)}")
    click.echo(f"  Entries:        {result.total_entries} ({result.manual_entries} manual, {result.synced_entries} calendar)")
    click.echo(f"  Days tracked:   {result.days_tracked}")
    if best:
        click.echo(f"  Most productive: {best.day.strftime('%A, %b %d')} ({format_duration(best.total_duration)})")


@main.command("cal-auth")
def cal_auth():
    """Connect Google Calendar."""
    config = load_config()
    if _calendar_source(config).authenticate():
        click.echo("✓ Google Calendar connected")
    else:
        click.echo("Error: authentication failed (is GOOGLE_CLIENT_SECRET_FILE set?)", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
