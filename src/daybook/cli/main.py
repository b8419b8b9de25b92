"""Main CLI application."""

import json
from datetime import date
from decimal import Decimal
from typing import Any, Optional

import click

from daybook import __version__
from daybook.cli.auth_commands import login, logout, signup, whoami
from daybook.cli.common import (
    console,
    fail,
    get_config,
    get_reporter,
    get_tracker,
    setup_logging,
)
from daybook.cli.config_commands import config
from daybook.cli.export_import_commands import export_command, import_command
from daybook.core.duration import format_number
from daybook.core.errors import DaybookError
from daybook.core.models import Entry, EntryKind, TimeEntry
from daybook.core.ranges import parse_day, parse_month, shift_anchor
from daybook.core.timeparse import match_time, parse_time_range
from daybook.core.tracker import EntryTracker


def _parse_day_option(value: Optional[str]) -> date:
    try:
        return parse_day(value)
    except ValueError as e:
        fail(e)


def _normalize_time(value: str) -> str:
    """Normalize a single time given as --start/--end."""
    matched = match_time(value)
    if matched is None:
        fail(f"Unrecognized time: '{value}'")
    return matched[0]


def _resolve_entry_day(tracker: EntryTracker, entry_id: str, day: Optional[str]) -> date:
    """Day an entry belongs to: from --date, or looked up by id."""
    if day:
        return _parse_day_option(day)
    found = tracker.find_entry(entry_id)
    if found is None:
        fail(f"Entry not found: {entry_id}")
    return found[0]


def _describe(entry: Entry) -> str:
    if isinstance(entry, TimeEntry):
        span = f"{entry.start_time} - {entry.end_time}" if entry.start_time else "no times"
        return f"{entry.task} ({span}, {format_number(entry.duration)}h)"
    return f"{entry.description} ({format_number(entry.amount)})"


def _decimal_default(value: Any) -> str:
    if isinstance(value, Decimal):
        return format_number(value)
    raise TypeError(f"Cannot serialize {type(value).__name__}")


@click.group()
@click.version_option(version=__version__)
@click.option("--data-dir", help="Custom data directory", type=click.Path())
@click.option(
    "--config",
    "config_path",
    envvar="DAYBOOK_CONFIG",
    type=click.Path(dir_okay=False),
    help="Configuration file (default: ~/.daybook/config.yml)",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.option("--no-color", is_flag=True, help="Disable colored output")
@click.pass_context
def cli(
    ctx: click.Context,
    data_dir: Optional[str],
    config_path: Optional[str],
    verbose: bool,
    no_color: bool,
) -> None:
    """Daybook - Log your time and expenses day by day.

    Record timed tasks and expenses, then review daily, weekly, monthly
    and yearly summaries or export them to CSV.
    """
    ctx.ensure_object(dict)
    ctx.obj["data_dir"] = data_dir
    ctx.obj["config_path"] = config_path

    setup_logging(get_config(ctx), verbose)

    if no_color:
        console.no_color = True


@cli.command(name="time")
@click.argument("task")
@click.argument("time_range", required=False)
@click.option("--start", help="Start time (e.g. 09:00 or 9am)")
@click.option("--end", help="End time (e.g. 17:30 or 5:30pm)")
@click.option("-d", "--date", "day", help="Day (YYYY-MM-DD, 'today', 'yesterday')")
@click.option("--save-option", is_flag=True, help="Also save the task as a reusable option")
@click.pass_context
def time_command(
    ctx: click.Context,
    task: str,
    time_range: Optional[str],
    start: Optional[str],
    end: Optional[str],
    day: Optional[str],
    save_option: bool,
) -> None:
    """Log a timed task.

    Example:
        daybook time "Writing" "9am to 5pm"
        daybook time "Standup" "9:30-9:45" -d yesterday
        daybook time "Review" --start 14:00 --end 15:30
    """
    target = _parse_day_option(day)

    if time_range:
        if start or end:
            fail("Give either a time range or --start/--end, not both")
        try:
            start, end = parse_time_range(time_range)
        except DaybookError as e:
            fail(e)
    elif start and end:
        start, end = _normalize_time(start), _normalize_time(end)
    else:
        fail("A time range such as '9am to 5pm' or both --start and --end are required")

    tracker = get_tracker(ctx)
    try:
        entry = tracker.add_time(target, task, start, end)
        if save_option:
            tracker.save_option(EntryKind.TIME, task)
    except (DaybookError, ValueError) as e:
        fail(e)

    console.print(f"[green]✓[/green] Logged time: {task}")
    console.print(f"  Time: {entry.start_time} → {entry.end_time}")
    console.print(f"  Duration: {format_number(entry.duration)}h")
    console.print(f"  Date: {target.isoformat()}")
    console.print(f"  ID: {entry.id}")


@cli.command()
@click.argument("description")
@click.argument("amount")
@click.option("-d", "--date", "day", help="Day (YYYY-MM-DD, 'today', 'yesterday')")
@click.option("--save-option", is_flag=True, help="Also save the description as an option")
@click.pass_context
def expense(
    ctx: click.Context,
    description: str,
    amount: str,
    day: Optional[str],
    save_option: bool,
) -> None:
    """Log an expense.

    Example:
        daybook expense "Coffee" 4.50
        daybook expense "Train ticket" 12 -d 2024-03-04
    """
    target = _parse_day_option(day)
    tracker = get_tracker(ctx)

    try:
        entry = tracker.add_expense(target, description, amount)
        if save_option:
            tracker.save_option(EntryKind.EXPENSE, description)
    except (DaybookError, ValueError) as e:
        fail(e)

    symbol = get_config(ctx).get("general.currency_symbol", "$")
    console.print(f"[green]✓[/green] Logged expense: {description}")
    console.print(f"  Amount: {symbol}{entry.amount:.2f}")
    console.print(f"  Date: {target.isoformat()}")
    console.print(f"  ID: {entry.id}")


@cli.command()
@click.argument("entry_id")
@click.option("-d", "--date", "day", help="Day of the entry (looked up by ID if omitted)")
@click.option("--task", help="New task label")
@click.option("--range", "time_range", help="New time range, e.g. '9am to 11am'")
@click.option("--start", help="New start time")
@click.option("--end", help="New end time")
@click.option("--description", help="New expense description")
@click.option("--amount", help="New expense amount")
@click.pass_context
def edit(
    ctx: click.Context,
    entry_id: str,
    day: Optional[str],
    task: Optional[str],
    time_range: Optional[str],
    start: Optional[str],
    end: Optional[str],
    description: Optional[str],
    amount: Optional[str],
) -> None:
    """Edit an entry, keeping its ID.

    Example:
        daybook edit 3f2a... --range "10am to 12pm"
        daybook edit 9b1c... --amount 5.25
    """
    tracker = get_tracker(ctx)
    target = _resolve_entry_day(tracker, entry_id, day)

    try:
        if time_range:
            start, end = parse_time_range(time_range)
        else:
            start = _normalize_time(start) if start else None
            end = _normalize_time(end) if end else None
        entry = tracker.update_entry(
            target,
            entry_id,
            task=task,
            start_time=start,
            end_time=end,
            description=description,
            amount=amount,
        )
    except (DaybookError, ValueError) as e:
        fail(e)

    console.print(f"[green]✓[/green] Updated: {_describe(entry)}")


@cli.command()
@click.argument("entry_id")
@click.option("-d", "--date", "day", help="Day of the entry (looked up by ID if omitted)")
@click.pass_context
def delete(ctx: click.Context, entry_id: str, day: Optional[str]) -> None:
    """Delete an entry.

    Example:
        daybook delete 3f2a...
    """
    tracker = get_tracker(ctx)
    target = _resolve_entry_day(tracker, entry_id, day)

    try:
        removed = tracker.delete_entry(target, entry_id)
    except (DaybookError, ValueError) as e:
        fail(e)

    console.print(f"[yellow]✓[/yellow] Deleted: {_describe(removed)}")


@cli.command()
@click.option("-d", "--date", "day", help="Day to show (default: today)")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def day(ctx: click.Context, day: Optional[str], as_json: bool) -> None:
    """Show the entries of one day.

    Example:
        daybook day
        daybook day -d yesterday
    """
    target = _parse_day_option(day)
    tracker = get_tracker(ctx)
    bucket = tracker.bucket(target)

    if as_json:
        data = {
            "date": target.isoformat(),
            "total_hours": bucket.total_hours,
            "total_amount": bucket.total_amount,
            "time": [
                {
                    "id": e.id,
                    "task": e.task,
                    "start_time": e.start_time,
                    "end_time": e.end_time,
                    "duration": e.duration,
                }
                for e in bucket.sorted_time_entries()
            ],
            "expense": [
                {"id": e.id, "description": e.description, "amount": e.amount}
                for e in bucket.expense
            ],
        }
        click.echo(json.dumps(data, indent=2, default=_decimal_default))
        return

    get_reporter(ctx).day_report(bucket, is_today=target == date.today())


@cli.command()
@click.argument("period", type=click.Choice(["week", "month", "year"]), default="week")
@click.option("-d", "--date", "day", help="Any day inside the period (default: today)")
@click.option("--offset", default=0, help="Shift by whole periods (-1 = previous)")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def summary(
    ctx: click.Context, period: str, day: Optional[str], offset: int, as_json: bool
) -> None:
    """Summarize a week, month or year.

    The period is the one containing --date; weeks start on Monday unless
    general.week_start says otherwise.

    Example:
        daybook summary week
        daybook summary month --offset -1
        daybook summary year -d 2023-06-01
    """
    anchor = shift_anchor(period, _parse_day_option(day), offset)
    tracker = get_tracker(ctx)
    date_range, result = tracker.summarize(period, anchor)

    if as_json:
        data = {
            "period": period,
            "start": date_range.start.isoformat(),
            "end": date_range.end.isoformat(),
            "total_time": result.total_time,
            "total_money": result.total_money,
            "task_breakdown": dict(result.ranked_tasks()),
            "expense_breakdown": dict(result.ranked_expenses()),
        }
        click.echo(json.dumps(data, indent=2, default=_decimal_default))
        return

    get_reporter(ctx).summary_report(result, date_range, period)


@cli.command()
@click.option("-m", "--month", help="Month to show (YYYY-MM, default: current)")
@click.option("--offset", default=0, help="Shift by whole months (-1 = previous)")
@click.pass_context
def calendar(ctx: click.Context, month: Optional[str], offset: int) -> None:
    """Show a month as a calendar grid.

    Example:
        daybook calendar
        daybook calendar -m 2024-02
    """
    try:
        anchor = parse_month(month) if month else date.today()
    except ValueError as e:
        fail(e)
    anchor = shift_anchor("month", anchor, offset)

    tracker = get_tracker(ctx)
    get_reporter(ctx).calendar_report(
        tracker.buckets, anchor, week_start=get_config(ctx).get("general.week_start")
    )


@cli.group()
def options() -> None:
    """Manage saved task and expense options."""
    pass


@options.command("list")
@click.option("--kind", type=click.Choice(["time", "expense"]), help="Only one kind")
@click.pass_context
def options_list(ctx: click.Context, kind: Optional[str]) -> None:
    """List saved options."""
    tracker = get_tracker(ctx)
    kinds = [EntryKind(kind)] if kind else list(EntryKind)

    found = False
    for entry_kind in kinds:
        for option in tracker.options(entry_kind):
            found = True
            console.print(
                f"[dim]{option.id}[/dim]  [cyan]{entry_kind.value}[/cyan]  {option.content}"
            )

    if not found:
        console.print("[yellow]No saved options[/yellow]")


@options.command("add")
@click.argument("kind", type=click.Choice(["time", "expense"]))
@click.argument("content")
@click.pass_context
def options_add(ctx: click.Context, kind: str, content: str) -> None:
    """Save a reusable task label or expense description.

    Example:
        daybook options add time "Deep work"
    """
    tracker = get_tracker(ctx)
    try:
        option = tracker.save_option(EntryKind(kind), content)
    except (DaybookError, ValueError) as e:
        fail(e)
    console.print(f"[green]✓[/green] Saved option: {option.content} ({option.id})")


@options.command("remove")
@click.argument("option_id")
@click.pass_context
def options_remove(ctx: click.Context, option_id: str) -> None:
    """Remove a saved option by ID."""
    tracker = get_tracker(ctx)
    try:
        tracker.delete_option(option_id)
    except (DaybookError, ValueError) as e:
        fail(e)
    console.print("[yellow]✓[/yellow] Option removed")


cli.add_command(signup)
cli.add_command(login)
cli.add_command(logout)
cli.add_command(whoami)
cli.add_command(export_command)
cli.add_command(import_command)
cli.add_command(config)


if __name__ == "__main__":
    cli(obj={})
