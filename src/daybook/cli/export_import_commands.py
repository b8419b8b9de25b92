"""Export and import CLI commands."""

from datetime import date
from pathlib import Path
from typing import Optional

import click

from daybook.cli.common import console, error_console, fail, get_config, get_tracker
from daybook.core.errors import DaybookError
from daybook.core.models import DateRange
from daybook.core.ranges import custom_range, parse_day, parse_month, resolve_range
from daybook.export_import import CSVExporter, Exporter, JSONExporter, JSONImporter

EXPORTERS: dict[str, type[Exporter]] = {
    "csv": CSVExporter,
    "json": JSONExporter,
}


def resolve_export_range(
    month: Optional[str],
    year: Optional[int],
    from_date: Optional[str],
    to_date: Optional[str],
    today: Optional[date] = None,
) -> DateRange:
    """Pick the export range from the mutually exclusive options.

    Defaults to the current month when nothing is given.

    Raises:
        ValueError: If options are combined or malformed
        InvalidRange: If a custom range ends before it starts
    """
    today = today or date.today()
    chosen = sum(
        1 for given in (month, year, from_date or to_date) if given is not None and given != ""
    )
    if chosen > 1:
        raise ValueError("Use only one of --month, --year or --from/--to")

    if from_date or to_date:
        if not (from_date and to_date):
            raise ValueError("A custom range needs both --from and --to")
        return custom_range(parse_day(from_date, today), parse_day(to_date, today))
    if year is not None:
        return resolve_range("year", date(year, 1, 1))
    anchor = parse_month(month) if month else today
    return resolve_range("month", anchor)


@click.command(name="export")
@click.argument("output_file", required=False, type=click.Path(dir_okay=False))
@click.option(
    "--format",
    "-f",
    "fmt",
    type=click.Choice(["csv", "json"], case_sensitive=False),
    help="Export format (default: from file extension, then export.default_format)",
)
@click.option("--month", "-m", help="Export one month (YYYY-MM)")
@click.option("--year", "-y", type=click.IntRange(2000, 2100), help="Export one year")
@click.option("--from", "from_date", help="Custom range start (YYYY-MM-DD)")
@click.option("--to", "to_date", help="Custom range end (YYYY-MM-DD)")
@click.pass_context
def export_command(
    ctx: click.Context,
    output_file: Optional[str],
    fmt: Optional[str],
    month: Optional[str],
    year: Optional[int],
    from_date: Optional[str],
    to_date: Optional[str],
) -> None:
    """Export entries over a month, a year or a custom range.

    Without OUTPUT_FILE the file is named after the range, e.g.
    daybook_export_20240301-20240331.csv.

    Examples:
      daybook export --month 2024-03
      daybook export --year 2024 -f json
      daybook export report.csv --from 2024-03-04 --to 2024-03-10
    """
    config = get_config(ctx)

    try:
        date_range = resolve_export_range(month, year, from_date, to_date)
    except (DaybookError, ValueError) as e:
        fail(e)

    if not fmt and output_file:
        fmt = Path(output_file).suffix.lower().lstrip(".") or None
        if fmt not in EXPORTERS:
            fail(
                f"Could not detect format from extension '{Path(output_file).suffix}'. "
                "Please specify --format"
            )
    fmt = (fmt or config.get("export.default_format", "csv")).lower()

    exporter_class = EXPORTERS[fmt]
    extension = ".csv" if fmt == "csv" else ".json"
    output_path = Path(output_file or Exporter.default_filename(date_range, extension))

    tracker = get_tracker(ctx)
    exporter = exporter_class(output_path)

    try:
        if fmt == "json":
            count = exporter.export_range(
                tracker.buckets,
                date_range,
                include_metadata=config.get("export.include_metadata", True),
            )
        else:
            count = exporter.export_range(tracker.buckets, date_range)
    except ValueError as e:
        # Raised for an empty range; nothing was written
        error_console.print(f"[yellow]Warning:[/yellow] {e}")
        raise SystemExit(1)
    except OSError as e:
        fail(f"Could not write {output_path}: {e}")

    console.print(f"[green]✓[/green] Exported {count} entries ({date_range.label()})")
    console.print(f"  File: {output_path}")


@click.command(name="import")
@click.argument("input_file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--skip-invalid",
    is_flag=True,
    help="Skip invalid rows instead of aborting",
)
@click.pass_context
def import_command(ctx: click.Context, input_file: str, skip_invalid: bool) -> None:
    """Import entries from a JSON export.

    Imported entries are added as new entries with new IDs.

    Example:
      daybook import daybook_export_20240101-20241231.json
    """
    importer = JSONImporter(Path(input_file))
    try:
        pairs = importer.import_entries(validate=not skip_invalid)
    except (FileNotFoundError, ValueError) as e:
        fail(e)

    if not pairs:
        console.print("[yellow]No entries to import[/yellow]")
        return

    tracker = get_tracker(ctx)
    imported = 0
    try:
        for day, entry in pairs:
            tracker.add_entry(day, entry)
            imported += 1
    except DaybookError as e:
        fail(f"Import stopped after {imported} entries: {e}")

    console.print(f"[green]✓[/green] Imported {imported} entries")
    if importer.skipped:
        console.print(f"[yellow]Skipped {importer.skipped} invalid rows[/yellow]")
