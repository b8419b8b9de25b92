"""CSV export."""

import csv
from collections.abc import Mapping
from datetime import date
from typing import Any

from daybook.core.duration import format_number
from daybook.core.models import DateRange, DayBucket, Entry, TimeEntry
from daybook.export_import.base import Exporter

CSV_HEADER = ["Date", "Type", "Category/Task", "Value", "Start Time", "End Time"]


def entry_to_csv_row(day: date, entry: Entry) -> list[str]:
    """Format one entry as a CSV row.

    Time rows carry hours and start/end times; expense rows carry the
    amount and leave the time columns empty.
    """
    if isinstance(entry, TimeEntry):
        return [
            day.isoformat(),
            "Time",
            entry.task,
            format_number(entry.duration),
            entry.start_time or "",
            entry.end_time or "",
        ]
    return [day.isoformat(), "Expense", entry.description, format_number(entry.amount), "", ""]


class CSVExporter(Exporter):
    """Export entries to CSV.

    Text containing commas, quotes or newlines is quoted, with embedded
    quotes doubled.
    """

    def get_file_extension(self) -> str:
        return ".csv"

    def build_rows(
        self, buckets: Mapping[str, DayBucket], date_range: DateRange
    ) -> list[list[str]]:
        """Header followed by one row per entry in the range."""
        rows = [list(CSV_HEADER)]
        rows.extend(
            entry_to_csv_row(day, entry) for day, entry in self.collect(buckets, date_range)
        )
        return rows

    def export_range(
        self,
        buckets: Mapping[str, DayBucket],
        date_range: DateRange,
        **kwargs: Any,
    ) -> int:
        """Write the range to the output file.

        Returns:
            Number of entry rows written (header excluded)

        Raises:
            ValueError: If the range holds no entries; nothing is written
        """
        rows = self.build_rows(buckets, date_range)
        if len(rows) == 1:
            raise ValueError("No data found for this period")

        self.ensure_output_path()
        with open(self.output_path, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f, lineterminator="\n")
            writer.writerows(rows)

        return len(rows) - 1
