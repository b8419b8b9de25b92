"""JSON export and import functionality."""

import json
from collections.abc import Mapping
from datetime import date, datetime
from pathlib import Path
from typing import Any

from daybook.core.models import (
    DateRange,
    DayBucket,
    Entry,
    EntryStatus,
    entry_from_row,
    entry_to_row,
    placeholder_id,
)
from daybook.export_import.base import Exporter, Importer


class JSONExporter(Exporter):
    """Export entries as backend rows in a JSON document."""

    def get_file_extension(self) -> str:
        """Get JSON file extension.

        Returns:
            '.json'
        """
        return ".json"

    def export_range(
        self,
        buckets: Mapping[str, DayBucket],
        date_range: DateRange,
        **kwargs: Any,
    ) -> int:
        """Export entries in the range to a JSON file.

        Args:
            buckets: Day buckets keyed by ISO date
            date_range: Inclusive range of days to export
            **kwargs: Additional options
                - indent (int): JSON indentation level (default: 2)
                - include_metadata (bool): Include export metadata (default: True)

        Returns:
            Number of entries written

        Raises:
            ValueError: If the range holds no entries; nothing is written
        """
        pairs = self.collect(buckets, date_range)
        if not pairs:
            raise ValueError("No data found for this period")

        self.ensure_output_path()
        export_data: dict[str, Any] = {
            "entries": [entry_to_row(day, entry) for day, entry in pairs],
        }

        if kwargs.get("include_metadata", True):
            export_data["metadata"] = {
                "export_date": datetime.now().isoformat(),
                "entry_count": len(pairs),
                "date_range": {
                    "start": date_range.start.isoformat(),
                    "end": date_range.end.isoformat(),
                },
                "format_version": "1.0",
            }

        indent = kwargs.get("indent", 2)
        with open(self.output_path, "w", encoding="utf-8") as f:
            json.dump(export_data, f, indent=indent, ensure_ascii=False)

        return len(pairs)


class JSONImporter(Importer):
    """Import entries from a JSON export."""

    def __init__(self, input_path: Path):
        super().__init__(input_path)
        self.skipped = 0

    def get_file_extension(self) -> str:
        return ".json"

    def import_entries(self, **kwargs: Any) -> list[tuple[date, Entry]]:
        """Import entries from JSON file.

        Args:
            **kwargs: Additional options
                - validate (bool): Fail on invalid rows instead of skipping
                  them (default: True)

        Returns:
            List of (day, entry) pairs. Entries get fresh placeholder ids and
            are pending until saved.

        Raises:
            FileNotFoundError: If input file doesn't exist
            ValueError: If JSON is malformed or invalid
        """
        self.validate_input_path()

        try:
            with open(self.input_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON file: {e}")

        if isinstance(data, dict) and "entries" in data:
            rows = data["entries"]
        elif isinstance(data, list):
            # Bare array of rows
            rows = data
        else:
            raise ValueError("JSON must contain 'entries' array or be an array itself")

        imported = []
        self.skipped = 0
        for row in rows:
            try:
                day, entry = entry_from_row({"id": "", **row})
            except (KeyError, TypeError, ValueError) as e:
                if kwargs.get("validate", True):
                    raise ValueError(f"Invalid entry data: {e}")
                self.skipped += 1
                continue
            entry.id = placeholder_id()
            entry.status = EntryStatus.PENDING
            imported.append((day, entry))

        return imported
