"""Base classes for export and import functionality."""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from datetime import date
from pathlib import Path
from typing import Any

from daybook.core.aggregation import iter_range_entries
from daybook.core.models import DateRange, DayBucket, Entry


class Exporter(ABC):
    """Base class for all exporters."""

    def __init__(self, output_path: Path):
        """Initialize exporter.

        Args:
            output_path: Path where exported data will be written
        """
        self.output_path = Path(output_path)

    @abstractmethod
    def export_range(
        self,
        buckets: Mapping[str, DayBucket],
        date_range: DateRange,
        **kwargs: Any,
    ) -> int:
        """Export every entry inside a date range.

        Args:
            buckets: Day buckets keyed by ISO date
            date_range: Inclusive range of days to export
            **kwargs: Format-specific options

        Returns:
            Number of entries written
        """
        pass

    @abstractmethod
    def get_file_extension(self) -> str:
        """Get the file extension for this format (e.g., '.csv', '.json').

        Returns:
            File extension including the dot
        """
        pass

    def ensure_output_path(self) -> None:
        """Ensure the output path's parent directory exists."""
        self.output_path.parent.mkdir(parents=True, exist_ok=True)

    def collect(
        self, buckets: Mapping[str, DayBucket], date_range: DateRange
    ) -> list[tuple[date, Entry]]:
        """Entries inside the range as (day, entry) pairs, in day order."""
        return list(iter_range_entries(buckets, date_range))

    @classmethod
    def default_filename(cls, date_range: DateRange, extension: str) -> str:
        """File name encoding the range bounds.

        Example:
            >>> Exporter.default_filename(DateRange(date(2024, 3, 1), date(2024, 3, 31)), ".csv")
            'daybook_export_20240301-20240331.csv'
        """
        return (
            f"daybook_export_{date_range.start:%Y%m%d}-{date_range.end:%Y%m%d}{extension}"
        )


class Importer(ABC):
    """Base class for all importers."""

    def __init__(self, input_path: Path):
        """Initialize importer.

        Args:
            input_path: Path to file to import
        """
        self.input_path = Path(input_path)

    @abstractmethod
    def import_entries(self, **kwargs: Any) -> list[tuple[date, Entry]]:
        """Import entries from the input file.

        Returns:
            List of (day, entry) pairs; entries are new and pending

        Raises:
            FileNotFoundError: If input file doesn't exist
            ValueError: If input file is malformed
        """
        pass

    @abstractmethod
    def get_file_extension(self) -> str:
        """Get the expected file extension (e.g., '.json')."""
        pass

    def validate_input_path(self) -> None:
        """Validate that input file exists and has correct extension.

        Raises:
            FileNotFoundError: If file doesn't exist
            ValueError: If file has wrong extension
        """
        if not self.input_path.exists():
            raise FileNotFoundError(f"Input file not found: {self.input_path}")

        expected_ext = self.get_file_extension()
        if self.input_path.suffix.lower() != expected_ext.lower():
            raise ValueError(f"Expected {expected_ext} file, got {self.input_path.suffix}")
