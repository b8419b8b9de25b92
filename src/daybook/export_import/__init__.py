"""Export and import functionality for Daybook."""

from daybook.export_import.base import Exporter, Importer
from daybook.export_import.csv_format import CSV_HEADER, CSVExporter
from daybook.export_import.json_format import JSONExporter, JSONImporter

__all__ = [
    "Exporter",
    "Importer",
    "CSV_HEADER",
    "CSVExporter",
    "JSONExporter",
    "JSONImporter",
]
