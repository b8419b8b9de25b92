"""Report rendering."""

from daybook.analysis.reports import ReportGenerator

__all__ = ["ReportGenerator"]
