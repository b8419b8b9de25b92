"""Core functionality for logging time and expenses."""

from daybook.core.errors import (
    AuthenticationError,
    BackendError,
    DaybookError,
    InvalidRange,
    ParseFailure,
)
from daybook.core.models import (
    AggregationResult,
    DateRange,
    DayBucket,
    Entry,
    EntryKind,
    EntryStatus,
    ExpenseEntry,
    SavedOption,
    TimeEntry,
)
from daybook.core.tracker import EntryTracker

__all__ = [
    "AggregationResult",
    "AuthenticationError",
    "BackendError",
    "DateRange",
    "DayBucket",
    "DaybookError",
    "Entry",
    "EntryKind",
    "EntryStatus",
    "EntryTracker",
    "ExpenseEntry",
    "InvalidRange",
    "ParseFailure",
    "SavedOption",
    "TimeEntry",
]
