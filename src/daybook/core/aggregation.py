"""Aggregation of day buckets over a date range."""

from collections.abc import Iterator, Mapping
from datetime import date
from decimal import Decimal

from daybook.core.models import AggregationResult, DateRange, DayBucket, Entry, TimeEntry


def iter_range_entries(
    buckets: Mapping[str, DayBucket], date_range: DateRange
) -> Iterator[tuple[date, Entry]]:
    """Yield (day, entry) for every entry inside the range.

    Days are visited in order; within a day, time entries come before
    expenses. Days without a bucket yield nothing.
    """
    for day in date_range.days():
        bucket = buckets.get(day.isoformat())
        if bucket is None:
            continue
        for entry in bucket.all_entries():
            yield day, entry


def aggregate(buckets: Mapping[str, DayBucket], date_range: DateRange) -> AggregationResult:
    """Fold all entries in an inclusive date range into totals and breakdowns.

    Labels are compared as exact strings: "Write" and "write" (or "Write "
    with a trailing space) are separate categories.

    Args:
        buckets: Day buckets keyed by ISO date (YYYY-MM-DD)
        date_range: Inclusive range of days to include

    Returns:
        Fresh AggregationResult; all zeros when the range holds no entries
    """
    result = AggregationResult()
    tasks: dict[str, Decimal] = {}
    expenses: dict[str, Decimal] = {}

    for _day, entry in iter_range_entries(buckets, date_range):
        if isinstance(entry, TimeEntry):
            hours = entry.duration
            result.total_time += hours
            tasks[entry.label] = tasks.get(entry.label, Decimal("0")) + hours
        else:
            amount = entry.amount
            result.total_money += amount
            expenses[entry.label] = expenses.get(entry.label, Decimal("0")) + amount

    result.task_breakdown = tasks
    result.expense_breakdown = expenses
    return result
