"""Entry tracker: the in-memory day buckets kept in sync with a backend."""

import copy
import logging
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Any, Callable, Optional, Union

from daybook.core.aggregation import aggregate
from daybook.core.auth import Session
from daybook.core.backend import Backend
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
    entry_from_row,
    entry_to_row,
)
from daybook.core.ranges import resolve_range
from daybook.core.timeparse import parse_time_range

logger = logging.getLogger(__name__)


def _require_text(value: Optional[str], name: str) -> str:
    if value is None or not value.strip():
        raise ValueError(f"{name} must not be empty")
    return value


def _require_amount(value: Union[Decimal, float, str]) -> Decimal:
    try:
        amount = Decimal(str(value))
    except ArithmeticError:
        raise ValueError(f"Invalid amount: {value}")
    if not amount.is_finite() or amount < 0:
        raise ValueError("Amount must be a non-negative number")
    return amount


class EntryTracker:
    """Day-bucketed entries with optimistic updates against a backend.

    The bucket map is a projection of the backend rows: rebuilt by
    refresh() and patched locally on every mutation. A mutation is applied
    right away with the entry marked pending, then sent to the backend.
    When the backend call raises, the last known good snapshot is restored
    and the error is re-raised.
    """

    def __init__(self, backend: Backend, session: Session, week_start: str = "monday"):
        """Initialize tracker.

        Args:
            backend: Backend holding the rows
            session: Signed-in session; checked before every backend call
            week_start: First day of the week for summaries
        """
        self.backend = backend
        self.session = session
        self.week_start = week_start
        self.buckets: dict[str, DayBucket] = {}
        self.saved_options: list[SavedOption] = []
        self._last_known_good: Optional[dict[str, DayBucket]] = None

    @property
    def user_id(self) -> str:
        return self.session.user_id

    # Loading

    def refresh(self) -> None:
        """Rebuild the day buckets and saved options from the backend."""
        self.session.require_valid()
        buckets: dict[str, DayBucket] = {}
        for row in self.backend.list_entries(self.user_id):
            try:
                day, entry = entry_from_row(row)
            except (KeyError, ValueError) as e:
                logger.warning(f"Skipping malformed row {row.get('id')}: {e}")
                continue
            key = day.isoformat()
            if key not in buckets:
                buckets[key] = DayBucket(day)
            buckets[key].add(entry)
        self.buckets = buckets
        self.saved_options = [
            SavedOption.from_row(row) for row in self.backend.list_options(self.user_id)
        ]
        logger.debug(f"Loaded {len(buckets)} days from backend")

    def bucket(self, day: date) -> DayBucket:
        """Get the bucket for a day; an empty bucket if nothing is logged."""
        return self.buckets.get(day.isoformat()) or DayBucket(day)

    def find_entry(self, entry_id: str) -> Optional[tuple[date, Entry]]:
        """Find an entry on any day.

        Returns:
            Tuple of (day, entry) or None if not found
        """
        for bucket in self.buckets.values():
            entry = bucket.find(entry_id)
            if entry is not None:
                return bucket.day, entry
        return None

    # Optimistic mutation

    def _snapshot(self) -> None:
        self._last_known_good = copy.deepcopy(self.buckets)

    def _rollback(self) -> None:
        if self._last_known_good is not None:
            self.buckets = self._last_known_good
            self._last_known_good = None

    def _commit(self, action: str, request: Callable[..., Any], *args: Any) -> Any:
        """Run a backend request, rolling local state back if it fails."""
        try:
            result = request(*args)
        except Exception as e:
            logger.error(f"Failed to {action}: {e}")
            self._rollback()
            raise
        self._last_known_good = None
        return result

    def _writable_bucket(self, day: date) -> DayBucket:
        key = day.isoformat()
        if key not in self.buckets:
            self.buckets[key] = DayBucket(day)
        return self.buckets[key]

    def _add(self, day: date, entry: Entry) -> Entry:
        self.session.require_valid()
        self._snapshot()
        self._writable_bucket(day).add(entry)

        stored = self._commit(
            "save entry", self.backend.insert_entry, self.user_id, entry_to_row(day, entry)
        )

        # Swap the placeholder id for the backend id
        entry.id = str(stored["id"])
        entry.status = EntryStatus.CONFIRMED
        logger.info(f"Added {entry.kind.value} entry {entry.id} on {day.isoformat()}")
        return entry

    def add_entry(self, day: date, entry: Entry) -> Entry:
        """Save an already-built entry, e.g. one read by an importer.

        Raises:
            ValueError: If the entry was already confirmed by the backend
            BackendError: If the backend rejects the entry (state rolled back)
        """
        if not entry.is_pending:
            raise ValueError(f"Entry {entry.id} is already saved")
        return self._add(day, entry)

    def add_time(self, day: date, task: str, start_time: str, end_time: str) -> TimeEntry:
        """Log a timed task.

        Raises:
            ValueError: If the task is empty
            InvalidRange: If end_time is not after start_time
            BackendError: If the backend rejects the entry (state rolled back)
        """
        entry = TimeEntry(
            task=_require_text(task, "Task"), start_time=start_time, end_time=end_time
        )
        return self._add(day, entry)  # type: ignore[return-value]

    def add_time_from_text(self, day: date, task: str, text: str) -> TimeEntry:
        """Log a timed task from free text such as '9am to 5pm'.

        Raises:
            ParseFailure: If the text is not a recognizable time range
        """
        start, end = parse_time_range(text)
        return self.add_time(day, task, start, end)

    def add_expense(
        self, day: date, description: str, amount: Union[Decimal, float, str]
    ) -> ExpenseEntry:
        """Log an expense.

        Raises:
            ValueError: If the description is empty or the amount negative
            BackendError: If the backend rejects the entry (state rolled back)
        """
        entry = ExpenseEntry(
            description=_require_text(description, "Description"),
            amount=_require_amount(amount),
        )
        return self._add(day, entry)  # type: ignore[return-value]

    def _existing(self, day: date, entry_id: str) -> Entry:
        entry = self.bucket(day).find(entry_id)
        if entry is None:
            raise ValueError(f"Entry not found on {day.isoformat()}: {entry_id}")
        if entry.is_pending:
            raise ValueError(f"Entry {entry_id} has a change in progress")
        return entry

    def update_entry(
        self,
        day: date,
        entry_id: str,
        task: Optional[str] = None,
        start_time: Optional[str] = None,
        end_time: Optional[str] = None,
        description: Optional[str] = None,
        amount: Optional[Union[Decimal, float, str]] = None,
    ) -> Entry:
        """Edit an entry, keeping its id. Fields left as None are unchanged.

        Raises:
            ValueError: If the entry is missing, pending, or a field is invalid
            InvalidRange: If the new times do not form a positive duration
            BackendError: If the backend rejects the change (state rolled back)
        """
        existing = self._existing(day, entry_id)

        updated: Entry
        if isinstance(existing, TimeEntry):
            if description is not None or amount is not None:
                raise ValueError("Time entries have no description or amount")
            updated = replace(
                existing,
                task=_require_text(task, "Task") if task is not None else existing.task,
                start_time=start_time if start_time is not None else existing.start_time,
                end_time=end_time if end_time is not None else existing.end_time,
                status=EntryStatus.PENDING,
            )
        else:
            if task is not None or start_time is not None or end_time is not None:
                raise ValueError("Expenses have no task or times")
            updated = replace(
                existing,
                description=(
                    _require_text(description, "Description")
                    if description is not None
                    else existing.description
                ),
                amount=_require_amount(amount) if amount is not None else existing.amount,
                status=EntryStatus.PENDING,
            )

        self.session.require_valid()
        self._snapshot()
        self._writable_bucket(day).replace(entry_id, updated)

        self._commit(
            "update entry",
            self.backend.update_entry,
            self.user_id,
            entry_id,
            entry_to_row(day, updated),
        )

        updated.status = EntryStatus.CONFIRMED
        logger.info(f"Updated entry {entry_id}")
        return updated

    def delete_entry(self, day: date, entry_id: str) -> Entry:
        """Delete an entry.

        Returns:
            The removed entry

        Raises:
            ValueError: If the entry is missing or pending
            BackendError: If the backend rejects the delete (state rolled back)
        """
        self._existing(day, entry_id)

        self.session.require_valid()
        self._snapshot()
        removed = self._writable_bucket(day).remove(entry_id)

        self._commit("delete entry", self.backend.delete_entry, self.user_id, entry_id)

        logger.info(f"Deleted entry {entry_id}")
        return removed  # type: ignore[return-value]

    # Summaries

    def aggregate(self, date_range: DateRange) -> AggregationResult:
        """Aggregate the loaded entries over a range."""
        return aggregate(self.buckets, date_range)

    def summarize(self, selector: str, anchor: date) -> tuple[DateRange, AggregationResult]:
        """Aggregate the week, month or year containing anchor."""
        date_range = resolve_range(selector, anchor, self.week_start)
        return date_range, self.aggregate(date_range)

    # Saved options

    def options(self, kind: EntryKind) -> list[SavedOption]:
        """Saved options of a kind, oldest first."""
        return [o for o in self.saved_options if o.kind == kind]

    def save_option(self, kind: EntryKind, content: str) -> SavedOption:
        """Save a reusable label. Saving an existing label returns it unchanged."""
        content = _require_text(content, "Option")
        for option in self.options(kind):
            if option.content == content:
                return option

        self.session.require_valid()
        option = SavedOption(kind=kind, content=content)
        stored = self.backend.insert_option(self.user_id, option.to_row())
        option.id = str(stored["id"])
        self.saved_options.append(option)
        logger.info(f"Saved {kind.value} option '{content}'")
        return option

    def delete_option(self, option_id: str) -> None:
        """Delete a saved option.

        Raises:
            ValueError: If no option has this id
        """
        if not any(o.id == option_id for o in self.saved_options):
            raise ValueError(f"Option not found: {option_id}")
        self.session.require_valid()
        self.backend.delete_option(self.user_id, option_id)
        self.saved_options = [o for o in self.saved_options if o.id != option_id]
