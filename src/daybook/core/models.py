"""Core data models for the time and expense log."""

from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal
from enum import Enum
from typing import Any, ClassVar, Iterator, Optional, Union
from uuid import uuid4

from daybook.core.duration import calculate_duration, format_number, round_hours, to_minutes
from daybook.core.errors import InvalidRange


class EntryKind(str, Enum):
    """Kind of logged entry, as stored in the backend ``type`` column."""

    TIME = "time"
    EXPENSE = "expense"


class EntryStatus(str, Enum):
    """Whether the backend has confirmed an entry."""

    PENDING = "pending"
    CONFIRMED = "confirmed"


def placeholder_id() -> str:
    """Generate a local identifier used until the backend assigns one."""
    return f"tmp-{uuid4().hex}"


def _to_decimal(value: Any, name: str) -> Decimal:
    try:
        return Decimal(str(value))
    except (ArithmeticError, ValueError):
        raise ValueError(f"Invalid {name}: {value!r}")


@dataclass
class TimeEntry:
    """A timed task logged for one day.

    Attributes:
        task: Task label (exact string, never normalized)
        start_time: Start wall-clock time (HH:MM), None for legacy rows
        end_time: End wall-clock time (HH:MM), None for legacy rows
        id: Backend id, or a placeholder while pending
        status: Pending until the backend confirms the entry
        recorded_hours: Stored duration, used only when no times are present
    """

    kind: ClassVar[EntryKind] = EntryKind.TIME

    task: str
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    id: str = field(default_factory=placeholder_id)
    status: EntryStatus = EntryStatus.PENDING
    recorded_hours: Optional[Decimal] = None

    def __post_init__(self) -> None:
        if not self.task:
            raise ValueError("Task label must not be empty")

        if (self.start_time is None) != (self.end_time is None):
            raise ValueError("Both start and end time are required")

        if self.start_time is not None and self.end_time is not None:
            # Raises InvalidRange when end is not after start
            calculate_duration(self.start_time, self.end_time)
            self.recorded_hours = None
        elif self.recorded_hours is None:
            raise ValueError("Time entry needs start/end times or recorded hours")
        else:
            hours = _to_decimal(self.recorded_hours, "hours")
            if not hours.is_finite():
                raise ValueError(f"Invalid hours: {self.recorded_hours!r}")
            self.recorded_hours = round_hours(hours)
            if self.recorded_hours <= 0:
                raise InvalidRange("Duration must be positive")

    @property
    def duration(self) -> Decimal:
        """Duration in hours, derived from the start and end times."""
        if self.start_time is not None and self.end_time is not None:
            return calculate_duration(self.start_time, self.end_time)
        return self.recorded_hours or Decimal("0")

    @property
    def label(self) -> str:
        """Breakdown key for this entry."""
        return self.task

    @property
    def value(self) -> Decimal:
        """Numeric value stored in the backend row."""
        return self.duration

    @property
    def is_pending(self) -> bool:
        return self.status == EntryStatus.PENDING


@dataclass
class ExpenseEntry:
    """An expense logged for one day.

    Attributes:
        description: Expense description (exact string, never normalized)
        amount: Non-negative amount, currency agnostic
        id: Backend id, or a placeholder while pending
        status: Pending until the backend confirms the entry
    """

    kind: ClassVar[EntryKind] = EntryKind.EXPENSE

    description: str
    amount: Decimal
    id: str = field(default_factory=placeholder_id)
    status: EntryStatus = EntryStatus.PENDING

    def __post_init__(self) -> None:
        if not self.description:
            raise ValueError("Description must not be empty")
        self.amount = _to_decimal(self.amount, "amount")
        if not self.amount.is_finite() or self.amount < 0:
            raise ValueError("Amount must be a non-negative number")

    @property
    def label(self) -> str:
        return self.description

    @property
    def value(self) -> Decimal:
        return self.amount

    @property
    def is_pending(self) -> bool:
        return self.status == EntryStatus.PENDING


Entry = Union[TimeEntry, ExpenseEntry]


@dataclass
class DayBucket:
    """All entries logged for one calendar day.

    Both lists are always present; a day without entries of a kind holds an
    empty list.
    """

    day: date
    time: list[TimeEntry] = field(default_factory=list)
    expense: list[ExpenseEntry] = field(default_factory=list)

    @property
    def key(self) -> str:
        """ISO day key (YYYY-MM-DD)."""
        return self.day.isoformat()

    def entries(self, kind: EntryKind) -> list[Any]:
        """Get the entry list for a kind."""
        return self.time if kind == EntryKind.TIME else self.expense

    def all_entries(self) -> list[Entry]:
        """Time entries followed by expenses."""
        return [*self.time, *self.expense]

    def add(self, entry: Entry) -> None:
        self.entries(entry.kind).append(entry)

    def find(self, entry_id: str) -> Optional[Entry]:
        """Find an entry of either kind by id."""
        for entry in self.all_entries():
            if entry.id == entry_id:
                return entry
        return None

    def replace(self, entry_id: str, entry: Entry) -> bool:
        """Replace the entry with the given id, keeping its position.

        Returns:
            True if an entry was replaced, False if not found
        """
        entries = self.entries(entry.kind)
        for i, existing in enumerate(entries):
            if existing.id == entry_id:
                entries[i] = entry
                return True
        return False

    def remove(self, entry_id: str) -> Optional[Entry]:
        """Remove an entry by id.

        Returns:
            The removed entry, or None if not found
        """
        for entries in (self.time, self.expense):
            for i, existing in enumerate(entries):
                if existing.id == entry_id:
                    return entries.pop(i)  # type: ignore[no-any-return]
        return None

    @property
    def total_hours(self) -> Decimal:
        return sum((e.duration for e in self.time), Decimal("0"))

    @property
    def total_amount(self) -> Decimal:
        return sum((e.amount for e in self.expense), Decimal("0"))

    @property
    def is_empty(self) -> bool:
        return not self.time and not self.expense

    def sorted_time_entries(self) -> list[TimeEntry]:
        """Time entries ordered by start time; entries without one sort as 00:00."""
        return sorted(self.time, key=lambda e: to_minutes(e.start_time or "00:00"))


@dataclass(frozen=True)
class DateRange:
    """Inclusive range of calendar days.

    Raises:
        InvalidRange: If start is after end
    """

    start: date
    end: date

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise InvalidRange(
                f"Range start {self.start.isoformat()} is after end {self.end.isoformat()}"
            )

    def days(self) -> Iterator[date]:
        """Iterate every day in the range, in order."""
        current = self.start
        while current <= self.end:
            yield current
            current += timedelta(days=1)

    def __len__(self) -> int:
        return (self.end - self.start).days + 1

    def __contains__(self, day: object) -> bool:
        return isinstance(day, date) and self.start <= day <= self.end

    def label(self) -> str:
        """Human-readable label, e.g. 'Mar 4 - Mar 10, 2024'."""
        end = f"{self.end:%b} {self.end.day}, {self.end.year}"
        if self.start == self.end:
            return end
        return f"{self.start:%b} {self.start.day} - {end}"


@dataclass
class AggregationResult:
    """Totals and per-label breakdowns over a date range.

    Breakdown dicts keep labels in encounter order.
    """

    total_time: Decimal = Decimal("0")
    total_money: Decimal = Decimal("0")
    task_breakdown: dict[str, Decimal] = field(default_factory=dict)
    expense_breakdown: dict[str, Decimal] = field(default_factory=dict)

    @staticmethod
    def _ranked(breakdown: dict[str, Decimal]) -> list[tuple[str, Decimal]]:
        # sorted() is stable, so ties keep encounter order
        return sorted(breakdown.items(), key=lambda item: item[1], reverse=True)

    def ranked_tasks(self) -> list[tuple[str, Decimal]]:
        """Task breakdown, largest first."""
        return self._ranked(self.task_breakdown)

    def ranked_expenses(self) -> list[tuple[str, Decimal]]:
        """Expense breakdown, largest first."""
        return self._ranked(self.expense_breakdown)

    @property
    def is_empty(self) -> bool:
        return not self.task_breakdown and not self.expense_breakdown


@dataclass
class SavedOption:
    """A reusable task label or expense description.

    Attributes:
        kind: Which form the option belongs to
        content: Option text
        id: Backend id
    """

    kind: EntryKind
    content: str
    id: str = field(default_factory=placeholder_id)

    def to_row(self) -> dict[str, Any]:
        """Convert to a backend row."""
        return {"id": self.id, "type": self.kind.value, "content": self.content}

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "SavedOption":
        """Create SavedOption from a backend row."""
        return cls(kind=EntryKind(row["type"]), content=row["content"], id=str(row["id"]))


def entry_to_row(day: date, entry: Entry) -> dict[str, Any]:
    """Convert an entry to the backend row shape.

    Args:
        day: Day the entry belongs to
        entry: Entry to convert

    Returns:
        Row with date, type, content, value, start_time and end_time
    """
    if isinstance(entry, TimeEntry):
        return {
            "id": entry.id,
            "date": day.isoformat(),
            "type": EntryKind.TIME.value,
            "content": entry.task,
            "value": format_number(entry.duration),
            "start_time": entry.start_time or "",
            "end_time": entry.end_time or "",
        }
    return {
        "id": entry.id,
        "date": day.isoformat(),
        "type": EntryKind.EXPENSE.value,
        "content": entry.description,
        "value": format_number(entry.amount),
        "start_time": "",
        "end_time": "",
    }


def entry_from_row(row: dict[str, Any]) -> tuple[date, Entry]:
    """Create an entry from a backend row.

    Rows coming from the backend are confirmed by definition.

    Returns:
        Tuple of (day, entry)

    Raises:
        ValueError: If the row is malformed
    """
    day = date.fromisoformat(row["date"])
    kind = EntryKind(row["type"])
    entry: Entry
    if kind == EntryKind.TIME:
        entry = TimeEntry(
            task=row["content"],
            start_time=row.get("start_time") or None,
            end_time=row.get("end_time") or None,
            id=str(row["id"]),
            status=EntryStatus.CONFIRMED,
            recorded_hours=row.get("value") or None,
        )
    else:
        entry = ExpenseEntry(
            description=row["content"],
            amount=row["value"],
            id=str(row["id"]),
            status=EntryStatus.CONFIRMED,
        )
    return day, entry
