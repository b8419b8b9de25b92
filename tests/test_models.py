"""Tests for data models."""

from datetime import date
from decimal import Decimal

import pytest  # type: ignore[import-not-found]

from daybook.core.errors import InvalidRange
from daybook.core.models import (
    AggregationResult,
    DateRange,
    DayBucket,
    EntryKind,
    EntryStatus,
    ExpenseEntry,
    SavedOption,
    TimeEntry,
    entry_from_row,
    entry_to_row,
)


class TestTimeEntry:
    """Test TimeEntry model."""

    def test_create_entry(self) -> None:
        entry = TimeEntry(task="Writing", start_time="09:00", end_time="17:30")

        assert entry.task == "Writing"
        assert entry.duration == Decimal("8.5")
        assert entry.kind == EntryKind.TIME
        assert entry.status == EntryStatus.PENDING
        assert entry.is_pending is True
        assert entry.id.startswith("tmp-")

    def test_placeholder_ids_are_unique(self) -> None:
        first = TimeEntry(task="A", start_time="09:00", end_time="10:00")
        second = TimeEntry(task="A", start_time="09:00", end_time="10:00")
        assert first.id != second.id

    def test_reversed_times_rejected(self) -> None:
        with pytest.raises(InvalidRange):
            TimeEntry(task="Writing", start_time="17:00", end_time="09:00")

    def test_empty_task_rejected(self) -> None:
        with pytest.raises(ValueError, match="Task"):
            TimeEntry(task="", start_time="09:00", end_time="10:00")

    def test_single_time_rejected(self) -> None:
        with pytest.raises(ValueError, match="Both start and end"):
            TimeEntry(task="Writing", start_time="09:00")

    def test_recorded_hours_without_times(self) -> None:
        """Test entries stored with only a duration."""
        entry = TimeEntry(task="Legacy", recorded_hours=Decimal("1.5"))
        assert entry.duration == Decimal("1.50")

    def test_times_take_precedence_over_recorded_hours(self) -> None:
        entry = TimeEntry(
            task="Writing", start_time="09:00", end_time="10:00", recorded_hours=Decimal("7")
        )
        assert entry.duration == Decimal("1")
        assert entry.recorded_hours is None

    def test_no_times_and_no_hours_rejected(self) -> None:
        with pytest.raises(ValueError):
            TimeEntry(task="Writing")

    @pytest.mark.parametrize("hours", ["NaN", "Infinity", "-Infinity", "sNaN", "abc"])
    def test_non_finite_recorded_hours_rejected(self, hours: str) -> None:
        with pytest.raises(ValueError):
            TimeEntry(task="Legacy", recorded_hours=hours)

    def test_label_is_exact_task(self) -> None:
        entry = TimeEntry(task="Write ", start_time="09:00", end_time="10:00")
        assert entry.label == "Write "


class TestExpenseEntry:
    """Test ExpenseEntry model."""

    def test_create_expense(self) -> None:
        expense = ExpenseEntry(description="Coffee", amount="4.50")

        assert expense.amount == Decimal("4.50")
        assert expense.kind == EntryKind.EXPENSE
        assert expense.label == "Coffee"
        assert expense.value == Decimal("4.50")

    def test_zero_amount_allowed(self) -> None:
        assert ExpenseEntry(description="Free sample", amount=0).amount == 0

    @pytest.mark.parametrize("amount", ["-1", "abc", "NaN", "Infinity"])
    def test_invalid_amount_rejected(self, amount: str) -> None:
        with pytest.raises(ValueError):
            ExpenseEntry(description="Coffee", amount=amount)  # type: ignore[arg-type]

    def test_empty_description_rejected(self) -> None:
        with pytest.raises(ValueError):
            ExpenseEntry(description="", amount=Decimal("1"))


class TestDayBucket:
    """Test DayBucket model."""

    def test_empty_bucket(self) -> None:
        bucket = DayBucket(date(2024, 3, 4))

        assert bucket.key == "2024-03-04"
        assert bucket.time == []
        assert bucket.expense == []
        assert bucket.is_empty
        assert bucket.total_hours == 0
        assert bucket.total_amount == 0

    def test_add_routes_by_kind(self) -> None:
        bucket = DayBucket(date(2024, 3, 4))
        bucket.add(TimeEntry(task="Writing", start_time="09:00", end_time="10:00"))
        bucket.add(ExpenseEntry(description="Coffee", amount=Decimal("3")))

        assert len(bucket.time) == 1
        assert len(bucket.expense) == 1
        assert bucket.total_hours == Decimal("1")
        assert bucket.total_amount == Decimal("3")

    def test_find_replace_remove(self) -> None:
        bucket = DayBucket(date(2024, 3, 4))
        first = TimeEntry(task="A", start_time="09:00", end_time="10:00")
        second = TimeEntry(task="B", start_time="10:00", end_time="11:00")
        bucket.add(first)
        bucket.add(second)

        replacement = TimeEntry(task="A2", start_time="09:00", end_time="09:30", id=first.id)
        assert bucket.replace(first.id, replacement) is True
        assert bucket.time[0].task == "A2"

        assert bucket.remove(second.id) is second
        assert bucket.find(second.id) is None
        assert bucket.remove("missing") is None

    def test_sorted_time_entries(self) -> None:
        """Test that time entries sort by start, missing start first."""
        bucket = DayBucket(date(2024, 3, 4))
        bucket.add(TimeEntry(task="Late", start_time="14:00", end_time="15:00"))
        bucket.add(TimeEntry(task="Early", start_time="08:00", end_time="09:00"))
        bucket.add(TimeEntry(task="Legacy", recorded_hours=Decimal("1")))

        assert [e.task for e in bucket.sorted_time_entries()] == ["Legacy", "Early", "Late"]


class TestDateRange:
    """Test DateRange model."""

    def test_days_inclusive(self) -> None:
        date_range = DateRange(date(2024, 2, 28), date(2024, 3, 1))

        assert list(date_range.days()) == [
            date(2024, 2, 28),
            date(2024, 2, 29),
            date(2024, 3, 1),
        ]
        assert len(date_range) == 3
        assert date(2024, 2, 29) in date_range
        assert date(2024, 3, 2) not in date_range

    def test_start_after_end_rejected(self) -> None:
        with pytest.raises(InvalidRange):
            DateRange(date(2024, 3, 2), date(2024, 3, 1))

    def test_label(self) -> None:
        assert DateRange(date(2024, 3, 4), date(2024, 3, 10)).label() == "Mar 4 - Mar 10, 2024"
        assert DateRange(date(2024, 3, 4), date(2024, 3, 4)).label() == "Mar 4, 2024"


class TestAggregationResult:
    """Test ranking of breakdowns."""

    def test_ranked_largest_first_ties_in_encounter_order(self) -> None:
        result = AggregationResult(
            task_breakdown={"A": Decimal("1"), "B": Decimal("2"), "C": Decimal("1")}
        )
        assert [label for label, _ in result.ranked_tasks()] == ["B", "A", "C"]

    def test_is_empty(self) -> None:
        assert AggregationResult().is_empty
        assert not AggregationResult(expense_breakdown={"x": Decimal("0")}).is_empty


class TestRows:
    """Test conversion to and from backend rows."""

    def test_time_row(self) -> None:
        entry = TimeEntry(task="Writing", start_time="09:00", end_time="17:30", id="e1")
        row = entry_to_row(date(2024, 3, 4), entry)

        assert row == {
            "id": "e1",
            "date": "2024-03-04",
            "type": "time",
            "content": "Writing",
            "value": "8.5",
            "start_time": "09:00",
            "end_time": "17:30",
        }

    def test_expense_row_has_no_times(self) -> None:
        row = entry_to_row(date(2024, 3, 4), ExpenseEntry(description="Coffee", amount="4.50"))

        assert row["type"] == "expense"
        assert row["value"] == "4.5"
        assert row["start_time"] == ""
        assert row["end_time"] == ""

    def test_from_row_is_confirmed(self) -> None:
        day, entry = entry_from_row(
            {
                "id": "e1",
                "date": "2024-03-04",
                "type": "time",
                "content": "Writing",
                "value": "8.5",
                "start_time": "09:00",
                "end_time": "17:30",
            }
        )

        assert day == date(2024, 3, 4)
        assert isinstance(entry, TimeEntry)
        assert entry.id == "e1"
        assert entry.status == EntryStatus.CONFIRMED
        assert entry.duration == Decimal("8.5")

    def test_from_row_without_times_uses_value(self) -> None:
        _, entry = entry_from_row(
            {"id": "e2", "date": "2024-03-04", "type": "time", "content": "Old", "value": "2"}
        )
        assert entry.value == Decimal("2")

    def test_from_row_unknown_type_rejected(self) -> None:
        with pytest.raises(ValueError):
            entry_from_row(
                {"id": "x", "date": "2024-03-04", "type": "mood", "content": "ok", "value": "1"}
            )

    @pytest.mark.parametrize("value", ["NaN", "Infinity"])
    def test_from_row_non_finite_value_rejected(self, value: str) -> None:
        with pytest.raises(ValueError, match="Invalid hours"):
            entry_from_row(
                {"id": "x", "date": "2024-03-04", "type": "time", "content": "Old", "value": value}
            )


class TestSavedOption:
    def test_row_conversion(self) -> None:
        option = SavedOption(kind=EntryKind.EXPENSE, content="Coffee", id="o1")
        assert SavedOption.from_row(option.to_row()) == option
