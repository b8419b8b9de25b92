"""Tests for aggregation over date ranges."""

from datetime import date
from decimal import Decimal

from daybook.core.aggregation import aggregate, iter_range_entries
from daybook.core.models import DateRange, DayBucket, ExpenseEntry, TimeEntry

D1 = date(2024, 3, 4)
D2 = date(2024, 3, 5)


def make_buckets(*buckets: DayBucket) -> dict[str, DayBucket]:
    return {bucket.key: bucket for bucket in buckets}


def time_entry(task: str, start: str, end: str) -> TimeEntry:
    return TimeEntry(task=task, start_time=start, end_time=end)


class TestAggregate:
    """Test totals and breakdowns."""

    def test_two_day_example(self) -> None:
        buckets = make_buckets(
            DayBucket(
                D1,
                time=[time_entry("Write", "09:00", "11:00")],
                expense=[ExpenseEntry(description="Coffee", amount=Decimal("4.5"))],
            ),
            DayBucket(D2, time=[time_entry("Write", "13:00", "14:30")]),
        )

        result = aggregate(buckets, DateRange(D1, D2))

        assert result.total_time == Decimal("3.5")
        assert result.total_money == Decimal("4.5")
        assert result.task_breakdown == {"Write": Decimal("3.5")}
        assert result.expense_breakdown == {"Coffee": Decimal("4.5")}

    def test_empty_single_day_range(self) -> None:
        result = aggregate({}, DateRange(D1, D1))

        assert result.total_time == 0
        assert result.total_money == 0
        assert result.task_breakdown == {}
        assert result.expense_breakdown == {}
        assert result.is_empty

    def test_days_outside_range_ignored(self) -> None:
        buckets = make_buckets(
            DayBucket(D1, time=[time_entry("Write", "09:00", "10:00")]),
            DayBucket(D2, time=[time_entry("Write", "09:00", "12:00")]),
        )

        result = aggregate(buckets, DateRange(D2, D2))

        assert result.total_time == Decimal("3")

    def test_labels_match_exactly(self) -> None:
        """Test that labels differing in case or spacing stay separate."""
        buckets = make_buckets(
            DayBucket(
                D1,
                time=[
                    time_entry("Write", "09:00", "10:00"),
                    time_entry("write", "10:00", "11:00"),
                    time_entry("Write ", "11:00", "12:00"),
                ],
            )
        )

        result = aggregate(buckets, DateRange(D1, D1))

        assert list(result.task_breakdown) == ["Write", "write", "Write "]
        assert result.total_time == Decimal("3")

    def test_totals_equal_breakdown_sums(self) -> None:
        buckets = make_buckets(
            DayBucket(
                D1,
                time=[
                    time_entry("A", "09:00", "09:20"),
                    time_entry("B", "09:20", "09:40"),
                    time_entry("A", "10:00", "10:10"),
                ],
                expense=[
                    ExpenseEntry(description="Lunch", amount=Decimal("12.30")),
                    ExpenseEntry(description="Lunch", amount=Decimal("0.70")),
                ],
            )
        )

        result = aggregate(buckets, DateRange(D1, D1))

        assert result.total_time == sum(result.task_breakdown.values())
        assert result.total_money == sum(result.expense_breakdown.values())
        assert result.expense_breakdown == {"Lunch": Decimal("13.00")}

    def test_ties_keep_encounter_order(self) -> None:
        buckets = make_buckets(
            DayBucket(
                D1,
                expense=[
                    ExpenseEntry(description="Bus", amount=Decimal("2")),
                    ExpenseEntry(description="Book", amount=Decimal("10")),
                    ExpenseEntry(description="Tea", amount=Decimal("2")),
                ],
            )
        )

        ranked = aggregate(buckets, DateRange(D1, D1)).ranked_expenses()

        assert [label for label, _ in ranked] == ["Book", "Bus", "Tea"]

    def test_does_not_mutate_buckets(self) -> None:
        bucket = DayBucket(D1, time=[time_entry("Write", "09:00", "10:00")])
        buckets = make_buckets(bucket)

        aggregate(buckets, DateRange(D1, D2))

        assert list(buckets) == [D1.isoformat()]
        assert len(bucket.time) == 1


class TestIterRangeEntries:
    def test_order_by_day_then_kind(self) -> None:
        coffee = ExpenseEntry(description="Coffee", amount=Decimal("3"))
        write = time_entry("Write", "09:00", "10:00")
        read = time_entry("Read", "09:00", "10:00")
        buckets = make_buckets(
            DayBucket(D2, time=[read]),
            DayBucket(D1, time=[write], expense=[coffee]),
        )

        pairs = list(iter_range_entries(buckets, DateRange(D1, D2)))

        assert pairs == [(D1, write), (D1, coffee), (D2, read)]
