"""Report rendering for day, summary and calendar views."""

from collections.abc import Mapping
from datetime import date
from decimal import Decimal
from typing import Optional

from rich.console import Console  # type: ignore[import-not-found]
from rich.table import Table  # type: ignore[import-not-found]
from rich.text import Text  # type: ignore[import-not-found]

from daybook.core.duration import format_hours
from daybook.core.models import AggregationResult, DateRange, DayBucket
from daybook.core.ranges import month_grid

SUMMARY_TITLES = {
    "day": "Daily Summary",
    "week": "Weekly Summary",
    "month": "Monthly Summary",
    "year": "Yearly Summary",
}


class ReportGenerator:
    """Render entries and aggregations to the console."""

    def __init__(
        self,
        console: Optional[Console] = None,
        currency_symbol: str = "$",
        hours_precision: int = 2,
        show_ids: bool = True,
    ):
        """Initialize report generator.

        Args:
            console: Rich console for output. Creates default if None.
            currency_symbol: Prefix for money amounts
            hours_precision: Decimal places when showing hours
            show_ids: Show entry ids in the day view (needed for edit/delete)
        """
        self.console = console or Console()
        self.currency_symbol = currency_symbol
        self.hours_precision = hours_precision
        self.show_ids = show_ids

    def _money(self, amount: Decimal) -> str:
        return f"{self.currency_symbol}{amount:.2f}"

    def _hours(self, hours: Decimal) -> str:
        return format_hours(hours, self.hours_precision)

    def day_report(self, bucket: DayBucket, is_today: bool = False) -> None:
        """Display every entry of one day with totals.

        Expenses come first, then time entries ordered by start time.
        """
        heading = f"{bucket.day:%A}"
        if is_today:
            heading += " (today)"
        self.console.print(f"\n[bold cyan]{heading}[/bold cyan]")
        self.console.print(f"[dim]{bucket.day:%B} {bucket.day.day}, {bucket.day.year}[/dim]\n")

        expense_table = Table(title=f"Expenses: {self._money(bucket.total_amount)}")
        if self.show_ids:
            expense_table.add_column("ID", style="dim")
        expense_table.add_column("Description", style="bold")
        expense_table.add_column("Amount", style="magenta", justify="right")

        for expense in bucket.expense:
            row = [expense.description, self._money(expense.amount)]
            expense_table.add_row(*([expense.id] if self.show_ids else []), *row)

        if bucket.expense:
            self.console.print(expense_table)
        else:
            self.console.print("[yellow]No expenses logged.[/yellow]")
        self.console.print()

        time_table = Table(title=f"Time: {self._hours(bucket.total_hours)}")
        if self.show_ids:
            time_table.add_column("ID", style="dim")
        time_table.add_column("Time", style="cyan")
        time_table.add_column("Task", style="bold")
        time_table.add_column("Duration", style="magenta", justify="right")

        for entry in bucket.sorted_time_entries():
            span = f"{entry.start_time} - {entry.end_time}" if entry.start_time else "-"
            row = [span, entry.task, self._hours(entry.duration)]
            time_table.add_row(*([entry.id] if self.show_ids else []), *row)

        if bucket.time:
            self.console.print(time_table)
        else:
            self.console.print("[yellow]No tasks logged.[/yellow]")

    def summary_report(
        self,
        result: AggregationResult,
        date_range: DateRange,
        period: str = "week",
    ) -> None:
        """Display totals and breakdowns for a range.

        Args:
            result: Aggregation over the range
            date_range: The aggregated range
            period: Selector used to pick the title
        """
        title = SUMMARY_TITLES.get(period, "Summary")
        self.console.print(f"\n[bold cyan]{title}[/bold cyan]")
        self.console.print(f"[dim]{date_range.label()}[/dim]\n")

        overview_table = Table(show_header=False, box=None, padding=(0, 2))
        overview_table.add_column(style="dim")
        overview_table.add_column(style="bold")
        overview_table.add_row("Total Spent:", self._money(result.total_money))
        overview_table.add_row("Total Time:", self._hours(result.total_time))
        overview_table.add_row("Days:", str(len(date_range)))
        self.console.print(overview_table)
        self.console.print()

        if result.expense_breakdown:
            expense_table = Table(title="Spending by Description")
            expense_table.add_column("Description", style="cyan")
            expense_table.add_column("Amount", style="magenta", justify="right")
            expense_table.add_column("% Total", style="green", justify="right")
            expense_table.add_column("Bar", style="blue")

            for description, amount in result.ranked_expenses():
                pct = self._percentage(amount, result.total_money)
                expense_table.add_row(
                    description, self._money(amount), f"{pct:.1f}%", self._create_bar(pct)
                )

            self.console.print(expense_table)
        else:
            self.console.print("[yellow]No expenses recorded.[/yellow]")
        self.console.print()

        if result.task_breakdown:
            task_table = Table(title="Time by Task")
            task_table.add_column("Task", style="cyan")
            task_table.add_column("Duration", style="magenta", justify="right")
            task_table.add_column("% Total", style="green", justify="right")
            task_table.add_column("Bar", style="blue")

            for task, hours in result.ranked_tasks():
                pct = self._percentage(hours, result.total_time)
                task_table.add_row(
                    task[:50] + "..." if len(task) > 50 else task,
                    self._hours(hours),
                    f"{pct:.1f}%",
                    self._create_bar(pct),
                )

            self.console.print(task_table)
        else:
            self.console.print("[yellow]No tasks recorded.[/yellow]")

    def calendar_report(
        self,
        buckets: Mapping[str, DayBucket],
        anchor: date,
        week_start: str = "monday",
        today: Optional[date] = None,
    ) -> None:
        """Display the month containing anchor as a calendar grid.

        Days with entries show their hours and spending. Days of adjacent
        months are dimmed and today is highlighted.
        """
        today = today or date.today()
        weeks = month_grid(anchor, week_start)

        table = Table(title=f"{anchor:%B %Y}", show_lines=True)
        for day in weeks[0]:
            table.add_column(f"{day:%a}", justify="center", min_width=8)

        for week in weeks:
            cells = []
            for day in week:
                in_month = day.month == anchor.month
                cell = Text(str(day.day), style="bold" if in_month else "dim")
                if day == today:
                    cell.stylize("reverse")

                bucket = buckets.get(day.isoformat())
                if in_month and bucket is not None and not bucket.is_empty:
                    if bucket.time:
                        cell.append(f"\n{self._hours(bucket.total_hours)}", style="magenta")
                    if bucket.expense:
                        cell.append(f"\n{self._money(bucket.total_amount)}", style="green")
                cells.append(cell)
            table.add_row(*cells)

        self.console.print(table)

    @staticmethod
    def _percentage(value: Decimal, total: Decimal) -> float:
        return float(value / total * 100) if total > 0 else 0.0

    def _create_bar(self, percentage: float, width: int = 25) -> Text:
        """Create a visual bar for percentage display.

        Args:
            percentage: Percentage value (0-100)
            width: Width of the bar in characters

        Returns:
            Rich Text object with colored bar
        """
        filled = int((percentage / 100) * width)
        empty = width - filled

        bar = Text()
        bar.append("█" * filled, style="blue")
        bar.append("░" * empty, style="dim")

        return bar
