"""Date range resolution for day, week, month and year views."""

import calendar
from datetime import date, datetime, timedelta
from typing import Optional

from daybook.core.models import DateRange

SELECTORS = ("day", "week", "month", "year")
WEEK_STARTS = {"monday": 0, "sunday": 6}


def _week_offset(day: date, week_start: str) -> int:
    """Days since the start of the week containing day."""
    try:
        first = WEEK_STARTS[week_start]
    except KeyError:
        raise ValueError(f"Unknown week start: {week_start}")
    return (day.weekday() - first) % 7


def _add_months(day: date, months: int) -> date:
    """Shift by whole months, clamping the day to the target month's length."""
    index = day.year * 12 + (day.month - 1) + months
    year, month = divmod(index, 12)
    month += 1
    last = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last))


def resolve_range(selector: str, anchor: date, week_start: str = "monday") -> DateRange:
    """Resolve a period selector to the inclusive range containing anchor.

    Args:
        selector: One of 'day', 'week', 'month', 'year'
        anchor: Any day inside the wanted period
        week_start: 'monday' (default) or 'sunday'

    Returns:
        DateRange covering the full period

    Raises:
        ValueError: If the selector is unknown

    Example:
        >>> resolve_range("week", date(2024, 3, 6))
        DateRange(start=datetime.date(2024, 3, 4), end=datetime.date(2024, 3, 10))
    """
    if selector == "day":
        return DateRange(anchor, anchor)
    if selector == "week":
        start = anchor - timedelta(days=_week_offset(anchor, week_start))
        return DateRange(start, start + timedelta(days=6))
    if selector == "month":
        last = calendar.monthrange(anchor.year, anchor.month)[1]
        return DateRange(anchor.replace(day=1), anchor.replace(day=last))
    if selector == "year":
        return DateRange(date(anchor.year, 1, 1), date(anchor.year, 12, 31))
    raise ValueError(f"Unknown period: {selector}. Use one of {', '.join(SELECTORS)}")


def custom_range(start: date, end: date) -> DateRange:
    """Build a custom range. Raises InvalidRange if start is after end."""
    return DateRange(start, end)


def shift_anchor(selector: str, anchor: date, steps: int) -> date:
    """Move an anchor date by a number of whole periods.

    Negative steps move backwards. Month and year shifts clamp the day
    (Mar 31 minus one month is Feb 28/29).
    """
    if selector == "day":
        return anchor + timedelta(days=steps)
    if selector == "week":
        return anchor + timedelta(weeks=steps)
    if selector == "month":
        return _add_months(anchor, steps)
    if selector == "year":
        return _add_months(anchor, steps * 12)
    raise ValueError(f"Unknown period: {selector}. Use one of {', '.join(SELECTORS)}")


def month_grid(anchor: date, week_start: str = "monday") -> list[list[date]]:
    """Build the calendar grid for the month containing anchor.

    Returns:
        List of weeks, each a list of seven days. The first week starts on
        or before the 1st and the last week ends on or after the month's
        last day, so leading and trailing days belong to adjacent months.
    """
    month = resolve_range("month", anchor)
    start = month.start - timedelta(days=_week_offset(month.start, week_start))
    end = month.end + timedelta(days=6 - _week_offset(month.end, week_start))
    days = list(DateRange(start, end).days())
    return [days[i : i + 7] for i in range(0, len(days), 7)]


def parse_day(text: Optional[str], today: Optional[date] = None) -> date:
    """Parse a day given as 'today', 'yesterday', 'tomorrow' or YYYY-MM-DD.

    Raises:
        ValueError: If the text is not a recognized day
    """
    today = today or date.today()
    if not text:
        return today
    value = text.strip().lower()
    if value == "today":
        return today
    if value == "yesterday":
        return today - timedelta(days=1)
    if value == "tomorrow":
        return today + timedelta(days=1)
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise ValueError(
            f"Invalid date '{text}'. Use YYYY-MM-DD, 'today', 'yesterday' or 'tomorrow'"
        )


def parse_month(text: str) -> date:
    """Parse YYYY-MM into the first day of that month."""
    try:
        return datetime.strptime(text.strip(), "%Y-%m").date()
    except ValueError:
        raise ValueError(f"Invalid month '{text}'. Use YYYY-MM")
