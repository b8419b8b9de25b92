"""Duration calculation between two wall-clock times."""

import re
from decimal import ROUND_HALF_UP, Decimal
from typing import Union

from daybook.core.errors import InvalidRange, ParseFailure

_CLOCK = re.compile(r"^(\d{1,2}):(\d{2})$")
_HUNDREDTHS = Decimal("0.01")


def to_minutes(value: str) -> int:
    """Convert an HH:MM string to minutes after midnight.

    Raises:
        ParseFailure: If value is not a valid 24-hour HH:MM time
    """
    match = _CLOCK.match(value.strip()) if value else None
    if match is None:
        raise ParseFailure(f"Invalid time '{value}', expected HH:MM")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise ParseFailure(f"Invalid time '{value}', expected HH:MM")
    return hours * 60 + minutes


def round_hours(value: Union[Decimal, int, str]) -> Decimal:
    """Round an hour value half-up to two decimal places.

    Raises:
        ValueError: If the value is not a finite number
    """
    try:
        return Decimal(value).quantize(_HUNDREDTHS, rounding=ROUND_HALF_UP)
    except ArithmeticError:
        raise ValueError(f"Invalid hours: {value!r}")


def calculate_duration(start: str, end: str) -> Decimal:
    """Calculate elapsed hours between two times on the same day.

    Args:
        start: Start time (HH:MM)
        end: End time (HH:MM)

    Returns:
        Elapsed hours rounded half-up to two decimals

    Raises:
        InvalidRange: If end is not strictly after start. Spans crossing
            midnight are not supported.
        ParseFailure: If either time is malformed

    Example:
        >>> calculate_duration("09:00", "17:30")
        Decimal('8.50')
    """
    elapsed = to_minutes(end) - to_minutes(start)
    if elapsed <= 0:
        raise InvalidRange("End time must be after start time")
    return round_hours(Decimal(elapsed) / 60)


def format_hours(hours: Decimal, precision: int = 2) -> str:
    """Format hours for display, e.g. Decimal('8.5') -> '8.50h'."""
    return f"{hours:.{precision}f}h"


def format_number(value: Decimal) -> str:
    """Render a Decimal without trailing zeros or exponent notation."""
    text = f"{value.normalize():f}"
    return text if text != "-0" else "0"
