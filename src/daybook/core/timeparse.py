"""Free-text time range parsing.

Turns loosely formatted input such as ``"9am to 5pm"`` or ``"9:30-17:45"``
into a pair of canonical 24-hour ``HH:MM`` strings.
"""

import re
from datetime import time
from typing import Callable, NamedTuple, Optional

from daybook.core.errors import ParseFailure

# Separators: the words "to" / "until" or a hyphen (spaces optional around it)
_SEPARATOR = re.compile(r"\s*-\s*|\s+(?:to|until)\s+")
_WHITESPACE = re.compile(r"\s+")


class TimeRange(NamedTuple):
    """Normalized start and end wall-clock times."""

    start: str
    end: str


def _from_24h(match: "re.Match[str]") -> Optional[time]:
    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        return None
    return time(hour, minute)


def _from_12h(match: "re.Match[str]") -> Optional[time]:
    hour = int(match.group(1))
    minute = int(match.group(2)) if match.group(2) else 0
    meridiem = match.group(3)
    if not 1 <= hour <= 12 or minute > 59:
        return None
    hour %= 12
    if meridiem == "pm":
        hour += 12
    return time(hour, minute)


class TimeFormat(NamedTuple):
    """Accepted time-of-day format.

    Attributes:
        name: Short identifier for the format
        pattern: Anchored regex the whole segment must match
        convert: Turns a match into a time, or None if out of range
    """

    name: str
    pattern: "re.Pattern[str]"
    convert: Callable[["re.Match[str]"], Optional[time]]


# Tried in order; the first format that yields a valid time wins.
TIME_FORMATS: tuple[TimeFormat, ...] = (
    TimeFormat("24h", re.compile(r"^(\d{1,2}):(\d{2})$"), _from_24h),
    TimeFormat("12h", re.compile(r"^(\d{1,2}):(\d{2})\s?(am|pm)$"), _from_12h),
    TimeFormat("12h-hour", re.compile(r"^(\d{1,2})()\s?(am|pm)$"), _from_12h),
)


def normalize_text(text: str) -> str:
    """Lower-case text and collapse runs of whitespace to single spaces."""
    return _WHITESPACE.sub(" ", text.lower()).strip()


def match_time(segment: str) -> Optional[tuple[str, str]]:
    """Match a single time segment against the accepted formats.

    Args:
        segment: One side of a time range, e.g. "9am" or "17:45"

    Returns:
        Tuple of (canonical HH:MM, format name), or None if no format matches
    """
    segment = normalize_text(segment)
    for fmt in TIME_FORMATS:
        match = fmt.pattern.match(segment)
        if match is None:
            continue
        value = fmt.convert(match)
        if value is not None:
            return value.strftime("%H:%M"), fmt.name
    return None


def parse_time_range(text: str) -> TimeRange:
    """Parse "<start> to <end>" text into canonical 24-hour times.

    Args:
        text: Free text such as "9am to 5pm", "9:30-17:45" or "6pm until 8pm"

    Returns:
        TimeRange with both endpoints as HH:MM

    Raises:
        ParseFailure: If the text does not split into exactly two segments,
            or either segment matches no accepted format

    Example:
        >>> parse_time_range("9am to 5pm")
        TimeRange(start='09:00', end='17:00')
    """
    if not text:
        raise ParseFailure("No time range given")

    parts = _SEPARATOR.split(normalize_text(text))
    if len(parts) != 2 or not all(parts):
        raise ParseFailure(f"Could not split '{text}' into a start and an end time")

    start = match_time(parts[0])
    end = match_time(parts[1])
    if start is None or end is None:
        bad = parts[0] if start is None else parts[1]
        raise ParseFailure(f"Unrecognized time: '{bad}'")

    return TimeRange(start[0], end[0])


def try_parse_time_range(text: str) -> Optional[TimeRange]:
    """Like parse_time_range, but return None instead of raising."""
    try:
        return parse_time_range(text)
    except ParseFailure:
        return None
