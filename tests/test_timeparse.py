"""Tests for free-text time range parsing."""

import pytest  # type: ignore[import-not-found]

from daybook.core.errors import ParseFailure
from daybook.core.timeparse import (
    TimeRange,
    match_time,
    normalize_text,
    parse_time_range,
    try_parse_time_range,
)


class TestMatchTime:
    """Test single time segments."""

    @pytest.mark.parametrize(
        "segment,expected",
        [
            ("9:05", ("09:05", "24h")),
            ("17:45", ("17:45", "24h")),
            ("0:00", ("00:00", "24h")),
            ("5:45pm", ("17:45", "12h")),
            ("5:45 PM", ("17:45", "12h")),
            ("5pm", ("17:00", "12h-hour")),
            ("5 am", ("05:00", "12h-hour")),
            ("12am", ("00:00", "12h-hour")),
            ("12pm", ("12:00", "12h-hour")),
            ("12:30am", ("00:30", "12h")),
        ],
    )
    def test_accepted_formats(self, segment: str, expected: tuple[str, str]) -> None:
        """Test each accepted format and its canonical form."""
        assert match_time(segment) == expected

    @pytest.mark.parametrize("segment", ["noon", "25:00", "9:60", "13pm", "0am", "9", ""])
    def test_rejected_segments(self, segment: str) -> None:
        assert match_time(segment) is None

    def test_canonical_form_is_stable(self) -> None:
        """Test that a canonical time parses to itself."""
        canonical, _ = match_time("9:30pm")  # type: ignore[misc]
        assert match_time(canonical) == (canonical, "24h")

    def test_every_canonical_time_matches_itself(self) -> None:
        for h in range(24):
            for m in range(60):
                canonical = f"{h:02d}:{m:02d}"
                assert match_time(canonical) == (canonical, "24h")

    @pytest.mark.parametrize(
        "segment,expected",
        [("12:00am", "00:00"), ("11:59am", "11:59"), ("12:00pm", "12:00"), ("11:59pm", "23:59")],
    )
    def test_twelve_hour_round_trip_to_24h(self, segment: str, expected: str) -> None:
        """Test that a 12h time and its canonical 24h form agree."""
        canonical, fmt = match_time(segment)  # type: ignore[misc]
        assert (canonical, fmt) == (expected, "12h")
        assert match_time(canonical) == (expected, "24h")


class TestParseTimeRange:
    """Test parsing of start/end ranges."""

    def test_twelve_hour_words(self) -> None:
        assert parse_time_range("9am to 5pm") == TimeRange("09:00", "17:00")

    def test_twenty_four_hour_hyphen(self) -> None:
        assert parse_time_range("9:30-17:45") == TimeRange("09:30", "17:45")

    def test_twelve_hour_with_minutes_hyphen(self) -> None:
        assert parse_time_range("9:00am-5:00pm") == TimeRange("09:00", "17:00")

    def test_until_separator(self) -> None:
        assert parse_time_range("6pm until 8:15pm") == TimeRange("18:00", "20:15")

    def test_whitespace_and_case_tolerated(self) -> None:
        """Test that spacing and capitalization do not matter."""
        assert parse_time_range("  9AM   To   5PM ") == TimeRange("09:00", "17:00")
        assert parse_time_range("9:30 - 17:45") == TimeRange("09:30", "17:45")
        assert parse_time_range("9 am to 5 pm") == TimeRange("09:00", "17:00")

    def test_mixed_formats(self) -> None:
        assert parse_time_range("8:15 to 1pm") == TimeRange("08:15", "13:00")

    def test_result_unpacks(self) -> None:
        start, end = parse_time_range("10am-11am")
        assert (start, end) == ("10:00", "11:00")

    def test_does_not_check_order(self) -> None:
        """Test that a reversed range still parses; ordering is checked later."""
        assert parse_time_range("5pm to 9am") == TimeRange("17:00", "09:00")

    def test_reparse_is_identity(self) -> None:
        """Test that canonical output parses back to the same range."""
        first = parse_time_range("9:05am until 4:50pm")
        assert parse_time_range(f"{first.start} to {first.end}") == first

    @pytest.mark.parametrize("separator", [" to ", " until ", "-"])
    def test_reparse_is_identity_for_every_time(self, separator: str) -> None:
        """Test that every canonical time survives a second parse unchanged."""
        times = [f"{h:02d}:{m:02d}" for h in range(24) for m in range(60)]
        for start, end in zip(times, reversed(times)):
            parsed = parse_time_range(f"{start}{separator}{end}")
            assert parsed == TimeRange(start, end)
            assert parse_time_range(f"{parsed.start}{separator}{parsed.end}") == parsed

    @pytest.mark.parametrize(
        "text",
        [
            "noon to 5pm",
            "9am 5pm",
            "9am to",
            "to 5pm",
            "9am-5pm-6pm",
            "25:00 to 26:00",
            "",
        ],
    )
    def test_unparseable_text_raises(self, text: str) -> None:
        with pytest.raises(ParseFailure):
            parse_time_range(text)

    def test_failure_names_bad_segment(self) -> None:
        with pytest.raises(ParseFailure, match="noon"):
            parse_time_range("noon to 5pm")

    def test_parse_failure_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            parse_time_range("whenever")


class TestHelpers:
    """Test normalization helpers."""

    def test_normalize_text(self) -> None:
        assert normalize_text("  9AM\tTO\n5PM  ") == "9am to 5pm"

    def test_try_parse_returns_none(self) -> None:
        assert try_parse_time_range("sometime") is None
        assert try_parse_time_range("9am to 10am") == TimeRange("09:00", "10:00")
