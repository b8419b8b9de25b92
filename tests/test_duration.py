"""Tests for duration calculation."""

from decimal import Decimal

import pytest  # type: ignore[import-not-found]

from daybook.core.duration import (
    calculate_duration,
    format_hours,
    format_number,
    round_hours,
    to_minutes,
)
from daybook.core.errors import InvalidRange, ParseFailure


class TestCalculateDuration:
    """Test elapsed hours between two times."""

    def test_full_day(self) -> None:
        assert calculate_duration("09:00", "17:30") == Decimal("8.5")

    def test_quarter_hour(self) -> None:
        assert calculate_duration("09:30", "09:45") == Decimal("0.25")

    def test_single_minute_rounds_half_up(self) -> None:
        """Test that 1/60 h = 0.01666... rounds to 0.02."""
        assert calculate_duration("10:00", "10:01") == Decimal("0.02")

    def test_twenty_minutes(self) -> None:
        assert calculate_duration("10:00", "10:20") == Decimal("0.33")

    def test_forty_minutes(self) -> None:
        assert calculate_duration("10:00", "10:40") == Decimal("0.67")

    def test_end_before_start_raises(self) -> None:
        with pytest.raises(InvalidRange, match="End time must be after start time"):
            calculate_duration("17:00", "09:00")

    def test_zero_length_raises(self) -> None:
        with pytest.raises(InvalidRange):
            calculate_duration("09:00", "09:00")

    def test_malformed_time_raises(self) -> None:
        with pytest.raises(ParseFailure):
            calculate_duration("9am", "17:00")


class TestHelpers:
    """Test conversion and formatting helpers."""

    def test_to_minutes(self) -> None:
        assert to_minutes("00:00") == 0
        assert to_minutes("23:59") == 23 * 60 + 59

    @pytest.mark.parametrize("value", ["24:00", "12:60", "", "noon"])
    def test_to_minutes_rejects(self, value: str) -> None:
        with pytest.raises(ParseFailure):
            to_minutes(value)

    def test_round_hours_half_up(self) -> None:
        assert round_hours(Decimal("1.005")) == Decimal("1.01")
        assert round_hours(Decimal("1.004")) == Decimal("1.00")

    @pytest.mark.parametrize("value", ["NaN", "Infinity", "abc"])
    def test_round_hours_rejects_non_finite(self, value: str) -> None:
        with pytest.raises(ValueError, match="Invalid hours"):
            round_hours(value)

    def test_format_hours(self) -> None:
        assert format_hours(Decimal("8.5")) == "8.50h"
        assert format_hours(Decimal("8.5"), precision=1) == "8.5h"

    def test_format_number_strips_trailing_zeros(self) -> None:
        assert format_number(Decimal("8.50")) == "8.5"
        assert format_number(Decimal("10.00")) == "10"
        assert format_number(Decimal("0.00")) == "0"
        assert format_number(Decimal("1E+2")) == "100"
