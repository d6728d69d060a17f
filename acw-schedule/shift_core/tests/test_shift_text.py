"""Tests for shift-cell parsing."""

from datetime import datetime

import pytest

from shift_core.shift_text import (
    is_off,
    is_open_ended,
    parse_hours,
    parse_time_of_day,
    split_range,
    strip_status,
    to_minutes,
)

NOW = datetime(2025, 11, 12, 14, 30)


class TestParseHours:
    def test_plain_range_crosses_midday(self):
        assert parse_hours("9-5") == 8

    def test_meridiem_range(self):
        assert parse_hours("9AM-5PM") == 8
        assert parse_hours("9 AM - 5 PM") == 8

    def test_half_hour_start(self):
        assert parse_hours("9:30-2") == 4.5

    def test_no_adjustment_when_end_is_later(self):
        assert parse_hours("7-11") == 4

    @pytest.mark.parametrize("cell", ["OFF", "off", "OFFR", "CERRADO", "N/A", "APP"])
    def test_off_tokens(self, cell):
        assert parse_hours(cell) == 0

    @pytest.mark.parametrize("cell", ["garbage", "", None, "-", "9", "25:99 to soon"])
    def test_unparseable_is_zero(self, cell):
        assert parse_hours(cell) == 0

    def test_status_suffix_is_ignored(self):
        assert parse_hours("9-5 DONE") == 8
        assert parse_hours("8:30-4:30 sent") == 8

    def test_alternative_dashes(self):
        assert parse_hours("9 – 5") == 8
        assert parse_hours("9—5") == 8
        assert parse_hours("9 to 5") == 8

    def test_explicit_meridiem_never_adjusted(self):
        # 10PM-2AM reads as a negative span and clamps to zero.
        assert parse_hours("10PM-2AM") == 0

    def test_midday_heuristic_kept_for_ambiguous_night_shift(self):
        assert parse_hours("10-2") == 4

    def test_open_ended_cell_has_no_hours(self):
        assert parse_hours("8:45.") == 0


class TestHelpers:
    def test_to_minutes(self):
        assert to_minutes("9") == 540
        assert to_minutes("9:30") == 570
        assert to_minutes("12AM") == 0
        assert to_minutes("12 PM") == 720
        assert to_minutes("1:15PM") == 795

    def test_split_range(self):
        assert split_range("9:30 - 2") == ("9:30", "2")
        assert split_range("OFF") is None

    def test_strip_status(self):
        assert strip_status("9-5 READY") == "9-5"
        assert strip_status("9-5") == "9-5"

    def test_open_ended(self):
        assert is_open_ended("8:45.")
        assert not is_open_ended("8:45-5")

    def test_is_off(self):
        assert is_off("")
        assert is_off("---")
        assert is_off("Off")
        assert not is_off("9-5")


class TestParseTimeOfDay:
    def test_plain_time(self):
        assert parse_time_of_day("8:45", NOW) == datetime(2025, 11, 12, 8, 45)

    def test_open_ended_period_is_stripped(self):
        assert parse_time_of_day("8:45.", NOW) == datetime(2025, 11, 12, 8, 45)

    def test_meridiem(self):
        assert parse_time_of_day("1:30 pm", NOW) == datetime(2025, 11, 12, 13, 30)
        assert parse_time_of_day("12am", NOW) == datetime(2025, 11, 12, 0, 0)

    def test_invalid(self):
        assert parse_time_of_day("soon", NOW) is None
        assert parse_time_of_day("9-5", NOW) is None
        assert parse_time_of_day("27:00", NOW) is None
