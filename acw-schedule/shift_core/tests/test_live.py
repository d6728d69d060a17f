"""Tests for live-hours inference on today's shift."""

from datetime import datetime

import pytest

from shift_core.live import LiveState, classify_shift, compute_live
from shift_core.normalize import normalize_schedule

# A Wednesday.
NOW = datetime(2025, 11, 12, 14, 30)


def _week(wed_shift, total=None):
    payload = {"days": [{"name": "Mon", "shift": "9-5"}, {"name": "Wed", "shift": wed_shift}]}
    if total is not None:
        payload["total"] = total
    return normalize_schedule(payload)


class TestComputeLive:
    def test_open_ended_shift_is_in_progress(self):
        status = compute_live(_week("8:30."), NOW, "wed")
        assert status.state is LiveState.IN_PROGRESS
        assert status.hours == pytest.approx(6.0)
        assert status.total == pytest.approx(8 + 6.0)
        assert status.active

    def test_start_in_future_clamps_to_zero(self):
        status = compute_live(_week("4 pm."), NOW, "wed")
        assert status.state is LiveState.IN_PROGRESS
        assert status.hours == 0

    def test_closed_range_is_completed(self):
        status = compute_live(_week("9:30-2"), NOW, "wed")
        assert status.state is LiveState.COMPLETED
        assert status.hours == pytest.approx(4.5)
        assert status.total == pytest.approx(8 + 4.5)

    def test_meridiem_range(self):
        assert compute_live(_week("9AM-5PM"), NOW, "wed").hours == pytest.approx(8)

    def test_off_today(self):
        status = compute_live(_week("OFF"), NOW, "wed")
        assert status.state is LiveState.NONE
        assert status.hours == 0

    def test_no_row_for_today(self):
        assert compute_live(_week("9-5"), NOW, "fri").state is LiveState.NONE

    def test_unparseable_today(self):
        assert compute_live(_week("APP"), NOW, "wed").state is LiveState.NONE

    def test_today_key_defaults_to_now(self):
        assert compute_live(_week("9-5"), NOW).state is LiveState.COMPLETED

    def test_reported_total_used_as_base(self):
        status = compute_live(_week("8:30.", total=20), NOW, "wed")
        assert status.total == pytest.approx(26.0)


class TestClassifyShift:
    @pytest.mark.parametrize(
        "shift,expected",
        [
            ("", "none"),
            ("-", "none"),
            ("OFF", "none"),
            ("3PM-9PM", "later"),
            ("9-5", "on"),
            ("6-11", "done"),
            ("9-5 SENT", "on"),
            ("8:30.", "on"),
            ("4pm.", "later"),
            ("APP", "unknown"),
        ],
    )
    def test_classify(self, shift, expected):
        assert classify_shift(shift, NOW) == expected
