"""Live hours for today's shift.

An open-ended shift ("8:45.") means the employee is on the clock; the
elapsed time is added on top of the week total until the shift is closed
with an end time.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

from .normalize import NormalizedSchedule
from .shift_text import (
    is_off,
    is_open_ended,
    parse_time_of_day,
    range_minutes,
    split_range,
    strip_status,
)
from .weekdays import today_key as _today_key


class LiveState(str, Enum):
    NONE = "NONE"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


@dataclass(frozen=True)
class LiveStatus:
    state: LiveState
    hours: float = 0.0
    total: float = 0.0

    @property
    def active(self) -> bool:
        return self.state is LiveState.IN_PROGRESS


def _closed_range(shift: str, now: datetime) -> tuple[datetime, datetime] | None:
    sides = split_range(shift)
    if sides is None:
        return None
    start_min, end_min = range_minutes(*sides)
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
    return midnight + timedelta(minutes=start_min), midnight + timedelta(minutes=end_min)


def compute_live(
    schedule: NormalizedSchedule,
    now: datetime,
    today_key: str | None = None,
) -> LiveStatus:
    """Live state and hours for today's row of ``schedule``."""
    key = today_key or _today_key(now)
    week_total = float(schedule.total or 0)
    today = schedule.day(key)
    if today is None or is_off(today.shift):
        return LiveStatus(LiveState.NONE, 0.0, week_total)

    shift = today.shift.strip()
    if is_open_ended(shift) and split_range(shift) is None:
        start = parse_time_of_day(strip_status(shift), now)
        if start is None:
            return LiveStatus(LiveState.NONE, 0.0, week_total)
        elapsed = max(0.0, (now - start).total_seconds() / 3600)
        return LiveStatus(LiveState.IN_PROGRESS, elapsed, week_total + elapsed)

    bounds = _closed_range(shift, now)
    if bounds is None:
        return LiveStatus(LiveState.NONE, 0.0, week_total)
    start, end = bounds
    duration = max(0.0, (end - start).total_seconds() / 3600)
    return LiveStatus(LiveState.COMPLETED, duration, week_total)


def classify_shift(shift: str | None, now: datetime) -> str:
    """Where ``now`` falls relative to a shift: none, later, on, done or unknown."""
    raw = str(shift or "").strip()
    if is_off(raw):
        return "none"

    clean = strip_status(raw)
    bounds = _closed_range(clean, now)
    if bounds is not None:
        start, end = bounds
        if now < start:
            return "later"
        if now <= end:
            return "on"
        return "done"

    start = parse_time_of_day(clean, now)
    if start is None:
        return "unknown"
    return "on" if now >= start else "later"
