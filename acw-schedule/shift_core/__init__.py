"""Shared schedule logic: shift parsing, alias derivation, normalization, live hours."""

from .aliases import build_alias_variants, derive_alias, normalize_email, normalize_phone
from .live import LiveState, LiveStatus, classify_shift, compute_live
from .normalize import NormalizedSchedule, ScheduleDay, normalize_schedule
from .shift_text import is_open_ended, parse_hours, parse_time_of_day
from .weekdays import day_fix, today_key, week_label

__all__ = [
    "LiveState",
    "LiveStatus",
    "NormalizedSchedule",
    "ScheduleDay",
    "build_alias_variants",
    "classify_shift",
    "compute_live",
    "day_fix",
    "derive_alias",
    "is_open_ended",
    "normalize_email",
    "normalize_phone",
    "normalize_schedule",
    "parse_hours",
    "parse_time_of_day",
    "today_key",
    "week_label",
]
