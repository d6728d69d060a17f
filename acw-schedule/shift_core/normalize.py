"""Schedule payload normalization.

The backend answers schedule reads in several shapes depending on which
action served the request:

    {"days": [{"name": "Mon", "shift": "9-5", "hours": 8}, ...], "total": 40}
    {"week": {"days": [...]}}
    {"schedule": [...]} / {"rows": [...]}
    {"mon": "9-5", "tue": "OFF", ...}

All of them collapse into one ``NormalizedSchedule``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .shift_text import parse_hours
from .weekdays import day_key

FLAT_DAY_KEYS = (
    "mon", "tue", "wed", "thu", "fri", "sat", "sun",
    "Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun",
)


@dataclass(frozen=True)
class ScheduleDay:
    name: str
    shift: str
    hours: float


@dataclass(frozen=True)
class NormalizedSchedule:
    ok: bool
    days: list[ScheduleDay] = field(default_factory=list)
    total: float = 0.0
    row_alias: str | None = None
    week_label: str | None = None
    raw: Any = None
    cancelled: bool = False

    def day(self, key: str) -> ScheduleDay | None:
        """First day whose name starts with ``key`` (case-insensitive, 3 letters)."""
        key = day_key(key)
        for d in self.days:
            if day_key(d.name) == key:
                return d
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": self.ok,
            "days": [{"name": d.name, "shift": d.shift, "hours": d.hours} for d in self.days],
            "total": self.total,
            "rowAlias": self.row_alias,
            "weekLabel": self.week_label,
            "cancelled": self.cancelled,
        }


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def detect_days(payload: dict[str, Any]) -> list[Any] | None:
    """Raw day entries from the first recognized shape, or ``None``."""
    week = payload.get("week")
    for candidate in (
        payload.get("days"),
        week.get("days") if isinstance(week, dict) else None,
        payload.get("schedule"),
        payload.get("rows"),
    ):
        if isinstance(candidate, list):
            return candidate

    present = [k for k in FLAT_DAY_KEYS if k in payload]
    if present:
        return [{"name": k, "shift": payload[k]} for k in present]
    return None


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def normalize_day(entry: Any) -> ScheduleDay:
    if isinstance(entry, dict):
        name = _text(entry.get("name") or entry.get("day"))
        shift = entry.get("shift")
        if shift is None:
            shift = entry.get("text")
        hours_field = entry.get("hours")
    else:
        name = ""
        shift = entry
        hours_field = None

    shift_text = _text(shift) or "-"
    try:
        hours = float(hours_field or 0)
    except (TypeError, ValueError):
        hours = 0.0
    if not hours or hours < 0:
        hours = parse_hours(shift_text)
    return ScheduleDay(name=name, shift=shift_text, hours=hours)


def normalize_schedule(payload: Any) -> NormalizedSchedule:
    """Canonical ``{days, total}`` view of any schedule payload; never raises."""
    if not isinstance(payload, dict):
        return NormalizedSchedule(ok=False, raw=payload)

    entries = detect_days(payload) or []
    days = [normalize_day(e) for e in entries]

    reported = payload.get("total")
    total = float(reported) if _is_number(reported) else sum(d.hours for d in days)

    return NormalizedSchedule(
        ok=bool(days),
        days=days,
        total=total,
        row_alias=payload.get("rowAlias") or payload.get("alias") or None,
        week_label=payload.get("weekLabel") or payload.get("label") or None,
        raw=payload,
    )
