"""Weekday names as the schedule backend expects them."""

from __future__ import annotations

from datetime import date, datetime, timedelta

WEEKDAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")

# English and Spanish, with and without accents.
_DAY_PREFIXES = {
    "mon": "Mon",
    "tue": "Tue",
    "wed": "Wed",
    "thu": "Thu",
    "fri": "Fri",
    "sat": "Sat",
    "sun": "Sun",
    "lun": "Mon",
    "mar": "Tue",
    "mié": "Wed",
    "mie": "Wed",
    "jue": "Thu",
    "vie": "Fri",
    "sáb": "Sat",
    "sab": "Sat",
    "dom": "Sun",
}


def day_fix(day: str | None) -> str:
    """Canonical three-letter English tag ("Lunes" → "Mon", "miércoles" → "Wed").

    Unknown input falls back to its first three characters; empty input to "Mon".
    """
    raw = str(day or "").strip()
    return _DAY_PREFIXES.get(raw[:3].lower()) or raw[:3] or "Mon"


def day_key(name: str | None) -> str:
    """Lowercase three-letter key used to match a schedule row to today."""
    return str(name or "").strip()[:3].lower()


def today_key(now: datetime | date) -> str:
    return WEEKDAYS[now.weekday()].lower()


def week_monday(today: date, offset: int = 0) -> date:
    """Monday of the week ``offset`` weeks back (negative offsets look ahead)."""
    monday = today - timedelta(days=today.weekday())
    return monday - timedelta(weeks=offset)


def week_label(today: date, offset: int = 0) -> str:
    """Display label such as ``"Oct 13 – Oct 19"`` for the week at ``offset``."""
    monday = week_monday(today, offset)
    sunday = monday + timedelta(days=6)
    return f"{monday:%b} {monday.day} – {sunday:%b} {sunday.day}"
