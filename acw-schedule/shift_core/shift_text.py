"""Free-text shift cell parsing.

Cells come straight from the schedule sheet, so anything goes: "9-5",
"9:30 AM – 5 PM", "10 to 6 DONE", "OFF", "8:45." (open-ended, still working).
Nothing here raises on bad input; unparseable text is zero hours or ``None``.
"""

from __future__ import annotations

import re
from datetime import datetime

OFF_TOKENS = ("OFF", "OFFR", "CERRADO", "N/A", "APP")
STATUS_SUFFIXES = ("DONE", "READY", "SENT", "UPDATE", "UPDATED")

_OFF_RE = re.compile(r"^(?:%s)$" % "|".join(re.escape(t) for t in OFF_TOKENS))
_STATUS_RE = re.compile(r"\s+(?:%s)\b" % "|".join(STATUS_SUFFIXES), re.IGNORECASE)
_DASH_RE = re.compile(r"[–—]|to", re.IGNORECASE)
_SIDE = r"[0-9]{1,2}(?::[0-9]{2})?\s*(?:AM|PM)?"
_RANGE_RE = re.compile(rf"^({_SIDE})\s*-\s*({_SIDE})$", re.IGNORECASE)
_MERIDIEM_RE = re.compile(r"[AP]M", re.IGNORECASE)
_TIME_RE = re.compile(r"^(\d{1,2})(?::(\d{1,2}))?\s*(am|pm)?$", re.IGNORECASE)

MIDDAY_SHIFT_MINUTES = 12 * 60


def strip_status(text: str | None) -> str:
    """Drop a trailing status word such as ``DONE`` or ``SENT``."""
    return _STATUS_RE.split(str(text or "").strip(), maxsplit=1)[0].strip()


def is_open_ended(text: str | None) -> bool:
    """An open-ended shift is recorded as its start time plus a literal period."""
    return str(text or "").strip().endswith(".")


def is_off(text: str | None) -> bool:
    raw = str(text or "").strip()
    if not raw or re.fullmatch(r"-+", raw):
        return True
    return "off" in raw.lower()


def to_minutes(text: str) -> int:
    """Minutes after midnight for one side of a range (``9``, ``9:30``, ``9:30 PM``)."""
    s = str(text).strip().upper()
    match = re.search(r"(AM|PM)\s*$", s)
    meridiem = match.group(1) if match else ""
    s = s[: match.start()].strip() if match else s
    hh, _, mm = s.partition(":")
    h = int(hh)
    m = int(mm or 0)
    if meridiem == "AM" and h == 12:
        h = 0
    if meridiem == "PM" and h != 12:
        h += 12
    return h * 60 + m


def split_range(text: str | None) -> tuple[str, str] | None:
    """Return the two sides of a ``start-end`` cell, or ``None`` if it is not a range."""
    core = strip_status(str(text or "").upper())
    clean = re.sub(r"\.+\s*$", "", core)
    clean = _DASH_RE.sub("-", clean)
    clean = re.sub(r"\s*-\s*", "-", clean, count=1)
    match = _RANGE_RE.match(clean)
    if not match:
        return None
    return match.group(1), match.group(2)


def range_minutes(start: str, end: str) -> tuple[int, int]:
    """Start/end minutes with the midday rule applied.

    When neither side says AM or PM and the end reads earlier than the start,
    the end is moved forward twelve hours ("9:30-2" is 9:30 to 14:00).
    """
    a = to_minutes(start)
    b = to_minutes(end)
    if not _MERIDIEM_RE.search(start) and not _MERIDIEM_RE.search(end) and b < a:
        b += MIDDAY_SHIFT_MINUTES
    return a, b


def parse_hours(cell: str | None) -> float:
    """Hours worked for a shift cell; 0.0 for days off and anything unparseable."""
    if not cell:
        return 0.0
    text = str(cell).strip().upper()
    if _OFF_RE.match(text):
        return 0.0
    sides = split_range(text)
    if sides is None:
        return 0.0
    try:
        start, end = range_minutes(*sides)
    except ValueError:
        return 0.0
    return max(0, end - start) / 60


def parse_time_of_day(text: str | None, now: datetime) -> datetime | None:
    """Instant on ``now``'s date for a single time such as ``8:45`` or ``8:45 am.``.

    A trailing period (open-ended shift) is stripped before parsing.
    """
    clean = re.sub(r"\.+$", "", str(text or "").strip()).strip()
    match = _TIME_RE.match(clean)
    if not match:
        return None
    h = int(match.group(1))
    m = int(match.group(2) or 0)
    meridiem = (match.group(3) or "").lower()
    if meridiem == "pm" and h < 12:
        h += 12
    if meridiem == "am" and h == 12:
        h = 0
    try:
        return now.replace(hour=h, minute=m, second=0, microsecond=0)
    except ValueError:
        return None
