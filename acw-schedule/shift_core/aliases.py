"""Name → alias derivation and alias variants for fuzzy row matching.

The schedule sheet keys each row by an uppercase surname token ("GIRALDO",
"DE LA CRUZ"), sometimes written with an initial ("J. GIRALDO").  The
directory only knows full names, so both sides are reduced to alias
variants before comparing.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

NBSP = "\u00a0"

# Joiners that belong to the surname ("De La Cruz", "Van Dijk").
JOINERS = frozenset(
    {"DE", "DEL", "DE LA", "DE LOS", "DE LAS", "DA", "DOS", "VON", "VAN", "DI", "DAL"}
)

_INITIAL_RE = re.compile(r"^[A-ZÁÉÍÓÚÜÑ]\.?$")
_ALIAS_STRIP_RE = re.compile(r"[^A-ZÁÉÍÓÚÜÑ ]")


def normalize_email(value: Any) -> str:
    return str(value or "").strip().lower()


def normalize_phone(value: Any) -> str:
    return re.sub(r"\D", "", str(value or ""))


def _name_parts(full_name: str | None) -> list[str]:
    raw = re.sub(r"\s+", " ", str(full_name or "")).strip()
    if not raw:
        return []
    return [p for p in raw.split(" ") if not _INITIAL_RE.match(p)]


def _surname(parts: Sequence[str]) -> str:
    """Last name token, with a preceding joiner ("DE", "DE LA") folded in."""
    if not parts:
        return ""
    last = parts[-1]
    if len(parts) >= 3:
        pair = f"{parts[-3]} {parts[-2]}"
        if pair.upper() in JOINERS:
            return f"{pair} {last}"
    if len(parts) >= 2 and parts[-2].upper() in JOINERS:
        return f"{parts[-2]} {last}"
    return last


def derive_alias(full_name: str | None) -> str:
    """Canonical display alias for a full name.

    >>> derive_alias("Johan A. Giraldo")
    'GIRALDO'
    >>> derive_alias("Maria De La Cruz")
    'DE LA CRUZ'
    """
    surname = _surname(_name_parts(full_name))
    return _ALIAS_STRIP_RE.sub("", surname.upper()).strip()


def build_alias_variants(full_name: str | None) -> list[str]:
    """Spacing/punctuation permutations of a name's alias, for matching only."""
    parts = _name_parts(full_name)
    if not parts:
        return []
    first = parts[0].upper()
    last = _surname(parts).upper()
    fi = first[:1]

    candidates = [
        last,
        f"{fi}. {last}",
        f"{fi}.{last}",
        f"{fi}{NBSP}.{NBSP}{last}",
        f"{fi}{NBSP}{last}",
        f"{fi} {last}",
        f"{first} {last}",
        " ".join(parts).upper(),
    ]
    return list(dict.fromkeys(c.strip() for c in candidates if c.strip()))


def variants_for(value: str | None, *extra: str | None) -> set[str]:
    """Variant set for a name or label, plus any literal aliases given."""
    out = {v.upper().strip() for v in build_alias_variants(value)}
    for item in (value, *extra):
        if item:
            out.add(str(item).upper().strip())
    return out


def alias_matches(a: str | None, b: str | None) -> bool:
    if not a or not b:
        return False
    return bool(variants_for(a) & variants_for(b))


def roster_segments(
    records: Sequence[Mapping[str, Any]],
    bounds: Mapping[str, tuple[str, str]],
) -> dict[str, list[Mapping[str, Any]]]:
    """Split an ordered roster into contiguous named groups.

    ``bounds`` maps a group name to the alias labels of its first and last
    member, e.g. ``{"back": ("J. GIRALDO", "S. BARRERA")}``.  A group whose
    bounds cannot both be found is empty.
    """
    label_variants = {
        label: variants_for(label) for pair in bounds.values() for label in pair
    }
    found: dict[str, int] = {}
    for index, record in enumerate(records):
        name = record.get("name") or record.get("alias") or record.get("employee") or ""
        emp_variants = variants_for(name, record.get("alias"))
        for label, lv in label_variants.items():
            if label not in found and emp_variants & lv:
                found[label] = index

    groups: dict[str, list[Mapping[str, Any]]] = {}
    for group, (start_label, end_label) in bounds.items():
        a = found.get(start_label)
        b = found.get(end_label)
        if a is None or b is None:
            groups[group] = []
            continue
        groups[group] = list(records[min(a, b) : max(a, b) + 1])
    return groups


def unique_upper(values: Iterable[str | None]) -> list[str]:
    """Uppercased, trimmed, deduplicated, order-preserving; empties dropped."""
    return list(dict.fromkeys(v for v in (str(x or "").strip().upper() for x in values) if v))
