"""Identity resolution: email/phone → directory record → schedule alias."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from shift_core.aliases import (
    build_alias_variants,
    derive_alias,
    normalize_email,
    normalize_phone,
    unique_upper,
)
from shift_core.normalize import NormalizedSchedule

from .cancel import CancelToken
from .errors import AliasEmpty, AliasNotFound, FetchError

logger = logging.getLogger(__name__)

DirectoryLoader = Callable[[CancelToken | None], Awaitable[Any]]
ScheduleLoader = Callable[[str, CancelToken | None], Awaitable[NormalizedSchedule]]

# Contact fields the active week's row may carry, most specific first.
PHONE_FIELDS = ("rowCallMeBot", "rowPhone", "phone", "contact")
API_KEY_FIELDS = ("rowApiKey", "apikey")


@dataclass(frozen=True)
class DirectoryRecord:
    email: str
    name: str
    phone: str | None = None
    role: str | None = None
    api_key: str | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> DirectoryRecord:
        def opt(*keys: str) -> str | None:
            for key in keys:
                value = row.get(key)
                if value not in (None, ""):
                    return str(value).strip()
            return None

        return cls(
            email=str(row.get("email") or "").strip(),
            name=opt("name", "employee", "fullname") or "",
            phone=opt("phone"),
            role=opt("role"),
            api_key=opt("apiKey", "apikey"),
        )

    @property
    def key(self) -> str:
        return record_key(self.email, self.phone)

    def to_dict(self) -> dict[str, Any]:
        return {
            "email": self.email,
            "name": self.name,
            "phone": self.phone,
            "role": self.role,
            "apiKey": self.api_key,
        }


@dataclass(frozen=True)
class AliasResolution:
    alias: str
    found_by: str = "directory"


def record_key(email: Any = None, phone: Any = None) -> str:
    return normalize_email(email) or normalize_phone(phone)


def directory_rows(payload: Any) -> list[dict[str, Any]]:
    """Raw rows from any of the directory payload shapes."""
    if isinstance(payload, list):
        rows = payload
    elif isinstance(payload, dict):
        rows = payload.get("directory") or payload.get("employees") or payload.get("rows") or []
    else:
        rows = []
    return [r for r in rows if isinstance(r, dict)]


def parse_directory(payload: Any) -> list[DirectoryRecord]:
    return [DirectoryRecord.from_row(r) for r in directory_rows(payload)]


def find_record(
    records: list[DirectoryRecord], *, email: Any = None, phone: Any = None
) -> DirectoryRecord | None:
    want_email = normalize_email(email)
    want_phone = normalize_phone(phone)
    for rec in records:
        if want_email and normalize_email(rec.email) == want_email:
            return rec
        if want_phone and normalize_phone(rec.phone) == want_phone:
            return rec
    return None


def _first_field(raw: Any, fields: tuple[str, ...]) -> str | None:
    if not isinstance(raw, dict):
        return None
    for name in fields:
        value = raw.get(name)
        if value not in (None, ""):
            return str(value).strip()
    return None


class IdentityResolver:
    """Maps an employee's email or phone to the alias their schedule row uses.

    Aliases are memoized for the life of the resolver; names do not change
    mid-session.  Call ``forget()`` to drop them.
    """

    def __init__(
        self,
        load_directory: DirectoryLoader,
        load_schedule: ScheduleLoader | None = None,
    ):
        self._load_directory = load_directory
        self._load_schedule = load_schedule
        self._aliases: dict[str, AliasResolution] = {}

    def forget(self, key: str | None = None) -> None:
        if key is None:
            self._aliases.clear()
        else:
            self._aliases.pop(key, None)

    async def records(self, token: CancelToken | None = None) -> list[DirectoryRecord]:
        return parse_directory(await self._load_directory(token))

    async def directory_record(
        self, email: Any = None, phone: Any = None, token: CancelToken | None = None
    ) -> DirectoryRecord | None:
        return find_record(await self.records(token), email=email, phone=phone)

    async def resolve_alias(
        self,
        email: str | None = None,
        phone: str | None = None,
        token: CancelToken | None = None,
    ) -> AliasResolution:
        key = record_key(email, phone)
        cached = self._aliases.get(key)
        if cached is not None:
            return cached

        rec = await self.directory_record(email, phone, token)
        if rec is None:
            raise AliasNotFound(key)
        alias = derive_alias(rec.name)
        if not alias:
            raise AliasEmpty(key)

        resolution = AliasResolution(alias=alias, found_by="directory")
        self._aliases[key] = resolution
        return resolution

    async def _active_week(self, email: str, token: CancelToken | None) -> NormalizedSchedule | None:
        if self._load_schedule is None:
            return None
        try:
            return await self._load_schedule(email, token)
        except (FetchError, LookupError) as exc:
            logger.warning("active week lookup failed for %s: %s", email, exc)
            return None

    async def _contact_field(
        self,
        email: str,
        fields: tuple[str, ...],
        attr: str,
        token: CancelToken | None,
    ) -> str | None:
        week = await self._active_week(email, token)
        found = _first_field(week.raw if week else None, fields)
        if found:
            return found
        try:
            rec = await self.directory_record(email, token=token)
        except FetchError as exc:
            logger.warning("directory lookup failed for %s: %s", email, exc)
            return None
        return getattr(rec, attr) if rec else None

    async def resolve_phone(self, email: str, token: CancelToken | None = None) -> str | None:
        """Phone from the active week's row, else from the directory."""
        return await self._contact_field(email, PHONE_FIELDS, "phone", token)

    async def resolve_api_key(self, email: str, token: CancelToken | None = None) -> str | None:
        return await self._contact_field(email, API_KEY_FIELDS, "api_key", token)

    async def alias_candidates(self, email: str, token: CancelToken | None = None) -> list[str]:
        """Every alias spelling worth trying against the schedule sheet."""
        week = await self._active_week(email, token)
        try:
            rec = await self.directory_record(email, token=token)
        except FetchError as exc:
            logger.warning("directory lookup failed for %s: %s", email, exc)
            rec = None

        values: list[str | None] = [week.row_alias if week else None]
        if rec and rec.name:
            values.extend(build_alias_variants(rec.name))
            values.append(rec.name.split(" ")[-1])
        return unique_upper(values)
