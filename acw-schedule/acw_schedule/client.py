"""Async client for the ACW schedule web app.

The backend is a single ``GET base_url?action=...`` endpoint whose action
names and response shapes have drifted over time.  This client hides that:
reads are cached and normalized, and every operation that can be served
several ways walks an ordered candidate list until one succeeds.
"""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from functools import partial
from typing import Any
from urllib.parse import quote, urlencode

import httpx

from shift_core.live import LiveStatus, compute_live
from shift_core.normalize import NormalizedSchedule, ScheduleDay, normalize_schedule
from shift_core.weekdays import day_fix, today_key, week_label

from .cache import RequestCache
from .cancel import CancelToken, SharedRequest
from .cascade import first_success
from .config import RuntimeConfig
from .errors import FetchError, IdentityError, RequestCancelled
from .identity import AliasResolution, DirectoryRecord, IdentityResolver, parse_directory
from .runner import run_limited

logger = logging.getLogger(__name__)

DIRECTORY_ACTION = "getEmployeesDirectory"
PRIMARY_SCHEDULE_ACTION = "getSmartSchedule"
ALIAS_SCHEDULE_ACTIONS = ("getSmartSchedule", "getScheduleByAlias", "getSchedule")
UPDATE_ACTIONS = ("updateShift", "updateShiftAPI", "updateShiftAPI_v1")
SEND_ACTIONS = ("sendtoday", "sendtomorrow")
NOTIFICATIONS_ACTION = "getnotifications"

ROW_NOT_FOUND = "row_not_found_for_alias"
ALL_VARIANTS_FAILED = "all_variants_failed"

# Errors that only say "this spelling of the row didn't match"; the next
# candidate may still succeed.
_AMBIGUOUS_ERROR_RE = re.compile(
    r"row_not_found\w*|missing(_\w+)?|\w*_alias|\w*_day", re.IGNORECASE
)


@dataclass
class MutationResult:
    ok: bool
    data: dict[str, Any] | None = None
    used: str | None = None
    error: str | None = None
    attempts: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"ok": self.ok, "attempts": len(self.attempts)}
        if self.ok:
            out["data"] = self.data
            out["used"] = self.used
        else:
            out["error"] = self.error
        return out


@dataclass(frozen=True)
class HistoryWeek:
    offset: int
    label: str
    total: float
    days: list[ScheduleDay]


@dataclass(frozen=True)
class TeamMemberStatus:
    record: DirectoryRecord
    schedule: NormalizedSchedule
    live: LiveStatus


@dataclass(frozen=True)
class NotificationBatch:
    items: list[dict[str, Any]]
    cursor: int


@dataclass(frozen=True)
class _Reply:
    payload: dict[str, Any]
    transport_error: bool = False

    @property
    def ok(self) -> bool:
        return bool(self.payload.get("ok"))

    @property
    def error(self) -> str | None:
        err = self.payload.get("error")
        return str(err) if err else None


def is_meaningful_error(error: str | None) -> bool:
    """A backend error that naming the row differently will not fix."""
    return bool(error) and not _AMBIGUOUS_ERROR_RE.fullmatch(error.strip())


def _as_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


class ScheduleClient:
    """Cached, fallback-aware access to the directory and weekly schedules.

    Use as ``async with ScheduleClient(cfg) as client: ...``.  One instance
    owns one cache and one alias memo; create a new client per session.
    """

    def __init__(
        self,
        config: RuntimeConfig,
        *,
        http: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        cache: RequestCache | None = None,
        now: Callable[[], datetime] | None = None,
    ):
        self.config = config
        self.base_url = config.base_url.rstrip("?")
        self.cache = cache or RequestCache()
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(
            timeout=config.timeout_s,
            transport=transport,
            follow_redirects=True,
            headers={"Accept": "application/json", "Cache-Control": "no-store"},
        )
        self._now = now or (lambda: datetime.now(config.tz))
        self.identity = IdentityResolver(self._directory_payload, self._active_schedule)

    async def __aenter__(self) -> ScheduleClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    # -- Transport --

    def url_for(self, params: dict[str, Any]) -> str:
        query = urlencode({k: "" if v is None else v for k, v in params.items()}, quote_via=quote)
        return f"{self.base_url}?{query}"

    async def _get_json(self, url: str) -> Any:
        try:
            resp = await self._http.get(url)
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPStatusError as exc:
            raise FetchError(url, f"HTTP {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise FetchError(url, exc.__class__.__name__) from exc
        except ValueError as exc:
            raise FetchError(url, "invalid JSON") from exc

    def _settle(self, url: str, ttl: float, shared: SharedRequest, task: asyncio.Future) -> None:
        if self.cache.get(url) is not shared:
            return
        if task.cancelled() or task.exception() is not None:
            self.cache.clear_inflight(url)
        else:
            self.cache.set(url, task.result(), ttl)

    async def fetch_json(
        self,
        params: dict[str, Any],
        *,
        ttl: float = 0,
        token: CancelToken | None = None,
    ) -> Any:
        """GET one backend action.

        ``ttl > 0`` serves from the cache and shares an in-flight request
        between concurrent callers; ``ttl == 0`` always goes to the network.
        Raises ``FetchError``, or ``RequestCancelled`` once ``token`` fires;
        a shared request keeps running for callers whose token has not.
        """
        url = self.url_for(params)
        if token is not None:
            token.raise_if_cancelled()

        if ttl > 0:
            cached = self.cache.get(url)
            if isinstance(cached, SharedRequest):
                if not cached.abandoned:
                    return await cached.wait(token)
            elif cached is not None:
                return cached

        shared = SharedRequest(asyncio.ensure_future(self._get_json(url)))
        if ttl > 0:
            self.cache.set_inflight(url, shared)
            shared.task.add_done_callback(partial(self._settle, url, ttl, shared))
        return await shared.wait(token)

    # -- Directory --

    async def _directory_payload(self, token: CancelToken | None = None) -> Any:
        return await self.fetch_json(
            {"action": DIRECTORY_ACTION}, ttl=self.config.directory_ttl_s, token=token
        )

    async def get_directory(self, token: CancelToken | None = None) -> dict[str, Any]:
        """Directory payload; failures come back as ``{"ok": False, ...}``."""
        try:
            payload = await self._directory_payload(token)
        except RequestCancelled:
            return {"ok": False, "cancelled": True}
        except FetchError as exc:
            logger.warning("directory read failed: %s", exc)
            return {"ok": False, "error": exc.reason}
        if isinstance(payload, list):
            return {"ok": True, "directory": payload}
        if not isinstance(payload, dict):
            return {"ok": False, "error": "invalid_payload"}
        return payload

    async def directory_records(self, token: CancelToken | None = None) -> list[DirectoryRecord]:
        return parse_directory(await self.get_directory(token))

    async def resolve_alias(
        self,
        email: str | None = None,
        phone: str | None = None,
        token: CancelToken | None = None,
    ) -> AliasResolution:
        return await self.identity.resolve_alias(email=email, phone=phone, token=token)

    # -- Schedules --

    async def _schedule_attempt(
        self, params: dict[str, Any], ttl: float, token: CancelToken | None
    ) -> NormalizedSchedule:
        try:
            raw = await self.fetch_json(params, ttl=ttl, token=token)
        except FetchError as exc:
            logger.warning("schedule read failed: %s", exc)
            return NormalizedSchedule(ok=False)
        return normalize_schedule(raw)

    async def _alias_for(self, identifier: str, token: CancelToken | None) -> str | None:
        if "@" in identifier:
            lookup = {"email": identifier}
        else:
            lookup = {"phone": identifier}
        try:
            return (await self.identity.resolve_alias(token=token, **lookup)).alias
        except (IdentityError, FetchError) as exc:
            logger.info("no alias fallback for %s: %s", identifier, exc)
            return None

    async def get_schedule(
        self,
        identifier: str,
        week_offset: int = 0,
        token: CancelToken | None = None,
    ) -> NormalizedSchedule:
        """Normalized week for an employee.

        ``week_offset`` 0 is the current week, positive values are past weeks
        and negative values are upcoming ones.  Tries the identifier first,
        then the employee's alias against each schedule action.  Never raises;
        a cancelled read returns ``cancelled=True``.
        """
        ttl = self.config.schedule_ttl(week_offset)
        try:
            primary = await self._schedule_attempt(
                {"action": PRIMARY_SCHEDULE_ACTION, "email": identifier, "offset": week_offset},
                ttl,
                token,
            )
            if primary.ok:
                return primary

            alias = await self._alias_for(identifier, token)
            if not alias:
                return primary

            outcome = await first_success(
                ALIAS_SCHEDULE_ACTIONS,
                lambda action: self._schedule_attempt(
                    {"action": action, "alias": alias, "offset": week_offset}, ttl, token
                ),
                lambda schedule: schedule.ok,
            )
            return outcome.result if outcome.result is not None else primary
        except RequestCancelled:
            return NormalizedSchedule(ok=False, cancelled=True)

    async def _active_schedule(self, email: str, token: CancelToken | None) -> NormalizedSchedule:
        return await self.get_schedule(email, 0, token)

    async def live_status(
        self,
        email: str,
        now: datetime | None = None,
        token: CancelToken | None = None,
    ) -> LiveStatus:
        now = now or self._now()
        schedule = await self.get_schedule(email, 0, token)
        return compute_live(schedule, now, today_key(now))

    async def get_history(
        self,
        email: str,
        weeks: int = 5,
        token: CancelToken | None = None,
    ) -> list[HistoryWeek]:
        """The current week and ``weeks - 1`` past weeks, newest first."""
        today = self._now().date()

        async def load(offset: int, _index: int) -> HistoryWeek:
            schedule = await self.get_schedule(email, offset, token)
            if schedule.ok:
                return HistoryWeek(
                    offset=offset,
                    label=schedule.week_label or week_label(today, offset),
                    total=float(schedule.total or 0),
                    days=list(schedule.days),
                )
            return HistoryWeek(offset=offset, label=week_label(today, offset), total=0.0, days=[])

        results = await run_limited(list(range(weeks)), self.config.history_limit, load)
        return [
            week or HistoryWeek(offset=i, label=week_label(today, i), total=0.0, days=[])
            for i, week in enumerate(results)
        ]

    async def team_overview(
        self,
        records: Sequence[DirectoryRecord] | None = None,
        *,
        now: datetime | None = None,
        token: CancelToken | None = None,
    ) -> list[TeamMemberStatus]:
        """Current-week schedule and live hours for each roster member."""
        if records is None:
            records = await self.directory_records(token)
        now = now or self._now()
        key = today_key(now)

        async def load(record: DirectoryRecord, _index: int) -> TeamMemberStatus:
            schedule = await self.get_schedule(record.email, 0, token)
            return TeamMemberStatus(record=record, schedule=schedule, live=compute_live(schedule, now, key))

        results = await run_limited(list(records), self.config.batch_limit, load)
        return [r for r in results if r is not None]

    # -- Mutations --

    async def _alias_list(self, email: str) -> list[str]:
        aliases: list[str] = []
        resolved = await self._alias_for(email, None)
        if resolved:
            aliases.append(resolved)
        aliases.extend(await self.identity.alias_candidates(email))
        return list(dict.fromkeys(aliases))

    async def _mutation_attempt(self, params: dict[str, Any]) -> _Reply:
        try:
            payload = await self.fetch_json(params, ttl=0)
        except FetchError as exc:
            logger.warning("mutation attempt failed: %s", exc)
            return _Reply({"ok": False, "error": exc.reason}, transport_error=True)
        if not isinstance(payload, dict):
            return _Reply({"ok": False, "error": "invalid_payload"}, transport_error=True)
        return _Reply(payload)

    async def _mutate(self, candidates: Iterable[dict[str, Any]]) -> MutationResult:
        by_url = {self.url_for(params): params for params in candidates}
        last_backend_error: str | None = None

        async def attempt(url: str) -> _Reply:
            nonlocal last_backend_error
            logger.debug("mutation candidate %s", url)
            reply = await self._mutation_attempt(by_url[url])
            if not reply.ok and not reply.transport_error and reply.error:
                last_backend_error = reply.error
            return reply

        outcome = await first_success(
            by_url,
            attempt,
            lambda reply: reply.ok,
            lambda reply: not reply.transport_error and is_meaningful_error(reply.error),
        )
        attempts = list(outcome.attempts)
        if outcome.ok and outcome.result is not None:
            return MutationResult(
                ok=True, data=outcome.result.payload, used=outcome.candidate, attempts=attempts
            )
        return MutationResult(ok=False, error=last_backend_error or ALL_VARIANTS_FAILED, attempts=attempts)

    async def send_shift(
        self, target_email: str, action: str, actor: str | None = None
    ) -> MutationResult:
        """Ask the backend to message an employee today's or tomorrow's shift."""
        if action not in SEND_ACTIONS:
            raise ValueError(f"Unknown send action '{action}'. Expected one of {SEND_ACTIONS}")
        extra = {"actor": actor} if actor else {}
        candidates: list[dict[str, Any]] = [
            {"action": action, "target": target_email, **extra},
            {"action": action, "email": target_email, **extra},
        ]
        for alias in await self._alias_list(target_email):
            candidates.append({"action": action, "alias": alias, **extra})
        return await self._mutate(candidates)

    async def update_shift(
        self, target_email: str, day: str, new_shift: str, actor: str
    ) -> MutationResult:
        """Write one day's shift text for an employee in the active week."""
        day3 = day_fix(day)
        shift = " ".join(str(new_shift or "").split())
        candidates: list[dict[str, Any]] = [
            {"action": "updateShift", "actor": actor, "target": target_email, "day": day3, "shift": shift},
        ]
        for alias in await self._alias_list(target_email):
            for action in UPDATE_ACTIONS:
                candidates.append(
                    {"action": action, "actor": actor, "alias": alias, "day": day3, "shift": shift}
                )
        return await self._mutate(candidates)

    # -- Notifications --

    async def poll_notifications(self, email: str, since: int = 0) -> NotificationBatch:
        """New notifications for ``email`` after cursor ``since``."""
        try:
            payload = await self.fetch_json(
                {"action": NOTIFICATIONS_ACTION, "email": email, "since": since}, ttl=0
            )
        except (FetchError, RequestCancelled) as exc:
            logger.warning("notification poll failed: %s", exc)
            return NotificationBatch(items=[], cursor=since)
        if not isinstance(payload, dict) or not payload.get("ok"):
            return NotificationBatch(items=[], cursor=since)
        items = [n for n in payload.get("items") or [] if isinstance(n, dict)]
        cursor = max([since, *(_as_int(n.get("id")) for n in items)])
        return NotificationBatch(items=items, cursor=cursor)
