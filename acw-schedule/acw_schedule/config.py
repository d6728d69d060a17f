from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from zoneinfo import ZoneInfo

from dotenv import load_dotenv

DEFAULT_TIMEZONE = "America/New_York"


@dataclass(frozen=True)
class RuntimeConfig:
    base_url: str
    timeout_s: float = 15.0
    directory_ttl_s: float = 300.0
    schedule_ttl_current_s: float = 60.0
    schedule_ttl_past_s: float = 300.0
    batch_limit: int = 4
    history_limit: int = 3
    timezone: str = DEFAULT_TIMEZONE

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    def schedule_ttl(self, week_offset: int) -> float:
        """The current week changes often; other weeks are cached longer."""
        return self.schedule_ttl_current_s if week_offset == 0 else self.schedule_ttl_past_s


def load_env(dotenv_path: str | Path | None = None) -> None:
    path = Path(dotenv_path) if dotenv_path else None
    if path and path.exists():
        load_dotenv(path)
        return
    load_dotenv()


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc


def _int_env(name: str, default: int, *, minimum: int = 1) -> int:
    value = int(_float_env(name, default))
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}, got {value}")
    return value


def runtime_config() -> RuntimeConfig:
    base_url = os.getenv("ACW_BASE_URL", "").strip()
    if not base_url:
        raise ValueError(
            "Missing schedule backend URL. Expected env var ACW_BASE_URL "
            "(the deployed web app /exec endpoint)."
        )
    timezone = os.getenv("ACW_TIMEZONE", DEFAULT_TIMEZONE).strip() or DEFAULT_TIMEZONE
    ZoneInfo(timezone)
    return RuntimeConfig(
        base_url=base_url,
        timeout_s=_float_env("ACW_TIMEOUT_S", 15.0),
        directory_ttl_s=_float_env("ACW_DIRECTORY_TTL_S", 300.0),
        schedule_ttl_current_s=_float_env("ACW_SCHEDULE_TTL_CURRENT_S", 60.0),
        schedule_ttl_past_s=_float_env("ACW_SCHEDULE_TTL_PAST_S", 300.0),
        batch_limit=_int_env("ACW_BATCH_LIMIT", 4),
        history_limit=_int_env("ACW_HISTORY_LIMIT", 3),
        timezone=timezone,
    )
