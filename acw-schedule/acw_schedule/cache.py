"""In-memory request cache with TTL and in-flight de-duplication."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class CacheEntry:
    value: Any = None
    expires_at: float = 0.0
    inflight: Any = None


class RequestCache:
    """Key → value store with expiry.

    A key holds either a resolved value or the in-flight handle producing it,
    never both.  Expired values are dropped on read; there is no sweeper.
    """

    def __init__(self, *, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._store: dict[str, CacheEntry] = {}

    def __len__(self) -> int:
        return len(self._store)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def get(self, key: str) -> Any:
        """Cached value, the shared in-flight handle, or ``None``."""
        entry = self._store.get(key)
        if entry is None:
            return None
        if entry.inflight is not None:
            return entry.inflight
        if self._clock() < entry.expires_at:
            return entry.value
        del self._store[key]
        return None

    def set(self, key: str, value: Any, ttl_s: float) -> Any:
        self._store[key] = CacheEntry(value=value, expires_at=self._clock() + ttl_s)
        return value

    def set_inflight(self, key: str, pending: Any) -> None:
        self._store[key] = CacheEntry(inflight=pending)

    def clear_inflight(self, key: str) -> None:
        entry = self._store.get(key)
        if entry is not None and entry.inflight is not None:
            del self._store[key]

    def invalidate(self, key: str | None = None) -> None:
        if key is None:
            self._store.clear()
        else:
            self._store.pop(key, None)
