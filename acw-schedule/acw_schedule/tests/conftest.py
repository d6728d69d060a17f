"""Shared fixtures: a scripted fake backend behind httpx.MockTransport."""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Any, Callable

import httpx
import pytest

from acw_schedule.client import ScheduleClient
from acw_schedule.config import RuntimeConfig

BASE_URL = "https://backend.test/macros/exec"

# Wednesday afternoon.
FIXED_NOW = datetime(2025, 11, 12, 14, 30)

DIRECTORY = {
    "ok": True,
    "directory": [
        {"email": "johan@acw.test", "name": "Johan A. Giraldo", "phone": "(617) 555-0101", "role": "manager"},
        {"email": "maria@acw.test", "name": "Maria De La Cruz", "phone": "617-555-0102", "apiKey": "k-102"},
        {"email": "ghost@acw.test", "name": "", "phone": ""},
    ],
}


class FakeBackend:
    """Routes ``?action=`` to handlers and records every call in order."""

    def __init__(self) -> None:
        self.calls: list[dict[str, str]] = []
        self.handlers: dict[str, Callable[[dict[str, str]], Any]] = {}
        self.delay = 0.0

    def on(self, action: str, handler: Callable[[dict[str, str]], Any] | Any) -> None:
        self.handlers[action] = handler if callable(handler) else (lambda _params, v=handler: v)

    def actions(self) -> list[str]:
        return [c.get("action", "") for c in self.calls]

    def count(self, action: str) -> int:
        return self.actions().count(action)

    async def handle(self, request: httpx.Request) -> httpx.Response:
        params = dict(request.url.params)
        self.calls.append(params)
        if self.delay:
            await asyncio.sleep(self.delay)
        handler = self.handlers.get(params.get("action", ""))
        if handler is None:
            return httpx.Response(200, json={"ok": False, "error": "unknown_action"})
        result = handler(params)
        if isinstance(result, Exception):
            raise result
        if isinstance(result, httpx.Response):
            return result
        return httpx.Response(200, json=result)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def config():
    return RuntimeConfig(base_url=BASE_URL)


@pytest.fixture
def backend():
    fake = FakeBackend()
    fake.on("getEmployeesDirectory", DIRECTORY)
    return fake


@pytest.fixture
async def client(backend, config):
    async with ScheduleClient(
        config,
        transport=httpx.MockTransport(backend.handle),
        now=lambda: FIXED_NOW,
    ) as c:
        yield c
