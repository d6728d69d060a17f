"""Cancellation tokens for batches of reads tied to one view."""

from __future__ import annotations

import asyncio
from typing import Any

from .errors import RequestCancelled


class CancelToken:
    """Aborts every read waiting under it once ``cancel()`` is called.

    One token per open view (team overview, history picker); closing the
    view cancels the token and its waiting reads end with
    ``RequestCancelled``.  Reads other views share are left alone.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise RequestCancelled()

    async def wait(self) -> None:
        await self._event.wait()


class SharedRequest:
    """One in-flight request awaited by any number of callers.

    Each caller races the request against its own token.  The request itself
    is cancelled only once every caller has stopped waiting before it
    finished.
    """

    def __init__(self, task: asyncio.Future):
        self.task = task
        self.abandoned = False
        self._waiters = 0

    async def wait(self, token: CancelToken | None = None) -> Any:
        if token is not None:
            token.raise_if_cancelled()
        self._waiters += 1
        try:
            if token is None:
                await asyncio.wait({self.task})
            else:
                await self._race(token)
            if self.task.cancelled():
                raise RequestCancelled()
            return self.task.result()
        finally:
            self._waiters -= 1
            if self._waiters == 0 and not self.task.done():
                self.abandoned = True
                self.task.cancel()

    async def _race(self, token: CancelToken) -> None:
        fired = asyncio.ensure_future(token.wait())
        try:
            await asyncio.wait({self.task, fired}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            fired.cancel()
        if not self.task.done():
            raise RequestCancelled()
