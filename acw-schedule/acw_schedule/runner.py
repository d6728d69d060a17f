"""Bounded-concurrency batch runner."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


async def run_limited(
    items: Sequence[T],
    limit: int,
    worker: Callable[[T, int], Awaitable[R]],
) -> list[R | None]:
    """Run ``worker(item, index)`` for every item, at most ``limit`` at a time.

    Items start in input order as slots free up.  ``result[i]`` is the outcome
    for ``items[i]`` whatever order they finish in.  A worker that raises
    leaves ``None`` in its slot and does not stop the batch; workers should
    catch their own errors when they need a richer failure value.
    """
    if limit < 1:
        raise ValueError(f"limit must be >= 1, got {limit}")
    results: list[Any] = [None] * len(items)
    if not items:
        return results

    next_index = 0

    async def lane() -> None:
        nonlocal next_index
        while next_index < len(items):
            index = next_index
            next_index += 1
            try:
                results[index] = await worker(items[index], index)
            except Exception:
                logger.exception("batch worker failed for item %d", index)

    await asyncio.gather(*(lane() for _ in range(min(limit, len(items)))))
    return results
