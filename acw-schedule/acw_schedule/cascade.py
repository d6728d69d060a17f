"""First-success evaluation of ordered fallback candidates."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

C = TypeVar("C")
R = TypeVar("R")


@dataclass
class CascadeOutcome(Generic[C, R]):
    ok: bool
    result: R | None = None
    candidate: C | None = None
    attempts: list[C] = field(default_factory=list)
    stopped: bool = False


async def first_success(
    candidates: Iterable[C],
    attempt: Callable[[C], Awaitable[R]],
    is_success: Callable[[R], bool],
    should_stop: Callable[[R], bool] | None = None,
) -> CascadeOutcome[C, R]:
    """Try candidates left to right; the first result passing ``is_success`` wins.

    ``should_stop`` ends the cascade early on a failure that later candidates
    cannot fix.  Without a winner the outcome carries the last result seen.
    """
    outcome: CascadeOutcome[C, R] = CascadeOutcome(ok=False)
    for candidate in candidates:
        outcome.attempts.append(candidate)
        result = await attempt(candidate)
        outcome.result = result
        outcome.candidate = candidate
        if is_success(result):
            outcome.ok = True
            return outcome
        if should_stop is not None and should_stop(result):
            logger.debug("cascade stopped at %r", candidate)
            outcome.stopped = True
            return outcome
    return outcome
