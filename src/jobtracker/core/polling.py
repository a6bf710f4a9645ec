"""Fixed-interval waiting for results that arrive through the workflow callback.

There is no backoff: the check runs every ``interval_sec`` until it yields a
value or ``max_attempts`` is reached.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from typing import TypeVar

from jobtracker.errors import GenerationTimeoutError
from jobtracker.types import ProgressSnapshot

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_INTERVAL_SEC = 2.0
DEFAULT_MAX_ATTEMPTS = 150
PROGRESS_CAP = 95.0


def poll_until(
    check: Callable[[], T | None],
    *,
    interval_sec: float = DEFAULT_INTERVAL_SEC,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    sleep: Callable[[float], None] = time.sleep,
    label: str = "",
) -> T:
    for attempt in range(1, max_attempts + 1):
        logger.debug("Polling attempt %s/%s %s", attempt, max_attempts, label)
        result = check()
        if result is not None:
            return result
        if attempt < max_attempts:
            sleep(interval_sec)

    raise GenerationTimeoutError()


async def apoll_until(
    check: Callable[[], Awaitable[T | None]],
    *,
    interval_sec: float = DEFAULT_INTERVAL_SEC,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    on_attempt: Callable[[int], Awaitable[None]] | None = None,
    label: str = "",
) -> T:
    for attempt in range(1, max_attempts + 1):
        logger.debug("Polling attempt %s/%s %s", attempt, max_attempts, label)
        result = await check()
        if result is not None:
            return result
        if on_attempt is not None:
            await on_attempt(attempt)
        if attempt < max_attempts:
            await asyncio.sleep(interval_sec)

    raise GenerationTimeoutError()


class ProgressTracker:
    """Elapsed-time progress estimate. It has no signal from the workflow itself."""

    def __init__(self, duration_sec: float, *, clock: Callable[[], float] = time.monotonic):
        if duration_sec <= 0:
            raise ValueError("duration_sec must be positive")
        self.duration_sec = duration_sec
        self._clock = clock
        self._started = clock()
        self._completed = False

    def complete(self) -> None:
        self._completed = True

    def snapshot(self) -> ProgressSnapshot:
        elapsed = max(0.0, self._clock() - self._started)
        if self._completed:
            return ProgressSnapshot(progress=100.0, time_remaining=0, elapsed=elapsed, completed=True)

        progress = min(elapsed / self.duration_sec * 100.0, PROGRESS_CAP)
        remaining = max(int(round(self.duration_sec - elapsed)), 0)
        return ProgressSnapshot(progress=round(progress, 1), time_remaining=remaining, elapsed=elapsed)
