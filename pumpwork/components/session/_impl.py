"""
Async helpers for the session reconciler: retry with exponential backoff
and a leading/trailing throttle bound to the running event loop.
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import httpx

logger = logging.getLogger(__name__)

T = TypeVar("T")

TRANSIENT_ERRORS: tuple[type[BaseException], ...] = (
    ConnectionError,
    sqlite3.OperationalError,
    httpx.TransportError,
)


def is_transient(error: BaseException) -> bool:
    return isinstance(error, TRANSIENT_ERRORS)


async def with_retry(
    fn: Callable[[], Awaitable[T]],
    *,
    retries: int = 2,
    base_delay: float = 1.0,
    should_retry: Callable[[BaseException], bool] = lambda e: True,
) -> T:
    """Call ``fn``; on a retryable error wait base_delay * 2**attempt and try again."""
    attempt = 0
    while True:
        try:
            return await fn()
        except Exception as e:
            if attempt >= retries or not should_retry(e):
                raise
            delay = base_delay * (2**attempt)
            logger.debug("Retrying after %s (attempt %d, %.1fs)", e, attempt + 1, delay)
            await asyncio.sleep(delay)
            attempt += 1


class Throttle:
    """
    Run ``fn`` at most once per ``delay`` seconds.

    The first call runs immediately. A call inside the window schedules one
    trailing run at the end of the window; further calls are dropped until
    it fires.
    """

    def __init__(self, fn: Callable[..., Awaitable[Any]], delay: float):
        self.fn = fn
        self.delay = delay
        self._last_call = float("-inf")
        self._pending: asyncio.TimerHandle | None = None
        self._tasks: set[asyncio.Task[Any]] = set()

    def __call__(self, *args: Any) -> asyncio.Task[Any] | None:
        loop = asyncio.get_running_loop()
        now = loop.time()
        remaining = self.delay - (now - self._last_call)

        if remaining <= 0:
            self._last_call = now
            return self._spawn(loop, args)
        if self._pending is None:
            self._pending = loop.call_later(remaining, self._fire, loop, args)
        return None

    def _fire(self, loop: asyncio.AbstractEventLoop, args: tuple[Any, ...]) -> None:
        self._pending = None
        self._last_call = loop.time()
        self._spawn(loop, args)

    def _spawn(
        self, loop: asyncio.AbstractEventLoop, args: tuple[Any, ...]
    ) -> asyncio.Task[Any]:
        task = loop.create_task(self.fn(*args))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    @property
    def has_pending(self) -> bool:
        return self._pending is not None

    def cancel(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None
        for task in list(self._tasks):
            task.cancel()
