"""Sliding-window rate limiter for outbound vendor calls.

Callers are never rejected: when a service key has used up its window the
caller is suspended until the oldest recorded call ages out, then the
check is repeated.
"""

import asyncio
import time
from collections import defaultdict, deque
from collections.abc import Awaitable, Callable
from typing import Any

from notifyhub.core.errors import ConfigurationError
from notifyhub.core.logging import get_logger

logger = get_logger(__name__)

DEFAULT_MAX_REQUESTS = 10
DEFAULT_WINDOW_MS = 60_000


def _monotonic_ms() -> float:
    return time.monotonic() * 1000


class SlidingWindowRateLimiter:
    """Bounds calls per service key to ``max_requests`` in any trailing ``window_ms``.

    Each key has its own timestamp window and its own lock; the check and
    the record of a call happen under that lock, and the lock is released
    while a caller waits.
    """

    def __init__(
        self,
        max_requests: int = DEFAULT_MAX_REQUESTS,
        window_ms: int = DEFAULT_WINDOW_MS,
        clock: Callable[[], float] = _monotonic_ms,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        """Initialize rate limiter.

        Args:
            max_requests: Maximum calls per window, must be positive
            window_ms: Window length in milliseconds, must be positive
            clock: Returns the current time in milliseconds
            sleep: Awaitable sleep taking seconds
        """
        if not isinstance(max_requests, int) or max_requests <= 0:
            raise ConfigurationError(
                f"max_requests must be a positive integer, got {max_requests!r}",
                config_key="RATE_LIMITER_MAX_REQUESTS",
            )
        if not isinstance(window_ms, int) or window_ms <= 0:
            raise ConfigurationError(
                f"window_ms must be a positive integer, got {window_ms!r}",
                config_key="RATE_LIMITER_WINDOW_MS",
            )

        self.max_requests = max_requests
        self.window_ms = window_ms
        self._clock = clock
        self._sleep = sleep

        self._windows: dict[str, deque[float]] = defaultdict(deque)
        self._locks: dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)
        self.metrics: dict[str, dict[str, int]] = defaultdict(
            lambda: {"admitted": 0, "delayed": 0}
        )

    async def check_and_wait_if_needed(self, service_key: str) -> None:
        """Record a call for ``service_key``, waiting first if the window is full."""
        lock = self._locks[service_key]
        delayed = False

        while True:
            async with lock:
                now = self._clock()
                window = self._prune(service_key, now)

                if len(window) < self.max_requests:
                    window.append(now)
                    self.metrics[service_key]["admitted"] += 1
                    if delayed:
                        self.metrics[service_key]["delayed"] += 1
                    return

                wait_ms = self.window_ms - (now - window[0])

            delayed = True
            logger.info(
                "Rate limit reached, waiting",
                service_key=service_key,
                wait_ms=round(wait_ms, 3),
                max_requests=self.max_requests,
                window_ms=self.window_ms,
            )
            await self._sleep(max(wait_ms, 0) / 1000)

    def _prune(self, service_key: str, now: float) -> deque[float]:
        window = self._windows[service_key]
        while window and now - window[0] >= self.window_ms:
            window.popleft()
        return window

    def _active_timestamps(self, service_key: str) -> list[float]:
        now = self._clock()
        return [
            ts for ts in self._windows.get(service_key, ()) if now - ts < self.window_ms
        ]

    def get_remaining_requests(self, service_key: str) -> int:
        """Calls ``service_key`` could make right now without waiting."""
        return max(self.max_requests - len(self._active_timestamps(service_key)), 0)

    def get_time_until_reset(self, service_key: str) -> float:
        """Milliseconds until the oldest recorded call leaves the window; 0 if none."""
        active = self._active_timestamps(service_key)
        if not active:
            return 0
        return max(self.window_ms - (self._clock() - active[0]), 0)

    def get_rate_limit_info(self, service_key: str) -> dict[str, Any]:
        active = self._active_timestamps(service_key)
        return {
            "service_key": service_key,
            "max_requests": self.max_requests,
            "window_ms": self.window_ms,
            "current_requests": len(active),
            "remaining_requests": max(self.max_requests - len(active), 0),
            "time_until_reset_ms": self.get_time_until_reset(service_key),
        }

    def reset_state(self, service_key: str | None = None) -> None:
        """Forget recorded calls for one key, or for every key."""
        if service_key is None:
            self._windows.clear()
            self.metrics.clear()
        else:
            self._windows.pop(service_key, None)
            self.metrics.pop(service_key, None)
        logger.debug("Rate limiter state reset", service_key=service_key or "*")
