"""
In-Memory Rate Limit Store

Process-local window map. State is lost on restart and is not shared between
worker processes; use the Redis store when that matters.
"""

import logging
import threading
from typing import Optional

from food_ordering.security.rate_limit.base import BaseRateLimitStore, RateWindow

logger = logging.getLogger(__name__)


class InMemoryRateLimitStore(BaseRateLimitStore):
    """
    Dictionary-backed store.

    The read-modify-write in increment() runs under a lock and contains no
    await, so interleaved requests for the same key are never under-counted,
    whether they come from one event loop or several threads.

    Attributes:
        sweep_threshold: Number of tracked keys above which elapsed windows are purged
    """

    def __init__(self, sweep_threshold: int = 10_000):
        self._windows: dict[str, tuple[RateWindow, float]] = {}
        self._lock = threading.Lock()
        self.sweep_threshold = sweep_threshold

    @property
    def provider_name(self) -> str:
        return "memory"

    async def get(self, key: str) -> Optional[RateWindow]:
        with self._lock:
            entry = self._windows.get(key)
        return entry[0] if entry else None

    async def increment(self, key: str, window_seconds: float, now: float) -> RateWindow:
        with self._lock:
            entry = self._windows.get(key)
            if entry is None or entry[0].is_elapsed(now, window_seconds):
                window = RateWindow(window_start=now, count=1)
            else:
                window = RateWindow(window_start=entry[0].window_start, count=entry[0].count + 1)
            self._windows[key] = (window, window.window_start + window_seconds)

            if len(self._windows) > self.sweep_threshold:
                self._sweep(now)
        return window

    async def reset(self, key: str) -> None:
        with self._lock:
            self._windows.pop(key, None)

    def _sweep(self, now: float) -> None:
        # caller holds the lock
        expired = [k for k, (_, expires_at) in self._windows.items() if expires_at <= now]
        for k in expired:
            del self._windows[k]
        if expired:
            logger.debug(f"Purged {len(expired)} elapsed rate limit windows")

    def __len__(self) -> int:
        return len(self._windows)
