"""
Fixed-Window Rate Limiter

Per client key the limiter moves through

    UNTRACKED -> WITHIN_WINDOW -> OVER_LIMIT

The first request (or the first after the window elapsed) opens a window with
count 1. Every further request in the window increments the count; once the
count exceeds max_requests the request is rejected with RateLimitError until
the window elapses.

Several limiters can share one store: keys are namespaced by limiter name.
"""

import logging
import math
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from food_ordering.core.errors import RateLimitError
from food_ordering.security.rate_limit.base import BaseRateLimitStore

logger = logging.getLogger(__name__)


class RateLimitState(str, Enum):
    UNTRACKED = "untracked"
    WITHIN_WINDOW = "within_window"
    OVER_LIMIT = "over_limit"


@dataclass(frozen=True)
class RateLimitDecision:
    """Result of counting one request."""
    allowed: bool
    state: RateLimitState
    count: int
    retry_after: int


class RateLimiter:
    """
    Decision logic over a BaseRateLimitStore.

    Attributes:
        name: Namespace for this limiter's keys (e.g. "general", "login")
        max_requests: Ceiling per window; request max_requests + 1 is rejected
        window_seconds: Window length
        message: Fixed advisory message returned on rejection
    """

    def __init__(
        self,
        store: BaseRateLimitStore,
        name: str,
        max_requests: int,
        window_seconds: float,
        message: str,
        clock: Callable[[], float] = time.time,
    ):
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")

        self.store = store
        self.name = name
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.message = message
        self._clock = clock

    def key_for(self, client_id: str) -> str:
        return f"{self.name}:{client_id}"

    async def hit(self, client_id: str) -> RateLimitDecision:
        """Count one request from client_id and decide whether it may proceed."""
        now = self._clock()
        window = await self.store.increment(self.key_for(client_id), self.window_seconds, now)
        retry_after = max(math.ceil(window.window_start + self.window_seconds - now), 0)

        if window.count > self.max_requests:
            return RateLimitDecision(False, RateLimitState.OVER_LIMIT, window.count, retry_after)
        return RateLimitDecision(True, RateLimitState.WITHIN_WINDOW, window.count, retry_after)

    async def check(self, client_id: str) -> None:
        """
        Count one request and raise when it is over budget.

        Raises:
            RateLimitError: with the limiter's message and a Retry-After hint
        """
        decision = await self.hit(client_id)
        if not decision.allowed:
            logger.warning(f"Rate limit '{self.name}' exceeded by {client_id}")
            raise RateLimitError(self.message, retry_after=decision.retry_after)

    async def state(self, client_id: str) -> RateLimitState:
        """Current state for client_id without counting a request."""
        window = await self.store.get(self.key_for(client_id))
        if window is None or window.is_elapsed(self._clock(), self.window_seconds):
            return RateLimitState.UNTRACKED
        if window.count > self.max_requests:
            return RateLimitState.OVER_LIMIT
        return RateLimitState.WITHIN_WINDOW

    async def reset(self, client_id: str) -> None:
        await self.store.reset(self.key_for(client_id))
