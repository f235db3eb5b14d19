"""
Rate Limit Store Abstract Base Class

Defines the storage contract behind the RateLimiter. The limiter owns the
policy (ceiling, message, state); a store only keeps per-key windows and
must make increment() atomic with respect to concurrent requests that share
a key.

Design Pattern: Strategy Pattern
    - InMemoryRateLimitStore for a single process (default)
    - RedisRateLimitStore when several processes should share windows
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class RateWindow:
    """
    One client's current window.

    Attributes:
        window_start: Epoch seconds when the window opened
        count: Requests seen in this window, including the current one
    """
    window_start: float
    count: int

    def age(self, now: float) -> float:
        return now - self.window_start

    def is_elapsed(self, now: float, window_seconds: float) -> bool:
        return self.age(now) >= window_seconds


class BaseRateLimitStore(ABC):
    """Abstract per-key window store."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the store name (e.g. "memory", "redis")."""

    @abstractmethod
    async def get(self, key: str) -> Optional[RateWindow]:
        """Return the stored window for key (possibly elapsed), or None if untracked."""

    @abstractmethod
    async def increment(self, key: str, window_seconds: float, now: float) -> RateWindow:
        """
        Count one request for key.

        Opens a fresh window with count 1 when none exists or the existing one
        has elapsed; otherwise increments the count. Must be atomic.

        Args:
            key: Client key (limiter name + client address)
            window_seconds: Window length
            now: Current epoch seconds

        Returns:
            RateWindow: The window after counting this request
        """

    @abstractmethod
    async def reset(self, key: str) -> None:
        """Forget the window for key."""

    async def health_check(self) -> bool:
        """Verify the store is reachable."""
        return True

    async def close(self) -> None:
        """Release connections, if any."""
