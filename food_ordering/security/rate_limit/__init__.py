"""
Rate Limit Store Factory

Single entry point for building the configured window store and the two
limiters the application runs (general and login).

Usage:
    from food_ordering.security.rate_limit import create_rate_limit_store

    store = create_rate_limit_store(settings)
    general, login = create_limiters(settings, store)

Backend Switching:
    - RATE_LIMIT_BACKEND=memory → InMemoryRateLimitStore (single process)
    - RATE_LIMIT_BACKEND=redis  → RedisRateLimitStore (shared)
"""

import logging

from food_ordering.core.config import RateLimitBackend, Settings
from food_ordering.security.rate_limit.base import BaseRateLimitStore, RateWindow
from food_ordering.security.rate_limit.limiter import (
    RateLimitDecision,
    RateLimiter,
    RateLimitState,
)
from food_ordering.security.rate_limit.memory import InMemoryRateLimitStore
from food_ordering.security.rate_limit.middleware import RateLimitMiddleware, client_address
from food_ordering.security.rate_limit.redis import RedisRateLimitStore

logger = logging.getLogger(__name__)

GENERAL_LIMIT_MESSAGE = "Too many requests from this IP, please try again later."
LOGIN_LIMIT_MESSAGE = "Too many login attempts, please try again later."


def create_rate_limit_store(settings: Settings) -> BaseRateLimitStore:
    """
    Build the window store selected by RATE_LIMIT_BACKEND.

    Returns:
        BaseRateLimitStore: Configured store instance
    """
    if settings.rate_limit_backend == RateLimitBackend.REDIS:
        logger.info("Rate Limit Store: Using RedisRateLimitStore")
        return RedisRateLimitStore(redis_url=settings.redis_url)

    logger.info("Rate Limit Store: Using InMemoryRateLimitStore (single process)")
    return InMemoryRateLimitStore()


def create_limiters(settings: Settings, store: BaseRateLimitStore) -> tuple[RateLimiter, RateLimiter]:
    """
    Build the general limiter (all routes) and the stricter login limiter.

    Both share the store; their keys are kept apart by limiter name.
    """
    general = RateLimiter(
        store=store,
        name="general",
        max_requests=settings.rate_limit_max_requests,
        window_seconds=settings.rate_limit_window_seconds,
        message=GENERAL_LIMIT_MESSAGE,
    )
    login = RateLimiter(
        store=store,
        name="login",
        max_requests=settings.auth_rate_limit_max_requests,
        window_seconds=settings.auth_rate_limit_window_seconds,
        message=LOGIN_LIMIT_MESSAGE,
    )
    return general, login


__all__ = [
    "create_rate_limit_store",
    "create_limiters",
    "client_address",
    "BaseRateLimitStore",
    "InMemoryRateLimitStore",
    "RedisRateLimitStore",
    "RateLimiter",
    "RateLimitDecision",
    "RateLimitMiddleware",
    "RateLimitState",
    "RateWindow",
    "GENERAL_LIMIT_MESSAGE",
    "LOGIN_LIMIT_MESSAGE",
]
