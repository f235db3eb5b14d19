"""
Redis Rate Limit Store

Shares windows between processes. Each hit is a single Lua script, so the
increment and the window reset happen atomically on the Redis server.

A window is represented by two keys with the same TTL:
    <prefix>:<key>:count  request counter
    <prefix>:<key>:start  epoch seconds the window opened
When the TTL runs out the next hit opens a fresh window.
"""

import logging
from typing import Any, Optional

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from food_ordering.security.rate_limit.base import BaseRateLimitStore, RateWindow

logger = logging.getLogger(__name__)


INCREMENT_SCRIPT = """
local count = redis.call('INCR', KEYS[1])
if count == 1 then
    redis.call('PEXPIRE', KEYS[1], ARGV[1])
    redis.call('SET', KEYS[2], ARGV[2], 'PX', ARGV[1])
end
local start = redis.call('GET', KEYS[2])
if not start then
    start = ARGV[2]
end
return {count, start}
"""


class RedisRateLimitStore(BaseRateLimitStore):
    """
    Redis-backed store.

    Attributes:
        key_prefix: Namespace for all keys written by this store
    """

    def __init__(
        self,
        redis_url: Optional[str] = None,
        client: Optional[Any] = None,
        key_prefix: str = "rate_limit",
        timeout: float = 2.0,
    ):
        if client is None:
            if not redis_url:
                raise ValueError("redis_url or client is required")
            client = aioredis.from_url(
                redis_url,
                socket_timeout=timeout,
                socket_connect_timeout=timeout,
                decode_responses=True,
            )
        self._client = client
        self._increment = client.register_script(INCREMENT_SCRIPT)
        self.key_prefix = key_prefix

        logger.info(f"RedisRateLimitStore initialized (prefix={key_prefix})")

    @property
    def provider_name(self) -> str:
        return "redis"

    def _keys(self, key: str) -> tuple[str, str]:
        base = f"{self.key_prefix}:{key}"
        return f"{base}:count", f"{base}:start"

    async def get(self, key: str) -> Optional[RateWindow]:
        count_key, start_key = self._keys(key)
        count, start = await self._client.mget(count_key, start_key)
        if count is None:
            return None
        return RateWindow(window_start=float(start) if start else 0.0, count=int(count))

    async def increment(self, key: str, window_seconds: float, now: float) -> RateWindow:
        count_key, start_key = self._keys(key)
        ttl_ms = max(int(window_seconds * 1000), 1)
        count, start = await self._increment(keys=[count_key, start_key], args=[ttl_ms, repr(now)])
        return RateWindow(window_start=float(start), count=int(count))

    async def reset(self, key: str) -> None:
        await self._client.delete(*self._keys(key))

    async def health_check(self) -> bool:
        try:
            return bool(await self._client.ping())
        except RedisError as e:
            logger.error(f"Redis health check failed: {e}")
            return False

    async def close(self) -> None:
        await self._client.aclose()
