"""Tests for the fixed-window rate limiter and its stores."""

import asyncio

import pytest

from food_ordering.core.errors import RateLimitError
from food_ordering.security.rate_limit import (
    GENERAL_LIMIT_MESSAGE,
    LOGIN_LIMIT_MESSAGE,
    InMemoryRateLimitStore,
    RateLimiter,
    RateLimitState,
    RedisRateLimitStore,
    create_limiters,
    create_rate_limit_store,
)

from tests.conftest import make_settings


class FakeClock:
    def __init__(self, now: float = 1_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def limiter(clock):
    return RateLimiter(
        store=InMemoryRateLimitStore(),
        name="login",
        max_requests=5,
        window_seconds=900,
        message=LOGIN_LIMIT_MESSAGE,
        clock=clock,
    )


class TestRateLimiter:
    async def test_untracked_until_first_request(self, limiter):
        assert await limiter.state("10.0.0.1") == RateLimitState.UNTRACKED

    async def test_allows_up_to_ceiling(self, limiter):
        for expected in range(1, 6):
            decision = await limiter.hit("10.0.0.1")
            assert decision.allowed
            assert decision.count == expected
        assert await limiter.state("10.0.0.1") == RateLimitState.WITHIN_WINDOW

    async def test_sixth_request_rejected(self, limiter):
        for _ in range(5):
            await limiter.check("10.0.0.1")
        with pytest.raises(RateLimitError) as exc_info:
            await limiter.check("10.0.0.1")
        assert exc_info.value.status_code == 429
        assert exc_info.value.to_body() == {"error": LOGIN_LIMIT_MESSAGE}
        assert exc_info.value.headers == {"Retry-After": "900"}
        assert await limiter.state("10.0.0.1") == RateLimitState.OVER_LIMIT

    async def test_retry_after_counts_down(self, limiter, clock):
        for _ in range(5):
            await limiter.hit("10.0.0.1")
        clock.advance(600)
        decision = await limiter.hit("10.0.0.1")
        assert not decision.allowed
        assert decision.retry_after == 300

    async def test_window_elapses(self, limiter, clock):
        for _ in range(6):
            await limiter.hit("10.0.0.1")
        clock.advance(900)
        assert await limiter.state("10.0.0.1") == RateLimitState.UNTRACKED
        decision = await limiter.hit("10.0.0.1")
        assert decision.allowed
        assert decision.count == 1

    async def test_clients_are_independent(self, limiter):
        for _ in range(6):
            await limiter.hit("10.0.0.1")
        assert (await limiter.hit("10.0.0.2")).allowed

    async def test_reset(self, limiter):
        for _ in range(6):
            await limiter.hit("10.0.0.1")
        await limiter.reset("10.0.0.1")
        assert await limiter.state("10.0.0.1") == RateLimitState.UNTRACKED

    async def test_concurrent_hits_are_not_under_counted(self, clock):
        limiter = RateLimiter(
            store=InMemoryRateLimitStore(),
            name="general",
            max_requests=100,
            window_seconds=900,
            message=GENERAL_LIMIT_MESSAGE,
            clock=clock,
        )
        decisions = await asyncio.gather(*(limiter.hit("10.0.0.1") for _ in range(150)))
        assert sorted(d.count for d in decisions) == list(range(1, 151))
        assert sum(d.allowed for d in decisions) == 100

    def test_rejects_invalid_configuration(self):
        with pytest.raises(ValueError):
            RateLimiter(InMemoryRateLimitStore(), "x", 0, 60, "msg")
        with pytest.raises(ValueError):
            RateLimiter(InMemoryRateLimitStore(), "x", 5, 0, "msg")


class TestInMemoryStore:
    async def test_limiters_sharing_a_store_do_not_collide(self, clock):
        store = InMemoryRateLimitStore()
        general, login = create_limiters(make_settings(), store)
        await general.hit("10.0.0.1")
        await login.hit("10.0.0.1")
        assert (await store.get("general:10.0.0.1")).count == 1
        assert (await store.get("login:10.0.0.1")).count == 1
        assert login.message == LOGIN_LIMIT_MESSAGE
        assert general.max_requests == 100

    async def test_sweeps_elapsed_windows(self):
        store = InMemoryRateLimitStore(sweep_threshold=2)
        await store.increment("a", 10, now=0)
        await store.increment("b", 10, now=0)
        await store.increment("c", 10, now=20)
        assert len(store) == 1

    def test_factory_defaults_to_memory(self):
        assert create_rate_limit_store(make_settings()).provider_name == "memory"


class FakeScript:
    """Evaluates the increment script's effect against FakeRedis."""

    def __init__(self, redis: "FakeRedis"):
        self.redis = redis

    async def __call__(self, keys, args):
        count_key, start_key = keys
        ttl_ms, now = args
        count = int(self.redis.data.get(count_key, 0)) + 1
        self.redis.data[count_key] = str(count)
        if count == 1:
            self.redis.data[start_key] = now
            self.redis.ttls[count_key] = ttl_ms
        return [count, self.redis.data[start_key]]


class FakeRedis:
    def __init__(self):
        self.data = {}
        self.ttls = {}
        self.closed = False

    def register_script(self, script):
        assert "INCR" in script
        return FakeScript(self)

    async def mget(self, *keys):
        return [self.data.get(k) for k in keys]

    async def delete(self, *keys):
        for k in keys:
            self.data.pop(k, None)

    async def ping(self):
        return True

    async def aclose(self):
        self.closed = True


class TestRedisStore:
    @pytest.fixture
    def fake(self):
        return FakeRedis()

    @pytest.fixture
    def store(self, fake):
        return RedisRateLimitStore(client=fake, key_prefix="test")

    async def test_increment_uses_namespaced_keys(self, store, fake):
        window = await store.increment("login:1.2.3.4", 900, now=1000.5)
        assert window.count == 1
        assert window.window_start == 1000.5
        assert fake.data["test:login:1.2.3.4:count"] == "1"
        assert fake.ttls["test:login:1.2.3.4:count"] == 900_000

    async def test_window_start_is_kept(self, store):
        await store.increment("k", 900, now=1000.0)
        window = await store.increment("k", 900, now=1010.0)
        assert window.count == 2
        assert window.window_start == 1000.0

    async def test_get_and_reset(self, store):
        assert await store.get("k") is None
        await store.increment("k", 60, now=5.0)
        assert (await store.get("k")).count == 1
        await store.reset("k")
        assert await store.get("k") is None

    async def test_health_and_close(self, store, fake):
        assert await store.health_check()
        await store.close()
        assert fake.closed
        assert store.provider_name == "redis"

    async def test_limiter_over_redis_store(self, store, clock):
        limiter = RateLimiter(store, "login", 5, 900, LOGIN_LIMIT_MESSAGE, clock=clock)
        for _ in range(5):
            await limiter.check("1.2.3.4")
        with pytest.raises(RateLimitError):
            await limiter.check("1.2.3.4")

    def test_requires_url_or_client(self):
        with pytest.raises(ValueError):
            RedisRateLimitStore()
