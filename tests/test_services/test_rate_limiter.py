"""
Rate Limiter Tests
------------------
Fixed-window counting in Redis and the in-memory fallback.
"""

import pytest

from taskflow.services.rate_limiter import RateLimiter
from tests.fakes import FailingRedis, FakeRedis, FrozenClock

WINDOW = 900


async def hit_times(limiter, times, limit=3, bucket="auth", identity="10.0.0.1"):
    states = []
    for _ in range(times):
        states.append(await limiter.hit(bucket, identity, limit, WINDOW))
    return states


class TestRedisCounters:
    @pytest.mark.asyncio
    async def test_allows_up_to_limit(self):
        limiter = RateLimiter(FakeRedis(), FrozenClock())

        states = await hit_times(limiter, 4)

        assert [s.allowed for s in states] == [True, True, True, False]
        assert [s.remaining for s in states] == [2, 1, 0, 0]

    @pytest.mark.asyncio
    async def test_counter_key_and_expiry(self):
        redis = FakeRedis()
        clock = FrozenClock()
        limiter = RateLimiter(redis, clock)

        await hit_times(limiter, 2)

        window = int(clock.now().timestamp() // WINDOW)
        key = f"ratelimit:auth:10.0.0.1:{window}"
        assert redis.data == {key: "2"}
        assert redis.expirations == {key: WINDOW}

    @pytest.mark.asyncio
    async def test_buckets_and_addresses_are_independent(self):
        limiter = RateLimiter(FakeRedis(), FrozenClock())
        await hit_times(limiter, 3)

        assert (await limiter.hit("api", "10.0.0.1", 3, WINDOW)).allowed
        assert (await limiter.hit("auth", "10.0.0.2", 3, WINDOW)).allowed
        assert not (await limiter.hit("auth", "10.0.0.1", 3, WINDOW)).allowed

    @pytest.mark.asyncio
    async def test_next_window_starts_fresh(self):
        clock = FrozenClock()
        limiter = RateLimiter(FakeRedis(), clock)
        await hit_times(limiter, 4)

        clock.advance(seconds=WINDOW)

        assert (await limiter.hit("auth", "10.0.0.1", 3, WINDOW)).remaining == 2

    @pytest.mark.asyncio
    async def test_reset_after_counts_down(self):
        clock = FrozenClock()
        limiter = RateLimiter(FakeRedis(), clock)

        # the frozen start time sits on a window boundary
        assert (await limiter.hit("auth", "a", 3, WINDOW)).reset_after == WINDOW
        clock.advance(seconds=600)
        assert (await limiter.hit("auth", "a", 3, WINDOW)).reset_after == 300

    @pytest.mark.asyncio
    async def test_headers(self):
        limiter = RateLimiter(FakeRedis(), FrozenClock())

        state = await limiter.hit("api", "10.0.0.1", 50, WINDOW)

        assert state.headers() == {
            "RateLimit-Limit": "50",
            "RateLimit-Remaining": "49",
            "RateLimit-Reset": "900",
        }


class TestInMemoryFallback:
    @pytest.mark.asyncio
    async def test_counts_without_redis(self):
        limiter = RateLimiter(None, FrozenClock())

        states = await hit_times(limiter, 4)

        assert [s.allowed for s in states] == [True, True, True, False]

    @pytest.mark.asyncio
    async def test_redis_failure_falls_back_to_memory(self):
        limiter = RateLimiter(FailingRedis(), FrozenClock())

        states = await hit_times(limiter, 4)

        assert states[-1].allowed is False

    @pytest.mark.asyncio
    async def test_memory_window_rolls_over(self):
        clock = FrozenClock()
        limiter = RateLimiter(None, clock)
        await hit_times(limiter, 4)

        clock.advance(seconds=WINDOW)

        assert (await limiter.hit("auth", "10.0.0.1", 3, WINDOW)).allowed

    @pytest.mark.asyncio
    async def test_detach_switches_to_memory(self):
        redis = FakeRedis()
        limiter = RateLimiter(redis, FrozenClock())
        limiter.attach(None)

        await hit_times(limiter, 1)

        assert redis.data == {}
