"""
Rate Limiter
------------
Fixed-window request counters per bucket and client address.

Counters live in Redis (INCR, then EXPIRE on the first hit of a window) so
every API worker shares them. Without Redis, or while Redis is failing,
counting falls back to process memory so limits keep applying.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from loguru import logger

from taskflow.core.ports import Clock, CounterBackend

KEY_PREFIX = "ratelimit"


@dataclass(frozen=True)
class RateLimitState:
    allowed: bool
    limit: int
    remaining: int
    reset_after: int

    def headers(self) -> Dict[str, str]:
        return {
            "RateLimit-Limit": str(self.limit),
            "RateLimit-Remaining": str(self.remaining),
            "RateLimit-Reset": str(self.reset_after),
        }


class RateLimiter:
    def __init__(self, client: Optional[CounterBackend], clock: Clock):
        self.client = client
        self.clock = clock
        # bucket:identity -> (window index, count)
        self._local: Dict[str, Tuple[int, int]] = {}

    def attach(self, client: Optional[CounterBackend]) -> None:
        self.client = client

    async def hit(
        self, bucket: str, identity: str, limit: int, window_seconds: int
    ) -> RateLimitState:
        """
        Count one request and report whether it fits the quota.

        Args:
            bucket: Limiter name, e.g. "auth"
            identity: Client address
            limit: Requests allowed per window
            window_seconds: Window length
        """
        now = self.clock.now().timestamp()
        window = int(now // window_seconds)
        reset_after = max(1, int((window + 1) * window_seconds - now))

        count = await self._increment(f"{KEY_PREFIX}:{bucket}:{identity}", window, window_seconds)
        return RateLimitState(
            allowed=count <= limit,
            limit=limit,
            remaining=max(0, limit - count),
            reset_after=reset_after,
        )

    async def _increment(self, base_key: str, window: int, window_seconds: int) -> int:
        if self.client is not None:
            key = f"{base_key}:{window}"
            try:
                count = await self.client.incr(key)
                if count == 1:
                    await self.client.expire(key, window_seconds)
                return int(count)
            except Exception as e:
                logger.warning(f"Rate limit counter unavailable, counting in memory: {e}")

        stored_window, count = self._local.get(base_key, (window, 0))
        count = count + 1 if stored_window == window else 1
        self._local[base_key] = (window, count)
        return count
