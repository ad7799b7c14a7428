"""
Cache Service
-------------
Read-through cache for task detail, task lists and task statistics.

The cache is an optimisation, never a source of truth: every operation
swallows backend failures, logs a warning and degrades to a miss or a no-op.
"""

import hashlib
import json
from typing import Any, Optional
from uuid import UUID

from loguru import logger

from taskflow.core.ports import CacheBackend
from taskflow.models.domain_models import AllTenantsScope, OwnedScope, QueryScope

SCAN_BATCH_SIZE = 100


# ============================================================================
# KEY BUILDERS
# ============================================================================


def fingerprint(payload: Any) -> str:
    """SHA-256 of the canonical (sorted-key) JSON form of ``payload``."""
    canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def task_detail_key(task_id: UUID) -> str:
    return f"tasks:detail:{task_id}"


def task_list_key(scope: QueryScope, query_payload: Any) -> str:
    return f"tasks:list:{scope.cache_segment}:{fingerprint(query_payload)}"


def task_list_pattern(scope: QueryScope) -> str:
    return f"tasks:list:{scope.cache_segment}:*"


def task_stats_key(scope: QueryScope) -> str:
    return f"tasks:stats:{scope.cache_segment}"


class CacheService:
    """JSON values with a TTL over a redis.asyncio-compatible client."""

    def __init__(
        self,
        client: Optional[CacheBackend],
        ttl_seconds: int = 300,
        enabled: bool = True,
    ):
        self._client = client
        self.ttl_seconds = ttl_seconds
        self._enabled = enabled

    @property
    def enabled(self) -> bool:
        return self._enabled and self._client is not None

    def attach(self, client: Optional[CacheBackend]) -> None:
        """Bind (or unbind) the backend once its connection pool exists."""
        self._client = client

    async def get(self, key: str) -> Optional[Any]:
        """Return the decoded value, or None on miss or backend failure."""
        if not self.enabled:
            return None
        try:
            raw = await self._client.get(key)
            if raw is None:
                return None
            return json.loads(raw)
        except Exception as e:
            logger.warning(f"Cache get failed for {key}: {e}")
            return None

    async def set(self, key: str, value: Any, ttl_seconds: Optional[int] = None) -> None:
        if not self.enabled:
            return
        try:
            await self._client.set(
                key, json.dumps(value, default=str), ex=ttl_seconds or self.ttl_seconds
            )
        except Exception as e:
            logger.warning(f"Cache set failed for {key}: {e}")

    async def delete(self, *keys: str) -> None:
        if not self.enabled or not keys:
            return
        try:
            await self._client.delete(*keys)
        except Exception as e:
            logger.warning(f"Cache delete failed for {', '.join(keys)}: {e}")

    async def delete_by_pattern(self, pattern: str) -> None:
        """Delete every key matching a glob, walking the keyspace with SCAN."""
        if not self.enabled:
            return
        try:
            batch = []
            async for key in self._client.scan_iter(match=pattern, count=SCAN_BATCH_SIZE):
                batch.append(key)
                if len(batch) >= SCAN_BATCH_SIZE:
                    await self._client.delete(*batch)
                    batch = []
            if batch:
                await self._client.delete(*batch)
        except Exception as e:
            logger.warning(f"Cache pattern delete failed for {pattern}: {e}")

    async def invalidate_task(self, task_id: UUID, owner_id: UUID) -> None:
        """Drop every cached view a write to this task can change."""
        owner_scope = OwnedScope(owner_id)
        all_scope = AllTenantsScope()
        await self.delete(
            task_detail_key(task_id),
            task_stats_key(owner_scope),
            task_stats_key(all_scope),
        )
        await self.delete_by_pattern(task_list_pattern(owner_scope))
        await self.delete_by_pattern(task_list_pattern(all_scope))
