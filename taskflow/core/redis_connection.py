"""
Redis Connection Manager
------------------------
Manages the Redis connection pool backing the task cache.

The manager is built by the service container from ApplicationSettings and
opened/closed by the application lifespan.
"""

from typing import Optional

import redis.asyncio as aioredis
from loguru import logger
from redis.asyncio.connection import ConnectionPool

from taskflow.core.config_manager import ApplicationSettings


class RedisManager:
    """Manages Redis connection pool and client."""

    def __init__(self, app_settings: ApplicationSettings):
        self.settings = app_settings
        self._pool: Optional[ConnectionPool] = None
        self._client: Optional[aioredis.Redis] = None

    def initialize(self) -> None:
        """
        Initialize Redis connection pool and client.
        Creates connection pool based on configuration.
        """
        if self._pool is not None:
            logger.warning("Redis connection pool already initialized")
            return

        logger.info(
            f"Initializing Redis connection to {self.settings.redis_host}:{self.settings.redis_port}"
        )

        self._pool = ConnectionPool(
            host=self.settings.redis_host,
            port=self.settings.redis_port,
            db=self.settings.redis_db,
            password=self.settings.redis_password,
            max_connections=self.settings.redis_max_connections,
            decode_responses=True,
            socket_connect_timeout=5,
            socket_keepalive=True,
            health_check_interval=30,
        )
        self._client = aioredis.Redis(connection_pool=self._pool)

        logger.info("Redis connection initialized successfully")

    async def close(self) -> None:
        """Close Redis connection pool and cleanup."""
        if self._client is None:
            return

        logger.info("Closing Redis connections")
        await self._client.aclose()
        await self._pool.disconnect()
        self._client = None
        self._pool = None
        logger.info("Redis connections closed")

    async def ping(self) -> bool:
        """
        Check Redis connection health.

        Returns:
            bool: True if Redis is responsive, False otherwise
        """
        try:
            if self._client is None:
                return False
            return bool(await self._client.ping())
        except Exception as e:
            logger.error(f"Redis ping failed: {e}")
            return False

    @property
    def client(self) -> aioredis.Redis:
        """
        Get Redis client.

        Raises:
            RuntimeError: If Redis not initialized
        """
        if self._client is None:
            raise RuntimeError("Redis not initialized. Call initialize() first.")
        return self._client
