"""
Database Connection Manager
---------------------------
Manages PostgreSQL database connections with SQLAlchemy async engine.

One manager is constructed per process by the service container and opened
and closed by the application lifespan; nothing here is a module-level
singleton.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional

from loguru import logger
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from taskflow.core.config_manager import ApplicationSettings


class DatabaseManager:
    """
    Manages database connections and operations using SQLAlchemy async engine.

    The asyncpg-backed engine provides connection pooling with pre-ping
    health checks and hourly recycling; services obtain sessions through
    get_session(), which commits on success and rolls back on error.
    """

    def __init__(self, app_settings: ApplicationSettings):
        self.settings = app_settings
        self._engine: Optional[AsyncEngine] = None
        self._sessionmaker: Optional[async_sessionmaker] = None

    @property
    def is_initialized(self) -> bool:
        return self._engine is not None

    async def initialize(self, config: Optional[Dict[str, Any]] = None) -> None:
        """
        Initialize SQLAlchemy async engine.

        Args:
            config: Optional configuration override
        """
        if self._engine is not None:
            logger.warning("Database engine already initialized")
            return

        if config is None:
            config = {
                "host": self.settings.database_host,
                "port": self.settings.database_port,
                "dbname": self.settings.database_name,
                "user": self.settings.database_user,
                "password": self.settings.database_password,
                "min_connections": self.settings.database_pool_size,
                "max_connections": self.settings.database_pool_size
                + self.settings.database_max_overflow,
            }

        logger.info(
            f"Initializing database connection to {config.get('host')}:{config.get('port')}"
        )

        try:
            db_url = (
                f"postgresql+asyncpg://"
                f"{config['user']}:{config['password']}@"
                f"{config['host']}:{config['port']}/"
                f"{config['dbname']}"
            )

            self._engine = create_async_engine(
                db_url,
                pool_size=config.get("min_connections", 5),
                max_overflow=config.get("max_connections", 10)
                - config.get("min_connections", 5),
                pool_pre_ping=True,  # Health checks
                pool_recycle=3600,  # Recycle connections every hour
                pool_timeout=30,  # Wait time for connection
                echo=False,
            )

            self._sessionmaker = async_sessionmaker(
                bind=self._engine,
                class_=AsyncSession,
                expire_on_commit=False,
            )
            logger.info(
                "SQLAlchemy async engine and sessionmaker initialized successfully"
            )

        except Exception as e:
            logger.error(f"Error initializing SQLAlchemy engine: {e}")
            raise

    async def close(self) -> None:
        """Close SQLAlchemy engine."""
        if self._engine is not None:
            logger.info("Disposing SQLAlchemy engine")
            await self._engine.dispose()
            self._engine = None
            self._sessionmaker = None
            logger.info("SQLAlchemy engine disposed")

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Get a SQLAlchemy async session from the sessionmaker.

        Yields:
            AsyncSession: Active SQLAlchemy session with automatic
                         commit on success or rollback on exception

        Raises:
            RuntimeError: If database not initialized
        """
        if not self._sessionmaker:
            raise RuntimeError("Database not initialized. Call initialize() first.")

        session = self._sessionmaker()
        try:
            yield session
            await session.commit()
            logger.debug("Session committed successfully")
        except Exception as e:
            await session.rollback()
            logger.warning(f"Session rolled back due to error: {e}")
            raise
        finally:
            await session.close()

    async def ping(self) -> bool:
        """Run ``SELECT 1``; False if the database is unreachable."""
        try:
            async with self.get_session() as session:
                result = await session.execute(text("SELECT 1"))
                return result.scalar() == 1
        except Exception as e:
            logger.error(f"Database ping failed: {e}")
            return False
