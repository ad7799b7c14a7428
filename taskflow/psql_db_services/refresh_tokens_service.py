"""
PostgreSQL Operations for Refresh Tokens
----------------------------------------
Session store: one row per live refresh token.

Deletes are delete-if-exists and report whether this call removed the row.
That return value is what makes rotation single-use under concurrency: of
two callers deleting the same token, exactly one sees True.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from loguru import logger
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from taskflow.core.database_connection import DatabaseManager
from taskflow.models.domain_models import RefreshTokenRecord
from taskflow.psql_db_services.base_service import BaseDatabaseService


class RefreshTokensService(BaseDatabaseService):
    """Service for refresh_tokens table operations."""

    def __init__(self, database_manager: DatabaseManager):
        super().__init__(database_manager)

    async def create(
        self, user_id: UUID, token: str, expires_at: datetime
    ) -> RefreshTokenRecord:
        """
        Persist a newly issued refresh token.

        Raises:
            UniqueConstraintError: If the token string already exists
        """
        self.validate_uuid(user_id, "user_id")
        try:
            async with self.get_session() as session:
                sql_query = """
                    INSERT INTO refresh_tokens (token, user_id, expires_at)
                    VALUES (:token, :user_id, :expires_at)
                    RETURNING token, user_id, expires_at, created_at
                """
                result = await session.execute(
                    text(sql_query),
                    {"token": token, "user_id": user_id, "expires_at": expires_at},
                )
                record = result.mappings().one()

            logger.debug(f"Refresh token stored for user {user_id}")
            return RefreshTokenRecord(**dict(record))

        except IntegrityError as e:
            self.raise_for_integrity_error(e, "refresh token")
            raise
        except Exception as e:
            logger.error(f"Error storing refresh token for user {user_id}: {e}")
            raise

    async def find_by_token(self, token: str) -> Optional[RefreshTokenRecord]:
        """Look up the session row for a raw token string."""
        try:
            async with self.get_session() as session:
                sql_query = """
                    SELECT token, user_id, expires_at, created_at
                    FROM refresh_tokens
                    WHERE token = :token
                """
                result = await session.execute(text(sql_query), {"token": token})
                record = result.mappings().one_or_none()
                return RefreshTokenRecord(**dict(record)) if record else None
        except Exception as e:
            logger.error(f"Error fetching refresh token: {e}")
            raise

    async def delete(self, token: str) -> bool:
        """Delete a token if present. Returns True only if a row was removed."""
        try:
            async with self.get_session() as session:
                result = await session.execute(
                    text("DELETE FROM refresh_tokens WHERE token = :token"),
                    {"token": token},
                )
                return result.rowcount > 0
        except Exception as e:
            logger.error(f"Error deleting refresh token: {e}")
            raise

    async def delete_all_by_user_id(self, user_id: UUID) -> int:
        """Revoke every session of a user. Returns the number of rows removed."""
        self.validate_uuid(user_id, "user_id")
        try:
            async with self.get_session() as session:
                result = await session.execute(
                    text("DELETE FROM refresh_tokens WHERE user_id = :user_id"),
                    {"user_id": user_id},
                )
                deleted = result.rowcount
            self.log_operation("DELETE_ALL", user_id, additional_context=f"{deleted} sessions")
            return deleted
        except Exception as e:
            logger.error(f"Error deleting refresh tokens for user {user_id}: {e}")
            raise

    async def delete_expired(self, now: datetime) -> int:
        """Remove every row with ``expires_at <= now``. Safe to run concurrently."""
        try:
            async with self.get_session() as session:
                result = await session.execute(
                    text("DELETE FROM refresh_tokens WHERE expires_at <= :now"),
                    {"now": now},
                )
                deleted = result.rowcount
            self.log_operation("DELETE_EXPIRED", "refresh_tokens", additional_context=f"{deleted} rows")
            return deleted
        except Exception as e:
            logger.error(f"Error purging expired refresh tokens: {e}")
            raise
