"""
PostgreSQL CRUD Operations for Users
------------------------------------
Identity store: single-row operations over the uniquely-keyed users table.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from loguru import logger
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from taskflow.core.database_connection import DatabaseManager
from taskflow.models.domain_models import User, UserRole
from taskflow.psql_db_services.base_service import BaseDatabaseService

USER_COLUMNS = "user_id, username, email, password_hash, role, created_at, updated_at"


class UsersService(BaseDatabaseService):
    """
    Service for user database operations.

    Supports:
    - Registration inserts with unique email/username enforcement
    - Lookups by id, email and username
    - Existence checks used for registration conflict ordering
    """

    def __init__(self, database_manager: DatabaseManager):
        super().__init__(database_manager)

    # ========================================================================
    # VALIDATION HELPERS
    # ========================================================================

    async def email_exists(self, email: str) -> bool:
        """Check if email already exists in database"""
        try:
            async with self.get_session() as session:
                sql_query = "SELECT 1 FROM users WHERE email = :email LIMIT 1"
                result = await session.execute(text(sql_query), {"email": email})
                return result.first() is not None
        except Exception as e:
            logger.error(f"Error checking email existence: {e}")
            raise

    async def username_exists(self, username: str) -> bool:
        """Check if username already exists in database"""
        try:
            async with self.get_session() as session:
                sql_query = "SELECT 1 FROM users WHERE username = :username LIMIT 1"
                result = await session.execute(text(sql_query), {"username": username})
                return result.first() is not None
        except Exception as e:
            logger.error(f"Error checking username existence: {e}")
            raise

    # ========================================================================
    # CREATE OPERATIONS
    # ========================================================================

    async def create(
        self,
        *,
        username: str,
        email: str,
        password_hash: str,
        role: UserRole = UserRole.USER,
        created_at: datetime,
    ) -> User:
        """
        Create a new user record in the database.

        Args:
            username: Unique username
            email: Unique, already-normalized email address
            password_hash: bcrypt digest
            role: User role. Defaults to USER
            created_at: Creation timestamp (also used as updated_at)

        Returns:
            The created User row

        Raises:
            UniqueConstraintError: If email or username is already taken
            sqlalchemy.exc.SQLAlchemyError: On database errors
        """
        params = {
            "user_id": uuid4(),
            "username": username,
            "email": email,
            "password_hash": password_hash,
            "role": role.value,
            "created_at": created_at,
            "updated_at": created_at,
        }

        try:
            async with self.get_session() as session:
                sql_query = f"""
                    INSERT INTO users (
                        user_id, username, email, password_hash, role,
                        created_at, updated_at
                    )
                    VALUES (
                        :user_id, :username, :email, :password_hash, :role,
                        :created_at, :updated_at
                    )
                    RETURNING {USER_COLUMNS}
                """
                result = await session.execute(text(sql_query), params)
                created_user = result.mappings().one_or_none()

                if not created_user:
                    raise RuntimeError("Failed to create user record")

            self.log_operation("CREATE", params["user_id"])
            return User(**dict(created_user))

        except IntegrityError as e:
            self.raise_for_integrity_error(e, "user")
            raise
        except Exception as e:
            logger.error(f"Error creating user {username}: {e}")
            raise

    # ========================================================================
    # READ OPERATIONS
    # ========================================================================

    async def _find_one(self, column: str, value: object) -> Optional[User]:
        async with self.get_session() as session:
            sql_query = f"SELECT {USER_COLUMNS} FROM users WHERE {column} = :value"
            result = await session.execute(text(sql_query), {"value": value})
            user_record = result.mappings().one_or_none()
            return User(**dict(user_record)) if user_record else None

    async def find_by_id(self, user_id: UUID) -> Optional[User]:
        """
        Retrieve a user by their unique identifier.

        Raises:
            ValueError: If user_id is invalid
        """
        self.validate_uuid(user_id, "user_id")
        try:
            return await self._find_one("user_id", user_id)
        except Exception as e:
            logger.error(f"Error fetching user {user_id}: {e}")
            raise

    async def find_by_email(self, email: str) -> Optional[User]:
        """Retrieve a user by their (lowercase) email address."""
        try:
            return await self._find_one("email", email)
        except Exception as e:
            logger.error(f"Error fetching user by email: {e}")
            raise

    async def find_by_username(self, username: str) -> Optional[User]:
        """Retrieve a user by their username."""
        try:
            return await self._find_one("username", username)
        except Exception as e:
            logger.error(f"Error fetching user by username {username}: {e}")
            raise
