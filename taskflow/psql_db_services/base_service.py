"""
Base Database Service
--------------------
Base class for the PostgreSQL stores with shared session management,
error translation and query-building utilities.

This base class provides:
- SQLAlchemy session management
- Translation of unique violations into UniqueConstraintError
- Consistent error handling and logging
- Validation helpers
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Iterable, Optional, Tuple
from uuid import UUID

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from taskflow.core.database_connection import DatabaseManager
from taskflow.psql_db_services.errors import UniqueConstraintError

UNIQUE_VIOLATION_SQLSTATE = "23505"


class BaseDatabaseService:
    """
    Base class for all database service classes.

    Provides shared functionality for database operations including:
    - SQLAlchemy session management
    - Transaction handling with commit/rollback
    - Error handling and logging
    - Common validation utilities
    """

    def __init__(self, database_manager: DatabaseManager):
        """
        Initialize the database service with a database manager.

        Args:
            database_manager: The process-wide DatabaseManager built by the container
        """
        self.database_manager = database_manager
        self._service_name = self.__class__.__name__

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Get a SQLAlchemy session with automatic commit/rollback.

        Yields:
            AsyncSession: SQLAlchemy session

        Example:
            async with self.get_session() as session:
                result = await session.execute(text("SELECT * FROM users"))
                users = result.mappings().all()
        """
        async with self.database_manager.get_session() as session:
            yield session

    # ========================================================================
    # ERROR TRANSLATION
    # ========================================================================

    @staticmethod
    def is_unique_violation(error: IntegrityError) -> bool:
        """Check whether an IntegrityError was raised by a unique/PK constraint."""
        original = getattr(error, "orig", None)
        sqlstate = getattr(original, "sqlstate", None) or getattr(
            original, "pgcode", None
        )
        if sqlstate:
            return sqlstate == UNIQUE_VIOLATION_SQLSTATE
        message = str(original or error).lower()
        return "duplicate key" in message or "unique" in message

    @staticmethod
    def constraint_name(error: IntegrityError) -> Optional[str]:
        """Best-effort extraction of the violated constraint name."""
        original = getattr(error, "orig", None)
        for candidate in (original, getattr(original, "__cause__", None)):
            name = getattr(candidate, "constraint_name", None)
            if name:
                return name
        return None

    def raise_for_integrity_error(self, error: IntegrityError, entity: str) -> None:
        """Re-raise unique violations as UniqueConstraintError; leave others alone."""
        if self.is_unique_violation(error):
            constraint = self.constraint_name(error)
            logger.warning(
                f"{self._service_name}: unique violation on {entity} "
                f"(constraint={constraint})"
            )
            raise UniqueConstraintError(
                f"{entity} violates a unique constraint", constraint=constraint
            ) from error

    # ========================================================================
    # VALIDATION UTILITIES
    # ========================================================================

    def validate_uuid(self, uuid_value: UUID, parameter_name: str = "UUID") -> None:
        """
        Validate that a UUID is not None and is a valid UUID instance.

        Raises:
            ValueError: If UUID is invalid or None
        """
        if uuid_value is None:
            raise ValueError(f"{parameter_name} cannot be None")
        if not isinstance(uuid_value, UUID):
            raise ValueError(f"{parameter_name} must be a valid UUID instance")

    # ========================================================================
    # UTILITY METHODS
    # ========================================================================

    def build_dynamic_update_query(
        self,
        table_name: str,
        update_fields: Dict[str, Any],
        where_clause: str,
        where_parameters: Dict[str, Any],
        allowed_fields: Iterable[str],
    ) -> Tuple[str, Dict[str, Any]]:
        """
        Build a dynamic UPDATE query with only the fields that need updating.

        Args:
            table_name: Name of the table to update
            update_fields: Dictionary of field names and their new values
            where_clause: WHERE clause (e.g., "task_id = :task_id")
            where_parameters: Parameters for the WHERE clause as dictionary
            allowed_fields: Column names that may appear in the SET clause

        Returns:
            Tuple of (query_string, parameters_dict)

        Raises:
            ValueError: If no fields are given or a field is not allowed
        """
        if not update_fields:
            raise ValueError("update_fields cannot be empty")

        allowed = set(allowed_fields)
        unknown = [name for name in update_fields if name not in allowed]
        if unknown:
            raise ValueError(f"Cannot update column(s): {', '.join(unknown)}")

        set_clauses = []
        parameters: Dict[str, Any] = {}

        for field_name, field_value in update_fields.items():
            param_name = f"set_{field_name}"
            set_clauses.append(f"{field_name} = :{param_name}")
            parameters[param_name] = field_value

        parameters.update(where_parameters)

        sql_query = f"""
            UPDATE {table_name}
            SET {", ".join(set_clauses)}
            WHERE {where_clause}
            RETURNING *
        """

        return sql_query, parameters

    def log_operation(
        self,
        operation_type: str,
        entity_identifier: Any,
        success: bool = True,
        additional_context: Optional[str] = None,
    ) -> None:
        """
        Log database operations for monitoring and debugging.

        Args:
            operation_type: Type of operation (e.g., "CREATE", "UPDATE", "DELETE")
            entity_identifier: Identifier of the entity being operated on
            success: Whether the operation was successful
            additional_context: Optional additional context information
        """
        log_level = "info" if success else "error"
        status = "succeeded" if success else "failed"

        message = (
            f"{self._service_name}: {operation_type} operation {status} "
            f"for entity: {entity_identifier}"
        )

        if additional_context:
            message += f" - {additional_context}"

        getattr(logger, log_level)(message)
