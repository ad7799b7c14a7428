"""
PostgreSQL CRUD Operations for Task Shares
------------------------------------------
One row per (task_id, shared_with) pair; the composite primary key makes a
duplicate grant fail with UniqueConstraintError.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from loguru import logger
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from taskflow.core.database_connection import DatabaseManager
from taskflow.models.domain_models import SharePermission, TaskShare
from taskflow.psql_db_services.base_service import BaseDatabaseService

SHARE_COLUMNS = "task_id, shared_with, permission, created_at"


class TaskSharesService(BaseDatabaseService):
    """Service for task_shares table operations."""

    def __init__(self, database_manager: DatabaseManager):
        super().__init__(database_manager)

    async def create(
        self,
        task_id: UUID,
        shared_with: UUID,
        permission: SharePermission,
        created_at: datetime,
    ) -> TaskShare:
        """
        Grant ``shared_with`` access to a task.

        Raises:
            UniqueConstraintError: If the pair is already shared
        """
        self.validate_uuid(task_id, "task_id")
        self.validate_uuid(shared_with, "shared_with")
        try:
            async with self.get_session() as session:
                sql_query = f"""
                    INSERT INTO task_shares (task_id, shared_with, permission, created_at)
                    VALUES (:task_id, :shared_with, :permission, :created_at)
                    RETURNING {SHARE_COLUMNS}
                """
                result = await session.execute(
                    text(sql_query),
                    {
                        "task_id": task_id,
                        "shared_with": shared_with,
                        "permission": permission.value,
                        "created_at": created_at,
                    },
                )
                share = result.mappings().one()

            self.log_operation("CREATE", f"{task_id}/{shared_with}", additional_context=permission.value)
            return TaskShare(**dict(share))

        except IntegrityError as e:
            self.raise_for_integrity_error(e, "task share")
            raise
        except Exception as e:
            logger.error(f"Error sharing task {task_id} with {shared_with}: {e}")
            raise

    async def find_by_task_and_user(
        self, task_id: UUID, shared_with: UUID
    ) -> Optional[TaskShare]:
        try:
            async with self.get_session() as session:
                sql_query = f"""
                    SELECT {SHARE_COLUMNS} FROM task_shares
                    WHERE task_id = :task_id AND shared_with = :shared_with
                """
                result = await session.execute(
                    text(sql_query), {"task_id": task_id, "shared_with": shared_with}
                )
                share = result.mappings().one_or_none()
                return TaskShare(**dict(share)) if share else None
        except Exception as e:
            logger.error(f"Error fetching share {task_id}/{shared_with}: {e}")
            raise

    async def find_all_by_task(self, task_id: UUID) -> List[TaskShare]:
        try:
            async with self.get_session() as session:
                sql_query = f"""
                    SELECT {SHARE_COLUMNS} FROM task_shares
                    WHERE task_id = :task_id
                    ORDER BY created_at ASC
                """
                result = await session.execute(text(sql_query), {"task_id": task_id})
                return [TaskShare(**dict(row)) for row in result.mappings().all()]
        except Exception as e:
            logger.error(f"Error listing shares of task {task_id}: {e}")
            raise

    async def find_all_shared_with_user(self, user_id: UUID) -> List[TaskShare]:
        try:
            async with self.get_session() as session:
                sql_query = f"""
                    SELECT {SHARE_COLUMNS} FROM task_shares
                    WHERE shared_with = :user_id
                    ORDER BY created_at DESC
                """
                result = await session.execute(text(sql_query), {"user_id": user_id})
                return [TaskShare(**dict(row)) for row in result.mappings().all()]
        except Exception as e:
            logger.error(f"Error listing tasks shared with {user_id}: {e}")
            raise

    async def update_permission(
        self, task_id: UUID, shared_with: UUID, permission: SharePermission
    ) -> Optional[TaskShare]:
        """Change the permission of an existing share. None if the row is absent."""
        try:
            async with self.get_session() as session:
                sql_query = f"""
                    UPDATE task_shares SET permission = :permission
                    WHERE task_id = :task_id AND shared_with = :shared_with
                    RETURNING {SHARE_COLUMNS}
                """
                result = await session.execute(
                    text(sql_query),
                    {
                        "task_id": task_id,
                        "shared_with": shared_with,
                        "permission": permission.value,
                    },
                )
                share = result.mappings().one_or_none()
            return TaskShare(**dict(share)) if share else None
        except Exception as e:
            logger.error(f"Error updating share {task_id}/{shared_with}: {e}")
            raise

    async def delete(self, task_id: UUID, shared_with: UUID) -> bool:
        try:
            async with self.get_session() as session:
                result = await session.execute(
                    text(
                        "DELETE FROM task_shares "
                        "WHERE task_id = :task_id AND shared_with = :shared_with"
                    ),
                    {"task_id": task_id, "shared_with": shared_with},
                )
                return result.rowcount > 0
        except Exception as e:
            logger.error(f"Error revoking share {task_id}/{shared_with}: {e}")
            raise
