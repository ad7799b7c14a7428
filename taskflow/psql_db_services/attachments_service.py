"""
PostgreSQL CRUD Operations for Attachments
------------------------------------------
Metadata rows only; file bytes live on the configured upload directory.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID, uuid4

from loguru import logger
from sqlalchemy import text

from taskflow.core.database_connection import DatabaseManager
from taskflow.models.domain_models import Attachment
from taskflow.psql_db_services.base_service import BaseDatabaseService

ATTACHMENT_COLUMNS = (
    "attachment_id, task_id, filename, original_name, mime_type, size, path, "
    "uploaded_by, created_at"
)


class AttachmentsService(BaseDatabaseService):
    """Service for attachments table operations."""

    def __init__(self, database_manager: DatabaseManager):
        super().__init__(database_manager)

    async def create(
        self,
        *,
        task_id: UUID,
        filename: str,
        original_name: str,
        mime_type: str,
        size: int,
        path: str,
        uploaded_by: UUID,
        created_at: datetime,
    ) -> Attachment:
        self.validate_uuid(task_id, "task_id")
        params = {
            "attachment_id": uuid4(),
            "task_id": task_id,
            "filename": filename,
            "original_name": original_name,
            "mime_type": mime_type,
            "size": size,
            "path": path,
            "uploaded_by": uploaded_by,
            "created_at": created_at,
        }
        try:
            async with self.get_session() as session:
                sql_query = f"""
                    INSERT INTO attachments (
                        attachment_id, task_id, filename, original_name, mime_type,
                        size, path, uploaded_by, created_at
                    )
                    VALUES (
                        :attachment_id, :task_id, :filename, :original_name, :mime_type,
                        :size, :path, :uploaded_by, :created_at
                    )
                    RETURNING {ATTACHMENT_COLUMNS}
                """
                result = await session.execute(text(sql_query), params)
                attachment = result.mappings().one()

            self.log_operation("CREATE", params["attachment_id"], additional_context=f"task {task_id}")
            return Attachment(**dict(attachment))
        except Exception as e:
            logger.error(f"Error storing attachment for task {task_id}: {e}")
            raise

    async def find_by_id(self, attachment_id: UUID) -> Optional[Attachment]:
        self.validate_uuid(attachment_id, "attachment_id")
        try:
            async with self.get_session() as session:
                sql_query = f"SELECT {ATTACHMENT_COLUMNS} FROM attachments WHERE attachment_id = :attachment_id"
                result = await session.execute(text(sql_query), {"attachment_id": attachment_id})
                attachment = result.mappings().one_or_none()
                return Attachment(**dict(attachment)) if attachment else None
        except Exception as e:
            logger.error(f"Error fetching attachment {attachment_id}: {e}")
            raise

    async def find_all_by_task(self, task_id: UUID) -> List[Attachment]:
        try:
            async with self.get_session() as session:
                sql_query = f"""
                    SELECT {ATTACHMENT_COLUMNS} FROM attachments
                    WHERE task_id = :task_id
                    ORDER BY created_at DESC
                """
                result = await session.execute(text(sql_query), {"task_id": task_id})
                return [Attachment(**dict(row)) for row in result.mappings().all()]
        except Exception as e:
            logger.error(f"Error listing attachments of task {task_id}: {e}")
            raise

    async def delete(self, attachment_id: UUID) -> bool:
        try:
            async with self.get_session() as session:
                result = await session.execute(
                    text("DELETE FROM attachments WHERE attachment_id = :attachment_id"),
                    {"attachment_id": attachment_id},
                )
                deleted = result.rowcount > 0
            if deleted:
                self.log_operation("DELETE", attachment_id)
            return deleted
        except Exception as e:
            logger.error(f"Error deleting attachment {attachment_id}: {e}")
            raise
