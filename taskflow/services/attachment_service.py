"""
Attachment Service
------------------
Upload, list, download and delete files attached to tasks.

Uploading and deleting follow write access (owner or ADMIN); listing and
downloading follow read access (owner, share holder or ADMIN).
"""

from typing import Iterable, List
from uuid import UUID

from loguru import logger

from taskflow.auth.models import TokenSubject
from taskflow.core.ports import AttachmentStore, Clock
from taskflow.models.domain_models import Attachment
from taskflow.services.file_storage import LocalFileStorage
from taskflow.services.results import ErrorKind, ServiceResult
from taskflow.services.task_service import TASK_NOT_FOUND, TaskService

ATTACHMENT_NOT_FOUND = "Attachment not found"


class AttachmentService:
    def __init__(
        self,
        attachments: AttachmentStore,
        task_service: TaskService,
        file_storage: LocalFileStorage,
        clock: Clock,
        allowed_mime_types: Iterable[str],
        max_file_size: int,
    ):
        self.attachments = attachments
        self.task_service = task_service
        self.file_storage = file_storage
        self.clock = clock
        self.allowed_mime_types = frozenset(allowed_mime_types)
        self.max_file_size = max_file_size

    def validate_upload(self, mime_type: str, size: int) -> ServiceResult[None]:
        if mime_type not in self.allowed_mime_types:
            return ServiceResult.failure(
                ErrorKind.VALIDATION, f"File type {mime_type} is not allowed"
            )
        if size == 0:
            return ServiceResult.failure(ErrorKind.VALIDATION, "File is empty")
        if size > self.max_file_size:
            return ServiceResult.failure(
                ErrorKind.VALIDATION,
                f"File exceeds the maximum size of {self.max_file_size} bytes",
            )
        return ServiceResult.success(None)

    async def upload_attachment(
        self,
        subject: TokenSubject,
        task_id: UUID,
        original_name: str,
        mime_type: str,
        content: bytes,
    ) -> ServiceResult[Attachment]:
        task = await self.task_service.find_writable(subject, task_id)
        if task is None:
            return ServiceResult.failure(ErrorKind.NOT_FOUND, TASK_NOT_FOUND)

        validation = self.validate_upload(mime_type, len(content))
        if not validation.ok:
            logger.warning(
                f"Rejected upload to task {task_id} by user {subject.user_id}: "
                f"{validation.error.message}"
            )
            return ServiceResult.failure(validation.error.kind, validation.error.message)

        filename, path = await self.file_storage.save(original_name, content)
        try:
            attachment = await self.attachments.create(
                task_id=task_id,
                filename=filename,
                original_name=original_name,
                mime_type=mime_type,
                size=len(content),
                path=path,
                uploaded_by=subject.user_id,
                created_at=self.clock.now(),
            )
        except Exception:
            await self.file_storage.delete(path)
            raise

        logger.info(f"Attachment {attachment.attachment_id} uploaded to task {task_id}")
        return ServiceResult.success(attachment)

    async def list_attachments(
        self, subject: TokenSubject, task_id: UUID
    ) -> ServiceResult[List[Attachment]]:
        task = await self.task_service.find_readable(subject, task_id)
        if task is None:
            return ServiceResult.failure(ErrorKind.NOT_FOUND, TASK_NOT_FOUND)
        return ServiceResult.success(await self.attachments.find_all_by_task(task_id))

    async def get_attachment_for_download(
        self, subject: TokenSubject, attachment_id: UUID
    ) -> ServiceResult[Attachment]:
        attachment = await self.attachments.find_by_id(attachment_id)
        if attachment is None:
            return ServiceResult.failure(ErrorKind.NOT_FOUND, ATTACHMENT_NOT_FOUND)

        task = await self.task_service.find_readable(subject, attachment.task_id)
        if task is None:
            return ServiceResult.failure(ErrorKind.NOT_FOUND, ATTACHMENT_NOT_FOUND)

        if not await self.file_storage.exists(attachment.path):
            logger.error(f"Attachment {attachment_id} is missing its file {attachment.path}")
            return ServiceResult.failure(ErrorKind.NOT_FOUND, "File not found on disk")

        return ServiceResult.success(attachment)

    async def delete_attachment(
        self, subject: TokenSubject, attachment_id: UUID
    ) -> ServiceResult[None]:
        attachment = await self.attachments.find_by_id(attachment_id)
        if attachment is None:
            return ServiceResult.failure(ErrorKind.NOT_FOUND, ATTACHMENT_NOT_FOUND)

        task = await self.task_service.find_writable(subject, attachment.task_id)
        if task is None:
            return ServiceResult.failure(ErrorKind.NOT_FOUND, ATTACHMENT_NOT_FOUND)

        if not await self.attachments.delete(attachment_id):
            return ServiceResult.failure(ErrorKind.NOT_FOUND, ATTACHMENT_NOT_FOUND)

        await self.file_storage.delete(attachment.path)
        logger.info(f"Attachment {attachment_id} deleted by user {subject.user_id}")
        return ServiceResult.success(None)
