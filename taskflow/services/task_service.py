"""
Task Service
------------
Task CRUD, listing and statistics on top of the task store, with
read-through caching and ownership/share authorization.

Existence is hidden from callers without read access: a task they may not
see is reported exactly like a missing one.
"""

import math
from typing import List, Optional
from uuid import UUID

from loguru import logger

from taskflow.auth.models import TokenSubject
from taskflow.core.ports import AttachmentStore, Clock, TaskStore
from taskflow.models.domain_models import AllTenantsScope, Task, TaskStatus
from taskflow.models.request_models import (
    TaskCreateRequest,
    TaskQueryParams,
    TaskUpdateRequest,
)
from taskflow.models.response_models import (
    PaginatedTasksResponse,
    PaginationMeta,
    TaskResponse,
    TaskStatsResponse,
)
from taskflow.services.authorization import ResourceAuthorizer
from taskflow.services.cache_service import (
    CacheService,
    task_detail_key,
    task_list_key,
    task_stats_key,
)
from taskflow.services.file_storage import LocalFileStorage
from taskflow.services.results import ErrorKind, ServiceResult

TASK_NOT_FOUND = "Task not found"


class TaskService:
    def __init__(
        self,
        tasks: TaskStore,
        attachments: AttachmentStore,
        authorizer: ResourceAuthorizer,
        cache: CacheService,
        file_storage: LocalFileStorage,
        clock: Clock,
    ):
        self.tasks = tasks
        self.attachments = attachments
        self.authorizer = authorizer
        self.cache = cache
        self.file_storage = file_storage
        self.clock = clock

    # ========================================================================
    # LOOKUP HELPERS
    # ========================================================================

    async def load_task(self, task_id: UUID) -> Optional[Task]:
        """Fetch a task regardless of owner, through the detail cache."""
        cached = await self.cache.get(task_detail_key(task_id))
        if cached is not None:
            return Task.model_validate(cached)

        task = await self.tasks.find_by_id(task_id, AllTenantsScope())
        if task is not None:
            await self.cache.set(task_detail_key(task_id), task.model_dump(mode="json"))
        return task

    async def find_readable(self, subject: TokenSubject, task_id: UUID) -> Optional[Task]:
        task = await self.load_task(task_id)
        if task is None or not await self.authorizer.can_read(subject, task):
            return None
        return task

    async def find_writable(self, subject: TokenSubject, task_id: UUID) -> Optional[Task]:
        task = await self.tasks.find_by_id(task_id, AllTenantsScope())
        if task is None or not self.authorizer.can_write(subject, task):
            return None
        return task

    # ========================================================================
    # OPERATIONS
    # ========================================================================

    async def create_task(
        self, subject: TokenSubject, request: TaskCreateRequest
    ) -> ServiceResult[Task]:
        now = self.clock.now()
        task = await self.tasks.create(
            owner_id=subject.user_id,
            title=request.title,
            description=request.description,
            status=request.status,
            priority=request.priority,
            due_date=request.due_date,
            completed_at=now if request.status == TaskStatus.COMPLETED else None,
            created_at=now,
        )
        await self.cache.invalidate_task(task.task_id, task.owner_id)
        logger.info(f"Task {task.task_id} created by user {subject.user_id}")
        return ServiceResult.success(task)

    async def list_tasks(
        self, subject: TokenSubject, query: TaskQueryParams
    ) -> ServiceResult[PaginatedTasksResponse]:
        if (
            query.due_date_from is not None
            and query.due_date_to is not None
            and query.due_date_from > query.due_date_to
        ):
            return ServiceResult.failure(
                ErrorKind.VALIDATION, "due_date_from must not be after due_date_to"
            )

        scope = self.authorizer.scope_for(subject)
        cache_key = task_list_key(scope, query.model_dump(mode="json"))
        cached = await self.cache.get(cache_key)
        if cached is not None:
            return ServiceResult.success(PaginatedTasksResponse.model_validate(cached))

        tasks, total = await self.tasks.find_all(scope, query, self.clock.now())
        page = PaginatedTasksResponse(
            tasks=[TaskResponse.from_task(task) for task in tasks],
            pagination=PaginationMeta(
                page=query.page,
                page_size=query.page_size,
                total=total,
                total_pages=math.ceil(total / query.page_size) if total else 0,
            ),
        )
        await self.cache.set(cache_key, page.model_dump(mode="json"))
        return ServiceResult.success(page)

    async def get_task(self, subject: TokenSubject, task_id: UUID) -> ServiceResult[Task]:
        task = await self.find_readable(subject, task_id)
        if task is None:
            return ServiceResult.failure(ErrorKind.NOT_FOUND, TASK_NOT_FOUND)
        return ServiceResult.success(task)

    async def update_task(
        self, subject: TokenSubject, task_id: UUID, request: TaskUpdateRequest
    ) -> ServiceResult[Task]:
        task = await self.find_writable(subject, task_id)
        if task is None:
            return ServiceResult.failure(ErrorKind.NOT_FOUND, TASK_NOT_FOUND)

        now = self.clock.now()
        fields = request.model_dump(exclude_unset=True)
        new_status = fields.get("status", task.status)
        if new_status == TaskStatus.COMPLETED:
            if task.status != TaskStatus.COMPLETED:
                fields["completed_at"] = now
        elif task.completed_at is not None:
            fields["completed_at"] = None

        updated = await self.tasks.update(task_id, fields, updated_at=now)
        if updated is None:
            return ServiceResult.failure(ErrorKind.NOT_FOUND, TASK_NOT_FOUND)

        await self.cache.invalidate_task(updated.task_id, updated.owner_id)
        logger.info(f"Task {task_id} updated by user {subject.user_id}")
        return ServiceResult.success(updated)

    async def delete_task(self, subject: TokenSubject, task_id: UUID) -> ServiceResult[None]:
        task = await self.find_writable(subject, task_id)
        if task is None:
            return ServiceResult.failure(ErrorKind.NOT_FOUND, TASK_NOT_FOUND)

        attachments = await self.attachments.find_all_by_task(task_id)
        if not await self.tasks.delete(task_id):
            return ServiceResult.failure(ErrorKind.NOT_FOUND, TASK_NOT_FOUND)

        await self.cache.invalidate_task(task.task_id, task.owner_id)
        await self._remove_files([attachment.path for attachment in attachments])
        logger.info(f"Task {task_id} deleted by user {subject.user_id}")
        return ServiceResult.success(None)

    async def get_task_stats(self, subject: TokenSubject) -> ServiceResult[TaskStatsResponse]:
        scope = self.authorizer.scope_for(subject)
        cache_key = task_stats_key(scope)
        cached = await self.cache.get(cache_key)
        if cached is not None:
            return ServiceResult.success(TaskStatsResponse.model_validate(cached))

        counts = await self.tasks.count_by_status(scope)
        overdue = await self.tasks.count_overdue(scope, self.clock.now())
        stats = TaskStatsResponse(
            total=sum(counts.values()),
            todo=counts.get(TaskStatus.TODO, 0),
            in_progress=counts.get(TaskStatus.IN_PROGRESS, 0),
            completed=counts.get(TaskStatus.COMPLETED, 0),
            overdue=overdue,
        )
        await self.cache.set(cache_key, stats.model_dump(mode="json"))
        return ServiceResult.success(stats)

    async def _remove_files(self, paths: List[str]) -> None:
        for path in paths:
            try:
                await self.file_storage.delete(path)
            except OSError as e:
                # Row is already gone; an orphaned file is logged, not fatal
                logger.error(f"Failed to remove attachment file {path}: {e}")
