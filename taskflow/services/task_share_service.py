"""
Task Share Service
------------------
Owner-only management of delegated task permissions.

Every management operation starts with an owner-scoped task lookup, so a
caller who does not own the task cannot tell it apart from a missing one.
"""

from typing import List
from uuid import UUID

from loguru import logger

from taskflow.auth.models import TokenSubject
from taskflow.core.ports import Clock, TaskShareStore, TaskStore, UserStore
from taskflow.models.domain_models import AllTenantsScope, OwnedScope, SharePermission, TaskShare
from taskflow.models.response_models import SharedTaskResponse, TaskResponse
from taskflow.psql_db_services.errors import UniqueConstraintError
from taskflow.services.results import ErrorKind, ServiceResult

TASK_NOT_OWNED = "Task not found or access denied"
SHARE_NOT_FOUND = "Share not found"
ALREADY_SHARED = "Task already shared with this user"


class TaskShareService:
    def __init__(
        self,
        tasks: TaskStore,
        task_shares: TaskShareStore,
        users: UserStore,
        clock: Clock,
    ):
        self.tasks = tasks
        self.task_shares = task_shares
        self.users = users
        self.clock = clock

    async def _owns_task(self, subject: TokenSubject, task_id: UUID) -> bool:
        task = await self.tasks.find_by_id(task_id, OwnedScope(subject.user_id))
        if task is None:
            logger.warning(f"Share management denied on task {task_id} for user {subject.user_id}")
        return task is not None

    async def share_task(
        self,
        subject: TokenSubject,
        task_id: UUID,
        shared_with: UUID,
        permission: SharePermission,
    ) -> ServiceResult[TaskShare]:
        if not await self._owns_task(subject, task_id):
            return ServiceResult.failure(ErrorKind.NOT_FOUND, TASK_NOT_OWNED)

        if shared_with == subject.user_id:
            return ServiceResult.failure(ErrorKind.FORBIDDEN, "Cannot share task with yourself")

        if await self.users.find_by_id(shared_with) is None:
            return ServiceResult.failure(ErrorKind.NOT_FOUND, "Recipient user not found")

        if await self.task_shares.find_by_task_and_user(task_id, shared_with) is not None:
            return ServiceResult.failure(ErrorKind.CONFLICT, ALREADY_SHARED)

        try:
            share = await self.task_shares.create(
                task_id, shared_with, permission, created_at=self.clock.now()
            )
        except UniqueConstraintError:
            return ServiceResult.failure(ErrorKind.CONFLICT, ALREADY_SHARED)

        logger.info(f"Task {task_id} shared with {shared_with} ({permission.value})")
        return ServiceResult.success(share)

    async def get_shared_users(
        self, subject: TokenSubject, task_id: UUID
    ) -> ServiceResult[List[TaskShare]]:
        if not await self._owns_task(subject, task_id):
            return ServiceResult.failure(ErrorKind.NOT_FOUND, TASK_NOT_OWNED)
        return ServiceResult.success(await self.task_shares.find_all_by_task(task_id))

    async def update_permission(
        self,
        subject: TokenSubject,
        task_id: UUID,
        shared_with: UUID,
        permission: SharePermission,
    ) -> ServiceResult[TaskShare]:
        if not await self._owns_task(subject, task_id):
            return ServiceResult.failure(ErrorKind.NOT_FOUND, TASK_NOT_OWNED)

        share = await self.task_shares.update_permission(task_id, shared_with, permission)
        if share is None:
            return ServiceResult.failure(ErrorKind.NOT_FOUND, SHARE_NOT_FOUND)

        logger.info(f"Share {task_id}/{shared_with} changed to {permission.value}")
        return ServiceResult.success(share)

    async def revoke_share(
        self, subject: TokenSubject, task_id: UUID, shared_with: UUID
    ) -> ServiceResult[None]:
        if not await self._owns_task(subject, task_id):
            return ServiceResult.failure(ErrorKind.NOT_FOUND, TASK_NOT_OWNED)

        if not await self.task_shares.delete(task_id, shared_with):
            return ServiceResult.failure(ErrorKind.NOT_FOUND, SHARE_NOT_FOUND)

        logger.info(f"Share {task_id}/{shared_with} revoked")
        return ServiceResult.success(None)

    async def get_shared_with_me(
        self, subject: TokenSubject
    ) -> ServiceResult[List[SharedTaskResponse]]:
        shares = await self.task_shares.find_all_shared_with_user(subject.user_id)
        shared_tasks = []
        for share in shares:
            task = await self.tasks.find_by_id(share.task_id, AllTenantsScope())
            if task is None:
                continue
            shared_tasks.append(
                SharedTaskResponse(
                    task=TaskResponse.from_task(task),
                    permission=share.permission,
                    shared_at=share.created_at,
                )
            )
        return ServiceResult.success(shared_tasks)
