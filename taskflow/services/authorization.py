"""
Resource Authorization
----------------------
Decides who may read or write a task.

- Read: ADMIN, the owner, or any share holder (VIEW or EDIT)
- Write (update, delete, attachment upload/delete): ADMIN or the owner
- List/stats scope: ADMIN sees every tenant, everybody else their own tasks
"""

from loguru import logger

from taskflow.auth.models import TokenSubject
from taskflow.core.ports import TaskShareStore
from taskflow.models.domain_models import (
    AllTenantsScope,
    OwnedScope,
    QueryScope,
    SharePermission,
    Task,
    UserRole,
)


def is_admin(subject: TokenSubject) -> bool:
    return subject.role == UserRole.ADMIN


class ResourceAuthorizer:
    """Ownership, share and role checks against a single task."""

    def __init__(self, task_shares: TaskShareStore):
        self.task_shares = task_shares

    @staticmethod
    def scope_for(subject: TokenSubject) -> QueryScope:
        """Query scope for list and statistics reads."""
        if is_admin(subject):
            return AllTenantsScope()
        return OwnedScope(subject.user_id)

    @staticmethod
    def is_owner(subject: TokenSubject, task: Task) -> bool:
        return task.owner_id == subject.user_id

    def can_write(self, subject: TokenSubject, task: Task) -> bool:
        allowed = is_admin(subject) or self.is_owner(subject, task)
        if not allowed:
            logger.warning(f"Write denied on task {task.task_id} for user {subject.user_id}")
        return allowed

    async def can_read(self, subject: TokenSubject, task: Task) -> bool:
        if is_admin(subject) or self.is_owner(subject, task):
            return True
        share = await self.task_shares.find_by_task_and_user(task.task_id, subject.user_id)
        if share is not None and share.permission.allows(SharePermission.VIEW):
            return True
        logger.warning(f"Read denied on task {task.task_id} for user {subject.user_id}")
        return False
