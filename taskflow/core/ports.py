"""
Ports (interfaces) consumed by the services.

Services depend on these Protocols rather than on the PostgreSQL/Redis
implementations, so the stores can be swapped (tests use in-memory fakes).
Every mutation is a single-row atomic operation.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol, Tuple
from uuid import UUID

from taskflow.models.domain_models import (
    Attachment,
    QueryScope,
    RefreshTokenRecord,
    SharePermission,
    Task,
    TaskPriority,
    TaskShare,
    TaskStatus,
    User,
    UserRole,
)
from taskflow.models.request_models import TaskQueryParams


class Clock(Protocol):
    def now(self) -> datetime: ...


class UserStore(Protocol):
    async def find_by_email(self, email: str) -> Optional[User]: ...
    async def find_by_username(self, username: str) -> Optional[User]: ...
    async def find_by_id(self, user_id: UUID) -> Optional[User]: ...
    async def email_exists(self, email: str) -> bool: ...
    async def username_exists(self, username: str) -> bool: ...

    async def create(
        self,
        *,
        username: str,
        email: str,
        password_hash: str,
        role: UserRole = UserRole.USER,
        created_at: datetime,
    ) -> User: ...


class RefreshTokenStore(Protocol):
    async def create(
        self, user_id: UUID, token: str, expires_at: datetime
    ) -> RefreshTokenRecord: ...

    async def find_by_token(self, token: str) -> Optional[RefreshTokenRecord]: ...

    # Returns True only when this call removed the row.
    async def delete(self, token: str) -> bool: ...

    async def delete_all_by_user_id(self, user_id: UUID) -> int: ...
    async def delete_expired(self, now: datetime) -> int: ...


class TaskStore(Protocol):
    async def create(
        self,
        *,
        owner_id: UUID,
        title: str,
        description: Optional[str],
        status: TaskStatus,
        priority: TaskPriority,
        due_date: Optional[datetime],
        completed_at: Optional[datetime],
        created_at: datetime,
    ) -> Task: ...

    async def find_by_id(self, task_id: UUID, scope: QueryScope) -> Optional[Task]: ...

    async def find_all(
        self, scope: QueryScope, query: TaskQueryParams, now: datetime
    ) -> Tuple[List[Task], int]: ...

    async def update(
        self, task_id: UUID, fields: Dict[str, Any], updated_at: datetime
    ) -> Optional[Task]: ...

    async def delete(self, task_id: UUID) -> bool: ...

    async def count_by_status(self, scope: QueryScope) -> Dict[TaskStatus, int]: ...
    async def count_overdue(self, scope: QueryScope, now: datetime) -> int: ...


class TaskShareStore(Protocol):
    async def create(
        self,
        task_id: UUID,
        shared_with: UUID,
        permission: SharePermission,
        created_at: datetime,
    ) -> TaskShare: ...

    async def find_by_task_and_user(
        self, task_id: UUID, shared_with: UUID
    ) -> Optional[TaskShare]: ...

    async def find_all_by_task(self, task_id: UUID) -> List[TaskShare]: ...
    async def find_all_shared_with_user(self, user_id: UUID) -> List[TaskShare]: ...

    async def update_permission(
        self, task_id: UUID, shared_with: UUID, permission: SharePermission
    ) -> Optional[TaskShare]: ...

    async def delete(self, task_id: UUID, shared_with: UUID) -> bool: ...


class AttachmentStore(Protocol):
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
    ) -> Attachment: ...

    async def find_by_id(self, attachment_id: UUID) -> Optional[Attachment]: ...
    async def find_all_by_task(self, task_id: UUID) -> List[Attachment]: ...
    async def delete(self, attachment_id: UUID) -> bool: ...


class CacheBackend(Protocol):
    """Subset of the redis.asyncio client used by CacheService."""

    async def get(self, key: str) -> Optional[str]: ...
    async def set(self, key: str, value: str, ex: Optional[int] = None) -> Any: ...
    async def delete(self, *keys: str) -> int: ...
    def scan_iter(self, match: Optional[str] = None, count: Optional[int] = None) -> Any: ...


class CounterBackend(Protocol):
    """Subset of the redis.asyncio client used by RateLimiter."""

    async def incr(self, key: str) -> int: ...
    async def expire(self, key: str, seconds: int) -> Any: ...
