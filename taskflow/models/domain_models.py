"""
Domain Models
-------------
Pydantic models that mirror the PostgreSQL schema rows, plus the enums and
query-scope values shared by stores and services.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class UserRole(str, Enum):
    """User roles for role-based access control"""

    USER = "USER"
    ADMIN = "ADMIN"


class TaskStatus(str, Enum):
    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


class TaskPriority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class SharePermission(str, Enum):
    """Delegated permission on a shared task. EDIT includes VIEW."""

    VIEW = "VIEW"
    EDIT = "EDIT"

    @property
    def rank(self) -> int:
        return 1 if self is SharePermission.VIEW else 2

    def allows(self, required: "SharePermission") -> bool:
        return self.rank >= required.rank


PRIORITY_RANK = {TaskPriority.LOW: 1, TaskPriority.MEDIUM: 2, TaskPriority.HIGH: 3}


class User(BaseModel):
    """users table row. Carries the password digest: never return it to clients."""

    model_config = ConfigDict(from_attributes=True)

    user_id: UUID
    username: str
    email: str
    password_hash: str
    role: UserRole = UserRole.USER
    created_at: datetime
    updated_at: datetime


class RefreshTokenRecord(BaseModel):
    """refresh_tokens table row (one persisted session)."""

    token: str
    user_id: UUID
    expires_at: datetime
    created_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


class Task(BaseModel):
    """tasks table row."""

    task_id: UUID
    title: str
    description: Optional[str] = None
    status: TaskStatus = TaskStatus.TODO
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    owner_id: UUID
    created_at: datetime
    updated_at: datetime


class TaskShare(BaseModel):
    """task_shares table row, keyed by (task_id, shared_with)."""

    task_id: UUID
    shared_with: UUID
    permission: SharePermission
    created_at: datetime


class Attachment(BaseModel):
    """attachments table row."""

    attachment_id: UUID
    task_id: UUID
    filename: str
    original_name: str
    mime_type: str
    size: int
    path: str
    uploaded_by: UUID
    created_at: datetime


# ============================================================================
# QUERY SCOPE
# ============================================================================


@dataclass(frozen=True)
class OwnedScope:
    """Restrict a task query to a single owner."""

    user_id: UUID

    @property
    def cache_segment(self) -> str:
        return f"user:{self.user_id}"


@dataclass(frozen=True)
class AllTenantsScope:
    """Unrestricted task query (administrators only)."""

    @property
    def cache_segment(self) -> str:
        return "all"


QueryScope = Union[OwnedScope, AllTenantsScope]
