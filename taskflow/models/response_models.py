"""
Response Models
--------------
Pydantic models for API response validation.
Simple, focused schemas for returning data to clients.
"""

from datetime import datetime
from typing import Dict, Generic, List, Optional, TypeVar
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from taskflow.models.domain_models import (
    Attachment,
    SharePermission,
    Task,
    TaskPriority,
    TaskShare,
    TaskStatus,
    User,
    UserRole,
)

DataT = TypeVar("DataT")


class ApiResponse(BaseModel, Generic[DataT]):
    """Envelope used by every successful endpoint."""

    message: str
    data: Optional[DataT] = None


# ============================================================================
# USER / AUTH RESPONSE MODELS
# ============================================================================
class UserResponse(BaseModel):
    """Response schema for user data - no sensitive info"""

    user_id: UUID
    username: str
    email: str
    role: UserRole
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "user_id": "550e8400-e29b-41d4-a716-446655440000",
                "username": "johndoe",
                "email": "john.doe@example.com",
                "role": "USER",
                "created_at": "2026-10-18T08:00:00Z",
                "updated_at": "2026-10-18T08:00:00Z",
            }
        }
    )

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            user_id=user.user_id,
            username=user.username,
            email=user.email,
            role=user.role,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


class TokenPairResponse(BaseModel):
    """Fresh access/refresh pair returned by login and rotation."""

    access_token: str = Field(..., description="JWT access token")
    refresh_token: str = Field(..., description="JWT refresh token")
    token_type: str = Field(default="bearer", description="Always 'bearer'")


class LoginResponse(TokenPairResponse):
    user: UserResponse


class ProfileResponse(BaseModel):
    """Identity as asserted by the current access token."""

    user_id: UUID
    email: str
    role: UserRole


class SessionPurgeResponse(BaseModel):
    deleted: int


# ============================================================================
# TASK RESPONSE MODELS
# ============================================================================
class TaskResponse(BaseModel):
    task_id: UUID
    title: str
    description: Optional[str]
    status: TaskStatus
    priority: TaskPriority
    due_date: Optional[datetime]
    completed_at: Optional[datetime]
    owner_id: UUID
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_task(cls, task: Task) -> "TaskResponse":
        return cls(**task.model_dump())


class PaginationMeta(BaseModel):
    page: int
    page_size: int
    total: int
    total_pages: int


class PaginatedTasksResponse(BaseModel):
    tasks: List[TaskResponse]
    pagination: PaginationMeta


class TaskStatsResponse(BaseModel):
    total: int
    todo: int
    in_progress: int
    completed: int
    overdue: int


class TaskShareResponse(BaseModel):
    task_id: UUID
    shared_with: UUID
    permission: SharePermission
    created_at: datetime

    @classmethod
    def from_share(cls, share: TaskShare) -> "TaskShareResponse":
        return cls(**share.model_dump())


class SharedTaskResponse(BaseModel):
    """A task delegated to the caller, with the permission they hold on it."""

    task: TaskResponse
    permission: SharePermission
    shared_at: datetime


class AttachmentResponse(BaseModel):
    """Attachment metadata. The on-disk path stays server side."""

    attachment_id: UUID
    task_id: UUID
    original_name: str
    mime_type: str
    size: int
    uploaded_by: UUID
    created_at: datetime

    @classmethod
    def from_attachment(cls, attachment: Attachment) -> "AttachmentResponse":
        return cls(
            attachment_id=attachment.attachment_id,
            task_id=attachment.task_id,
            original_name=attachment.original_name,
            mime_type=attachment.mime_type,
            size=attachment.size,
            uploaded_by=attachment.uploaded_by,
            created_at=attachment.created_at,
        )


# ============================================================================
# HEALTH RESPONSE MODELS
# ============================================================================
class HealthStatus(BaseModel):
    status: str
    timestamp: datetime
    version: str


class DependencyHealth(BaseModel):
    status: str
    timestamp: datetime
    components: Dict[str, str]
