"""
Request Models
==============

Pydantic request models for the authentication, task, sharing and query
endpoints. Everything the core receives has already passed these schemas.
"""

import re
from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

from taskflow.models.domain_models import SharePermission, TaskPriority, TaskStatus

USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9_]+$")


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Read naive datetimes as UTC and convert aware ones to UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class TaskSortField(str, Enum):
    CREATED_AT = "created_at"
    DUE_DATE = "due_date"
    PRIORITY = "priority"
    TITLE = "title"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


# ============================================================================
# AUTHENTICATION REQUESTS
# ============================================================================


class RegisterRequest(BaseModel):
    """Request model for registering a new account."""

    username: str = Field(..., min_length=3, max_length=20)
    email: EmailStr = Field(...)
    password: str = Field(..., min_length=8, max_length=128)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: EmailStr) -> EmailStr:
        return v.lower().strip()

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        if not USERNAME_PATTERN.match(v):
            raise ValueError(
                "Username can only contain letters, numbers, and underscores"
            )
        return v

    @field_validator("password")
    @classmethod
    def validate_password_strength(cls, v: str) -> str:
        if not re.search(r"[A-Z]", v):
            raise ValueError("Password must contain at least one uppercase letter")
        if not re.search(r"[a-z]", v):
            raise ValueError("Password must contain at least one lowercase letter")
        if not re.search(r"[0-9]", v):
            raise ValueError("Password must contain at least one number")
        return v

    class Config:
        json_schema_extra = {
            "example": {
                "username": "johndoe",
                "email": "john.doe@example.com",
                "password": "SecurePass123",
            }
        }


class LoginRequest(BaseModel):
    """Request model for email/password login."""

    email: EmailStr = Field(...)
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: EmailStr) -> EmailStr:
        return v.lower().strip()

    class Config:
        json_schema_extra = {
            "example": {"email": "john.doe@example.com", "password": "SecurePass123"}
        }


class RefreshTokenRequest(BaseModel):
    """Carries a refresh token for rotation or logout."""

    refresh_token: str = Field(..., min_length=1, description="Refresh token")

    class Config:
        json_schema_extra = {
            "example": {"refresh_token": "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9..."}
        }


# ============================================================================
# TASK REQUESTS
# ============================================================================


class TaskCreateRequest(BaseModel):
    """Request model for creating a task."""

    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=2000)
    status: TaskStatus = Field(default=TaskStatus.TODO)
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM)
    due_date: Optional[datetime] = Field(default=None)

    @field_validator("due_date")
    @classmethod
    def normalize_due_date(cls, v: Optional[datetime]) -> Optional[datetime]:
        return as_utc(v)

    class Config:
        json_schema_extra = {
            "example": {
                "title": "Write quarterly report",
                "description": "Numbers for Q3",
                "priority": "HIGH",
                "due_date": "2026-11-01T17:00:00Z",
            }
        }


class TaskUpdateRequest(BaseModel):
    """
    Partial update. Only fields present in the body are applied; description
    and due_date may be explicitly set to null.
    """

    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=2000)
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[datetime] = None

    @field_validator("due_date")
    @classmethod
    def normalize_due_date(cls, v: Optional[datetime]) -> Optional[datetime]:
        return as_utc(v)

    @model_validator(mode="after")
    def reject_null_required_fields(self) -> "TaskUpdateRequest":
        for field_name in ("title", "status", "priority"):
            if field_name in self.model_fields_set and getattr(self, field_name) is None:
                raise ValueError(f"{field_name} cannot be null")
        return self


class TaskQueryParams(BaseModel):
    """Filter, sort and pagination parameters for listing tasks."""

    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=10, ge=1, le=100)
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    search: Optional[str] = Field(default=None, max_length=200)
    due_date_from: Optional[datetime] = None
    due_date_to: Optional[datetime] = None
    overdue: bool = False
    sort_by: TaskSortField = TaskSortField.CREATED_AT
    sort_order: SortOrder = SortOrder.DESC

    @field_validator("due_date_from", "due_date_to")
    @classmethod
    def normalize_due_range(cls, v: Optional[datetime]) -> Optional[datetime]:
        return as_utc(v)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


# ============================================================================
# SHARING REQUESTS
# ============================================================================


class ShareTaskRequest(BaseModel):
    """Grant another user access to a task."""

    shared_with: UUID = Field(..., description="Recipient user ID")
    permission: SharePermission = Field(default=SharePermission.VIEW)

    class Config:
        json_schema_extra = {
            "example": {
                "shared_with": "550e8400-e29b-41d4-a716-446655440000",
                "permission": "VIEW",
            }
        }


class UpdatePermissionRequest(BaseModel):
    permission: SharePermission
