"""
Models Package
---------------------
Pydantic models for database rows, API requests and API responses.
"""

from taskflow.models.domain_models import (
    AllTenantsScope,
    Attachment,
    OwnedScope,
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
from taskflow.models.request_models import (
    LoginRequest,
    RefreshTokenRequest,
    RegisterRequest,
    ShareTaskRequest,
    SortOrder,
    TaskCreateRequest,
    TaskQueryParams,
    TaskSortField,
    TaskUpdateRequest,
    UpdatePermissionRequest,
)
from taskflow.models.response_models import (
    ApiResponse,
    AttachmentResponse,
    DependencyHealth,
    HealthStatus,
    LoginResponse,
    PaginatedTasksResponse,
    PaginationMeta,
    ProfileResponse,
    SessionPurgeResponse,
    SharedTaskResponse,
    TaskResponse,
    TaskShareResponse,
    TaskStatsResponse,
    TokenPairResponse,
    UserResponse,
)

__all__ = [
    # Domain
    "AllTenantsScope",
    "Attachment",
    "OwnedScope",
    "QueryScope",
    "RefreshTokenRecord",
    "SharePermission",
    "Task",
    "TaskPriority",
    "TaskShare",
    "TaskStatus",
    "User",
    "UserRole",
    # Requests
    "LoginRequest",
    "RefreshTokenRequest",
    "RegisterRequest",
    "ShareTaskRequest",
    "SortOrder",
    "TaskCreateRequest",
    "TaskQueryParams",
    "TaskSortField",
    "TaskUpdateRequest",
    "UpdatePermissionRequest",
    # Responses
    "ApiResponse",
    "AttachmentResponse",
    "DependencyHealth",
    "HealthStatus",
    "LoginResponse",
    "PaginatedTasksResponse",
    "PaginationMeta",
    "ProfileResponse",
    "SessionPurgeResponse",
    "SharedTaskResponse",
    "TaskResponse",
    "TaskShareResponse",
    "TaskStatsResponse",
    "TokenPairResponse",
    "UserResponse",
]
