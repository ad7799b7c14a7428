"""
Task Endpoints
--------------
CRUD, filtered listing and statistics for tasks.

Non-admin callers list and count their own tasks; ADMIN callers see every
tenant. Reading a single task also works through a share.
"""

from typing import Annotated, List
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from taskflow.api.dependencies import get_task_service, get_task_share_service
from taskflow.api.error_handling import unwrap_or_raise
from taskflow.api.rate_limiting import api_rate_limit
from taskflow.auth.dependencies import get_current_user
from taskflow.auth.models import AccessClaim
from taskflow.models.request_models import TaskCreateRequest, TaskQueryParams, TaskUpdateRequest
from taskflow.models.response_models import (
    ApiResponse,
    PaginatedTasksResponse,
    SharedTaskResponse,
    TaskResponse,
    TaskStatsResponse,
)
from taskflow.services.task_service import TaskService
from taskflow.services.task_share_service import TaskShareService

router = APIRouter(
    prefix="/api/v1/tasks", tags=["Tasks"], dependencies=[Depends(api_rate_limit)]
)


# ============================================================================
# CREATE ENDPOINTS
# ============================================================================


@router.post(
    "",
    response_model=ApiResponse[TaskResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create a task",
)
async def create_task(
    request: TaskCreateRequest,
    claim: AccessClaim = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
):
    task = unwrap_or_raise(await task_service.create_task(claim, request))
    return ApiResponse(message="Task created successfully", data=TaskResponse.from_task(task))


# ============================================================================
# READ ENDPOINTS
# ============================================================================


@router.get("", response_model=ApiResponse[PaginatedTasksResponse], summary="List tasks")
async def list_tasks(
    query: Annotated[TaskQueryParams, Query()],
    claim: AccessClaim = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
):
    """
    Filter by status, priority, due-date range, overdue flag and a search
    term over title and description; paginate and sort.
    """
    page = unwrap_or_raise(await task_service.list_tasks(claim, query))
    return ApiResponse(message="Tasks retrieved successfully", data=page)


@router.get("/stats", response_model=ApiResponse[TaskStatsResponse], summary="Task statistics")
async def get_task_stats(
    claim: AccessClaim = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
):
    stats = unwrap_or_raise(await task_service.get_task_stats(claim))
    return ApiResponse(message="Task statistics retrieved successfully", data=stats)


@router.get(
    "/shared-with-me",
    response_model=ApiResponse[List[SharedTaskResponse]],
    summary="Tasks other users shared with the caller",
)
async def get_shared_with_me(
    claim: AccessClaim = Depends(get_current_user),
    task_share_service: TaskShareService = Depends(get_task_share_service),
):
    shared = unwrap_or_raise(await task_share_service.get_shared_with_me(claim))
    return ApiResponse(message="Shared tasks retrieved successfully", data=shared)


@router.get("/{task_id}", response_model=ApiResponse[TaskResponse], summary="Get a task")
async def get_task(
    task_id: UUID,
    claim: AccessClaim = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
):
    task = unwrap_or_raise(await task_service.get_task(claim, task_id))
    return ApiResponse(message="Task retrieved successfully", data=TaskResponse.from_task(task))


# ============================================================================
# UPDATE / DELETE ENDPOINTS
# ============================================================================


@router.patch("/{task_id}", response_model=ApiResponse[TaskResponse], summary="Update a task")
async def update_task(
    task_id: UUID,
    request: TaskUpdateRequest,
    claim: AccessClaim = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
):
    """Partial update; only the owner or an ADMIN may modify a task."""
    task = unwrap_or_raise(await task_service.update_task(claim, task_id, request))
    return ApiResponse(message="Task updated successfully", data=TaskResponse.from_task(task))


@router.delete("/{task_id}", response_model=ApiResponse[None], summary="Delete a task")
async def delete_task(
    task_id: UUID,
    claim: AccessClaim = Depends(get_current_user),
    task_service: TaskService = Depends(get_task_service),
):
    unwrap_or_raise(await task_service.delete_task(claim, task_id))
    return ApiResponse(message="Task deleted successfully")
