"""
Task Share Endpoints
--------------------
Owner-only management of who else can see a task.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status

from taskflow.api.dependencies import get_task_share_service
from taskflow.api.error_handling import unwrap_or_raise
from taskflow.api.rate_limiting import api_rate_limit
from taskflow.auth.dependencies import get_current_user
from taskflow.auth.models import AccessClaim
from taskflow.models.request_models import ShareTaskRequest, UpdatePermissionRequest
from taskflow.models.response_models import ApiResponse, TaskShareResponse
from taskflow.services.task_share_service import TaskShareService

router = APIRouter(
    prefix="/api/v1/tasks/{task_id}/shares",
    tags=["Task Sharing"],
    dependencies=[Depends(api_rate_limit)],
)


@router.post(
    "",
    response_model=ApiResponse[TaskShareResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Share a task",
)
async def share_task(
    task_id: UUID,
    request: ShareTaskRequest,
    claim: AccessClaim = Depends(get_current_user),
    task_share_service: TaskShareService = Depends(get_task_share_service),
):
    """
    Grant another user VIEW or EDIT on a task the caller owns.

    Raises:
        HTTPException 403: Sharing with yourself
        HTTPException 404: Task not owned by the caller, or unknown recipient
        HTTPException 409: Already shared with this user
    """
    share = unwrap_or_raise(
        await task_share_service.share_task(claim, task_id, request.shared_with, request.permission)
    )
    return ApiResponse(message="Task shared successfully", data=TaskShareResponse.from_share(share))


@router.get("", response_model=ApiResponse[List[TaskShareResponse]], summary="List shares")
async def get_shared_users(
    task_id: UUID,
    claim: AccessClaim = Depends(get_current_user),
    task_share_service: TaskShareService = Depends(get_task_share_service),
):
    shares = unwrap_or_raise(await task_share_service.get_shared_users(claim, task_id))
    return ApiResponse(
        message="Shares retrieved successfully",
        data=[TaskShareResponse.from_share(share) for share in shares],
    )


@router.patch(
    "/{user_id}",
    response_model=ApiResponse[TaskShareResponse],
    summary="Change a share's permission",
)
async def update_permission(
    task_id: UUID,
    user_id: UUID,
    request: UpdatePermissionRequest,
    claim: AccessClaim = Depends(get_current_user),
    task_share_service: TaskShareService = Depends(get_task_share_service),
):
    share = unwrap_or_raise(
        await task_share_service.update_permission(claim, task_id, user_id, request.permission)
    )
    return ApiResponse(message="Permission updated successfully", data=TaskShareResponse.from_share(share))


@router.delete("/{user_id}", response_model=ApiResponse[None], summary="Revoke a share")
async def revoke_share(
    task_id: UUID,
    user_id: UUID,
    claim: AccessClaim = Depends(get_current_user),
    task_share_service: TaskShareService = Depends(get_task_share_service),
):
    unwrap_or_raise(await task_share_service.revoke_share(claim, task_id, user_id))
    return ApiResponse(message="Share revoked successfully")
