"""
Attachment Endpoints
--------------------
Multipart upload, listing, download and deletion of task attachments.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, File, UploadFile, status
from fastapi.responses import FileResponse

from taskflow.api.dependencies import get_attachment_service
from taskflow.api.error_handling import unwrap_or_raise
from taskflow.api.rate_limiting import api_rate_limit
from taskflow.auth.dependencies import get_current_user
from taskflow.auth.models import AccessClaim
from taskflow.models.response_models import ApiResponse, AttachmentResponse
from taskflow.services.attachment_service import AttachmentService

DEFAULT_CONTENT_TYPE = "application/octet-stream"

router = APIRouter(
    prefix="/api/v1", tags=["Attachments"], dependencies=[Depends(api_rate_limit)]
)


@router.post(
    "/tasks/{task_id}/attachments",
    response_model=ApiResponse[AttachmentResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Upload an attachment",
)
async def upload_attachment(
    task_id: UUID,
    file: UploadFile = File(...),
    claim: AccessClaim = Depends(get_current_user),
    attachment_service: AttachmentService = Depends(get_attachment_service),
):
    """
    Attach a file to a task the caller owns (or any task, for ADMIN).

    Raises:
        HTTPException 400: Disallowed MIME type, empty or oversized file
        HTTPException 404: Task not found
    """
    # Read one byte past the limit so oversized uploads are detected without
    # buffering the whole body
    content = await file.read(attachment_service.max_file_size + 1)
    attachment = unwrap_or_raise(
        await attachment_service.upload_attachment(
            claim,
            task_id,
            original_name=file.filename or "upload",
            mime_type=file.content_type or DEFAULT_CONTENT_TYPE,
            content=content,
        )
    )
    return ApiResponse(
        message="File uploaded successfully",
        data=AttachmentResponse.from_attachment(attachment),
    )


@router.get(
    "/tasks/{task_id}/attachments",
    response_model=ApiResponse[List[AttachmentResponse]],
    summary="List a task's attachments",
)
async def list_attachments(
    task_id: UUID,
    claim: AccessClaim = Depends(get_current_user),
    attachment_service: AttachmentService = Depends(get_attachment_service),
):
    attachments = unwrap_or_raise(await attachment_service.list_attachments(claim, task_id))
    return ApiResponse(
        message="Attachments retrieved successfully",
        data=[AttachmentResponse.from_attachment(attachment) for attachment in attachments],
    )


@router.get("/attachments/{attachment_id}", summary="Download an attachment")
async def download_attachment(
    attachment_id: UUID,
    claim: AccessClaim = Depends(get_current_user),
    attachment_service: AttachmentService = Depends(get_attachment_service),
):
    attachment = unwrap_or_raise(
        await attachment_service.get_attachment_for_download(claim, attachment_id)
    )
    return FileResponse(
        attachment.path,
        media_type=attachment.mime_type,
        filename=attachment.original_name,
    )


@router.delete(
    "/attachments/{attachment_id}",
    response_model=ApiResponse[None],
    summary="Delete an attachment",
)
async def delete_attachment(
    attachment_id: UUID,
    claim: AccessClaim = Depends(get_current_user),
    attachment_service: AttachmentService = Depends(get_attachment_service),
):
    unwrap_or_raise(await attachment_service.delete_attachment(claim, attachment_id))
    return ApiResponse(message="Attachment deleted successfully")
