"""
Request-scoped access to the service container.
"""

from fastapi import Request

from taskflow.auth.auth_service import AuthService
from taskflow.core.container import ServiceContainer
from taskflow.services.attachment_service import AttachmentService
from taskflow.services.task_service import TaskService
from taskflow.services.task_share_service import TaskShareService


def get_container(request: Request) -> ServiceContainer:
    return request.app.state.container


def get_auth_service(request: Request) -> AuthService:
    return get_container(request).auth_service


def get_task_service(request: Request) -> TaskService:
    return get_container(request).task_service


def get_task_share_service(request: Request) -> TaskShareService:
    return get_container(request).task_share_service


def get_attachment_service(request: Request) -> AttachmentService:
    return get_container(request).attachment_service
