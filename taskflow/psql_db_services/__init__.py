"""
Database Services Package
-------------------------
PostgreSQL stores for the TaskFlow backend.

This package provides:
- Base service class with session management and unique-violation translation
- Users and refresh-token (session) stores used by authentication
- Task, task-share and attachment stores
- Schema bootstrap DDL
"""

from taskflow.psql_db_services.attachments_service import AttachmentsService
from taskflow.psql_db_services.base_service import BaseDatabaseService
from taskflow.psql_db_services.errors import UniqueConstraintError
from taskflow.psql_db_services.refresh_tokens_service import RefreshTokensService
from taskflow.psql_db_services.schema import create_schema
from taskflow.psql_db_services.task_shares_service import TaskSharesService
from taskflow.psql_db_services.tasks_service import TasksService
from taskflow.psql_db_services.users_service import UsersService

__all__ = [
    "AttachmentsService",
    "BaseDatabaseService",
    "RefreshTokensService",
    "TaskSharesService",
    "TasksService",
    "UniqueConstraintError",
    "UsersService",
    "create_schema",
]
