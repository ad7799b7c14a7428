"""
PostgreSQL Schema
-----------------
DDL for the TaskFlow tables. Statements are idempotent so they can run on
every start-up when ``database_auto_create_schema`` is enabled.
"""

from loguru import logger
from sqlalchemy import text

from taskflow.core.database_connection import DatabaseManager

SCHEMA_STATEMENTS = [
    """
    CREATE TABLE IF NOT EXISTS users (
        user_id UUID PRIMARY KEY,
        username VARCHAR(20) NOT NULL,
        email VARCHAR(255) NOT NULL,
        password_hash VARCHAR(255) NOT NULL,
        role VARCHAR(10) NOT NULL DEFAULT 'USER'
            CHECK (role IN ('USER', 'ADMIN')),
        created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
        updated_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
        CONSTRAINT users_email_key UNIQUE (email),
        CONSTRAINT users_username_key UNIQUE (username)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS refresh_tokens (
        token TEXT PRIMARY KEY,
        user_id UUID NOT NULL REFERENCES users (user_id) ON DELETE CASCADE,
        expires_at TIMESTAMPTZ NOT NULL,
        created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
    )
    """,
    "CREATE INDEX IF NOT EXISTS refresh_tokens_user_id_idx ON refresh_tokens (user_id)",
    "CREATE INDEX IF NOT EXISTS refresh_tokens_expires_at_idx ON refresh_tokens (expires_at)",
    """
    CREATE TABLE IF NOT EXISTS tasks (
        task_id UUID PRIMARY KEY,
        title VARCHAR(200) NOT NULL,
        description TEXT,
        status VARCHAR(20) NOT NULL DEFAULT 'TODO'
            CHECK (status IN ('TODO', 'IN_PROGRESS', 'COMPLETED')),
        priority VARCHAR(10) NOT NULL DEFAULT 'MEDIUM'
            CHECK (priority IN ('LOW', 'MEDIUM', 'HIGH')),
        due_date TIMESTAMPTZ,
        completed_at TIMESTAMPTZ,
        owner_id UUID NOT NULL REFERENCES users (user_id) ON DELETE CASCADE,
        created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
        updated_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
    )
    """,
    "CREATE INDEX IF NOT EXISTS tasks_owner_id_idx ON tasks (owner_id)",
    "CREATE INDEX IF NOT EXISTS tasks_owner_status_idx ON tasks (owner_id, status)",
    """
    CREATE TABLE IF NOT EXISTS task_shares (
        task_id UUID NOT NULL REFERENCES tasks (task_id) ON DELETE CASCADE,
        shared_with UUID NOT NULL REFERENCES users (user_id) ON DELETE CASCADE,
        permission VARCHAR(10) NOT NULL CHECK (permission IN ('VIEW', 'EDIT')),
        created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
        PRIMARY KEY (task_id, shared_with)
    )
    """,
    "CREATE INDEX IF NOT EXISTS task_shares_shared_with_idx ON task_shares (shared_with)",
    """
    CREATE TABLE IF NOT EXISTS attachments (
        attachment_id UUID PRIMARY KEY,
        task_id UUID NOT NULL REFERENCES tasks (task_id) ON DELETE CASCADE,
        filename VARCHAR(255) NOT NULL,
        original_name VARCHAR(255) NOT NULL,
        mime_type VARCHAR(255) NOT NULL,
        size INTEGER NOT NULL,
        path TEXT NOT NULL,
        uploaded_by UUID NOT NULL REFERENCES users (user_id) ON DELETE CASCADE,
        created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
    )
    """,
    "CREATE INDEX IF NOT EXISTS attachments_task_id_idx ON attachments (task_id)",
]


async def create_schema(database_manager: DatabaseManager) -> None:
    """Create all tables and indexes that do not exist yet."""
    logger.info("Ensuring database schema exists")
    async with database_manager.get_session() as session:
        for statement in SCHEMA_STATEMENTS:
            await session.execute(text(statement))
    logger.info("Database schema ready")
