"""
Unit Tests for UsersService
===========================
Async unit tests against a mocked SQLAlchemy session.
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest
from sqlalchemy.exc import IntegrityError

from taskflow.core.database_connection import DatabaseManager
from taskflow.models.domain_models import UserRole
from taskflow.psql_db_services.errors import UniqueConstraintError
from taskflow.psql_db_services.users_service import UsersService
from tests.db_mocks import setup_mock_sqlalchemy_session

NOW = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)


class FakePgUniqueViolation(Exception):
    sqlstate = "23505"

    def __init__(self, constraint_name):
        super().__init__(f"duplicate key value violates unique constraint {constraint_name}")
        self.constraint_name = constraint_name


def user_row(**overrides):
    row = {
        "user_id": uuid4(),
        "username": "johndoe",
        "email": "john@example.com",
        "password_hash": "$2b$04$digest",
        "role": "USER",
        "created_at": NOW,
        "updated_at": NOW,
    }
    row.update(overrides)
    return row


@pytest.fixture
def mock_db_manager():
    return AsyncMock(spec=DatabaseManager)


@pytest.fixture
def users_service(mock_db_manager):
    return UsersService(database_manager=mock_db_manager)


class TestExistenceChecks:
    @pytest.mark.asyncio
    async def test_email_exists_true(self, users_service, mock_db_manager):
        session, _ = setup_mock_sqlalchemy_session(mock_db_manager, {"?column?": 1})

        assert await users_service.email_exists("john@example.com") is True
        sql, params = session.executed[0]
        assert "FROM users WHERE email = :email" in sql
        assert params == {"email": "john@example.com"}

    @pytest.mark.asyncio
    async def test_username_exists_false(self, users_service, mock_db_manager):
        setup_mock_sqlalchemy_session(mock_db_manager, None)
        assert await users_service.username_exists("nobody") is False


class TestCreate:
    @pytest.mark.asyncio
    async def test_create_success(self, users_service, mock_db_manager):
        row = user_row()
        session, _ = setup_mock_sqlalchemy_session(mock_db_manager, row)

        user = await users_service.create(
            username="johndoe",
            email="john@example.com",
            password_hash="$2b$04$digest",
            created_at=NOW,
        )

        assert user.user_id == row["user_id"]
        assert user.role == UserRole.USER
        sql, params = session.executed[0]
        assert "INSERT INTO users" in sql
        assert params["role"] == "USER"
        assert params["updated_at"] == NOW
        session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unique_violation_translated(self, users_service, mock_db_manager):
        error = IntegrityError("INSERT", {}, FakePgUniqueViolation("users_username_key"))
        session, _ = setup_mock_sqlalchemy_session(mock_db_manager, execute_error=error)

        with pytest.raises(UniqueConstraintError) as exc_info:
            await users_service.create(
                username="johndoe",
                email="john@example.com",
                password_hash="x",
                created_at=NOW,
            )

        assert exc_info.value.constraint == "users_username_key"
        session.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_other_database_errors_propagate(self, users_service, mock_db_manager):
        setup_mock_sqlalchemy_session(mock_db_manager, execute_error=RuntimeError("db down"))

        with pytest.raises(RuntimeError):
            await users_service.create(
                username="johndoe", email="john@example.com", password_hash="x", created_at=NOW
            )


class TestFind:
    @pytest.mark.asyncio
    async def test_find_by_email(self, users_service, mock_db_manager):
        row = user_row(role="ADMIN")
        session, _ = setup_mock_sqlalchemy_session(mock_db_manager, row)

        user = await users_service.find_by_email("john@example.com")

        assert user.role == UserRole.ADMIN
        assert "WHERE email = :value" in session.executed[0][0]

    @pytest.mark.asyncio
    async def test_find_by_id_not_found(self, users_service, mock_db_manager):
        setup_mock_sqlalchemy_session(mock_db_manager, None)
        assert await users_service.find_by_id(uuid4()) is None

    @pytest.mark.asyncio
    async def test_find_by_id_rejects_non_uuid(self, users_service):
        with pytest.raises(ValueError):
            await users_service.find_by_id("not-a-uuid")
