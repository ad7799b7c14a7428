"""
Shared fixtures: in-memory stores, a frozen clock and a fully wired
ServiceContainer / FastAPI app that never touches PostgreSQL or Redis.
"""

import pytest
from fastapi.testclient import TestClient

from taskflow.app import create_app
from taskflow.auth.models import TokenSubject
from taskflow.core.config_manager import ApplicationSettings
from taskflow.core.container import ServiceContainer
from taskflow.models.domain_models import UserRole
from tests.fakes import (
    FakeAttachmentStore,
    FakeRedis,
    FakeRefreshTokenStore,
    FakeTaskShareStore,
    FakeTaskStore,
    FakeUserStore,
    TEST_PASSWORD,
    FrozenClock,
)


@pytest.fixture
def clock():
    return FrozenClock()


@pytest.fixture
def test_settings(tmp_path):
    return ApplicationSettings(
        upload_dir=str(tmp_path / "uploads"),
        bcrypt_rounds=4,
        cache_enabled=True,
        rate_limit_enabled=False,
        log_level="WARNING",
    )


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def stores():
    users = FakeUserStore()
    refresh_tokens = FakeRefreshTokenStore()
    task_shares = FakeTaskShareStore()
    attachments = FakeAttachmentStore()

    def cascade(task_id):
        task_shares.drop_task(task_id)
        attachments.drop_task(task_id)

    tasks = FakeTaskStore(on_delete=cascade)
    return {
        "users": users,
        "refresh_tokens": refresh_tokens,
        "tasks": tasks,
        "task_shares": task_shares,
        "attachments": attachments,
    }


@pytest.fixture
def container(test_settings, stores, fake_redis, clock):
    return ServiceContainer(
        test_settings,
        users=stores["users"],
        refresh_tokens=stores["refresh_tokens"],
        tasks=stores["tasks"],
        task_shares=stores["task_shares"],
        attachments=stores["attachments"],
        cache_client=fake_redis,
        clock=clock,
    )


@pytest.fixture
def auth_service(container):
    return container.auth_service


@pytest.fixture
def task_service(container):
    return container.task_service


@pytest.fixture
def task_share_service(container):
    return container.task_share_service


@pytest.fixture
def attachment_service(container):
    return container.attachment_service


@pytest.fixture
def client(container):
    app = create_app(container=container)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_user(stores, container, clock):
    """Create a user directly in the store and return (user, subject)."""

    async def _make_user(username: str, role: UserRole = UserRole.USER):
        user = await stores["users"].create(
            username=username,
            email=f"{username}@example.com",
            password_hash=container.hasher.hash_password(TEST_PASSWORD),
            role=role,
            created_at=clock.now(),
        )
        return user, TokenSubject(user_id=user.user_id, email=user.email, role=user.role)

    return _make_user
