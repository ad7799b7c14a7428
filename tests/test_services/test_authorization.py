"""
Resource Authorization Tests
"""

from datetime import datetime, timezone
from uuid import uuid4

import pytest

from taskflow.auth.models import TokenSubject
from taskflow.models.domain_models import (
    AllTenantsScope,
    OwnedScope,
    SharePermission,
    Task,
    UserRole,
)
from taskflow.services.authorization import ResourceAuthorizer, is_admin
from tests.fakes import FakeTaskShareStore

NOW = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)


def subject(role: UserRole = UserRole.USER) -> TokenSubject:
    return TokenSubject(user_id=uuid4(), email="someone@example.com", role=role)


class TestResourceAuthorizer:
    def setup_method(self):
        self.shares = FakeTaskShareStore()
        self.authorizer = ResourceAuthorizer(self.shares)
        self.owner = subject()
        self.task = Task(
            task_id=uuid4(),
            title="Quarterly report",
            owner_id=self.owner.user_id,
            created_at=NOW,
            updated_at=NOW,
        )

    def test_scope_for_user_and_admin(self):
        assert self.authorizer.scope_for(self.owner) == OwnedScope(self.owner.user_id)
        assert self.authorizer.scope_for(subject(UserRole.ADMIN)) == AllTenantsScope()

    def test_is_admin(self):
        assert is_admin(subject(UserRole.ADMIN))
        assert not is_admin(self.owner)

    @pytest.mark.asyncio
    async def test_owner_reads_and_writes(self):
        assert await self.authorizer.can_read(self.owner, self.task)
        assert self.authorizer.can_write(self.owner, self.task)

    @pytest.mark.asyncio
    async def test_admin_reads_and_writes_any_task(self):
        admin = subject(UserRole.ADMIN)
        assert await self.authorizer.can_read(admin, self.task)
        assert self.authorizer.can_write(admin, self.task)

    @pytest.mark.asyncio
    async def test_stranger_denied(self):
        stranger = subject()
        assert not await self.authorizer.can_read(stranger, self.task)
        assert not self.authorizer.can_write(stranger, self.task)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("permission", [SharePermission.VIEW, SharePermission.EDIT])
    async def test_share_grants_read_but_not_write(self, permission):
        recipient = subject()
        await self.shares.create(self.task.task_id, recipient.user_id, permission, NOW)

        assert await self.authorizer.can_read(recipient, self.task)
        assert not self.authorizer.can_write(recipient, self.task)


def test_edit_includes_view():
    assert SharePermission.EDIT.allows(SharePermission.VIEW)
    assert SharePermission.VIEW.allows(SharePermission.VIEW)
    assert not SharePermission.VIEW.allows(SharePermission.EDIT)
