"""
Unit Tests for Startup Diagnostics
==================================
Connectivity verification and failure reporting.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from taskflow.core.startup_diagnostics import (
    ServiceStatus,
    StartupError,
    verify_database_connectivity,
    verify_redis_connectivity,
    verify_required_services,
)


def manager(ping_result: bool) -> MagicMock:
    mock_manager = MagicMock()
    mock_manager.ping = AsyncMock(return_value=ping_result)
    return mock_manager


class TestServiceStatus:
    def test_service_status_basic_creation(self):
        service = ServiceStatus(name="TestService", status="connected")

        assert service.name == "TestService"
        assert service.error_message is None
        assert service.suggestion is None
        assert service.connection_details is None

    def test_startup_error_names_failed_services(self):
        error = StartupError(
            [ServiceStatus(name="PostgreSQL", status="failed"), ServiceStatus(name="Redis", status="failed")]
        )
        assert "PostgreSQL, Redis" in str(error)
        assert len(error.failed_services) == 2


class TestVerifyConnectivity:
    @pytest.mark.asyncio
    async def test_database_connected(self, test_settings):
        status = await verify_database_connectivity(manager(True), test_settings)

        assert status.status == "connected"
        assert status.connection_details["database"] == test_settings.database_name

    @pytest.mark.asyncio
    async def test_database_failed_has_suggestion(self, test_settings):
        status = await verify_database_connectivity(manager(False), test_settings)

        assert status.status == "failed"
        assert str(test_settings.database_port) in status.suggestion

    @pytest.mark.asyncio
    async def test_redis_failed(self, test_settings):
        status = await verify_redis_connectivity(manager(False), test_settings)

        assert status.name == "Redis"
        assert status.status == "failed"
        assert "redis-server" in status.suggestion


class TestVerifyRequiredServices:
    @pytest.mark.asyncio
    async def test_all_connected(self, test_settings):
        statuses = await verify_required_services(manager(True), manager(True), test_settings)
        assert [s.name for s in statuses] == ["PostgreSQL", "Redis"]

    @pytest.mark.asyncio
    async def test_redis_skipped_when_not_required(self, test_settings):
        statuses = await verify_required_services(manager(True), None, test_settings)
        assert [s.name for s in statuses] == ["PostgreSQL"]

    @pytest.mark.asyncio
    async def test_failure_raises_startup_error(self, test_settings):
        with pytest.raises(StartupError) as exc_info:
            await verify_required_services(manager(True), manager(False), test_settings)

        assert [s.name for s in exc_info.value.failed_services] == ["Redis"]
