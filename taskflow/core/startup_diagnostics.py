"""
Startup Diagnostics Module
-------------------------
Verifies PostgreSQL and Redis connectivity during application startup and
reports failures with actionable messages.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

from loguru import logger

from taskflow.core.config_manager import ApplicationSettings
from taskflow.core.database_connection import DatabaseManager
from taskflow.core.redis_connection import RedisManager


@dataclass
class ServiceStatus:
    """Track service connection status with detailed error information."""

    name: str
    status: str  # "connected" or "failed"
    error_message: Optional[str] = None
    suggestion: Optional[str] = None
    connection_details: Optional[Dict[str, str]] = None


class StartupError(RuntimeError):
    """Raised when a required infrastructure service is unreachable."""

    def __init__(self, failed_services: List[ServiceStatus]):
        names = ", ".join(service.name for service in failed_services)
        super().__init__(f"Required services unavailable: {names}")
        self.failed_services = failed_services


def report_startup_failure(failed_services: List[ServiceStatus]) -> None:
    """Log a readable failure report for every unreachable service."""
    logger.critical("APPLICATION STARTUP FAILED")
    for service in failed_services:
        logger.critical(f"{service.name}: {service.status.upper()} - {service.error_message}")
        if service.connection_details:
            details = ", ".join(f"{k}={v}" for k, v in service.connection_details.items())
            logger.critical(f"   Connection details: {details}")
        if service.suggestion:
            logger.critical(f"   Suggestion: {service.suggestion}")


async def verify_database_connectivity(
    database_manager: DatabaseManager, app_settings: ApplicationSettings
) -> ServiceStatus:
    """Run SELECT 1 against PostgreSQL."""
    details = {
        "host": app_settings.database_host,
        "port": str(app_settings.database_port),
        "database": app_settings.database_name,
    }
    if await database_manager.ping():
        return ServiceStatus(name="PostgreSQL", status="connected", connection_details=details)
    return ServiceStatus(
        name="PostgreSQL",
        status="failed",
        error_message="Connection test query failed",
        suggestion=(
            f"Start PostgreSQL or check it is reachable on "
            f"{app_settings.database_host}:{app_settings.database_port}, "
            "then verify the credentials in .env"
        ),
        connection_details=details,
    )


async def verify_redis_connectivity(
    redis_manager: RedisManager, app_settings: ApplicationSettings
) -> ServiceStatus:
    """PING the Redis server."""
    details = {
        "host": app_settings.redis_host,
        "port": str(app_settings.redis_port),
        "database": str(app_settings.redis_db),
    }
    if await redis_manager.ping():
        return ServiceStatus(name="Redis", status="connected", connection_details=details)
    return ServiceStatus(
        name="Redis",
        status="failed",
        error_message="Redis server did not respond to ping",
        suggestion=(
            f"Start Redis with: redis-server or check it is running on "
            f"{app_settings.redis_host}:{app_settings.redis_port}"
        ),
        connection_details=details,
    )


async def verify_required_services(
    database_manager: DatabaseManager,
    redis_manager: Optional[RedisManager],
    app_settings: ApplicationSettings,
) -> List[ServiceStatus]:
    """
    Check every required service.

    Redis is only required when caching is enabled.

    Raises:
        StartupError: If any required service is unreachable
    """
    statuses = [await verify_database_connectivity(database_manager, app_settings)]
    if redis_manager is not None:
        statuses.append(await verify_redis_connectivity(redis_manager, app_settings))

    failed = [status for status in statuses if status.status != "connected"]
    if failed:
        report_startup_failure(failed)
        raise StartupError(failed)

    for status in statuses:
        logger.info(f"{status.name} connected")
    return statuses
