"""
Health Check Endpoints
---------------------
Health monitoring endpoints for the service and its dependencies.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Request
from loguru import logger

from taskflow.api.dependencies import get_container
from taskflow.models.response_models import DependencyHealth, HealthStatus

router = APIRouter(prefix="/api/v1/health", tags=["Health"])


@router.get("/", response_model=HealthStatus)
async def health_check(request: Request):
    """Basic liveness check with version information."""
    logger.debug("Health check requested")

    return HealthStatus(
        status="healthy",
        timestamp=datetime.now(timezone.utc),
        version=get_container(request).settings.app_version,
    )


@router.get("/dependencies", response_model=DependencyHealth, status_code=200)
async def check_dependencies(request: Request):
    """
    Check connectivity to PostgreSQL and Redis.

    Always answers 200; the overall status is 'unhealthy' when any component
    is down, and monitoring decides criticality from the component map.
    """
    logger.debug("Dependency health check requested")

    components = await get_container(request).check_dependencies()
    all_healthy = all(state == "healthy" for state in components.values())

    if not all_healthy:
        logger.warning(f"Infrastructure health check detected issues: {components}")
    else:
        logger.info("All infrastructure components healthy")

    return DependencyHealth(
        status="healthy" if all_healthy else "unhealthy",
        timestamp=datetime.now(timezone.utc),
        components=components,
    )
