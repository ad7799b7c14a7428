"""
FastAPI Application Entry Point
-------------------------------
Main application initialization and configuration.
Registers routers, exception handlers and lifecycle handlers.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from taskflow.api import (
    attachment_endpoints,
    auth_endpoints,
    health_endpoints,
    task_endpoints,
    task_share_endpoints,
)
from taskflow.api.error_handling import register_exception_handlers
from taskflow.api.rate_limiting import global_rate_limit
from taskflow.api.request_logging import register_request_logging
from taskflow.core.config_manager import ApplicationSettings, settings
from taskflow.core.container import ServiceContainer
from taskflow.core.logger_setup import configure_logger


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build (unless injected), initialize and finally close the service container."""
    container: Optional[ServiceContainer] = app.state.container
    if container is None:
        container = ServiceContainer.from_settings(app.state.settings)
        app.state.container = container

    logger.info(f"Starting {container.settings.app_name} v{container.settings.app_version}")
    logger.info(f"Debug mode: {container.settings.debug}")

    try:
        await container.initialize()
    except Exception as e:
        logger.error(f"[ERROR] Startup failed: {e}")
        await container.close()
        raise

    logger.info("[SUCCESS] Application startup complete")

    yield

    logger.info("Shutting down application")
    try:
        await container.close()
        logger.info("Application shutdown complete")
    except Exception as e:
        logger.error(f"Shutdown error: {e}")


def create_app(
    container: Optional[ServiceContainer] = None,
    app_settings: Optional[ApplicationSettings] = None,
) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        container: Pre-wired services (tests inject in-memory stores here).
            When omitted, the lifespan wires PostgreSQL and Redis.
        app_settings: Settings to use; defaults to the container's or the global ones
    """
    app_settings = app_settings or (container.settings if container else settings)
    configure_logger(app_settings)

    app = FastAPI(
        title=app_settings.app_name,
        version=app_settings.app_version,
        description="Task management API with JWT sessions, task sharing and attachments",
        lifespan=lifespan,
        dependencies=[Depends(global_rate_limit)],
        debug=app_settings.debug,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
        swagger_ui_parameters={"displayRequestDuration": True},
    )
    app.state.settings = app_settings
    app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_request_logging(app)
    register_exception_handlers(app)

    app.include_router(health_endpoints.router)
    app.include_router(auth_endpoints.router)
    app.include_router(auth_endpoints.admin_router)
    app.include_router(task_endpoints.router)
    app.include_router(task_share_endpoints.router)
    app.include_router(attachment_endpoints.router)

    @app.get("/")
    async def root():
        """Root endpoint with basic information."""
        return {
            "name": app_settings.app_name,
            "version": app_settings.app_version,
            "status": "running",
            "docs": "/api/docs",
            "redoc": "/api/redoc",
            "openapi": "/api/openapi.json",
        }

    return app


app = create_app()
