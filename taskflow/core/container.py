"""
Service Container
-----------------
Builds every store, client and service once per process and owns their
lifecycle. The FastAPI lifespan calls initialize() on startup and close() on
shutdown; request handlers reach the services through ``app.state.container``.

Tests build a container from in-memory stores with ``ServiceContainer(...)``
and never touch PostgreSQL or Redis.
"""

from typing import Dict, Optional

from loguru import logger

from taskflow.auth.auth_service import AuthService
from taskflow.auth.jwt_utils import TokenCodec
from taskflow.core.clock import SystemClock
from taskflow.core.config_manager import ApplicationSettings
from taskflow.core.database_connection import DatabaseManager
from taskflow.core.ports import (
    AttachmentStore,
    CacheBackend,
    Clock,
    RefreshTokenStore,
    TaskShareStore,
    TaskStore,
    UserStore,
)
from taskflow.core.redis_connection import RedisManager
from taskflow.core.startup_diagnostics import verify_required_services
from taskflow.psql_db_services import (
    AttachmentsService,
    RefreshTokensService,
    TaskSharesService,
    TasksService,
    UsersService,
    create_schema,
)
from taskflow.services.attachment_service import AttachmentService
from taskflow.services.authorization import ResourceAuthorizer
from taskflow.services.cache_service import CacheService
from taskflow.services.file_storage import LocalFileStorage
from taskflow.services.rate_limiter import RateLimiter
from taskflow.services.task_service import TaskService
from taskflow.services.task_share_service import TaskShareService
from taskflow.utils.password_hashing import PasswordHasher


class ServiceContainer:
    """Explicitly wired dependencies for one application instance."""

    def __init__(
        self,
        app_settings: ApplicationSettings,
        users: UserStore,
        refresh_tokens: RefreshTokenStore,
        tasks: TaskStore,
        task_shares: TaskShareStore,
        attachments: AttachmentStore,
        cache_client: Optional[CacheBackend] = None,
        clock: Optional[Clock] = None,
        database_manager: Optional[DatabaseManager] = None,
        redis_manager: Optional[RedisManager] = None,
    ):
        self.settings = app_settings
        self.clock = clock or SystemClock()
        self.database_manager = database_manager
        self.redis_manager = redis_manager

        # Stores
        self.users = users
        self.refresh_tokens = refresh_tokens
        self.tasks = tasks
        self.task_shares = task_shares
        self.attachments = attachments

        # Primitives
        self.codec = TokenCodec.from_settings(app_settings, clock=self.clock)
        self.hasher = PasswordHasher(rounds=app_settings.bcrypt_rounds)
        self.cache = CacheService(
            cache_client,
            ttl_seconds=app_settings.cache_ttl_seconds,
            enabled=app_settings.cache_enabled,
        )
        self.file_storage = LocalFileStorage(app_settings.upload_dir)
        self.rate_limiter = RateLimiter(cache_client, self.clock)
        self.authorizer = ResourceAuthorizer(task_shares)

        # Services
        self.auth_service = AuthService(
            users=users,
            refresh_tokens=refresh_tokens,
            codec=self.codec,
            hasher=self.hasher,
            clock=self.clock,
        )
        self.task_service = TaskService(
            tasks=tasks,
            attachments=attachments,
            authorizer=self.authorizer,
            cache=self.cache,
            file_storage=self.file_storage,
            clock=self.clock,
        )
        self.task_share_service = TaskShareService(
            tasks=tasks,
            task_shares=task_shares,
            users=users,
            clock=self.clock,
        )
        self.attachment_service = AttachmentService(
            attachments=attachments,
            task_service=self.task_service,
            file_storage=self.file_storage,
            clock=self.clock,
            allowed_mime_types=app_settings.upload_allowed_mime_types,
            max_file_size=app_settings.upload_max_file_size,
        )

    @classmethod
    def from_settings(
        cls, app_settings: ApplicationSettings, clock: Optional[Clock] = None
    ) -> "ServiceContainer":
        """Wire the PostgreSQL stores and (when caching is on) Redis."""
        database_manager = DatabaseManager(app_settings)
        redis_manager = RedisManager(app_settings) if app_settings.cache_enabled else None
        return cls(
            app_settings,
            users=UsersService(database_manager),
            refresh_tokens=RefreshTokensService(database_manager),
            tasks=TasksService(database_manager),
            task_shares=TaskSharesService(database_manager),
            attachments=AttachmentsService(database_manager),
            clock=clock,
            database_manager=database_manager,
            redis_manager=redis_manager,
        )

    async def initialize(self) -> None:
        """
        Open connection pools and verify the infrastructure.

        Raises:
            StartupError: If PostgreSQL (or Redis, when caching) is unreachable
        """
        if self.database_manager is None:
            logger.info("Container uses injected stores; nothing to initialize")
            return

        await self.database_manager.initialize()
        if self.redis_manager is not None:
            self.redis_manager.initialize()

        await verify_required_services(self.database_manager, self.redis_manager, self.settings)

        if self.redis_manager is not None:
            self.cache.attach(self.redis_manager.client)
            self.rate_limiter.attach(self.redis_manager.client)
        if self.settings.database_auto_create_schema:
            await create_schema(self.database_manager)

    async def close(self) -> None:
        self.cache.attach(None)
        self.rate_limiter.attach(None)
        if self.redis_manager is not None:
            await self.redis_manager.close()
        if self.database_manager is not None:
            await self.database_manager.close()

    async def check_dependencies(self) -> Dict[str, str]:
        """Connectivity of each backing service, for the health endpoint."""
        components: Dict[str, str] = {}
        if self.database_manager is not None:
            components["postgres"] = "healthy" if await self.database_manager.ping() else "unhealthy"
        if self.redis_manager is not None:
            components["redis"] = "healthy" if await self.redis_manager.ping() else "unhealthy"
        return components
