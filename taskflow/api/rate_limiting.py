"""
Rate Limiting Dependencies
--------------------------
Per-address quotas applied as FastAPI dependencies:

- global: every route
- auth: login and register
- api: task, sharing and attachment routes

Quotas and the window come from ApplicationSettings. Allowed responses carry
RateLimit-* headers; rejected ones get 429 with Retry-After.
"""

from fastapi import HTTPException, Request, Response, status
from loguru import logger

from taskflow.api.dependencies import get_container


class RateLimit:
    """Enforce one fixed-window quota, read from the named setting."""

    def __init__(self, bucket: str, limit_setting: str, detail: str):
        self.bucket = bucket
        self.limit_setting = limit_setting
        self.detail = detail

    async def __call__(self, request: Request, response: Response) -> None:
        container = get_container(request)
        app_settings = container.settings
        if not app_settings.rate_limit_enabled:
            return

        identity = request.client.host if request.client else "unknown"
        state = await container.rate_limiter.hit(
            self.bucket,
            identity,
            getattr(app_settings, self.limit_setting),
            app_settings.rate_limit_window_seconds,
        )

        if not state.allowed:
            logger.warning(
                f"Rate limit '{self.bucket}' exceeded by {identity} "
                f"on {request.method} {request.url.path}"
            )
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail=self.detail,
                headers={**state.headers(), "Retry-After": str(state.reset_after)},
            )

        response.headers.update(state.headers())


global_rate_limit = RateLimit(
    "global",
    "rate_limit_global_requests",
    "Too many requests from this IP, please try again later",
)
auth_rate_limit = RateLimit(
    "auth",
    "rate_limit_auth_requests",
    "Too many authentication attempts, please try again later",
)
api_rate_limit = RateLimit(
    "api",
    "rate_limit_api_requests",
    "Too many API requests, please try again later",
)
