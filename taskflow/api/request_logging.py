"""
Request Logging Middleware
--------------------------
One access line per request: method, path, status and duration.

The request id comes from the X-Request-ID header when the client sends one
and is generated otherwise. It is bound to every log record written while
the request is served and echoed back in the response header.
"""

import time
from uuid import uuid4

from fastapi import FastAPI, Request
from loguru import logger

REQUEST_ID_HEADER = "X-Request-ID"


def register_request_logging(app: FastAPI) -> None:
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid4().hex
        start = time.perf_counter()

        with logger.contextualize(request_id=request_id):
            try:
                response = await call_next(request)
            except Exception:
                duration_ms = (time.perf_counter() - start) * 1000
                logger.error(
                    f"{request.method} {request.url.path} 500 {duration_ms:.1f}ms"
                )
                raise

            duration_ms = (time.perf_counter() - start) * 1000
            logger.info(
                f"{request.method} {request.url.path} {response.status_code} {duration_ms:.1f}ms"
            )

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
