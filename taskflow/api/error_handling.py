"""
Error Handling
--------------
The only place where service failures become HTTP responses.

- ServiceResult failures map to status codes by ErrorKind
- Request validation errors become 400 "Validation failed"
- Anything unexpected is logged with its traceback and becomes a 500
"""

from typing import TypeVar

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger

from taskflow.services.results import ErrorKind, ServiceResult

T = TypeVar("T")

STATUS_BY_KIND = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
}


def unwrap_or_raise(result: ServiceResult[T]) -> T:
    """
    Return the success value of ``result``.

    Raises:
        HTTPException: With the status mapped from the failure's ErrorKind
    """
    if result.ok:
        return result.value

    error = result.error
    status_code = STATUS_BY_KIND[error.kind]
    logger.info(f"Request failed with {status_code}: {error.message}")
    headers = {"WWW-Authenticate": "Bearer"} if error.kind == ErrorKind.UNAUTHORIZED else None
    raise HTTPException(status_code=status_code, detail=error.message, headers=headers)


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    logger.info(f"Validation failed for {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Validation failed", "errors": jsonable_encoder(exc.errors())},
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.opt(exception=exc).error(
        f"Unhandled error on {request.method} {request.url.path}: {exc}"
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal Server Error"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
