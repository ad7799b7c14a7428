"""
Service Results
---------------
Explicit success/failure values returned by the service layer.

Expected failures (conflict, not found, bad credentials, ...) travel as a
``ServiceResult`` carrying an ``ErrorKind``; only unexpected faults such as
an unreachable database are raised. The API layer is the single place that
turns an ``ErrorKind`` into an HTTP status code.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, Optional, TypeVar

T = TypeVar("T")


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    CONFLICT = "conflict"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class ServiceError:
    kind: ErrorKind
    message: str
    details: Optional[Any] = None


@dataclass(frozen=True)
class ServiceResult(Generic[T]):
    value: Optional[T] = None
    error: Optional[ServiceError] = field(default=None)

    @classmethod
    def success(cls, value: Optional[T] = None) -> "ServiceResult[T]":
        return cls(value=value)

    @classmethod
    def failure(
        cls, kind: ErrorKind, message: str, details: Optional[Any] = None
    ) -> "ServiceResult[T]":
        return cls(error=ServiceError(kind=kind, message=message, details=details))

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return the value or raise if this is a failure (used by callers that already checked)."""
        if self.error is not None:
            raise RuntimeError(
                f"Unwrapped failed result: {self.error.kind.value}: {self.error.message}"
            )
        return self.value
