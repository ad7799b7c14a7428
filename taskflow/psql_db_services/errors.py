from typing import Any, Dict, Optional


class UniqueConstraintError(Exception):
    """Raised when an INSERT/UPDATE hits a unique or primary-key constraint."""

    def __init__(self, message: str, constraint: Optional[str] = None, detail: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.constraint = constraint
        self.detail = detail or {}


__all__ = ["UniqueConstraintError"]
