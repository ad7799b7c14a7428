"""
Authentication Module
---------------------
JWT access/refresh tokens, the session lifecycle and endpoint guards.

Core Components:
- models: token subject and verified claim
- jwt_utils: TokenCodec (issue / verify) and the duration grammar
- auth_service: register, login, refresh rotation, logout, session sweep
- dependencies: FastAPI bearer guard and role checks (import it directly,
  it depends on the API layer)

Usage:
    from taskflow.auth import AccessClaim
    from taskflow.auth.dependencies import get_current_user

    @router.get("/protected")
    async def protected_endpoint(claim: AccessClaim = Depends(get_current_user)):
        return {"user_id": claim.user_id, "role": claim.role}
"""

from taskflow.auth.models import AccessClaim, TokenSubject
from taskflow.auth.jwt_utils import (
    InvalidDurationFormatError,
    InvalidTokenError,
    TokenCodec,
    parse_duration,
)
from taskflow.auth.auth_service import AuthService

__all__ = [
    # Models
    "AccessClaim",
    "TokenSubject",
    # Token codec
    "InvalidDurationFormatError",
    "InvalidTokenError",
    "TokenCodec",
    "parse_duration",
    # Service
    "AuthService",
]
