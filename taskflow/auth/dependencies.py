"""
FastAPI Authentication Dependencies
-----------------------------------
Bearer-token guard and role checks for protected endpoints.

Security Best Practices:
- Stateless authorization: the access token is verified cryptographically,
  no database query per request
- Distinct messages for a missing header, a malformed header and an empty
  token; every verification failure reads "Invalid or expired token"
- Role checks only run after the primary guard has attached the claim
"""

from typing import List, Optional

from fastapi import Depends, HTTPException, Request, status
from loguru import logger

from taskflow.api.dependencies import get_container
from taskflow.auth.jwt_utils import InvalidTokenError, TokenCodec
from taskflow.auth.models import AccessClaim
from taskflow.models.domain_models import UserRole

BEARER_PREFIX = "Bearer "


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def authenticate_authorization_header(
    authorization: Optional[str], codec: TokenCodec
) -> AccessClaim:
    """
    Validate an ``Authorization`` header value.

    Returns:
        AccessClaim: The verified access-token claim

    Raises:
        HTTPException 401: With a message naming what was wrong
    """
    if not authorization:
        raise _unauthorized("No authorization header provided")

    if not authorization.startswith(BEARER_PREFIX):
        raise _unauthorized("Invalid authorization format. Use: Bearer <token>")

    token = authorization[len(BEARER_PREFIX):].strip()
    if not token:
        raise _unauthorized("No token provided")

    try:
        return codec.verify_access(token)
    except InvalidTokenError as e:
        logger.warning(f"JWT validation failed: {e}")
        raise _unauthorized("Invalid or expired token")


async def get_current_user(request: Request) -> AccessClaim:
    """
    Primary guard. Verifies the bearer token and attaches the claim to
    ``request.state.user``.
    """
    claim = authenticate_authorization_header(
        request.headers.get("Authorization"), get_container(request).codec
    )
    request.state.user = claim
    logger.debug(f"Token validated for user {claim.user_id} with role {claim.role.value}")
    return claim


class RoleChecker:
    """
    Dependency class for role-based authorization.

    Usage:
        require_admin = RoleChecker([UserRole.ADMIN])
        @router.post("/admin-only")
        async def handler(claim: AccessClaim = Depends(require_admin)): ...
    """

    def __init__(self, allowed_roles: List[UserRole]):
        if not allowed_roles:
            raise ValueError("RoleChecker needs at least one allowed role")
        self.allowed_roles = [UserRole(role) for role in allowed_roles]

    def __call__(self, claim: AccessClaim = Depends(get_current_user)) -> AccessClaim:
        if claim.role not in self.allowed_roles:
            logger.warning(
                f"Access denied for user {claim.user_id} with role {claim.role.value}"
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return claim


require_admin = RoleChecker([UserRole.ADMIN])
"""Allow administrators only."""
