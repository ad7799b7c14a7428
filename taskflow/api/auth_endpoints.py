"""
Authentication Endpoints
------------------------
Registration, login, token rotation, logout and the caller's profile.
"""

from fastapi import APIRouter, Depends, status
from loguru import logger

from taskflow.api.dependencies import get_auth_service
from taskflow.api.error_handling import unwrap_or_raise
from taskflow.api.rate_limiting import auth_rate_limit
from taskflow.auth.auth_service import AuthService
from taskflow.auth.dependencies import get_current_user, require_admin
from taskflow.auth.models import AccessClaim
from taskflow.models.request_models import LoginRequest, RefreshTokenRequest, RegisterRequest
from taskflow.models.response_models import (
    ApiResponse,
    LoginResponse,
    ProfileResponse,
    SessionPurgeResponse,
    TokenPairResponse,
    UserResponse,
)

router = APIRouter(prefix="/api/v1/auth", tags=["Authentication"])
admin_router = APIRouter(prefix="/api/v1/admin", tags=["Administration"])


@router.post(
    "/register",
    response_model=ApiResponse[UserResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Register a new account",
    dependencies=[Depends(auth_rate_limit)],
)
async def register(
    request: RegisterRequest, auth_service: AuthService = Depends(get_auth_service)
):
    """
    Create a USER account.

    Raises:
        HTTPException 409: If the email or the username is already taken
    """
    user = unwrap_or_raise(
        await auth_service.register(request.username, request.email, request.password)
    )
    return ApiResponse(message="User registered successfully", data=user)


@router.post(
    "/login",
    response_model=ApiResponse[LoginResponse],
    summary="Log in",
    dependencies=[Depends(auth_rate_limit)],
)
async def login(
    request: LoginRequest, auth_service: AuthService = Depends(get_auth_service)
):
    """
    Exchange email and password for an access/refresh token pair.

    Raises:
        HTTPException 401: "Invalid credentials" for an unknown email or a wrong password
    """
    session = unwrap_or_raise(await auth_service.login(request.email, request.password))
    return ApiResponse(message="Login successful", data=session)


@router.post(
    "/refresh",
    response_model=ApiResponse[TokenPairResponse],
    summary="Rotate a refresh token",
)
async def refresh(
    request: RefreshTokenRequest, auth_service: AuthService = Depends(get_auth_service)
):
    """The presented refresh token is consumed; a new pair is returned."""
    pair = unwrap_or_raise(await auth_service.refresh(request.refresh_token))
    return ApiResponse(message="Token refreshed successfully", data=pair)


@router.post("/logout", response_model=ApiResponse[None], summary="Revoke a session")
async def logout(
    request: RefreshTokenRequest, auth_service: AuthService = Depends(get_auth_service)
):
    unwrap_or_raise(await auth_service.logout(request.refresh_token))
    return ApiResponse(message="Logged out successfully")


@router.post(
    "/logout-all",
    response_model=ApiResponse[SessionPurgeResponse],
    summary="Revoke every session of the caller",
)
async def logout_all(
    claim: AccessClaim = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service),
):
    deleted = unwrap_or_raise(await auth_service.logout_all(claim))
    return ApiResponse(
        message="All sessions revoked", data=SessionPurgeResponse(deleted=deleted)
    )


@router.get("/me", response_model=ApiResponse[ProfileResponse], summary="Current user")
async def me(claim: AccessClaim = Depends(get_current_user)):
    return ApiResponse(message="Profile retrieved", data=AuthService.get_profile(claim))


@admin_router.post(
    "/sessions/purge-expired",
    response_model=ApiResponse[SessionPurgeResponse],
    summary="Delete expired sessions",
)
async def purge_expired_sessions(
    claim: AccessClaim = Depends(require_admin),
    auth_service: AuthService = Depends(get_auth_service),
):
    """Idempotent sweep of expired refresh-token rows (ADMIN only)."""
    deleted = await auth_service.purge_expired_sessions()
    logger.info(f"Admin {claim.user_id} purged {deleted} expired sessions")
    return ApiResponse(
        message="Expired sessions purged", data=SessionPurgeResponse(deleted=deleted)
    )
