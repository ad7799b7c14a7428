"""
Authentication Service
----------------------
Registration, login, refresh-token rotation and logout.

This service is the only writer of refresh_tokens rows. A refresh token moves
one way only: live -> rotated | revoked | expired. Rotation is single-use:
the store's delete reports whether this call removed the row, and only the
caller that removed it is issued a new pair.
"""

from loguru import logger

from taskflow.auth.jwt_utils import InvalidTokenError, TokenCodec
from taskflow.auth.models import AccessClaim, TokenSubject
from taskflow.core.ports import Clock, RefreshTokenStore, UserStore
from taskflow.models.domain_models import User, UserRole
from taskflow.models.response_models import (
    LoginResponse,
    ProfileResponse,
    TokenPairResponse,
    UserResponse,
)
from taskflow.psql_db_services.errors import UniqueConstraintError
from taskflow.services.results import ErrorKind, ServiceResult
from taskflow.utils.password_hashing import PasswordHasher

EMAIL_TAKEN = "Email already registered"
USERNAME_TAKEN = "Username already taken"
INVALID_CREDENTIALS = "Invalid credentials"
INVALID_REFRESH_TOKEN = "Invalid refresh token"
REFRESH_TOKEN_NOT_FOUND = "Refresh token not found"
REFRESH_TOKEN_EXPIRED = "Refresh token expired"
LOGOUT_TOKEN_NOT_FOUND = "Refresh token not found or already invalidated"


class AuthService:
    """Orchestrates the credential and session lifecycle."""

    def __init__(
        self,
        users: UserStore,
        refresh_tokens: RefreshTokenStore,
        codec: TokenCodec,
        hasher: PasswordHasher,
        clock: Clock,
    ):
        self.users = users
        self.refresh_tokens = refresh_tokens
        self.codec = codec
        self.hasher = hasher
        self.clock = clock

    async def _issue_session(self, subject: TokenSubject) -> TokenPairResponse:
        """Sign a fresh pair and persist the refresh half."""
        access_token = self.codec.issue_access(subject)
        refresh_token = self.codec.issue_refresh(subject)
        await self.refresh_tokens.create(
            subject.user_id,
            refresh_token,
            expires_at=self.clock.now() + self.codec.refresh_lifetime,
        )
        return TokenPairResponse(access_token=access_token, refresh_token=refresh_token)

    # ========================================================================
    # REGISTRATION / LOGIN
    # ========================================================================

    async def register(
        self, username: str, email: str, password: str
    ) -> ServiceResult[UserResponse]:
        """
        Create a USER account.

        Email conflicts are reported before username conflicts.
        """
        if await self.users.email_exists(email):
            logger.warning("Registration rejected: email already registered")
            return ServiceResult.failure(ErrorKind.CONFLICT, EMAIL_TAKEN)

        if await self.users.username_exists(username):
            logger.warning(f"Registration rejected: username {username} taken")
            return ServiceResult.failure(ErrorKind.CONFLICT, USERNAME_TAKEN)

        password_hash = self.hasher.hash_password(password)
        try:
            user = await self.users.create(
                username=username,
                email=email,
                password_hash=password_hash,
                role=UserRole.USER,
                created_at=self.clock.now(),
            )
        except UniqueConstraintError as e:
            # Lost a race with a concurrent registration
            message = USERNAME_TAKEN if e.constraint and "username" in e.constraint else EMAIL_TAKEN
            return ServiceResult.failure(ErrorKind.CONFLICT, message)

        logger.info(f"User registered: {user.user_id}")
        return ServiceResult.success(UserResponse.from_user(user))

    async def login(self, email: str, password: str) -> ServiceResult[LoginResponse]:
        user = await self.users.find_by_email(email)
        if user is None or not self.hasher.verify_password(password, user.password_hash):
            logger.warning("Login failed: invalid credentials")
            return ServiceResult.failure(ErrorKind.UNAUTHORIZED, INVALID_CREDENTIALS)

        pair = await self._issue_session(self._subject_for(user))
        logger.info(f"User logged in: {user.user_id}")
        return ServiceResult.success(
            LoginResponse(
                user=UserResponse.from_user(user),
                access_token=pair.access_token,
                refresh_token=pair.refresh_token,
            )
        )

    @staticmethod
    def _subject_for(user: User) -> TokenSubject:
        return TokenSubject(user_id=user.user_id, email=user.email, role=user.role)

    # ========================================================================
    # SESSION LIFECYCLE
    # ========================================================================

    async def refresh(self, refresh_token: str) -> ServiceResult[TokenPairResponse]:
        """Exchange a live refresh token for a new pair, consuming it."""
        try:
            claim = self.codec.verify_refresh(refresh_token)
        except InvalidTokenError as e:
            logger.warning(f"Refresh rejected: {e}")
            return ServiceResult.failure(ErrorKind.UNAUTHORIZED, INVALID_REFRESH_TOKEN)

        record = await self.refresh_tokens.find_by_token(refresh_token)
        if record is None:
            logger.warning(f"Refresh rejected: unknown token for user {claim.user_id}")
            return ServiceResult.failure(ErrorKind.UNAUTHORIZED, REFRESH_TOKEN_NOT_FOUND)

        if record.is_expired(self.clock.now()):
            await self.refresh_tokens.delete(refresh_token)
            logger.warning(f"Refresh rejected: expired session for user {claim.user_id}")
            return ServiceResult.failure(ErrorKind.UNAUTHORIZED, REFRESH_TOKEN_EXPIRED)

        # The delete is the claim on this token; a concurrent caller gets False
        if not await self.refresh_tokens.delete(refresh_token):
            logger.warning(f"Refresh rejected: token already rotated for user {claim.user_id}")
            return ServiceResult.failure(ErrorKind.UNAUTHORIZED, REFRESH_TOKEN_NOT_FOUND)

        pair = await self._issue_session(
            TokenSubject(user_id=claim.user_id, email=claim.email, role=claim.role)
        )
        logger.info(f"Session rotated for user {claim.user_id}")
        return ServiceResult.success(pair)

    async def logout(self, refresh_token: str) -> ServiceResult[None]:
        if not await self.refresh_tokens.delete(refresh_token):
            logger.warning("Logout rejected: refresh token not found")
            return ServiceResult.failure(ErrorKind.UNAUTHORIZED, LOGOUT_TOKEN_NOT_FOUND)
        logger.info("Session revoked")
        return ServiceResult.success(None)

    async def logout_all(self, claim: AccessClaim) -> ServiceResult[int]:
        """Revoke every session of the calling user."""
        deleted = await self.refresh_tokens.delete_all_by_user_id(claim.user_id)
        logger.info(f"Revoked {deleted} sessions for user {claim.user_id}")
        return ServiceResult.success(deleted)

    async def purge_expired_sessions(self) -> int:
        """Delete every expired session row. Idempotent."""
        deleted = await self.refresh_tokens.delete_expired(self.clock.now())
        logger.info(f"Purged {deleted} expired sessions")
        return deleted

    @staticmethod
    def get_profile(claim: AccessClaim) -> ProfileResponse:
        return ProfileResponse(user_id=claim.user_id, email=claim.email, role=claim.role)
