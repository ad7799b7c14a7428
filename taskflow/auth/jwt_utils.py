"""
JWT Utilities
-------------
Token codec for the two bearer token classes (access and refresh).

Security Best Practices:
- Use python-jose[cryptography] for cryptographic operations
- Distinct secrets per token class, plus a ``type`` claim, so an access token
  can never be replayed as a refresh token and vice versa
- Every verification failure (bad signature, malformed token, wrong type,
  expiry) collapses into a single InvalidTokenError
- Expiry is judged against the injected clock, not the host clock
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from uuid import uuid4

from jose import JWTError, jwt
from loguru import logger
from pydantic import ValidationError

from taskflow.auth.models import AccessClaim, TokenSubject
from taskflow.core.clock import SystemClock
from taskflow.core.config_manager import DURATION_PATTERN, ApplicationSettings
from taskflow.core.ports import Clock

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"

REQUIRED_CLAIMS = ("user_id", "email", "role", "iat", "exp", "type", "jti")

_UNIT_SECONDS = {"s": 1, "m": 60, "h": 3600, "d": 86400}


class InvalidTokenError(Exception):
    """Raised for any token that fails verification."""


class InvalidDurationFormatError(ValueError):
    """Raised when a lifetime string is not <integer><s|m|h|d>."""


def parse_duration(duration: str) -> timedelta:
    """
    Parse a lifetime such as ``15m`` or ``7d``.

    Args:
        duration: <integer><unit> where unit is one of s, m, h, d

    Returns:
        The duration as a timedelta

    Raises:
        InvalidDurationFormatError: On any other shape
    """
    match = DURATION_PATTERN.match(duration or "")
    if not match:
        raise InvalidDurationFormatError(
            f"Invalid expiration format: '{duration}'"
        )
    value, unit = match.groups()
    return timedelta(seconds=int(value) * _UNIT_SECONDS[unit])


class TokenCodec:
    """Signs and verifies access/refresh tokens. Stateless apart from its keys."""

    def __init__(
        self,
        access_secret: str,
        refresh_secret: str,
        access_expires_in: str = "15m",
        refresh_expires_in: str = "7d",
        algorithm: str = "HS256",
        clock: Optional[Clock] = None,
    ):
        if not access_secret or not refresh_secret:
            raise ValueError("JWT secrets are not configured")

        self._secrets = {
            ACCESS_TOKEN_TYPE: access_secret,
            REFRESH_TOKEN_TYPE: refresh_secret,
        }
        self._lifetimes = {
            ACCESS_TOKEN_TYPE: parse_duration(access_expires_in),
            REFRESH_TOKEN_TYPE: parse_duration(refresh_expires_in),
        }
        self.algorithm = algorithm
        self.clock = clock or SystemClock()

    @classmethod
    def from_settings(
        cls, app_settings: ApplicationSettings, clock: Optional[Clock] = None
    ) -> "TokenCodec":
        return cls(
            access_secret=app_settings.jwt_access_secret,
            refresh_secret=app_settings.jwt_refresh_secret,
            access_expires_in=app_settings.jwt_access_expires_in,
            refresh_expires_in=app_settings.jwt_refresh_expires_in,
            algorithm=app_settings.jwt_algorithm,
            clock=clock,
        )

    @property
    def access_lifetime(self) -> timedelta:
        return self._lifetimes[ACCESS_TOKEN_TYPE]

    @property
    def refresh_lifetime(self) -> timedelta:
        return self._lifetimes[REFRESH_TOKEN_TYPE]

    def expiry_date(self, duration: str) -> datetime:
        """Return now + duration for a ``<integer><unit>`` string."""
        return self.clock.now() + parse_duration(duration)

    # ========================================================================
    # ISSUE
    # ========================================================================

    def issue_access(self, subject: TokenSubject) -> str:
        """Create a short-lived access token for ``subject``."""
        return self._issue(subject, ACCESS_TOKEN_TYPE)

    def issue_refresh(self, subject: TokenSubject) -> str:
        """Create a long-lived refresh token for ``subject``."""
        return self._issue(subject, REFRESH_TOKEN_TYPE)

    def _issue(self, subject: TokenSubject, token_type: str) -> str:
        issued_at = self.clock.now()
        expires_at = issued_at + self._lifetimes[token_type]

        # jti keeps two tokens minted in the same second distinct
        payload: Dict[str, Any] = {
            "user_id": str(subject.user_id),
            "email": subject.email,
            "role": subject.role.value,
            "iat": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
            "type": token_type,
            "jti": uuid4().hex,
        }

        token: str = jwt.encode(
            payload, self._secrets[token_type], algorithm=self.algorithm
        )
        logger.debug(f"{token_type.capitalize()} token issued for user {subject.user_id}")
        return token

    # ========================================================================
    # VERIFY
    # ========================================================================

    def verify_access(self, token: str) -> AccessClaim:
        """Verify an access token. Raises InvalidTokenError on any failure."""
        return self._verify(token, ACCESS_TOKEN_TYPE)

    def verify_refresh(self, token: str) -> AccessClaim:
        """Verify a refresh token. Raises InvalidTokenError on any failure."""
        return self._verify(token, REFRESH_TOKEN_TYPE)

    def _verify(self, token: str, expected_type: str) -> AccessClaim:
        if not isinstance(token, str) or not token:
            raise InvalidTokenError("Token missing")

        try:
            payload = jwt.decode(
                token,
                self._secrets[expected_type],
                algorithms=[self.algorithm],
                options={"verify_exp": False},
            )
        except JWTError as e:
            logger.debug(f"JWT decode failed: {e}")
            raise InvalidTokenError("Invalid token") from e

        missing = [claim for claim in REQUIRED_CLAIMS if claim not in payload]
        if missing:
            raise InvalidTokenError(f"Token missing claims: {', '.join(missing)}")

        if payload["type"] != expected_type:
            raise InvalidTokenError("Token type mismatch")

        try:
            expires_ts = int(payload["exp"])
            issued_ts = int(payload["iat"])
        except (TypeError, ValueError) as e:
            raise InvalidTokenError("Invalid token timestamps") from e

        if self.clock.now().timestamp() >= expires_ts:
            raise InvalidTokenError("Token expired")

        try:
            return AccessClaim(
                user_id=payload["user_id"],
                email=payload["email"],
                role=payload["role"],
                issued_at=datetime.fromtimestamp(issued_ts, tz=timezone.utc),
                expires_at=datetime.fromtimestamp(expires_ts, tz=timezone.utc),
                type=payload["type"],
                jti=payload["jti"],
            )
        except ValidationError as e:
            raise InvalidTokenError("Invalid token payload") from e
