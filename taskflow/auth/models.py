"""
JWT Authentication Models
-------------------------
Pydantic models for JWT token operations.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from taskflow.models.domain_models import UserRole


class TokenSubject(BaseModel):
    """The identity signed into both token classes."""

    user_id: UUID = Field(..., description="User's unique identifier")
    email: str = Field(..., description="User's email address")
    role: UserRole = Field(..., description="User role: USER or ADMIN")


class AccessClaim(TokenSubject):
    """
    Decoded and verified token payload.

    Rebuilt from the signed token on every request; never persisted.
    Security Note: only non-sensitive data is embedded in JWT payloads.
    """

    issued_at: datetime = Field(..., description="Token issued at timestamp")
    expires_at: datetime = Field(..., description="Token expiration timestamp")
    type: str = Field(..., description="Token type: 'access' or 'refresh'")
    jti: str = Field(..., description="Unique token identifier")

    class Config:
        json_schema_extra = {
            "example": {
                "user_id": "550e8400-e29b-41d4-a716-446655440000",
                "email": "john.doe@example.com",
                "role": "USER",
                "issued_at": "2026-10-18T10:15:00Z",
                "expires_at": "2026-10-18T10:30:00Z",
                "type": "access",
                "jti": "6f1c0f5e8f1d4a4a9b0f1c2d3e4f5a6b",
            }
        }
