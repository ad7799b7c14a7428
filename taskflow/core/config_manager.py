"""
Configuration Manager
--------------------
Centralized configuration management using Pydantic Settings.
All application settings are loaded from environment variables with validation.

The JWT secrets have no defaults: instantiating the settings without them
raises, so the process refuses to start without a signing key.
"""

import re
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DURATION_PATTERN = re.compile(r"^(\d+)([smhd])$")


class ApplicationSettings(BaseSettings):
    """Main application configuration settings."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # Application metadata
    app_name: str = Field(default="TaskFlow API", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    debug: bool = Field(default=False, description="Debug mode")
    log_level: str = Field(default="INFO", description="Logging level")
    log_file_path: Optional[str] = Field(
        default=None, description="Optional rotating log file path"
    )
    log_file_rotation: str = Field(
        default="100 MB", description="Size or interval at which the log file rotates"
    )
    log_file_retention: str = Field(
        default="14 days", description="How long rotated log files are kept"
    )
    log_json: bool = Field(
        default=False, description="Emit one JSON object per log record on stdout"
    )

    # FastAPI server configuration
    fastapi_host: str = Field(default="0.0.0.0", description="FastAPI host")
    fastapi_port: int = Field(default=8000, description="FastAPI port")

    # PostgreSQL database configuration
    database_host: str = Field(default="localhost", description="PostgreSQL host")
    database_port: int = Field(default=5432, description="PostgreSQL port")
    database_user: str = Field(default="taskflow", description="PostgreSQL user")
    database_password: str = Field(
        default="taskflow", description="PostgreSQL password"
    )
    database_name: str = Field(
        default="taskflow", description="PostgreSQL database name"
    )
    database_pool_size: int = Field(default=20, description="Connection pool size")
    database_max_overflow: int = Field(
        default=10, description="Max overflow connections"
    )
    database_auto_create_schema: bool = Field(
        default=True, description="Create missing tables on startup"
    )

    # Redis configuration
    redis_host: str = Field(default="localhost", description="Redis host")
    redis_port: int = Field(default=6379, description="Redis port")
    redis_db: int = Field(default=0, description="Redis database number")
    redis_password: Optional[str] = Field(default=None, description="Redis password")
    redis_max_connections: int = Field(default=50, description="Redis max connections")

    # Caching configuration
    cache_enabled: bool = Field(default=True, description="Enable response caching")
    cache_ttl_seconds: int = Field(default=300, description="Cache TTL in seconds")

    # Rate limiting configuration (fixed window per client address)
    rate_limit_enabled: bool = Field(default=True, description="Enable rate limiting")
    rate_limit_window_seconds: int = Field(
        default=900, description="Rate limit window in seconds"
    )
    rate_limit_global_requests: int = Field(
        default=100, description="Max requests per window across all routes"
    )
    rate_limit_auth_requests: int = Field(
        default=10, description="Max login and register attempts per window"
    )
    rate_limit_api_requests: int = Field(
        default=50, description="Max task, sharing and attachment requests per window"
    )

    # JWT configuration
    jwt_access_secret: str = Field(..., description="Access token signing secret")
    jwt_refresh_secret: str = Field(..., description="Refresh token signing secret")
    jwt_algorithm: str = Field(default="HS256", description="JWT signing algorithm")
    jwt_access_expires_in: str = Field(
        default="15m", description="Access token lifetime, e.g. 15m"
    )
    jwt_refresh_expires_in: str = Field(
        default="7d", description="Refresh token lifetime, e.g. 7d"
    )

    # Password hashing
    bcrypt_rounds: int = Field(default=10, description="bcrypt work factor")

    # File uploads
    upload_dir: str = Field(default="uploads", description="Attachment directory")
    upload_max_file_size: int = Field(
        default=5 * 1024 * 1024, description="Max attachment size in bytes"
    )
    upload_allowed_mime_types: List[str] = Field(
        default=[
            "image/jpeg",
            "image/png",
            "image/gif",
            "image/webp",
            "application/pdf",
            "text/plain",
            "application/msword",
            "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        ],
        description="Accepted attachment MIME types",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is acceptable."""
        valid_levels = ["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v_upper

    @field_validator("jwt_access_secret", "jwt_refresh_secret")
    @classmethod
    def validate_secret(cls, v: str) -> str:
        """Reject blank signing secrets."""
        if not v or not v.strip():
            raise ValueError("JWT secrets must be non-empty")
        return v

    @field_validator("jwt_access_expires_in", "jwt_refresh_expires_in")
    @classmethod
    def validate_duration(cls, v: str) -> str:
        """Validate lifetimes use the <integer><s|m|h|d> format."""
        if not DURATION_PATTERN.match(v):
            raise ValueError(
                f"Invalid duration '{v}'. Expected <integer><unit> with unit in s, m, h, d"
            )
        return v

    @field_validator(
        "rate_limit_window_seconds",
        "rate_limit_global_requests",
        "rate_limit_auth_requests",
        "rate_limit_api_requests",
    )
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Rate limit windows and quotas must be positive."""
        if v < 1:
            raise ValueError("Rate limit settings must be positive integers")
        return v

    @field_validator("bcrypt_rounds")
    @classmethod
    def validate_bcrypt_rounds(cls, v: int) -> int:
        """Validate bcrypt cost factor is in a usable range."""
        if not 4 <= v <= 16:
            raise ValueError("bcrypt_rounds must be between 4 and 16")
        return v

    @property
    def database_url(self) -> str:
        """Construct async PostgreSQL database URL."""
        return (
            f"postgresql+asyncpg://{self.database_user}:{self.database_password}"
            f"@{self.database_host}:{self.database_port}/{self.database_name}"
        )

    @property
    def redis_url(self) -> str:
        """Construct Redis URL."""
        if self.redis_password:
            return f"redis://:{self.redis_password}@{self.redis_host}:{self.redis_port}/{self.redis_db}"
        return f"redis://{self.redis_host}:{self.redis_port}/{self.redis_db}"


# Global settings instance
settings = ApplicationSettings()
