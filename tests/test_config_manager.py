"""
Configuration Manager Tests
---------------------------
Validation of ApplicationSettings loaded from the environment.
"""

import pytest
from pydantic import ValidationError

from taskflow.core.config_manager import ApplicationSettings


class TestApplicationSettings:
    def test_defaults(self):
        config = ApplicationSettings()

        assert config.jwt_algorithm == "HS256"
        assert config.jwt_access_expires_in == "15m"
        assert config.jwt_refresh_expires_in == "7d"
        assert config.cache_ttl_seconds == 300
        assert config.upload_max_file_size == 5 * 1024 * 1024
        assert "application/pdf" in config.upload_allowed_mime_types
        assert config.rate_limit_enabled is True
        assert config.rate_limit_window_seconds == 900
        assert config.rate_limit_global_requests == 100
        assert config.rate_limit_auth_requests == 10
        assert config.rate_limit_api_requests == 50
        assert config.log_json is False

    def test_secrets_loaded_from_environment(self):
        config = ApplicationSettings()
        assert config.jwt_access_secret == "test-access-secret"
        assert config.jwt_refresh_secret == "test-refresh-secret"

    def test_missing_secret_raises(self, monkeypatch):
        monkeypatch.delenv("JWT_ACCESS_SECRET", raising=False)
        with pytest.raises(ValidationError):
            ApplicationSettings()

    def test_blank_secret_raises(self):
        with pytest.raises(ValidationError, match="non-empty"):
            ApplicationSettings(jwt_refresh_secret="   ")

    @pytest.mark.parametrize("duration", ["15", "m15", "1w", "1.5h", ""])
    def test_invalid_duration_rejected(self, duration):
        with pytest.raises(ValidationError):
            ApplicationSettings(jwt_access_expires_in=duration)

    def test_log_level_normalized(self):
        assert ApplicationSettings(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level_rejected(self):
        with pytest.raises(ValidationError):
            ApplicationSettings(log_level="VERBOSE")

    def test_bcrypt_rounds_range(self):
        with pytest.raises(ValidationError):
            ApplicationSettings(bcrypt_rounds=3)
        with pytest.raises(ValidationError):
            ApplicationSettings(bcrypt_rounds=17)

    @pytest.mark.parametrize(
        "field_name", ["rate_limit_window_seconds", "rate_limit_auth_requests"]
    )
    def test_rate_limits_must_be_positive(self, field_name):
        with pytest.raises(ValidationError, match="positive"):
            ApplicationSettings(**{field_name: 0})

    def test_connection_urls(self):
        config = ApplicationSettings(
            database_user="u",
            database_password="p",
            database_host="db",
            database_port=5433,
            database_name="tasks",
            redis_host="cache",
            redis_port=6380,
            redis_db=2,
            redis_password=None,
        )
        assert config.database_url == "postgresql+asyncpg://u:p@db:5433/tasks"
        assert config.redis_url == "redis://cache:6380/2"
