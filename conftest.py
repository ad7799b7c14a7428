"""
Pytest configuration for TaskFlow tests.
Sets the environment the settings module needs before anything imports it.
"""

import os

# Set up test environment variables
os.environ.setdefault("JWT_ACCESS_SECRET", "test-access-secret")
os.environ.setdefault("JWT_REFRESH_SECRET", "test-refresh-secret")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("DATABASE_HOST", "localhost")
os.environ.setdefault("DATABASE_PORT", "5432")
os.environ.setdefault("DATABASE_NAME", "taskflow_test")
os.environ.setdefault("DATABASE_USER", "taskflow")
os.environ.setdefault("DATABASE_PASSWORD", "taskflow")
os.environ.setdefault("REDIS_HOST", "localhost")
os.environ.setdefault("REDIS_PORT", "6379")
os.environ.setdefault("DATABASE_AUTO_CREATE_SCHEMA", "false")
