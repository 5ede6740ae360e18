"""Testing configuration."""
from datetime import timedelta

from .base import BaseConfig


class TestingConfig(BaseConfig):
    """Testing configuration class."""

    DEBUG = False
    TESTING = True
    SECRET_KEY = 'test-secret-key'

    # Database (in-memory SQLite for testing)
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    SQLALCHEMY_ECHO = False

    # In-process ephemeral store
    REDIS_URL = None
    ALLOW_IN_MEMORY_STORE = True

    # JWT Configuration
    JWT_SECRET_KEY = 'test-jwt-secret-with-enough-bytes-for-hs256'
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(minutes=5)

    # Rate Limiting (disabled for testing)
    RATELIMIT_ENABLED = False
    RATELIMIT_STORAGE_URI = 'memory://'

    # Keep adapter timeouts short so timeout tests stay fast
    VERIFIER_TIMEOUT_SECONDS = 0.5

    # Logging
    LOG_LEVEL = 'WARNING'
