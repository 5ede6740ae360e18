"""Development configuration."""
import os

from .base import BaseConfig


class DevelopmentConfig(BaseConfig):
    """Development configuration class."""

    DEBUG = True
    TESTING = False

    SQLALCHEMY_DATABASE_URI = os.getenv('DEV_DATABASE_URL') or \
        'sqlite:///attendance_engine_dev.db'
    SQLALCHEMY_ECHO = True
    SQLALCHEMY_ENGINE_OPTIONS = {
        'connect_args': {'timeout': 5},
    }

    # Redis is optional in dev
    REDIS_URL = os.getenv('REDIS_URL') or None
    ALLOW_IN_MEMORY_STORE = True

    # Relaxed limits for local work
    RATELIMIT_DEFAULT = "1000 per day, 200 per hour"

    LOG_LEVEL = 'DEBUG'
