"""Base configuration shared by every environment."""
import os
from datetime import timedelta


class BaseConfig:
    """Settings common to all environments."""

    SECRET_KEY = os.getenv('SECRET_KEY') or 'dev-secret-key-change-in-production'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = False

    # JWT Configuration
    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY') or 'jwt-secret-key-change-in-production'
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=2)
    JWT_ALGORITHM = 'HS256'

    # CORS
    CORS_ORIGINS = ["http://localhost:*", "http://127.0.0.1:*"]

    # Ephemeral store (QR tokens, aggregates). None means in-process store.
    REDIS_URL = os.getenv('REDIS_URL')
    REDIS_SOCKET_TIMEOUT = 2.0
    # Only single-process environments may fall back to the in-process store
    ALLOW_IN_MEMORY_STORE = False

    # Rate Limiting
    RATELIMIT_STORAGE_URI = os.getenv('REDIS_URL') or 'memory://'
    RATELIMIT_DEFAULT = "200 per day, 50 per hour"

    # Check-in rules
    CHECKIN_GRACE_MINUTES = 15
    LATE_THRESHOLD_MINUTES = 10

    # Verification
    FACE_MATCH_THRESHOLD = 0.6
    GEOFENCE_RADIUS_METERS = 100
    VERIFIER_TIMEOUT_SECONDS = 5.0
    VERIFIER_MAX_WORKERS = 16
    VERIFIER_QUEUE_TIMEOUT_SECONDS = 5.0

    # QR sessions
    QR_DEFAULT_TTL_SECONDS = 300
    QR_MIN_TTL_SECONDS = 60
    QR_MAX_TTL_SECONDS = 3600

    # Session aggregates
    AGGREGATE_TTL_SECONDS = 3600

    # Logging
    LOG_LEVEL = 'INFO'
    LOG_FILE = 'logs/app.log'
