"""Ephemeral key-value store for QR tokens and session aggregates."""
import logging
import threading
import time
from typing import Callable, Dict, Optional, Tuple

import redis

logger = logging.getLogger(__name__)


class EphemeralStore:
    """Interface of the shared cache.

    ``get_and_delete_if_present`` must be atomic across every process that
    shares the store: of several concurrent callers for one key, exactly one
    receives the value.
    """

    def set_with_ttl(self, key: str, value: str, ttl_seconds: int) -> None:
        raise NotImplementedError

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def get_and_delete_if_present(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError


class RedisStore(EphemeralStore):
    """Redis-backed store. Requires Redis 6.2+ for GETDEL."""

    def __init__(self, client: redis.Redis):
        self._client = client

    @classmethod
    def from_url(cls, url: str, socket_timeout: float = 2.0) -> 'RedisStore':
        client = redis.Redis.from_url(
            url,
            decode_responses=True,
            socket_timeout=socket_timeout,
            socket_connect_timeout=socket_timeout
        )
        return cls(client)

    def set_with_ttl(self, key: str, value: str, ttl_seconds: int) -> None:
        self._client.setex(key, ttl_seconds, value)

    def get(self, key: str) -> Optional[str]:
        return self._client.get(key)

    def get_and_delete_if_present(self, key: str) -> Optional[str]:
        return self._client.getdel(key)

    def delete(self, key: str) -> None:
        self._client.delete(key)


class InMemoryStore(EphemeralStore):
    """Process-local store with TTL support.

    Only correct for a single process; used in development and tests when
    no REDIS_URL is configured.
    """

    def __init__(self, timer: Callable[[], float] = time.monotonic):
        self._timer = timer
        self._data: Dict[str, Tuple[str, float]] = {}
        self._lock = threading.Lock()

    def _live(self, key: str) -> Optional[str]:
        entry = self._data.get(key)
        if entry is None:
            return None
        value, expires = entry
        if self._timer() >= expires:
            del self._data[key]
            return None
        return value

    def set_with_ttl(self, key: str, value: str, ttl_seconds: int) -> None:
        with self._lock:
            self._data[key] = (value, self._timer() + ttl_seconds)

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._live(key)

    def get_and_delete_if_present(self, key: str) -> Optional[str]:
        with self._lock:
            value = self._live(key)
            if value is not None:
                del self._data[key]
            return value

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def ttl(self, key: str) -> Optional[float]:
        """Seconds left before ``key`` lapses, or None if absent."""
        with self._lock:
            if self._live(key) is None:
                return None
            return self._data[key][1] - self._timer()


def create_ephemeral_store(app) -> EphemeralStore:
    """Build the store selected by the app configuration."""
    url = app.config.get('REDIS_URL')
    if url:
        return RedisStore.from_url(url, socket_timeout=app.config.get('REDIS_SOCKET_TIMEOUT', 2.0))

    if not app.config.get('ALLOW_IN_MEMORY_STORE', False):
        raise RuntimeError(
            'REDIS_URL is required: the in-process store cannot keep QR tokens single-use '
            'across worker processes. Set ALLOW_IN_MEMORY_STORE only for single-process runs.'
        )

    if not app.testing:
        logger.warning('REDIS_URL not set; using in-process ephemeral store (single instance only)')
    return InMemoryStore()
