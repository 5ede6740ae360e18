"""Per-session, per-day attendance aggregates kept in the ephemeral store."""
import json
import logging
from dataclasses import asdict, dataclass
from datetime import date
from typing import Any, Dict, Optional

from attendance_engine.services.attendance_store import AttendanceStore
from attendance_engine.services.engine_config import EngineConfig
from attendance_engine.services.ephemeral_store import EphemeralStore
from attendance_engine.utils.errors import SessionInactive

logger = logging.getLogger(__name__)


@dataclass
class SessionAggregate:
    session_id: int
    day: str
    enrolled: int
    present: int
    rate: float
    updated_at: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class SessionAggregateCache:
    """Read optimization only; AttendanceRecords stay the source of truth."""

    KEY_PREFIX = 'session_stats'

    def __init__(self, store: AttendanceStore, cache: EphemeralStore, config: EngineConfig, clock):
        self.store = store
        self.cache = cache
        self.config = config
        self.clock = clock

    @classmethod
    def cache_key(cls, session_id: int, day: date) -> str:
        return f'{cls.KEY_PREFIX}:{session_id}:{day.isoformat()}'

    def recompute(self, session_id: int, day: date) -> SessionAggregate:
        """Live recount for (session, day), written back with a TTL."""
        session = self.store.find_session(session_id)
        if session is None:
            raise SessionInactive()

        enrolled = self.store.count_enrollment(session)
        present = self.store.count_attendance(session_id, day)
        rate = present / enrolled if enrolled else 0.0

        aggregate = SessionAggregate(
            session_id=session_id,
            day=day.isoformat(),
            enrolled=enrolled,
            present=present,
            rate=round(rate, 4),
            updated_at=self.clock.now().isoformat()
        )
        self.cache.set_with_ttl(
            self.cache_key(session_id, day),
            json.dumps(aggregate.to_dict()),
            self.config.aggregate_ttl_seconds
        )
        return aggregate

    def invalidate(self, session_id: int, day: date) -> None:
        """Drop the cached entry so the next read recounts.

        Check-ins call this after each commit; only reads write recounts.
        """
        self.cache.delete(self.cache_key(session_id, day))

    def get(self, session_id: int, day: Optional[date] = None) -> SessionAggregate:
        """Cached aggregate, falling back to a live recount on a miss."""
        day = day or self.clock.now().date()
        cached = self.cache.get(self.cache_key(session_id, day))
        if cached is not None:
            try:
                return SessionAggregate(**json.loads(cached))
            except (TypeError, ValueError):
                logger.warning('Discarding malformed aggregate for session %s on %s', session_id, day)
        return self.recompute(session_id, day)
