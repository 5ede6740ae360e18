"""Engine thresholds passed explicitly to each service."""
from dataclasses import dataclass
from datetime import timedelta
from typing import Mapping


@dataclass(frozen=True)
class EngineConfig:
    grace_period: timedelta = timedelta(minutes=15)
    late_threshold: timedelta = timedelta(minutes=10)
    face_match_threshold: float = 0.6
    geofence_radius_meters: float = 100.0
    verifier_timeout_seconds: float = 5.0
    verifier_max_workers: int = 16
    verifier_queue_timeout_seconds: float = 5.0
    aggregate_ttl_seconds: int = 3600
    qr_default_ttl_seconds: int = 300
    qr_min_ttl_seconds: int = 60
    qr_max_ttl_seconds: int = 3600

    @classmethod
    def from_mapping(cls, config: Mapping) -> 'EngineConfig':
        """Build from a Flask ``app.config``; missing keys keep defaults."""
        defaults = cls()
        return cls(
            grace_period=timedelta(minutes=config.get(
                'CHECKIN_GRACE_MINUTES', defaults.grace_period.total_seconds() / 60)),
            late_threshold=timedelta(minutes=config.get(
                'LATE_THRESHOLD_MINUTES', defaults.late_threshold.total_seconds() / 60)),
            face_match_threshold=float(config.get('FACE_MATCH_THRESHOLD', defaults.face_match_threshold)),
            geofence_radius_meters=float(config.get('GEOFENCE_RADIUS_METERS', defaults.geofence_radius_meters)),
            verifier_timeout_seconds=float(config.get('VERIFIER_TIMEOUT_SECONDS', defaults.verifier_timeout_seconds)),
            verifier_max_workers=int(config.get('VERIFIER_MAX_WORKERS', defaults.verifier_max_workers)),
            verifier_queue_timeout_seconds=float(config.get(
                'VERIFIER_QUEUE_TIMEOUT_SECONDS', defaults.verifier_queue_timeout_seconds)),
            aggregate_ttl_seconds=int(config.get('AGGREGATE_TTL_SECONDS', defaults.aggregate_ttl_seconds)),
            qr_default_ttl_seconds=int(config.get('QR_DEFAULT_TTL_SECONDS', defaults.qr_default_ttl_seconds)),
            qr_min_ttl_seconds=int(config.get('QR_MIN_TTL_SECONDS', defaults.qr_min_ttl_seconds)),
            qr_max_ttl_seconds=int(config.get('QR_MAX_TTL_SECONDS', defaults.qr_max_ttl_seconds)),
        )
