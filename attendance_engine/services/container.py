"""Wiring of engine services onto the Flask application."""
from dataclasses import dataclass
from datetime import datetime

from flask import Flask, current_app

from attendance_engine.services.aggregate_service import SessionAggregateCache
from attendance_engine.services.attendance_store import AttendanceStore
from attendance_engine.services.checkin_service import CheckInOrchestrator
from attendance_engine.services.engine_config import EngineConfig
from attendance_engine.services.ephemeral_store import EphemeralStore, create_ephemeral_store
from attendance_engine.services.face_verifier import DescriptorFaceVerifier, FaceVerifier
from attendance_engine.services.geofence_verifier import GeofenceVerifier, HaversineGeofenceVerifier
from attendance_engine.services.qr_service import QRSessionManager
from attendance_engine.services.verdict import VerifierRunner

EXTENSION_KEY = 'attendance_engine'


class SystemClock:
    """Wall clock in naive UTC, matching stored timestamps."""

    def now(self) -> datetime:
        return datetime.utcnow()


@dataclass
class Engine:
    config: EngineConfig
    clock: object
    cache: EphemeralStore
    store: AttendanceStore
    aggregates: SessionAggregateCache
    checkin: CheckInOrchestrator
    qr: QRSessionManager


def build_engine(app: Flask, clock=None, cache: EphemeralStore = None,
                 face_verifier: FaceVerifier = None,
                 geofence_verifier: GeofenceVerifier = None) -> Engine:
    """Create the engine for ``app`` and register it as an extension."""
    config = EngineConfig.from_mapping(app.config)
    clock = clock or SystemClock()
    cache = cache or create_ephemeral_store(app)
    store = AttendanceStore()

    aggregates = SessionAggregateCache(store, cache, config, clock)
    checkin = CheckInOrchestrator(
        store=store,
        face_verifier=face_verifier or DescriptorFaceVerifier(),
        geofence_verifier=geofence_verifier or HaversineGeofenceVerifier(config.geofence_radius_meters),
        runner=VerifierRunner(
            config.verifier_timeout_seconds,
            max_workers=config.verifier_max_workers,
            queue_timeout_seconds=config.verifier_queue_timeout_seconds
        ),
        aggregates=aggregates,
        config=config,
        clock=clock
    )
    qr = QRSessionManager(store, cache, checkin, config, clock)

    engine = Engine(
        config=config,
        clock=clock,
        cache=cache,
        store=store,
        aggregates=aggregates,
        checkin=checkin,
        qr=qr
    )
    app.extensions[EXTENSION_KEY] = engine
    return engine


def get_engine() -> Engine:
    """Engine bound to the current application."""
    return current_app.extensions[EXTENSION_KEY]
