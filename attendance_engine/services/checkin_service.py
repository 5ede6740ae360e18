"""Check-in orchestration: admission, verification, status and persistence."""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, Optional, Sequence, Tuple

from attendance_engine.models import (
    AttendanceRecord, AttendanceStatus, CheckInMethod, ClassSession
)
from attendance_engine.services.aggregate_service import SessionAggregateCache
from attendance_engine.services.attendance_store import AttendanceStore
from attendance_engine.services.engine_config import EngineConfig
from attendance_engine.services.face_verifier import FaceVerifier
from attendance_engine.services.geofence_verifier import GeofenceVerifier
from attendance_engine.services.verdict import Verdict, VerifierRunner
from attendance_engine.utils.errors import (
    DuplicateCheckIn, FaceMismatch, LocationMismatch, NotEnrolled, OutOfWindow,
    ProfileNotFound, SessionInactive, ValidationError
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CheckInPayload:
    """Evidence submitted with a check-in."""
    face_sample: Optional[Sequence[float]] = None
    observed_ssid: Optional[str] = None
    coordinates: Optional[Tuple[float, float]] = None


class CheckInOrchestrator:
    """
    Entry point for FACE/WIFI check-ins.

    Preconditions run in a fixed order, each failing with its own error:
    session active, enrolled, inside the window, not already checked in.
    Verifiers run next, without holding any lock; every requested channel
    must pass. The insert is the single commit point.
    """

    VERIFIED_METHODS = frozenset({CheckInMethod.FACE, CheckInMethod.WIFI})

    def __init__(self, store: AttendanceStore, face_verifier: FaceVerifier,
                 geofence_verifier: GeofenceVerifier, runner: VerifierRunner,
                 aggregates: SessionAggregateCache, config: EngineConfig, clock):
        self.store = store
        self.face_verifier = face_verifier
        self.geofence_verifier = geofence_verifier
        self.runner = runner
        self.aggregates = aggregates
        self.config = config
        self.clock = clock

    # =================== PUBLIC API ===================

    def check_in(self, participant_id: int, session_id: int,
                 methods: Iterable[CheckInMethod], payload: CheckInPayload = None) -> AttendanceRecord:
        methods = frozenset(methods)
        payload = payload or CheckInPayload()

        if not methods:
            raise ValidationError('At least one check-in method is required')
        if CheckInMethod.QR in methods:
            raise ValidationError('QR check-ins must be redeemed with a QR token')

        now = self.clock.now()
        session = self.admit(participant_id, session_id, now)

        verification: Dict[str, Any] = {}
        verdicts = []
        if CheckInMethod.FACE in methods:
            verdict = self._verify_face(participant_id, payload)
            verification['face'] = verdict.to_dict()
            verdicts.append(verdict)
        if CheckInMethod.WIFI in methods:
            verdict = self._verify_location(session, payload)
            verification['wifi'] = verdict.to_dict()
            verdicts.append(verdict)

        return self.record_attendance(
            participant_id=participant_id,
            session=session,
            methods=methods,
            now=now,
            verification=verification,
            confidence=min(v.confidence for v in verdicts)
        )

    def admit(self, participant_id: int, session_id: int, now: datetime) -> ClassSession:
        """Run the admission preconditions and return the session."""
        session = self.store.find_active_session(session_id)
        if session is None:
            logger.info('Check-in rejected: session %s inactive or missing', session_id)
            raise SessionInactive()

        if self.store.find_enrollment(participant_id, session) is None:
            logger.info('Check-in rejected: participant %s not enrolled in session %s',
                        participant_id, session_id)
            raise NotEnrolled()

        opens, closes = session.check_in_window(self.config.grace_period)
        if not opens <= now <= closes:
            logger.info('Check-in rejected: session %s closed at %s', session_id, now.isoformat())
            raise OutOfWindow(details={
                'opens_at': opens.isoformat(),
                'closes_at': closes.isoformat()
            })

        # Fast path only; the unique constraint is authoritative
        if self.store.find_attendance(participant_id, session_id, now.date()) is not None:
            logger.info('Check-in rejected: participant %s already recorded for session %s',
                        participant_id, session_id)
            raise DuplicateCheckIn()

        return session

    def decide_status(self, session: ClassSession, when: datetime) -> AttendanceStatus:
        """LATE once the late threshold has fully elapsed since the start."""
        if when - session.start_time >= self.config.late_threshold:
            return AttendanceStatus.LATE
        return AttendanceStatus.PRESENT

    def record_attendance(self, participant_id: int, session: ClassSession,
                          methods: Iterable[CheckInMethod], now: datetime,
                          verification: Dict[str, Any], confidence: Optional[float] = None,
                          qr_token: Optional[str] = None) -> AttendanceRecord:
        """Persist the record, then invalidate the session aggregate."""
        record = AttendanceRecord(
            participant_id=participant_id,
            session_id=session.id,
            attendance_date=now.date(),
            check_in_time=now,
            status=self.decide_status(session, now),
            method=CheckInMethod.encode(methods),
            confidence=confidence,
            verification_data=verification,
            qr_token=qr_token
        )
        self.store.insert_attendance_if_absent(record)

        logger.info(
            'Check-in recorded: participant=%s session=%s method=%s status=%s',
            participant_id, session.id, record.method, record.status.value
        )
        self._invalidate_aggregate(session.id, now)
        return record

    # =================== VERIFICATION ===================

    def _verify_face(self, participant_id: int, payload: CheckInPayload) -> Verdict:
        if payload.face_sample is None:
            raise ValidationError('faceSample is required for FACE check-in')

        profile = self.store.find_approved_profile(participant_id)
        if profile is None:
            raise ProfileNotFound()

        verdict = self.runner.run(
            'face',
            self.face_verifier.verify,
            payload.face_sample,
            list(profile.descriptors),
            self.config.face_match_threshold
        )
        if not verdict.matched:
            logger.info('Face mismatch: participant=%s confidence=%.3f', participant_id, verdict.confidence)
            raise FaceMismatch(confidence=verdict.confidence)
        return verdict

    def _verify_location(self, session: ClassSession, payload: CheckInPayload) -> Verdict:
        if not payload.observed_ssid:
            raise ValidationError('observedSSID is required for WIFI check-in')

        location = session.location
        verdict = self.runner.run(
            'wifi',
            self.geofence_verifier.verify,
            payload.observed_ssid,
            location.wifi_ssid,
            payload.coordinates,
            location.coordinates,
            location.radius_meters or self.config.geofence_radius_meters
        )
        if not verdict.matched:
            logger.info('Location mismatch: session=%s reason=%s', session.id, verdict.message)
            details = {'distance': verdict.distance} if verdict.distance is not None else None
            raise LocationMismatch(verdict.message or None, confidence=verdict.confidence, details=details)
        return verdict

    def _invalidate_aggregate(self, session_id: int, now: datetime) -> None:
        # The record is already committed; a cache failure must not undo it
        try:
            self.aggregates.invalidate(session_id, now.date())
        except Exception:
            logger.exception('Failed to invalidate aggregate for session %s', session_id)
