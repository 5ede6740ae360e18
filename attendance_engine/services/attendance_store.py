"""Durable store used by the engine (SQLAlchemy)."""
import logging
from datetime import date
from typing import Iterable, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from attendance_engine import db
from attendance_engine.models import (
    AttendanceRecord, AttendanceStatus, BiometricProfile, ClassSession,
    Enrollment, ProfileStatus, QRCodeLog
)
from attendance_engine.utils.errors import DuplicateCheckIn

logger = logging.getLogger(__name__)

COUNTED_STATUSES = (AttendanceStatus.PRESENT, AttendanceStatus.LATE)


class AttendanceStore:
    """Relational collaborator of the engine.

    ``insert_attendance_if_absent`` is atomic: the unique constraint on
    (participant, session, day) decides between concurrent inserts, and the
    loser gets ``DuplicateCheckIn``. ``find_attendance`` is only a fast
    pre-check and may race.
    """

    def find_session(self, session_id: int) -> Optional[ClassSession]:
        return db.session.get(ClassSession, session_id)

    def find_active_session(self, session_id: int) -> Optional[ClassSession]:
        return ClassSession.query.filter_by(id=session_id, is_active=True).first()

    def find_enrollment(self, participant_id: int, session: ClassSession) -> Optional[Enrollment]:
        return Enrollment.query.filter_by(
            participant_id=participant_id,
            course_id=session.course_id
        ).first()

    def find_approved_profile(self, participant_id: int) -> Optional[BiometricProfile]:
        return BiometricProfile.query.filter_by(
            participant_id=participant_id,
            status=ProfileStatus.APPROVED
        ).first()

    def find_attendance(self, participant_id: int, session_id: int, day: date) -> Optional[AttendanceRecord]:
        return AttendanceRecord.query.filter_by(
            participant_id=participant_id,
            session_id=session_id,
            attendance_date=day
        ).first()

    def insert_attendance_if_absent(self, record: AttendanceRecord) -> AttendanceRecord:
        """Commit ``record`` or raise ``DuplicateCheckIn``. All-or-nothing."""
        try:
            db.session.add(record)
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            logger.info(
                'Duplicate check-in rejected by store: participant=%s session=%s day=%s',
                record.participant_id, record.session_id, record.attendance_date
            )
            raise DuplicateCheckIn()
        except SQLAlchemyError:
            db.session.rollback()
            raise
        return record

    def count_attendance(self, session_id: int, day: date,
                         statuses: Iterable[AttendanceStatus] = COUNTED_STATUSES) -> int:
        return AttendanceRecord.query.filter(
            AttendanceRecord.session_id == session_id,
            AttendanceRecord.attendance_date == day,
            AttendanceRecord.status.in_(list(statuses))
        ).count()

    def count_enrollment(self, session: ClassSession) -> int:
        return Enrollment.query.filter_by(course_id=session.course_id).count()

    def log_qr_issued(self, log: QRCodeLog) -> QRCodeLog:
        try:
            db.session.add(log)
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            raise
        return log

    def mark_qr_redeemed(self, token: str, participant_id: int, when) -> None:
        """Best-effort audit update; validity never depends on it."""
        try:
            QRCodeLog.query.filter_by(token=token).update(
                {'redeemed_by': participant_id, 'redeemed_at': when},
                synchronize_session=False
            )
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            logger.exception('Failed to mark QR token as redeemed in audit log')
