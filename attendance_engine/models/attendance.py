"""Attendance model with verification details."""
from datetime import datetime
from enum import Enum
from typing import Iterable

from attendance_engine import db
from attendance_engine.models.base import BaseModel


class AttendanceStatus(Enum):
    """Computed attendance status."""
    PRESENT = 'PRESENT'
    LATE = 'LATE'


class CheckInMethod(Enum):
    """Verification channels a check-in can request."""
    FACE = 'FACE'
    WIFI = 'WIFI'
    QR = 'QR'

    @classmethod
    def encode(cls, methods: Iterable['CheckInMethod']) -> str:
        """Canonical column value, e.g. ``FACE+WIFI``."""
        order = list(cls)
        return '+'.join(m.value for m in sorted(set(methods), key=order.index))

    @classmethod
    def decode(cls, value: str) -> frozenset:
        return frozenset(cls(part) for part in value.split('+'))


class AttendanceRecord(BaseModel):
    """Durable fact of a check-in.

    The unique constraint on (participant, session, day) is what actually
    prevents duplicate attendance; application-level checks only fail fast.
    """

    __tablename__ = 'attendance_records'
    __table_args__ = (
        db.UniqueConstraint(
            'participant_id', 'session_id', 'attendance_date',
            name='uq_attendance_participant_session_day'
        ),
    )

    participant_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    session_id = db.Column(db.Integer, db.ForeignKey('class_sessions.id'), nullable=False, index=True)
    attendance_date = db.Column(db.Date, nullable=False)
    check_in_time = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    status = db.Column(db.Enum(AttendanceStatus), nullable=False)

    # Verification details
    method = db.Column(db.String(32), nullable=False)  # FACE, WIFI, QR or FACE+WIFI
    confidence = db.Column(db.Float, nullable=True)
    verification_data = db.Column(db.JSON, nullable=True)
    qr_token = db.Column(db.String(64), nullable=True)

    @property
    def methods(self) -> frozenset:
        return CheckInMethod.decode(self.method)

    def __repr__(self):
        return f'<AttendanceRecord {self.participant_id}-{self.session_id}-{self.attendance_date}>'
