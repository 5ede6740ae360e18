"""Biometric profile model."""
from enum import Enum

from attendance_engine import db
from attendance_engine.models.base import BaseModel


class ProfileStatus(Enum):
    """Review state of an enrolled face profile."""
    PENDING = 'PENDING'
    APPROVED = 'APPROVED'
    REJECTED = 'REJECTED'


class BiometricProfile(BaseModel):
    """Enrolled face descriptors for one participant."""

    __tablename__ = 'biometric_profiles'

    participant_id = db.Column(db.Integer, db.ForeignKey('users.id'), unique=True, nullable=False)
    descriptors = db.Column(db.JSON, nullable=False, default=list)  # list of numeric vectors
    status = db.Column(db.Enum(ProfileStatus), nullable=False, default=ProfileStatus.PENDING)
    quality_score = db.Column(db.Float, nullable=True)

    def to_dict(self, exclude: list = None):
        # Descriptors never leave the server
        return super().to_dict(exclude=(exclude or []) + ['descriptors'])

    def __repr__(self):
        return f'<BiometricProfile {self.participant_id} {self.status.value}>'
