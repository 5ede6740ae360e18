"""User model for caller identity and authorization."""
from enum import Enum

from attendance_engine import db
from attendance_engine.models.base import BaseModel


class UserRole(Enum):
    """User roles enumeration."""
    PARTICIPANT = 'participant'
    OWNER = 'owner'
    ADMIN = 'admin'


class User(BaseModel):
    """Any authenticated caller: participant, session owner or admin."""

    __tablename__ = 'users'

    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    role = db.Column(db.Enum(UserRole), nullable=False, default=UserRole.PARTICIPANT)
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    # Relationships
    enrollments = db.relationship('Enrollment', backref='participant', lazy='dynamic')
    attendance_records = db.relationship('AttendanceRecord', backref='participant', lazy='dynamic')

    def is_admin(self) -> bool:
        """Check if user is an administrator."""
        return self.role == UserRole.ADMIN

    def can_manage_session(self, session) -> bool:
        """Owners manage their own sessions; admins manage every session."""
        if self.is_admin():
            return True
        return self.role == UserRole.OWNER and session.owner_id == self.id

    def __repr__(self) -> str:
        return f'<User {self.email}>'
