"""Class session model."""
from datetime import datetime, timedelta
from typing import Tuple

from attendance_engine import db
from attendance_engine.models.base import BaseModel


class ClassSession(BaseModel):
    """A scheduled occurrence of a course. Read-only to the engine."""

    __tablename__ = 'class_sessions'

    title = db.Column(db.String(255), nullable=False)
    course_id = db.Column(db.Integer, db.ForeignKey('courses.id'), nullable=False)
    owner_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    location_id = db.Column(db.Integer, db.ForeignKey('locations.id'), nullable=False)
    start_time = db.Column(db.DateTime, nullable=False)
    end_time = db.Column(db.DateTime, nullable=False)
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    # Relationships
    attendance_records = db.relationship('AttendanceRecord', backref='session', lazy='dynamic')

    def check_in_window(self, grace: timedelta) -> Tuple[datetime, datetime]:
        """Inclusive (opens, closes) bounds for check-in."""
        return self.start_time, self.end_time + grace

    def __repr__(self):
        return f'<ClassSession {self.title}>'
