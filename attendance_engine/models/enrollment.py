"""Enrollment model."""
from attendance_engine import db
from attendance_engine.models.base import BaseModel


class Enrollment(BaseModel):
    """Participant membership in a course."""

    __tablename__ = 'enrollments'
    __table_args__ = (
        db.UniqueConstraint('participant_id', 'course_id', name='uq_enrollment_participant_course'),
    )

    participant_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    course_id = db.Column(db.Integer, db.ForeignKey('courses.id'), nullable=False, index=True)

    def __repr__(self):
        return f'<Enrollment {self.participant_id}-{self.course_id}>'
