"""Course model: the recurring class a session belongs to."""
from attendance_engine import db
from attendance_engine.models.base import BaseModel


class Course(BaseModel):
    """A recurring class or event series. Enrollment is held per course."""

    __tablename__ = 'courses'

    code = db.Column(db.String(32), unique=True, nullable=False)
    name = db.Column(db.String(255), nullable=False)
    owner_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)

    # Relationships
    sessions = db.relationship('ClassSession', backref='course', lazy='dynamic')
    enrollments = db.relationship('Enrollment', backref='course', lazy='dynamic')

    def __repr__(self):
        return f'<Course {self.code}>'
