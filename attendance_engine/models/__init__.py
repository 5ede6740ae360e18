"""Models package with all models."""
from .base import BaseModel
from .user import User, UserRole
from .course import Course
from .location import Location
from .session import ClassSession
from .enrollment import Enrollment
from .biometric_profile import BiometricProfile, ProfileStatus
from .attendance import AttendanceRecord, AttendanceStatus, CheckInMethod
from .qr_code_log import QRCodeLog

__all__ = [
    'BaseModel', 'User', 'UserRole',
    'Course', 'Location', 'ClassSession', 'Enrollment',
    'BiometricProfile', 'ProfileStatus',
    'AttendanceRecord', 'AttendanceStatus', 'CheckInMethod',
    'QRCodeLog'
]
