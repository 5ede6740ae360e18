"""Engine error taxonomy.

Every rejection the engine produces is an ``EngineError`` subclass carrying a
stable ``kind`` string and the HTTP status the API layer answers with.
Anything that is not an ``EngineError`` is an internal failure.
"""
from typing import Any, Dict, Optional


class EngineError(Exception):
    """Base class for client-visible engine errors."""

    kind = 'EngineError'
    status_code = 400
    default_message = 'Request rejected'

    def __init__(self, message: str = None, details: Optional[Dict[str, Any]] = None):
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for the JSON error envelope."""
        data = {'kind': self.kind}
        data.update(self.details)
        return data


class ValidationError(EngineError):
    """Malformed or out-of-range request input."""
    kind = 'ValidationError'
    default_message = 'Invalid request'


class NotAuthorized(EngineError):
    kind = 'NotAuthorized'
    status_code = 403
    default_message = 'You are not allowed to perform this action'


# Admission

class SessionInactive(EngineError):
    kind = 'SessionInactive'
    status_code = 404
    default_message = 'Session not found or inactive'


class NotEnrolled(EngineError):
    kind = 'NotEnrolled'
    status_code = 403
    default_message = 'You are not enrolled in this session'


class OutOfWindow(EngineError):
    kind = 'OutOfWindow'
    default_message = 'Session is not currently open for check-in'


class DuplicateCheckIn(EngineError):
    kind = 'DuplicateCheckIn'
    status_code = 409
    default_message = 'Attendance already recorded for today'


# Verification

class ProfileNotFound(EngineError):
    kind = 'ProfileNotFound'
    status_code = 404
    default_message = 'Face profile not found or not approved'


class VerificationFailed(EngineError):
    """A verifier ran and did not accept the claim."""

    def __init__(self, message: str = None, confidence: float = 0.0,
                 details: Optional[Dict[str, Any]] = None):
        details = dict(details or {})
        details['confidence'] = confidence
        self.confidence = confidence
        super().__init__(message, details)


class FaceMismatch(VerificationFailed):
    kind = 'FaceMismatch'
    default_message = 'Face verification failed'


class LocationMismatch(VerificationFailed):
    kind = 'LocationMismatch'
    default_message = 'Location verification failed. You must be in the correct room.'


class AdapterTimeout(VerificationFailed):
    kind = 'AdapterTimeout'
    default_message = 'Verification service did not respond in time'


class VerifierUnavailable(EngineError):
    """Every verifier worker is busy; the adapter was never called."""
    kind = 'VerifierUnavailable'
    status_code = 503
    default_message = 'Verification service is busy, try again shortly'


# QR tokens

class TokenNotFound(EngineError):
    kind = 'TokenNotFound'
    default_message = 'QR code expired or invalid'


class TokenExpired(EngineError):
    kind = 'TokenExpired'
    default_message = 'QR code has expired'
