"""Helper functions for the application."""
from typing import Any, Dict

from flask import jsonify


def handle_error(error, status_code: int):
    """Handle application errors with consistent format."""
    return jsonify({
        'error': True,
        'message': getattr(error, 'description', None) or str(error),
        'status_code': status_code
    }), status_code


def success_response(data: Any = None, message: str = "Success", status_code: int = 200):
    """Return consistent success response."""
    response = {
        'error': False,
        'message': message
    }

    if data is not None:
        response['data'] = data

    return jsonify(response), status_code


def error_response(message: str, status_code: int = 400, extra: Dict[str, Any] = None):
    """Return consistent error response."""
    body = {
        'error': True,
        'message': message,
        'status_code': status_code
    }
    if extra:
        body.update(extra)
    return jsonify(body), status_code


def serialize_attendance(record) -> Dict[str, Any]:
    """Public view of an AttendanceRecord."""
    return {
        'id': record.id,
        'participant_id': record.participant_id,
        'session_id': record.session_id,
        'date': record.attendance_date.isoformat(),
        'check_in_time': record.check_in_time.isoformat(),
        'method': record.method,
        'status': record.status.value,
        'confidence': record.confidence,
        'verification': record.verification_data,
        'qr_token': record.qr_token
    }
