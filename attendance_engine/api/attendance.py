"""Attendance API endpoints."""
from flask import Blueprint, g, request

from attendance_engine import limiter
from attendance_engine.models import CheckInMethod
from attendance_engine.services.checkin_service import CheckInPayload
from attendance_engine.services.container import get_engine
from attendance_engine.utils.decorators import current_user_required
from attendance_engine.utils.errors import NotAuthorized, SessionInactive, ValidationError
from attendance_engine.utils.helpers import serialize_attendance, success_response
from attendance_engine.utils.validators import Validator

attendance_bp = Blueprint('attendance', __name__)


@attendance_bp.route('/health', methods=['GET'])
def health_check():
    """Health check endpoint."""
    return success_response(message='Attendance service is running')


@attendance_bp.route('/check-in', methods=['POST'])
@current_user_required
@limiter.limit("30 per minute")
def check_in():
    """Record attendance with FACE and/or WIFI verification, or a QR token."""
    data = Validator.require_json(request.get_json(silent=True))
    methods = Validator.parse_methods(data)
    engine = get_engine()

    if methods == {CheckInMethod.QR}:
        token = data.get('qrToken')
        if not token:
            raise ValidationError("qrToken is required for QR check-in")
        expected = Validator.require_int(data, 'sessionId') if 'sessionId' in data else None
        record = engine.qr.redeem_session(token, g.current_user.id, expected_session_id=expected)
    else:
        session_id = Validator.require_int(data, 'sessionId')
        payload = CheckInPayload(
            face_sample=Validator.parse_face_sample(data),
            observed_ssid=data.get('observedSSID'),
            coordinates=Validator.parse_coordinates(data)
        )
        record = engine.checkin.check_in(g.current_user.id, session_id, methods, payload)

    return success_response(
        data=serialize_attendance(record),
        message=f"Attendance recorded successfully. Status: {record.status.value}",
        status_code=201
    )


@attendance_bp.route('/sessions/<int:session_id>/aggregate', methods=['GET'])
@current_user_required
def session_aggregate(session_id):
    """Enrolled/present/rate for a session day (cached, recounted on miss)."""
    engine = get_engine()
    session = engine.store.find_session(session_id)
    if session is None:
        raise SessionInactive()
    if not g.current_user.can_manage_session(session):
        raise NotAuthorized("You can only view statistics for your own sessions")

    day = Validator.parse_day(request.args.get('day'))
    aggregate = engine.aggregates.get(session_id, day)
    return success_response(data=aggregate.to_dict())
