"""QR Code API endpoints."""
from flask import Blueprint, g, request

from attendance_engine import limiter
from attendance_engine.services.container import get_engine
from attendance_engine.services.qr_service import render_qr_image
from attendance_engine.utils.decorators import current_user_required, owner_required
from attendance_engine.utils.errors import ValidationError
from attendance_engine.utils.helpers import serialize_attendance, success_response
from attendance_engine.utils.validators import Validator

qr_bp = Blueprint('qr', __name__)


@qr_bp.route('/health', methods=['GET'])
def health_check():
    """Health check endpoint."""
    return success_response(message='QR service is running')


@qr_bp.route('/issue', methods=['POST'])
@current_user_required
@owner_required
@limiter.limit("30 per hour")
def issue_qr():
    """Issue a single-use QR token for a session."""
    data = Validator.require_json(request.get_json(silent=True))
    session_id = Validator.require_int(data, 'sessionId')
    ttl_seconds = Validator.require_int(data, 'ttlSeconds') if 'ttlSeconds' in data else None

    qr_session = get_engine().qr.issue_session(session_id, g.current_user, ttl_seconds)

    return success_response(
        data={
            'token': qr_session.token,
            'expiresAt': qr_session.expires_at.isoformat(),
            'expiresIn': qr_session.ttl_seconds,
            'sessionId': qr_session.session_id,
            'qrImage': render_qr_image(qr_session.token)
        },
        message="QR code generated successfully",
        status_code=201
    )


@qr_bp.route('/redeem', methods=['POST'])
@current_user_required
@limiter.limit("30 per minute")
def redeem_qr():
    """Redeem a QR token and record attendance."""
    data = Validator.require_json(request.get_json(silent=True))
    token = data.get('token')
    if not token or not isinstance(token, str):
        raise ValidationError("token is required")

    record = get_engine().qr.redeem_session(token, g.current_user.id)

    return success_response(
        data=serialize_attendance(record),
        message="Attendance recorded successfully via QR code",
        status_code=201
    )
