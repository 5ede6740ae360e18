"""Custom decorators for authorization."""
from functools import wraps

from flask import g
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request

from attendance_engine.models.user import User, UserRole
from attendance_engine.utils.helpers import error_response


def current_user_required(f):
    """Require a valid JWT naming an active user; exposes it as ``g.current_user``."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        verify_jwt_in_request()
        identity = get_jwt_identity()

        try:
            user = User.get_by_id(int(identity))
        except (TypeError, ValueError):
            user = None

        if not user or not user.is_active:
            return error_response("User not found", 401)

        g.current_user = user
        return f(*args, **kwargs)
    return decorated_function


def owner_required(f):
    """Require a session owner or admin. Apply after ``current_user_required``."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if g.current_user.role not in [UserRole.OWNER, UserRole.ADMIN]:
            return error_response("Session owner access required", 403)

        return f(*args, **kwargs)
    return decorated_function
