from functools import wraps
from flask import jsonify, request
from flask_login import current_user

from quizknow.security.security_logger import SecurityLogger


def role_required(*roles):
    """Decorator to require an authenticated user with one of the given roles."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not current_user.is_authenticated:
                return jsonify({'success': False, 'error': 'Authentication required', 'code': 'unauthenticated'}), 401
            if current_user.role not in roles:
                SecurityLogger.log_unauthorized_access(request.path, current_user.id)
                allowed = " or ".join(roles)
                return jsonify({
                    'success': False,
                    'error': f'This endpoint is only accessible to {allowed} accounts',
                    'code': 'forbidden',
                }), 403
            return f(*args, **kwargs)
        return decorated_function
    return decorator


def student_required(f):
    """Decorator to require student role for a route."""
    return role_required('student')(f)


def instructor_required(f):
    """Decorator to require instructor role for a route."""
    return role_required('instructor')(f)
