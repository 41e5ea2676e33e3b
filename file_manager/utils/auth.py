"""
Route decorators for bearer token authentication and role checks.
"""
from functools import wraps

from flask import current_app, g, jsonify, request

from file_manager.database import get_db
from file_manager.services.auth_service import AuthError, extract_bearer_token, parse_token


def _authenticate():
    token = extract_bearer_token(request.headers.get('Authorization'))
    employee_code = parse_token(token, current_app.config['TOKEN_TTL_HOURS'])
    db = get_db()
    user = db.get_active_user(employee_code)
    if not user:
        raise AuthError('Invalid or expired token')
    return {
        'id': user['employeeCode'],
        'email': db.user_email(user['employeeCode']),
        'role': user.get('role') or 'user',
        'name': user.get('name'),
    }


def token_required(func):
    """Require a valid bearer token; the caller is available as g.current_user."""
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            g.current_user = _authenticate()
        except AuthError as e:
            return jsonify({'error': str(e)}), e.status_code
        return func(*args, **kwargs)
    return wrapper


def role_required(*roles):
    """Require one of the given roles. Apply beneath token_required."""
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            user = g.get('current_user')
            if not user:
                return jsonify({'error': 'Authentication required'}), 401
            if user['role'] not in roles:
                return jsonify({'error': 'Insufficient permissions'}), 403
            return func(*args, **kwargs)
        return wrapper
    return decorator
