from functools import wraps
from flask import session, jsonify


def admin_required(f):
    """Decorator to require a logged-in admin (session set by the login flow)"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if 'member_id' not in session:
            return jsonify({'message': 'Login required'}), 401
        if not session.get('is_admin'):
            return jsonify({'message': 'Admin access required'}), 403
        return f(*args, **kwargs)
    return decorated_function
