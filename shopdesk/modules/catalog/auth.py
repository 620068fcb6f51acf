"""
Bearer token guard for store API writes.
"""

import hmac
from functools import wraps
from flask import request, jsonify, g

from ...core.config import get_config


def _bearer_token():
    header = request.headers.get('Authorization', '')
    if not header.startswith('Bearer '):
        return None
    return header[len('Bearer '):].strip() or None


def require_store_token(f):
    """Reject requests whose bearer token does not match STORE_API_TOKEN"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        expected = get_config('STORE_API_TOKEN')
        token = _bearer_token()
        if not expected or not token or not hmac.compare_digest(token, expected):
            return jsonify({'success': False, 'error': 'Unauthorized'}), 401
        g.store_id = get_config('STORE_ID', 'default')
        return f(*args, **kwargs)
    return decorated_function
