"""Middleware for bearer-token authentication and role checks."""
from functools import wraps

from flask import g, request, current_app

from cafepos.exceptions import AuthenticationError, ForbiddenError, CafeError
from cafepos.services.auth_service import decode_token


def _bearer_token():
    header = request.headers.get('Authorization', '')
    parts = header.split(None, 1)
    if len(parts) == 2 and parts[0].lower() == 'bearer' and parts[1].strip():
        return parts[1].strip()
    return None


def load_current_user():
    """
    Load the caller's identity into g.

    Called before each request. Sets g.user to the token claims
    ({id, username, name, role}) or None, and keeps any verification
    failure in g.auth_error so protected routes can reject with 403
    while public routes carry on anonymously.
    """
    g.user = None
    g.auth_error = None

    token = _bearer_token()
    if not token:
        return

    try:
        g.user = decode_token(
            token,
            current_app.config['JWT_SECRET'],
            current_app.config.get('JWT_ALGORITHM', 'HS256')
        )
    except CafeError as e:
        g.auth_error = e


def current_actor():
    """Claims of the authenticated caller, or None."""
    return g.get('user')


def require_auth(f):
    """
    Decorator: Require a valid bearer token.

    No token -> 401; invalid or expired token -> 403.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if g.get('auth_error') is not None:
            raise g.auth_error
        if g.get('user') is None:
            raise AuthenticationError()
        return f(*args, **kwargs)
    return decorated_function


def require_role(*allowed_roles):
    """
    Decorator to restrict access to specific roles.

    Usage:
        @require_role('admin')
    """
    def decorator(f):
        @wraps(f)
        @require_auth
        def decorated_function(*args, **kwargs):
            if g.user.get('role') not in allowed_roles:
                raise ForbiddenError('You do not have permission to perform this action')
            return f(*args, **kwargs)
        return decorated_function
    return decorator
