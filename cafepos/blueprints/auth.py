"""Authentication blueprint: exchange credentials for a bearer token."""
from flask import Blueprint, jsonify, current_app

from cafepos.blueprints import json_body
from cafepos.database import get_session
from cafepos.exceptions import AuthenticationError
from cafepos.models import AuditAction
from cafepos.services import audit_service
from cafepos.services.auth_service import login

auth_bp = Blueprint('auth', __name__, url_prefix='/api')


@auth_bp.route('/auth', methods=['POST'])
def authenticate():
    """
    Log in with ``{username, password}``.

    Returns ``{user, token}``; 401 on bad credentials.
    """
    data = json_body()
    session = get_session()

    result = login(
        session,
        data.get('username'),
        data.get('password'),
        secret=current_app.config['JWT_SECRET'],
        ttl_hours=current_app.config.get('TOKEN_TTL_HOURS', 24),
        algorithm=current_app.config.get('JWT_ALGORITHM', 'HS256')
    )
    if result is None:
        raise AuthenticationError('Invalid credentials')

    user, token = result
    claims = user.claims
    audit_service.log_action(session, claims, AuditAction.LOGIN, f"User {user.username} logged in")
    current_app.logger.info(f"User {user.username} logged in as {user.role}")

    return jsonify({'user': claims, 'token': token})
