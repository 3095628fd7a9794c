"""
User management blueprint.
Staff accounts are managed by administrators only.
"""
from flask import Blueprint, jsonify

from cafepos.blueprints import json_body, success
from cafepos.database import get_session
from cafepos.middleware import require_role, current_actor
from cafepos.models import AuditAction, UserRole
from cafepos.services import audit_service, user_service

users_bp = Blueprint('users', __name__, url_prefix='/api/users')


@users_bp.route('', methods=['GET'])
@require_role(UserRole.ADMIN.value)
def list_users():
    """All users, without password material."""
    session = get_session()
    return jsonify([u.to_dict() for u in user_service.list_users(session)])


@users_bp.route('', methods=['POST'])
@require_role(UserRole.ADMIN.value)
def save_user():
    """Create a user, or update it when the body carries an ``id``."""
    session = get_session()
    user, created = user_service.save_user(session, json_body())

    if created:
        audit_service.log_action(session, current_actor(), AuditAction.USER_CREATED,
                                 f"Created user: {user.username}")
    else:
        audit_service.log_action(session, current_actor(), AuditAction.USER_UPDATED,
                                 f"Updated user: {user.username}")
    return success(id=user.id)


@users_bp.route('/<int:user_id>', methods=['DELETE'])
@require_role(UserRole.ADMIN.value)
def delete_user(user_id):
    session = get_session()
    username = user_service.delete_user(session, user_id)
    audit_service.log_action(session, current_actor(), AuditAction.USER_DELETED,
                             f"Deleted user: {username or user_id}")
    return success()
