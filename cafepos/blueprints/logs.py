"""Audit log blueprint."""
from flask import Blueprint, jsonify

from cafepos.blueprints import success
from cafepos.database import get_session
from cafepos.middleware import require_auth, current_actor
from cafepos.services import audit_service

logs_bp = Blueprint('logs', __name__, url_prefix='/api/logs')


@logs_bp.route('', methods=['GET'])
@require_auth
def list_logs():
    """Every audit entry, newest first."""
    session = get_session()
    return jsonify([entry.to_dict() for entry in audit_service.list_logs(session)])


@logs_bp.route('/clear', methods=['DELETE'])
@require_auth
def clear_logs():
    session = get_session()
    removed = audit_service.clear_logs(session, current_actor())
    return success(count=removed)
