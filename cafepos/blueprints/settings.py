"""Settings blueprint: shop-wide key/value preferences."""
from flask import Blueprint, jsonify

from cafepos.blueprints import json_body, success
from cafepos.database import get_session
from cafepos.middleware import require_auth, current_actor
from cafepos.models import AuditAction
from cafepos.services import audit_service, settings_service

settings_bp = Blueprint('settings', __name__, url_prefix='/api/settings')


@settings_bp.route('', methods=['GET'])
def get_settings():
    """Public: the POS needs the exchange rate before anyone logs in."""
    session = get_session()
    return jsonify(settings_service.get_settings(session))


@settings_bp.route('', methods=['POST'])
@require_auth
def update_settings():
    data = json_body()
    session = get_session()

    settings = settings_service.update_settings(session, data)
    audit_service.log_action(session, current_actor(), AuditAction.SETTINGS_CHANGED,
                             f"Changed system settings: {', '.join(data)}")
    return success(settings=settings)
