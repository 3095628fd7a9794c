"""Stock blueprint: consumables inventory."""
from flask import Blueprint, jsonify

from cafepos.blueprints import json_body, success
from cafepos.database import get_session
from cafepos.middleware import require_auth, current_actor
from cafepos.models import AuditAction
from cafepos.services import audit_service, stock_service

stock_bp = Blueprint('stock', __name__, url_prefix='/api/stock')


@stock_bp.route('', methods=['GET'])
def list_stock():
    session = get_session()
    return jsonify([item.to_dict() for item in stock_service.list_stock(session)])


@stock_bp.route('/low', methods=['GET'])
def list_low_stock():
    """Items at or below their low-stock threshold."""
    session = get_session()
    return jsonify([item.to_dict() for item in stock_service.list_low_stock(session)])


@stock_bp.route('', methods=['POST'])
@require_auth
def save_stock_item():
    session = get_session()
    item, created = stock_service.save_stock_item(session, json_body())

    action = AuditAction.STOCK_CREATED if created else AuditAction.STOCK_UPDATED
    verb = 'Created' if created else 'Updated'
    audit_service.log_action(session, current_actor(), action, f"{verb} stock item: {item.name}")
    return success(id=item.id)


@stock_bp.route('/<int:item_id>', methods=['DELETE'])
@require_auth
def delete_stock_item(item_id):
    session = get_session()
    name = stock_service.delete_stock_item(session, item_id)
    audit_service.log_action(session, current_actor(), AuditAction.STOCK_DELETED,
                             f"Deleted stock item: {name or item_id}")
    return success()
