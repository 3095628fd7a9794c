"""
Orders blueprint.

Placing an order is public (customer POS). Everything else is staff-only:
kitchen queue, admin views, status and payment changes, archival and
deletion. Every mutation leaves an audit entry.
"""
from flask import Blueprint, jsonify, current_app

from cafepos.blueprints import json_body, success
from cafepos.blueprints.metrics import orders_placed_total
from cafepos.database import get_session
from cafepos.exceptions import ValidationError
from cafepos.middleware import require_auth, current_actor
from cafepos.models import AuditAction
from cafepos.services import audit_service, order_service
from cafepos.services.event_service import notify_new_order
from cafepos.utils.formatters import money_usd, whole_number

orders_bp = Blueprint('orders', __name__, url_prefix='/api')


def _order_id(data):
    order_id = whole_number(data.get('id'))
    if order_id is None:
        raise ValidationError('id must be an integer')
    return order_id


# =====================================================
# READS
# =====================================================

@orders_bp.route('/orders', methods=['GET'])
@require_auth
def list_orders():
    session = get_session()
    orders = order_service.list_orders(session)
    return jsonify(order_service.serialize_orders(session, orders))


@orders_bp.route('/orders/archived', methods=['GET'])
@require_auth
def list_archived_orders():
    session = get_session()
    orders = order_service.list_orders(session, archived=True)
    return jsonify(order_service.serialize_orders(session, orders))


@orders_bp.route('/orders/active', methods=['GET'])
@require_auth
def list_active_orders():
    """Kitchen queue, oldest first."""
    session = get_session()
    orders = order_service.list_active_orders(session)
    return jsonify(order_service.serialize_orders(session, orders))


@orders_bp.route('/orders/<int:order_id>', methods=['GET'])
@require_auth
def get_order(order_id):
    session = get_session()
    order = order_service.get_order(session, order_id)
    return jsonify(order_service.serialize_orders(session, [order])[0])


@orders_bp.route('/order-statuses', methods=['GET'])
@require_auth
def list_statuses():
    session = get_session()
    return jsonify([s.to_dict() for s in order_service.list_statuses(session)])


# =====================================================
# PLACING AND EDITING
# =====================================================

@orders_bp.route('/orders', methods=['POST'])
def create_order():
    """
    Place an order from the POS: ``{items: [...], total}``.

    The stored total is recomputed from the items. Connected kitchen
    screens are notified once the order is committed.
    """
    data = json_body()
    session = get_session()

    order = order_service.create_order(session, data.get('items'), data.get('total'))
    order_id = order.id
    total = order.total

    notify_new_order(order_id)
    orders_placed_total.inc()
    audit_service.log_action(
        session, current_actor(), AuditAction.ORDER_PLACED,
        f"New order #{order_id} placed from POS (Total: {money_usd(total)})"
    )
    current_app.logger.info(f"New order #{order_id} placed, total {total}")

    return jsonify({'id': order_id})


@orders_bp.route('/orders/update', methods=['POST'])
@require_auth
def update_order():
    """Replace an order's items: ``{id, items: [...]}``."""
    data = json_body()
    session = get_session()

    order_id = _order_id(data)
    order = order_service.update_order(session, order_id, data.get('items'))
    audit_service.log_action(session, current_actor(), AuditAction.ORDER_UPDATED,
                             f"Updated order #{order_id}")
    return success(total=float(order.total))


@orders_bp.route('/orders/<int:order_id>/status', methods=['POST'])
@require_auth
def set_status(order_id):
    """
    Move an order to another status: ``{status: "<label>"}``.

    Unknown labels leave the order untouched and answer ``updated: false``.
    """
    data = json_body()
    session = get_session()
    label = data.get('status')

    updated = order_service.set_status(session, order_id, label)
    if updated:
        audit_service.log_action(session, current_actor(), AuditAction.ORDER_STATUS_CHANGED,
                                 f"Order #{order_id} set to {label}")
    return success(updated=updated)


@orders_bp.route('/orders/<int:order_id>/payment', methods=['POST'])
@require_auth
def set_payment(order_id):
    """Mark an order paid or unpaid: ``{status: "paid" | "unpaid"}``."""
    data = json_body()
    session = get_session()
    value = data.get('status')

    updated = order_service.set_payment_status(session, order_id, value)
    if updated:
        audit_service.log_action(session, current_actor(), AuditAction.ORDER_PAYMENT_CHANGED,
                                 f"Order #{order_id} set to {value}")
    return success(updated=updated)


# =====================================================
# ARCHIVAL AND DELETION
# =====================================================

@orders_bp.route('/orders/<int:order_id>/archive', methods=['POST'])
@require_auth
def archive_order(order_id):
    session = get_session()
    updated = order_service.archive_order(session, order_id)
    if updated:
        audit_service.log_action(session, current_actor(), AuditAction.ORDER_ARCHIVED,
                                 f"Archived order #{order_id}")
    return success(updated=updated)


@orders_bp.route('/orders/<int:order_id>/unarchive', methods=['POST'])
@require_auth
def unarchive_order(order_id):
    session = get_session()
    updated = order_service.unarchive_order(session, order_id)
    if updated:
        audit_service.log_action(session, current_actor(), AuditAction.ORDER_UNARCHIVED,
                                 f"Unarchived order #{order_id}")
    return success(updated=updated)


@orders_bp.route('/orders/bulk-archive', methods=['POST'])
@require_auth
def bulk_archive():
    """Archive a list of orders: ``{ids: [...]}``. An empty list is a no-op."""
    data = json_body()
    session = get_session()
    ids = data.get('ids') or []

    count = order_service.bulk_archive(session, ids)
    if ids:
        audit_service.log_action(session, current_actor(), AuditAction.ORDERS_BULK_ARCHIVED,
                                 f"Archived orders: {', '.join(str(i) for i in ids)}")
    return success(count=count)


@orders_bp.route('/orders/archive-all', methods=['POST'])
@require_auth
def archive_all():
    session = get_session()
    count = order_service.archive_all(session)
    audit_service.log_action(session, current_actor(), AuditAction.ORDERS_ALL_ARCHIVED,
                             "Archived all active orders")
    return success(count=count)


@orders_bp.route('/orders/clear', methods=['DELETE'])
@require_auth
def clear_orders():
    """Permanently delete every order. Irreversible."""
    session = get_session()
    count = order_service.clear_all(session)
    audit_service.log_action(session, current_actor(), AuditAction.ORDERS_CLEARED,
                             "Deleted all order records permanently")
    return success(count=count)


@orders_bp.route('/orders/<int:order_id>', methods=['DELETE'])
@require_auth
def delete_order(order_id):
    session = get_session()
    deleted = order_service.delete_order(session, order_id)
    if deleted:
        audit_service.log_action(session, current_actor(), AuditAction.ORDER_DELETED,
                                 f"Deleted order #{order_id}")
    return success(updated=deleted)
