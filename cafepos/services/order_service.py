"""
Order lifecycle service.

Creation, item replacement, status and payment changes, archival and
deletion of orders. Every multi-statement write runs in one transaction.
"""
import logging
from decimal import Decimal
from typing import List, Dict, Any, Iterable, Optional, Mapping

from sqlalchemy import func
from sqlalchemy.orm import selectinload

from cafepos.database import transaction
from cafepos.exceptions import CafeError, NotFoundError, ValidationError
from cafepos.models import (
    Order, OrderItem, OrderStatus, Product, PaymentStatus, KITCHEN_DONE_STATUSES
)
from cafepos.utils.formatters import to_decimal, parse_amount, whole_number

logger = logging.getLogger(__name__)


# =====================================================
# LINE ITEMS
# =====================================================

MAX_ITEM_QTY = 9999


def _parse_qty(value, position: int) -> int:
    qty = whole_number(value)
    if qty is None or qty > MAX_ITEM_QTY:
        raise ValidationError(f'Item {position}: qty must be a whole number up to {MAX_ITEM_QTY}')
    return qty


def _parse_product_id(raw: Mapping[str, Any], position: int) -> Optional[int]:
    # Edited items carry their own row id, so an explicit product_id wins
    value = raw['product_id'] if 'product_id' in raw else raw.get('id')
    if value is None or value == '':
        return None
    product_id = whole_number(value)
    if product_id is None:
        raise ValidationError(f'Item {position}: invalid product reference')
    return product_id


def build_order_lines(session, items: Iterable[Mapping[str, Any]], drop_empty: bool = False) -> List[Dict[str, Any]]:
    """
    Validate raw line items and turn them into OrderItem keyword arguments.

    Name and price are the caller's snapshot; when either is missing it is
    taken from the referenced product.

    Args:
        session: Database session
        items: list of {product_id|id, name, price, qty}
        drop_empty: skip lines whose qty is 0 instead of rejecting them

    Raises:
        ValidationError: malformed items or unknown product references
    """
    if not isinstance(items, (list, tuple)):
        raise ValidationError('items must be a list')

    parsed = []
    for position, raw in enumerate(items, start=1):
        if not isinstance(raw, Mapping):
            raise ValidationError(f'Item {position}: must be an object')

        qty = _parse_qty(raw.get('qty'), position)
        if qty == 0 and drop_empty:
            continue
        if qty < 1:
            raise ValidationError(f'Item {position}: qty must be at least 1')

        name = raw.get('name')
        parsed.append({
            'product_id': _parse_product_id(raw, position),
            'name': str(name).strip() if name is not None else '',
            'price': raw.get('price'),
            'qty': qty,
            'position': position,
        })

    product_ids = {line['product_id'] for line in parsed if line['product_id'] is not None}
    products = {}
    if product_ids:
        products = {
            p.id: p for p in session.query(Product).filter(Product.id.in_(product_ids)).all()
        }
        missing = sorted(product_ids - set(products))
        if missing:
            raise ValidationError(f'Unknown product id(s): {", ".join(str(m) for m in missing)}')

    lines = []
    for line in parsed:
        product = products.get(line['product_id'])
        position = line.pop('position')

        if not line['name']:
            if product is None:
                raise ValidationError(f'Item {position}: name is required')
            line['name'] = product.name

        if line['price'] is None or line['price'] == '':
            if product is None:
                raise ValidationError(f'Item {position}: price is required')
            line['price'] = product.price
        try:
            line['price'] = parse_amount(line['price'], 'price').quantize(Decimal('0.01'))
        except ValueError as e:
            raise ValidationError(f'Item {position}: {e}')

        lines.append(line)

    return lines


def _sum_lines(lines: List[Dict[str, Any]]) -> Decimal:
    return sum(
        ((line['price'] * line['qty']).quantize(Decimal('0.01')) for line in lines),
        Decimal('0.00')
    )


# =====================================================
# STATUS VOCABULARY
# =====================================================

def list_statuses(session) -> List[OrderStatus]:
    return session.query(OrderStatus).order_by(OrderStatus.id).all()


def get_default_status(session) -> OrderStatus:
    status = session.query(OrderStatus).filter(OrderStatus.is_default == True).first()  # noqa: E712
    if status is None:
        raise CafeError('No default order status configured')
    return status


def find_status(session, label) -> Optional[OrderStatus]:
    """Case-insensitive lookup of a status by its label."""
    if not isinstance(label, str) or not label.strip():
        return None
    return session.query(OrderStatus).filter(
        func.lower(OrderStatus.label) == label.strip().lower()
    ).first()


# =====================================================
# QUERIES
# =====================================================

def get_order(session, order_id: int) -> Order:
    order = session.query(Order).options(selectinload(Order.items)).filter(Order.id == order_id).first()
    if not order:
        raise NotFoundError(f'Order #{order_id} not found')
    return order


def list_orders(session, archived: bool = False) -> List[Order]:
    """Orders in the general (or archive) view, newest first."""
    return (
        session.query(Order)
        .options(selectinload(Order.items))
        .filter(Order.is_archived == archived)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .all()
    )


def list_active_orders(session) -> List[Order]:
    """
    Kitchen queue: not archived and not yet ready or cancelled.

    Oldest first, so the kitchen works through orders in arrival order.
    """
    return (
        session.query(Order)
        .join(OrderStatus, Order.status_id == OrderStatus.id)
        .options(selectinload(Order.items))
        .filter(
            Order.is_archived == False,  # noqa: E712
            func.lower(OrderStatus.label).notin_(KITCHEN_DONE_STATUSES)
        )
        .order_by(Order.created_at.asc(), Order.id.asc())
        .all()
    )


def serialize_orders(session, orders: Iterable[Order]) -> List[Dict[str, Any]]:
    """Orders as dicts, with each item's current Arabic product name."""
    orders = list(orders)
    product_ids = {item.product_id for order in orders for item in order.items if item.product_id}
    name_ar_by_product = {}
    if product_ids:
        rows = session.query(Product.id, Product.name_ar).filter(Product.id.in_(product_ids)).all()
        name_ar_by_product = {row.id: row.name_ar for row in rows}
    return [order.to_dict(name_ar_by_product) for order in orders]


# =====================================================
# MUTATIONS
# =====================================================

def create_order(session, items, total=None) -> Order:
    """
    Persist a new order placed from the customer-facing POS.

    The total is always recomputed from the items; a caller-supplied
    ``total`` is only compared and logged.

    Raises:
        ValidationError: empty or malformed items
    """
    if not items:
        raise ValidationError('An order needs at least one item')

    lines = build_order_lines(session, items)
    computed_total = _sum_lines(lines)

    if total is not None and to_decimal(total, default=None) != computed_total:
        logger.warning(
            f"Ignoring client total {total!r} for new order; computed {computed_total}"
        )

    default_status = get_default_status(session)

    with transaction(session):
        order = Order(
            status_id=default_status.id,
            payment_status=PaymentStatus.UNPAID.value,
            is_archived=False,
        )
        order.status = default_status
        for line in lines:
            order.items.append(OrderItem(**line))
        order.recalculate_total()
        session.add(order)

    logger.info(f"Order #{order.id} created with {len(lines)} item(s), total {order.total}")
    return order


def update_order(session, order_id: int, items) -> Order:
    """
    Replace the full item set of an order and recompute its total.

    Old items are deleted and the new ones inserted in the same
    transaction, so no reader sees a half-updated order.

    Raises:
        NotFoundError: unknown order id
        ValidationError: malformed items
    """
    order = get_order(session, order_id)
    lines = build_order_lines(session, items, drop_empty=True)

    with transaction(session):
        order.items.clear()
        session.flush()
        for line in lines:
            order.items.append(OrderItem(**line))
        order.recalculate_total()

    logger.info(f"Order #{order.id} items replaced ({len(lines)} item(s), total {order.total})")
    return order


def set_status(session, order_id: int, label) -> bool:
    """
    Move an order to the status named ``label`` (case-insensitive).

    Any status may follow any other. Unknown labels and unknown orders
    change nothing and raise nothing.

    Returns:
        True if the order was updated
    """
    status = find_status(session, label)
    if status is None:
        logger.warning(f"Ignoring unknown order status {label!r} for order #{order_id}")
        return False

    order = session.query(Order).filter(Order.id == order_id).first()
    if order is None:
        logger.warning(f"Status change for unknown order #{order_id} ignored")
        return False

    with transaction(session):
        order.status_id = status.id
        order.status = status
    return True


def set_payment_status(session, order_id: int, payment_status) -> bool:
    """
    Mark an order paid or unpaid. Order status is not consulted.

    Raises:
        ValidationError: value other than paid / unpaid
    """
    value = payment_status.strip().lower() if isinstance(payment_status, str) else None
    if value not in {p.value for p in PaymentStatus}:
        raise ValidationError("payment status must be 'paid' or 'unpaid'")

    with transaction(session):
        updated = session.query(Order).filter(Order.id == order_id).update(
            {Order.payment_status: value}, synchronize_session='fetch'
        )
    return updated > 0


def _set_archived(session, order_id: int, archived: bool) -> bool:
    with transaction(session):
        updated = session.query(Order).filter(Order.id == order_id).update(
            {Order.is_archived: archived}, synchronize_session='fetch'
        )
    return updated > 0


def archive_order(session, order_id: int) -> bool:
    return _set_archived(session, order_id, True)


def unarchive_order(session, order_id: int) -> bool:
    return _set_archived(session, order_id, False)


def bulk_archive(session, ids) -> int:
    """
    Archive a set of orders in a single statement.

    Returns:
        Number of rows matched (0 for an empty id list)
    """
    if ids is None:
        ids = []
    if not isinstance(ids, (list, tuple, set)):
        raise ValidationError('ids must be a list')
    order_ids = [whole_number(i) for i in ids]
    if any(i is None for i in order_ids):
        raise ValidationError('ids must be integers')
    if not order_ids:
        return 0

    with transaction(session):
        updated = session.query(Order).filter(Order.id.in_(order_ids)).update(
            {Order.is_archived: True}, synchronize_session='fetch'
        )
    return updated


def archive_all(session) -> int:
    """Archive every order that is not archived yet."""
    with transaction(session):
        updated = session.query(Order).filter(Order.is_archived == False).update(  # noqa: E712
            {Order.is_archived: True}, synchronize_session='fetch'
        )
    return updated


def delete_order(session, order_id: int) -> bool:
    """Permanently delete an order and its items."""
    order = session.query(Order).filter(Order.id == order_id).first()
    if order is None:
        return False
    with transaction(session):
        session.delete(order)
    return True


def clear_all(session) -> int:
    """Permanently delete every order and order item."""
    with transaction(session):
        session.query(OrderItem).delete(synchronize_session=False)
        removed = session.query(Order).delete(synchronize_session=False)
    session.expire_all()
    logger.warning(f"Order history cleared ({removed} orders)")
    return removed
