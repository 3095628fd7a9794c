"""Stock ledger service - consumables with costing and low-stock alerts."""
import logging
from typing import Dict, Any, List, Optional, Tuple

from cafepos.database import transaction
from cafepos.exceptions import NotFoundError, ValidationError
from cafepos.models import StockItem
from cafepos.utils.formatters import parse_amount

logger = logging.getLogger(__name__)


def list_stock(session) -> List[StockItem]:
    return session.query(StockItem).order_by(StockItem.name, StockItem.id).all()


def list_low_stock(session) -> List[StockItem]:
    """
    Items at or under their threshold, most critical first
    (lowest qty / threshold ratio).
    """
    low = [item for item in list_stock(session) if item.is_low]

    def criticality(item):
        threshold = float(item.low_stock_threshold or 0)
        ratio = float(item.qty or 0) / threshold if threshold > 0 else 0.0
        return ratio, float(item.qty or 0)

    return sorted(low, key=criticality)


def _amount(data: Dict[str, Any], field: str, default=None):
    value = data.get(field, default)
    if value is None or value == '':
        value = default
    try:
        return parse_amount(value, field)
    except ValueError as e:
        raise ValidationError(str(e))


def save_stock_item(session, data: Dict[str, Any]) -> Tuple[StockItem, bool]:
    """
    Create a stock item, or update it when ``data`` carries an ``id``.

    Returns:
        (item, created)
    """
    name = str(data.get('name') or '').strip()
    unit = str(data.get('unit') or '').strip()
    if not name:
        raise ValidationError('name is required')
    if not unit:
        raise ValidationError('unit is required')

    qty = _amount(data, 'qty')
    price = _amount(data, 'price', default=0)
    price_qty = _amount(data, 'price_qty', default=1)
    threshold = _amount(data, 'low_stock_threshold')
    if price_qty <= 0:
        raise ValidationError('price_qty must be greater than 0')

    item_id = data.get('id')
    with transaction(session):
        if item_id:
            item = session.query(StockItem).filter_by(id=item_id).first()
            if not item:
                raise NotFoundError(f'Stock item #{item_id} not found')
            created = False
        else:
            item = StockItem()
            session.add(item)
            created = True

        item.name = name
        item.unit = unit
        item.qty = qty
        item.price = price
        item.price_qty = price_qty
        item.low_stock_threshold = threshold

    if item.is_low:
        logger.info(f"Stock item {name!r} is low: {item.qty} {unit} (threshold {item.low_stock_threshold})")
    return item, created


def delete_stock_item(session, item_id: int) -> Optional[str]:
    """Hard delete. Returns the item's name, or None if it did not exist."""
    item = session.query(StockItem).filter_by(id=item_id).first()
    if not item:
        return None
    name = item.name
    with transaction(session):
        session.delete(item)
    return name
