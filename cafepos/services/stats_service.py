"""
Stats service - timeframe-scoped financial reporting.

Everything is recomputed from the order, expense, stock and user tables on
each call; nothing is maintained incrementally.
"""
import enum
import logging
from datetime import datetime, date, time, timedelta
from decimal import Decimal
from typing import Optional, Dict, Any, List

from sqlalchemy import func

from cafepos.models import Order, OrderItem, Product, Category, Expense, StockItem, User, PaymentStatus
from cafepos.utils.formatters import to_decimal

logger = logging.getLogger(__name__)

TOP_PRODUCTS_LIMIT = 5


class Timeframe(str, enum.Enum):
    """Reporting window."""
    WEEKLY = 'weekly'
    MONTHLY = 'monthly'
    YEARLY = 'yearly'
    ALL = 'all'

    @classmethod
    def parse(cls, value) -> 'Timeframe':
        """Parse a timeframe, falling back to ALL for anything unknown."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except (ValueError, AttributeError):
            return cls.ALL


LOOKBACK_DAYS = {
    Timeframe.WEEKLY: 7,
    Timeframe.MONTHLY: 30,
    Timeframe.YEARLY: 365,
}

# Monthly salary multiplier for the bounded timeframes
SALARY_FACTORS = {
    Timeframe.WEEKLY: Decimal('0.25'),
    Timeframe.MONTHLY: Decimal('1'),
    Timeframe.YEARLY: Decimal('12'),
}


def get_window_start(timeframe: Timeframe, now: datetime) -> Optional[datetime]:
    """
    Start of the reporting window: local midnight ``N`` days ago.

    Returns:
        datetime, or None for an unbounded window
    """
    days = LOOKBACK_DAYS.get(timeframe)
    if days is None:
        return None
    return datetime.combine(now.date() - timedelta(days=days), time.min)


def months_inclusive(start: datetime, end: datetime) -> int:
    """
    Whole calendar months from ``start`` to ``end``, counting both ends.

    Examples:
        Jan 31 -> Feb 1 is 2; same month is 1; never less than 1.
    """
    months = (end.year - start.year) * 12 + (end.month - start.month) + 1
    return max(months, 1)


def _order_window(query, window_start):
    if window_start is not None:
        query = query.filter(Order.created_at >= window_start)
    return query


def _revenue(session, window_start, paid_only: bool) -> Decimal:
    query = session.query(func.coalesce(func.sum(Order.total), 0))
    if paid_only:
        query = query.filter(Order.payment_status == PaymentStatus.PAID.value)
    return to_decimal(_order_window(query, window_start).scalar())


def _order_count(session, window_start) -> int:
    query = session.query(func.count(Order.id))
    return int(_order_window(query, window_start).scalar() or 0)


def _expenses(session, window_start) -> Decimal:
    query = session.query(func.coalesce(func.sum(Expense.amount), 0)).filter(
        Expense.is_archived == False  # noqa: E712
    )
    if window_start is not None:
        query = query.filter(Expense.date >= window_start.date())
    return to_decimal(query.scalar())


def get_stock_value(session) -> Decimal:
    """Current value of all stock (qty x price / price_qty). Not windowed."""
    return sum((item.value for item in session.query(StockItem).all()), Decimal('0'))


def get_salaries(session, timeframe: Timeframe, now: datetime) -> Decimal:
    """
    Monthly salary sum pro-rated to the timeframe.

    For ALL the multiplier is the number of calendar months since the first
    order was placed (inclusive, at least 1).
    """
    monthly = to_decimal(session.query(func.coalesce(func.sum(User.salary), 0)).scalar())

    if timeframe in SALARY_FACTORS:
        return monthly * SALARY_FACTORS[timeframe]

    first_order_at = session.query(func.min(Order.created_at)).scalar()
    if first_order_at is None:
        return monthly
    if isinstance(first_order_at, str):
        first_order_at = datetime.fromisoformat(first_order_at)
    return monthly * months_inclusive(first_order_at, now)


def get_top_products(session, window_start, limit: int = TOP_PRODUCTS_LIMIT) -> List[Dict[str, Any]]:
    """
    Best sellers by quantity within the window.

    Grouped by product id and labelled with the product's current name, so
    a renamed product keeps a single row. Items with no product reference
    fall back to their captured name.
    """
    query = (
        session.query(
            OrderItem.product_id,
            OrderItem.name.label('item_name'),
            Product.name.label('product_name'),
            func.sum(OrderItem.qty).label('qty')
        )
        .join(Order, Order.id == OrderItem.order_id)
        .outerjoin(Product, Product.id == OrderItem.product_id)
    )
    query = _order_window(query, window_start).group_by(
        OrderItem.product_id, OrderItem.name, Product.name
    )

    grouped: Dict[Any, Dict[str, Any]] = {}
    for row in query.all():
        key = ('product', row.product_id) if row.product_id is not None else ('name', row.item_name)
        entry = grouped.setdefault(key, {
            'product_id': row.product_id,
            'name': row.product_name or row.item_name,
            'qty': 0,
        })
        entry['qty'] += int(row.qty or 0)

    ranked = sorted(grouped.values(), key=lambda e: (-e['qty'], e['name']))
    return ranked[:limit]


def get_category_performance(session, window_start) -> List[Dict[str, Any]]:
    """Revenue (price x qty) per category within the window."""
    value = func.sum(OrderItem.price * OrderItem.qty).label('value')
    query = (
        session.query(Category.id, Category.name, value)
        .select_from(OrderItem)
        .join(Product, Product.id == OrderItem.product_id)
        .join(Category, Category.id == Product.category_id)
        .join(Order, Order.id == OrderItem.order_id)
    )
    query = _order_window(query, window_start).group_by(Category.id, Category.name).order_by(value.desc())

    return [
        {'category_id': row.id, 'name': row.name, 'value': to_decimal(row.value)}
        for row in query.all()
    ]


def get_stats(session, timeframe='all', now: Optional[datetime] = None) -> Dict[str, Any]:
    """
    Financial summary for a timeframe.

    Args:
        session: SQLAlchemy session
        timeframe: 'weekly', 'monthly', 'yearly' or 'all' (anything else is 'all')
        now: reference time (defaults to the current local time)

    Returns:
        dict with keys:
            - timeframe, window_start
            - total_revenue: paid orders only
            - total_potential_revenue: all orders
            - unpaid_revenue: potential minus paid
            - order_count, avg_order_value
            - total_expenses: non-archived expenses
            - stock_value: current stock, not windowed
            - total_salaries: pro-rated monthly salaries
            - top_products, category_performance
    """
    timeframe = Timeframe.parse(timeframe)
    now = now or datetime.now()
    window_start = get_window_start(timeframe, now)

    total_revenue = _revenue(session, window_start, paid_only=True)
    total_potential_revenue = _revenue(session, window_start, paid_only=False)
    order_count = _order_count(session, window_start)
    avg_order_value = (total_revenue / max(order_count, 1)).quantize(Decimal('0.01'))

    stats = {
        'timeframe': timeframe.value,
        'window_start': window_start,
        'total_revenue': total_revenue,
        'total_potential_revenue': total_potential_revenue,
        'unpaid_revenue': max(total_potential_revenue - total_revenue, Decimal('0')),
        'order_count': order_count,
        'avg_order_value': avg_order_value,
        'total_expenses': _expenses(session, window_start),
        'stock_value': get_stock_value(session),
        'total_salaries': get_salaries(session, timeframe, now),
        'top_products': get_top_products(session, window_start),
        'category_performance': get_category_performance(session, window_start),
    }

    logger.debug(f"Stats computed for {timeframe.value}: {order_count} orders, revenue {total_revenue}")
    return stats


def net_profit(stats: Dict[str, Any], include_salaries: bool = True,
               include_stock: bool = False, include_expenses: bool = True) -> Decimal:
    """
    Revenue minus the selected cost components.

    The selection belongs to the consumer of the report; the defaults match
    the back-office dashboard (salaries and expenses, not stock).
    """
    costs = Decimal('0')
    if include_salaries:
        costs += to_decimal(stats.get('total_salaries'))
    if include_stock:
        costs += to_decimal(stats.get('stock_value'))
    if include_expenses:
        costs += to_decimal(stats.get('total_expenses'))
    return to_decimal(stats.get('total_revenue')) - costs
