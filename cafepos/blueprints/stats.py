"""Financial statistics blueprint for the back-office dashboard."""
from flask import Blueprint, jsonify, request

from cafepos.database import get_session
from cafepos.middleware import require_auth
from cafepos.services import stats_service
from cafepos.utils.formatters import to_float

stats_bp = Blueprint('stats', __name__, url_prefix='/api')

TRUE_VALUES = {'1', 'true', 'yes', 'on'}


def _flag(name, default):
    value = request.args.get(name)
    if value is None:
        return default
    return value.strip().lower() in TRUE_VALUES


@stats_bp.route('/stats', methods=['GET'])
@require_auth
def get_stats():
    """
    Summary for ``?timeframe=weekly|monthly|yearly|all``.

    ``salaries``, ``stock`` and ``expenses`` toggle which costs are
    subtracted in ``netProfit``.
    """
    session = get_session()
    stats = stats_service.get_stats(session, request.args.get('timeframe', 'all'))
    profit = stats_service.net_profit(
        stats,
        include_salaries=_flag('salaries', True),
        include_stock=_flag('stock', False),
        include_expenses=_flag('expenses', True)
    )
    window_start = stats['window_start']

    return jsonify({
        'timeframe': stats['timeframe'],
        'windowStart': window_start.isoformat() if window_start else None,
        'totalRevenue': to_float(stats['total_revenue']),
        'totalPotentialRevenue': to_float(stats['total_potential_revenue']),
        'unpaidRevenue': to_float(stats['unpaid_revenue']),
        'orderCount': stats['order_count'],
        'avgOrderValue': to_float(stats['avg_order_value']),
        'totalExpenses': to_float(stats['total_expenses']),
        'stockValue': to_float(stats['stock_value']),
        'totalSalaries': to_float(stats['total_salaries']),
        'netProfit': to_float(profit),
        'topProducts': [
            {'product_id': p['product_id'], 'name': p['name'], 'qty': p['qty']}
            for p in stats['top_products']
        ],
        'categoryPerformance': [
            {'category_id': c['category_id'], 'name': c['name'], 'value': to_float(c['value'])}
            for c in stats['category_performance']
        ],
    })
