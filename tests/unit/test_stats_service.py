"""
Unit tests for timeframe-scoped statistics.
"""

import pytest
from datetime import date, datetime
from decimal import Decimal

from cafepos.models import Expense, Order, OrderItem, OrderStatus, Product, StockItem
from cafepos.services import stats_service
from cafepos.services.stats_service import Timeframe

NOW = datetime(2024, 6, 15, 12, 0)

# Seeded staff: admin 2000 + cashier 800 per month
MONTHLY_SALARIES = Decimal('2800')


def _add_order(session, created_at, lines, paid=False, archived=False):
    pending = session.query(OrderStatus).filter_by(is_default=True).one()
    order = Order(
        status_id=pending.id,
        payment_status='paid' if paid else 'unpaid',
        is_archived=archived,
        created_at=created_at,
    )
    for product_id, name, price, qty in lines:
        order.items.append(OrderItem(product_id=product_id, name=name, price=Decimal(str(price)), qty=qty))
    order.recalculate_total()
    session.add(order)
    session.commit()
    return order.id


class TestTimeframes:

    def test_unknown_timeframe_falls_back_to_all(self):
        assert Timeframe.parse('fortnightly') is Timeframe.ALL
        assert Timeframe.parse(None) is Timeframe.ALL
        assert Timeframe.parse('WEEKLY') is Timeframe.WEEKLY

    def test_window_starts_at_midnight(self):
        assert stats_service.get_window_start(Timeframe.WEEKLY, NOW) == datetime(2024, 6, 8)
        assert stats_service.get_window_start(Timeframe.MONTHLY, NOW) == datetime(2024, 5, 16)
        assert stats_service.get_window_start(Timeframe.ALL, NOW) is None

    def test_months_inclusive(self):
        assert stats_service.months_inclusive(datetime(2024, 1, 31), datetime(2024, 2, 1)) == 2
        assert stats_service.months_inclusive(datetime(2024, 6, 1), datetime(2024, 6, 30)) == 1
        assert stats_service.months_inclusive(datetime(2024, 7, 1), datetime(2024, 6, 30)) == 1


class TestRevenue:

    def test_no_orders(self, session):
        stats = stats_service.get_stats(session, 'all', now=NOW)

        assert stats['order_count'] == 0
        assert stats['avg_order_value'] == Decimal('0')
        assert stats['total_revenue'] == Decimal('0')

    def test_paid_vs_potential(self, session, product_ids):
        espresso = product_ids['espresso']
        _add_order(session, datetime(2024, 6, 14, 9), [(espresso, 'Espresso', 5, 2)], paid=True)
        _add_order(session, datetime(2024, 6, 14, 10), [(espresso, 'Espresso', 5, 1)], paid=False)

        stats = stats_service.get_stats(session, 'all', now=NOW)

        assert stats['total_revenue'] == Decimal('10')
        assert stats['total_potential_revenue'] == Decimal('15')
        assert stats['unpaid_revenue'] == Decimal('5')
        assert stats['order_count'] == 2
        assert stats['avg_order_value'] == Decimal('5.00')

    def test_window_excludes_older_orders(self, session, product_ids):
        espresso = product_ids['espresso']
        _add_order(session, datetime(2024, 6, 10, 9), [(espresso, 'Espresso', 5, 1)], paid=True)
        _add_order(session, datetime(2024, 5, 1, 9), [(espresso, 'Espresso', 5, 4)], paid=True)

        weekly = stats_service.get_stats(session, 'weekly', now=NOW)
        yearly = stats_service.get_stats(session, 'yearly', now=NOW)

        assert weekly['order_count'] == 1
        assert weekly['total_revenue'] == Decimal('5')
        assert yearly['order_count'] == 2

    def test_archived_orders_still_count(self, session, product_ids):
        _add_order(session, datetime(2024, 6, 14), [(product_ids['espresso'], 'Espresso', 5, 1)],
                   paid=True, archived=True)

        assert stats_service.get_stats(session, 'all', now=NOW)['total_revenue'] == Decimal('5')


class TestCosts:

    def test_salaries_per_timeframe(self, session):
        assert stats_service.get_salaries(session, Timeframe.WEEKLY, NOW) == MONTHLY_SALARIES * Decimal('0.25')
        assert stats_service.get_salaries(session, Timeframe.MONTHLY, NOW) == MONTHLY_SALARIES
        assert stats_service.get_salaries(session, Timeframe.YEARLY, NOW) == MONTHLY_SALARIES * 12

    def test_salaries_all_without_orders(self, session):
        assert stats_service.get_salaries(session, Timeframe.ALL, NOW) == MONTHLY_SALARIES

    def test_salaries_all_since_first_order(self, session, product_ids):
        _add_order(session, datetime(2024, 4, 20), [(product_ids['espresso'], 'Espresso', 5, 1)])

        # April, May and June
        assert stats_service.get_salaries(session, Timeframe.ALL, NOW) == MONTHLY_SALARIES * 3

    def test_stock_value(self, session):
        session.add(StockItem(name='Beans', qty=500, unit='g', price=12, price_qty=1000, low_stock_threshold=100))
        session.add(StockItem(name='Milk', qty=10, unit='l', price=1, price_qty=1, low_stock_threshold=2))
        session.commit()

        assert stats_service.get_stock_value(session) == Decimal('16')

    def test_expenses_skip_archived_and_old(self, session):
        session.add_all([
            Expense(title='Rent', amount=300, category='Fixed', date=date(2024, 6, 10), is_archived=False),
            Expense(title='Old rent', amount=300, category='Fixed', date=date(2024, 1, 10), is_archived=False),
            Expense(title='Archived', amount=50, category='Misc', date=date(2024, 6, 12), is_archived=True),
        ])
        session.commit()

        assert stats_service.get_stats(session, 'monthly', now=NOW)['total_expenses'] == Decimal('300')
        assert stats_service.get_stats(session, 'all', now=NOW)['total_expenses'] == Decimal('600')

    def test_net_profit_toggles(self):
        stats = {
            'total_revenue': Decimal('1000'),
            'total_salaries': Decimal('200'),
            'stock_value': Decimal('50'),
            'total_expenses': Decimal('100'),
        }

        assert stats_service.net_profit(stats) == Decimal('700')
        assert stats_service.net_profit(stats, include_stock=True) == Decimal('650')
        assert stats_service.net_profit(stats, include_salaries=False, include_expenses=False) == Decimal('1000')


class TestRankings:

    def test_top_products_grouped_by_product(self, session, product_ids):
        espresso = product_ids['espresso']
        croissant = product_ids['croissant']
        _add_order(session, datetime(2024, 6, 14), [(espresso, 'Espresso', 5, 2), (croissant, 'Croissant', 3, 1)])
        # Captured under an older name, still the same product
        _add_order(session, datetime(2024, 6, 14), [(espresso, 'Espresso (old)', 5, 3)])

        top = stats_service.get_top_products(session, None)

        assert top[0] == {'product_id': espresso, 'name': 'Espresso', 'qty': 5}
        assert top[1]['product_id'] == croissant
        assert len(top) == 2

    def test_top_products_limit(self, session):
        lines = [(None, f'Item {i}', 1, i + 1) for i in range(7)]
        _add_order(session, datetime(2024, 6, 14), lines)

        top = stats_service.get_top_products(session, None)

        assert len(top) == 5
        assert top[0]['name'] == 'Item 6'

    def test_category_performance(self, session, product_ids, category_id):
        _add_order(session, datetime(2024, 6, 14), [
            (product_ids['espresso'], 'Espresso', 5, 2),
            (product_ids['croissant'], 'Croissant', 3, 1),
        ])

        performance = stats_service.get_category_performance(session, None)

        # The croissant has no category
        assert len(performance) == 1
        assert performance[0]['category_id'] == category_id
        assert performance[0]['value'] == pytest.approx(Decimal('10'))
