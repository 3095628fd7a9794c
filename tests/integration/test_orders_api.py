"""
Integration tests for the order endpoints and live notifications.
"""

import fakeredis
import pytest

from cafepos.models import AuditLog, Order
from cafepos.services.event_service import (
    get_event_bus, decode_message, init_events, NEW_ORDER_EVENT
)


def _place_order(client, items, total=13):
    response = client.post('/api/orders', json={'items': items, 'total': total})
    assert response.status_code == 200, response.get_json()
    return response.get_json()['id']


def _audit_count(session, action):
    return session.query(AuditLog).filter_by(action=action).count()


class TestPlaceOrder:
    """POST /api/orders (public)."""

    def test_place_order(self, client, session, order_items, admin_headers):
        order_id = _place_order(client, order_items)

        response = client.get(f'/api/orders/{order_id}', headers=admin_headers)
        order = response.get_json()
        assert order['total'] == 13.0
        assert order['status'] == 'pending'
        assert order['payment_status'] == 'unpaid'
        assert len(order['items']) == 2

        entry = session.query(AuditLog).filter_by(action='Customer Order').one()
        assert entry.user_name == 'System'
        assert entry.details == f'New order #{order_id} placed from POS (Total: $13.00)'

    def test_place_order_notifies_subscribers(self, client, app, order_items):
        pubsub = get_event_bus(app).subscribe()
        try:
            order_id = _place_order(client, order_items)
            received = None
            for _ in range(20):
                received = decode_message(pubsub.get_message(timeout=0.05))
                if received:
                    break
            assert received == (NEW_ORDER_EVENT, {'id': order_id})
        finally:
            pubsub.close()

    def test_place_order_survives_redis_outage(self, client, app, session, order_items):
        server = fakeredis.FakeServer()
        server.connected = False
        init_events(app, client=fakeredis.FakeRedis(server=server, decode_responses=True))

        order_id = _place_order(client, order_items)

        assert session.get(Order, order_id) is not None

    @pytest.mark.parametrize('qty', [10 ** 30, 10000, 1.5])
    def test_unreasonable_qty_rejected(self, client, session, product_ids, qty):
        response = client.post('/api/orders', json={
            'items': [{'product_id': product_ids['espresso'], 'name': 'Espresso', 'price': 5, 'qty': qty}],
        })

        assert response.status_code == 400
        assert response.get_json()['status'] == 'error'
        assert session.query(Order).count() == 0

    def test_deleted_order_id_not_reused(self, client, order_items, admin_headers):
        first = _place_order(client, order_items)
        newest = _place_order(client, order_items)
        client.delete(f'/api/orders/{newest}', headers=admin_headers)

        replacement = _place_order(client, order_items)

        assert replacement > newest > first
        assert client.get(f'/api/orders/{newest}', headers=admin_headers).status_code == 404

    def test_empty_order_rejected(self, client, session):
        response = client.post('/api/orders', json={'items': []})

        assert response.status_code == 400
        assert session.query(Order).count() == 0

    def test_non_json_body_rejected(self, client):
        response = client.post('/api/orders', data='items', content_type='text/plain')
        assert response.status_code == 400


class TestOrderViews:
    """Admin and kitchen lists."""

    def test_kitchen_queue(self, client, order_items, admin_headers):
        first = _place_order(client, order_items)
        second = _place_order(client, order_items)
        client.post(f'/api/orders/{first}/status', json={'status': 'Ready'}, headers=admin_headers)

        active = client.get('/api/orders/active', headers=admin_headers).get_json()

        assert [o['id'] for o in active] == [second]

    def test_archived_view(self, client, order_items, admin_headers):
        order_id = _place_order(client, order_items)
        client.post(f'/api/orders/{order_id}/archive', headers=admin_headers)

        assert client.get('/api/orders', headers=admin_headers).get_json() == []
        archived = client.get('/api/orders/archived', headers=admin_headers).get_json()
        assert [o['id'] for o in archived] == [order_id]

    def test_unknown_order_is_404(self, client, admin_headers):
        assert client.get('/api/orders/4242', headers=admin_headers).status_code == 404

    def test_order_statuses(self, client, admin_headers):
        statuses = client.get('/api/order-statuses', headers=admin_headers).get_json()

        assert [s['status'] for s in statuses] == ['pending', 'preparing', 'ready', 'cancelled']
        assert sum(1 for s in statuses if s['is_default']) == 1


class TestOrderMutations:
    """Status, payment, update, archival and deletion."""

    def test_status_change(self, client, session, order_items, admin_headers):
        order_id = _place_order(client, order_items)

        response = client.post(f'/api/orders/{order_id}/status', json={'status': 'READY'}, headers=admin_headers)

        assert response.get_json() == {'success': True, 'updated': True}
        assert session.get(Order, order_id).status.key == 'ready'
        assert _audit_count(session, 'Update Order Status') == 1

    def test_unknown_status_reports_no_update(self, client, session, order_items, admin_headers):
        order_id = _place_order(client, order_items)

        response = client.post(f'/api/orders/{order_id}/status', json={'status': 'bogus'}, headers=admin_headers)

        assert response.status_code == 200
        assert response.get_json()['updated'] is False
        assert session.get(Order, order_id).status.key == 'pending'
        assert _audit_count(session, 'Update Order Status') == 0

    def test_payment(self, client, session, order_items, admin_headers):
        order_id = _place_order(client, order_items)

        response = client.post(f'/api/orders/{order_id}/payment', json={'status': 'paid'}, headers=admin_headers)

        assert response.status_code == 200
        assert session.get(Order, order_id).payment_status == 'paid'

    def test_invalid_payment_is_400(self, client, order_items, admin_headers):
        order_id = _place_order(client, order_items)

        response = client.post(f'/api/orders/{order_id}/payment', json={'status': 'maybe'}, headers=admin_headers)
        assert response.status_code == 400

    def test_update_items(self, client, order_items, product_ids, admin_headers):
        order_id = _place_order(client, order_items)

        response = client.post('/api/orders/update', json={
            'id': order_id,
            'items': [{'product_id': product_ids['espresso'], 'name': 'Espresso', 'price': 5, 'qty': 1}],
            'total': 999,
        }, headers=admin_headers)

        assert response.status_code == 200
        order = client.get(f'/api/orders/{order_id}', headers=admin_headers).get_json()
        assert order['total'] == 5.0
        assert len(order['items']) == 1

    def test_update_unknown_order_is_404(self, client, order_items, admin_headers):
        response = client.post('/api/orders/update', json={'id': 4242, 'items': order_items}, headers=admin_headers)
        assert response.status_code == 404

    def test_archive_twice_logs_each_call(self, client, session, order_items, admin_headers):
        order_id = _place_order(client, order_items)

        for _ in range(2):
            response = client.post(f'/api/orders/{order_id}/archive', headers=admin_headers)
            assert response.status_code == 200

        assert session.get(Order, order_id).is_archived is True
        assert _audit_count(session, 'Archive Order') == 2

    def test_bulk_archive(self, client, session, order_items, admin_headers):
        ids = [_place_order(client, order_items) for _ in range(3)]

        response = client.post('/api/orders/bulk-archive', json={'ids': ids[:2]}, headers=admin_headers)

        assert response.get_json()['count'] == 2
        assert [o['id'] for o in client.get('/api/orders', headers=admin_headers).get_json()] == [ids[2]]
        entry = session.query(AuditLog).filter_by(action='Bulk Archive Orders').one()
        assert entry.details == f'Archived orders: {ids[0]}, {ids[1]}'

    def test_bulk_archive_rejects_fractional_ids(self, client, session, order_items, admin_headers):
        order_id = _place_order(client, order_items)

        response = client.post('/api/orders/bulk-archive', json={'ids': [order_id + 0.7]}, headers=admin_headers)

        assert response.status_code == 400
        assert session.get(Order, order_id).is_archived is False
        assert _audit_count(session, 'Bulk Archive Orders') == 0

    def test_update_rejects_fractional_id(self, client, session, order_items, admin_headers):
        order_id = _place_order(client, order_items)

        response = client.post('/api/orders/update', json={'id': order_id + 0.5, 'items': order_items},
                               headers=admin_headers)

        assert response.status_code == 400

    def test_bulk_archive_empty_is_silent(self, client, session, admin_headers):
        response = client.post('/api/orders/bulk-archive', json={'ids': []}, headers=admin_headers)

        assert response.status_code == 200
        assert _audit_count(session, 'Bulk Archive Orders') == 0

    def test_archive_all_and_clear(self, client, session, order_items, admin_headers):
        _place_order(client, order_items)
        _place_order(client, order_items)

        assert client.post('/api/orders/archive-all', headers=admin_headers).get_json()['count'] == 2

        response = client.delete('/api/orders/clear', headers=admin_headers)
        assert response.get_json()['count'] == 2
        assert session.query(Order).count() == 0
        assert _audit_count(session, 'Clear Orders History') == 1

    def test_delete_order(self, client, session, order_items, admin_headers):
        order_id = _place_order(client, order_items)

        assert client.delete(f'/api/orders/{order_id}', headers=admin_headers).status_code == 200
        assert session.get(Order, order_id) is None

    @pytest.mark.parametrize('method, path', [
        ('post', '/api/orders/update'),
        ('post', '/api/orders/1/status'),
        ('post', '/api/orders/1/archive'),
        ('post', '/api/orders/archive-all'),
        ('delete', '/api/orders/clear'),
        ('get', '/api/order-statuses'),
    ])
    def test_mutations_require_auth(self, client, method, path):
        assert getattr(client, method)(path, json={}).status_code == 401


class TestStatsEndpoint:

    def test_stats_shape(self, client, order_items, admin_headers):
        order_id = _place_order(client, order_items)
        client.post(f'/api/orders/{order_id}/payment', json={'status': 'paid'}, headers=admin_headers)
        _place_order(client, order_items)

        stats = client.get('/api/stats?timeframe=monthly', headers=admin_headers).get_json()

        assert stats['timeframe'] == 'monthly'
        assert stats['totalRevenue'] == 13.0
        assert stats['totalPotentialRevenue'] == 26.0
        assert stats['unpaidRevenue'] == 13.0
        assert stats['orderCount'] == 2
        assert stats['avgOrderValue'] == 6.5
        assert stats['totalSalaries'] == 2800.0
        assert stats['netProfit'] == 13.0 - 2800.0
        assert stats['topProducts'][0]['name'] == 'Espresso'
        assert stats['topProducts'][0]['qty'] == 4

    def test_net_profit_toggles(self, client, admin_headers):
        stats = client.get('/api/stats?timeframe=monthly&salaries=false', headers=admin_headers).get_json()
        assert stats['netProfit'] == 0.0

    def test_unknown_timeframe_is_all(self, client, admin_headers):
        stats = client.get('/api/stats?timeframe=decade', headers=admin_headers).get_json()

        assert stats['timeframe'] == 'all'
        assert stats['avgOrderValue'] == 0.0
