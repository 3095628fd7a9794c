"""
Integration tests for authentication and authorization.
"""

import jwt
from datetime import datetime, timedelta, timezone

from cafepos.models import AuditLog


class TestLogin:
    """POST /api/auth."""

    def test_login_returns_user_and_token(self, client, app, session):
        response = client.post('/api/auth', json={'username': 'admin', 'password': '123'})

        assert response.status_code == 200
        data = response.get_json()
        assert data['user']['username'] == 'admin'
        assert data['user']['role'] == 'admin'
        assert 'password' not in data['user']
        assert 'password_hash' not in data['user']

        claims = jwt.decode(data['token'], app.config['JWT_SECRET'], algorithms=['HS256'])
        assert claims['id'] == data['user']['id']
        assert 'exp' in claims

        assert session.query(AuditLog).filter_by(action='Login').count() == 1

    def test_wrong_password(self, client):
        response = client.post('/api/auth', json={'username': 'admin', 'password': 'nope'})

        assert response.status_code == 401
        assert response.get_json()['status'] == 'error'

    def test_unknown_user(self, client):
        response = client.post('/api/auth', json={'username': 'ghost', 'password': '123'})
        assert response.status_code == 401


class TestBearerTokens:
    """Protected routes."""

    def test_missing_token_is_401(self, client):
        assert client.get('/api/orders').status_code == 401

    def test_garbage_token_is_403(self, client):
        response = client.get('/api/orders', headers={'Authorization': 'Bearer not-a-token'})
        assert response.status_code == 403

    def test_wrong_secret_is_403(self, client):
        token = jwt.encode({'id': 1, 'username': 'admin', 'name': 'Admin', 'role': 'admin'},
                           'some-other-secret', algorithm='HS256')
        response = client.get('/api/orders', headers={'Authorization': f'Bearer {token}'})
        assert response.status_code == 403

    def test_expired_token_is_403(self, client, app):
        past = datetime.now(timezone.utc) - timedelta(hours=2)
        token = jwt.encode(
            {'id': 1, 'username': 'admin', 'name': 'Admin', 'role': 'admin', 'exp': past},
            app.config['JWT_SECRET'], algorithm='HS256'
        )
        response = client.get('/api/orders', headers={'Authorization': f'Bearer {token}'})
        assert response.status_code == 403

    def test_valid_token(self, client, cashier_headers):
        assert client.get('/api/orders', headers=cashier_headers).status_code == 200

    def test_public_routes_need_no_token(self, client):
        assert client.get('/api/products').status_code == 200
        assert client.get('/api/categories').status_code == 200
        assert client.get('/api/stock').status_code == 200
        assert client.get('/api/settings').status_code == 200


class TestRoles:
    """Admin-only user management."""

    def test_cashier_cannot_list_users(self, client, cashier_headers):
        assert client.get('/api/users', headers=cashier_headers).status_code == 403

    def test_admin_lists_users_without_passwords(self, client, admin_headers):
        response = client.get('/api/users', headers=admin_headers)

        assert response.status_code == 200
        users = response.get_json()
        assert {u['username'] for u in users} == {'admin', 'cashier'}
        assert all('password_hash' not in u for u in users)
