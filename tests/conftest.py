import fakeredis
import pytest

from cafepos import create_app
from cafepos.database import get_store
from cafepos.services.event_service import init_events
from cafepos.models import Category, Product, StockItem, User


@pytest.fixture(scope='function')
def app(tmp_path):
    """Create application instance for testing (fresh in-memory database)."""
    app = create_app('config.TestConfig')
    app.config['UPLOAD_FOLDER'] = str(tmp_path / 'uploads')
    init_events(app, client=fakeredis.FakeRedis(server=fakeredis.FakeServer(), decode_responses=True))

    ctx = app.app_context()
    ctx.push()
    yield app
    ctx.pop()
    get_store(app).dispose()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def session(app):
    """Database session bound to the test's application."""
    session = get_store(app).session
    yield session
    session.rollback()


def _login(client, username, password):
    response = client.post('/api/auth', json={'username': username, 'password': password})
    assert response.status_code == 200, response.get_json()
    return response.get_json()['token']


@pytest.fixture(scope='function')
def admin_headers(client):
    """Bearer header for the seeded admin account."""
    return {'Authorization': f"Bearer {_login(client, 'admin', '123')}"}


@pytest.fixture(scope='function')
def cashier_headers(client):
    """Bearer header for the seeded cashier account."""
    return {'Authorization': f"Bearer {_login(client, 'cashier', '000')}"}


@pytest.fixture(scope='function')
def admin_claims(session):
    admin = session.query(User).filter_by(username='admin').one()
    return admin.claims


@pytest.fixture(scope='function')
def category_id(session):
    """Id of a test category."""
    category = Category(name='Test Beverages', name_ar='مشروبات', icon='Coffee')
    session.add(category)
    session.commit()
    return category.id


@pytest.fixture(scope='function')
def product_ids(session, category_id):
    """Ids of two active products: espresso (5.00) and croissant (3.00)."""
    espresso = Product(name='Espresso', name_ar='اسبريسو', price=5, category_id=category_id, active=True)
    croissant = Product(name='Croissant', name_ar='كرواسون', price=3, category_id=None, active=True)
    session.add_all([espresso, croissant])
    session.commit()
    return {'espresso': espresso.id, 'croissant': croissant.id}


@pytest.fixture(scope='function')
def stock_item_id(session):
    item = StockItem(name='Coffee beans', qty=3, unit='kg', price=12, price_qty=1, low_stock_threshold=5)
    session.add(item)
    session.commit()
    return item.id


@pytest.fixture(scope='function')
def order_items(product_ids):
    """Line items of a 13.00 order: 2 x espresso + 1 x croissant."""
    return [
        {'product_id': product_ids['espresso'], 'name': 'Espresso', 'price': 5, 'qty': 2},
        {'product_id': product_ids['croissant'], 'name': 'Croissant', 'price': 3, 'qty': 1},
    ]
