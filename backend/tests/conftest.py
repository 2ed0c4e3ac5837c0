"""
Pytest fixtures for Shopdesk backend tests.

Provides test database setup, admin/staff accounts with login headers, and
a sample product.
"""

import pytest
from shopdesk import create_app
from shopdesk.extensions import db
from shopdesk.models import Product
from shopdesk.services.auth_service import create_user
from shopdesk.services.dashboard_service import invalidate_dashboard_cache

TEST_PASSWORD = "Password123!"


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'BUSINESS_NAME': 'Hygienic & Comfort Co.',
        'PHONE_COUNTRY_CODE': '91',
        'CURRENCY_SYMBOL': '₹',
    })

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()
        # Bulk deletes bypass the ORM events, so drop the snapshot by hand
        invalidate_dashboard_cache()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def admin_user(db_session):
    return create_user(
        email="admin@shopdesk.test",
        password=TEST_PASSWORD,
        role="admin",
        full_name="Asha Admin",
        employee_id="E-001",
    )


@pytest.fixture(scope='function')
def staff_user(db_session):
    return create_user(
        email="staff@shopdesk.test",
        password=TEST_PASSWORD,
        role="staff",
        full_name="Sam Staff",
        employee_id="E-002",
    )


@pytest.fixture(scope='function')
def admin_headers(client, admin_user):
    return auth_headers(get_auth_token(client, admin_user.email, TEST_PASSWORD))


@pytest.fixture(scope='function')
def staff_headers(client, staff_user):
    return auth_headers(get_auth_token(client, staff_user.email, TEST_PASSWORD))


@pytest.fixture(scope='function')
def product(db_session):
    """Stocked product: 20 on hand, reorder level 5."""
    product = Product(
        name="Cotton Pads",
        category="Hygienic",
        price_cents=4500,
        purchase_cost_cents=3000,
        stock=20,
        min_stock=5,
        barcode="8901234567890",
        images=[],
    )
    db_session.add(product)
    db_session.commit()
    return product


def get_auth_token(client, email: str, password: str) -> str:
    """Helper to get auth token for a user."""
    response = client.post('/api/auth/login', json={
        'email': email,
        'password': password
    })
    if response.status_code == 200:
        return response.json.get('token')
    return None


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}
