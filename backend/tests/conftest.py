"""
Pytest fixtures for PVZ backend tests.

Provides the Flask app on an in-memory SQLite database, a clean database per
test, in-memory service fixtures and bearer-token helpers.
"""

import pytest

from pvz import create_app
from pvz.container import build_stores
from pvz.extensions import db
from pvz.services import (
    IdentityConfig,
    IdentityService,
    PickupPointService,
    ProductService,
    ReceptionService,
)
from pvz.services.concurrency import KeyedLock


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SECRET_KEY': 'test-secret',
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'STORE_BACKEND': 'sql',
        'BCRYPT_ROUNDS': 4,
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

        yield db.session

        # Cleanup after test
        db.session.rollback()


# =============================================================================
# IN-MEMORY SERVICES
# =============================================================================


@pytest.fixture
def stores():
    return build_stores("memory")


@pytest.fixture
def locks():
    return KeyedLock()


@pytest.fixture
def pickup_points(stores):
    return PickupPointService(stores.pickup_points, stores.receptions, stores.products)


@pytest.fixture
def receptions(stores, locks):
    return ReceptionService(stores.receptions, stores.pickup_points, locks=locks)


@pytest.fixture
def products(stores, locks):
    return ProductService(stores.products, stores.receptions, locks=locks)


@pytest.fixture
def identity(stores):
    config = IdentityConfig(secret_key="test-secret", bcrypt_rounds=4)
    return IdentityService(stores.users, stores.sessions, config)


@pytest.fixture
def moscow(pickup_points):
    """A registered pickup point in Moscow."""
    return pickup_points.create_pickup_point("Moscow")


# =============================================================================
# AUTH HELPERS
# =============================================================================


def get_dummy_token(client, role: str) -> str:
    """Helper to get a dummy-login token for a role."""
    response = client.post('/dummyLogin', json={'role': role})
    if response.status_code == 200:
        return response.json.get('token')
    return None


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def moderator_headers(client, db_session):
    return auth_headers(get_dummy_token(client, 'moderator'))


@pytest.fixture
def employee_headers(client, db_session):
    return auth_headers(get_dummy_token(client, 'employee'))
