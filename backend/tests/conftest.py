"""
Pytest fixtures for RestoPOS backend tests.

Provides an in-memory database, seeded permissions, one user per role and
helpers for logging in through the API.
"""

import pytest

from restopos import create_app
from restopos.extensions import db
from restopos.models import DiningTable, Product, Supplier, User
from restopos.services import permission_service
from restopos.services.auth_service import hash_password


PASSWORD = "Password123!"

_password_hash = None


def _cached_hash() -> str:
    # bcrypt at cost 12 is slow; hash the shared test password once per run
    global _password_hash
    if _password_hash is None:
        _password_hash = hash_password(PASSWORD)
    return _password_hash


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
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


@pytest.fixture(scope='function')
def setup_permissions(db_session):
    """Seed permissions and the default role grants."""
    permission_service.initialize_permissions()
    permission_service.assign_default_role_permissions()
    db_session.commit()


def make_user(db_session, email: str, role: str, **kwargs) -> User:
    user = User(
        email=email,
        full_name=kwargs.pop("full_name", email.split("@")[0].title()),
        role=role,
        password_hash=_cached_hash(),
        is_active=kwargs.pop("is_active", True),
        **kwargs,
    )
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture(scope='function')
def admin_user(db_session, setup_permissions):
    return make_user(db_session, "admin@restopos.test", "admin")


@pytest.fixture(scope='function')
def manager_user(db_session, setup_permissions):
    return make_user(db_session, "manager@restopos.test", "manager")


@pytest.fixture(scope='function')
def cashier_user(db_session, setup_permissions):
    return make_user(db_session, "cashier@restopos.test", "cashier")


@pytest.fixture(scope='function')
def kitchen_user(db_session, setup_permissions):
    return make_user(db_session, "kitchen@restopos.test", "kitchen")


def get_auth_token(app, email: str, password: str = PASSWORD) -> str:
    """
    Log in through the API and return the session token.

    Uses a throwaway client so the authToken cookie does not leak into the
    test's own client (the cookie wins over the Authorization header).
    """
    response = app.test_client().post('/api/auth/login', json={
        'email': email,
        'password': password,
    })
    if response.status_code == 200:
        return response.get_json().get('token')
    return None


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture(scope='function')
def admin_headers(app, admin_user):
    return auth_headers(get_auth_token(app, admin_user.email))


@pytest.fixture(scope='function')
def manager_headers(app, manager_user):
    return auth_headers(get_auth_token(app, manager_user.email))


@pytest.fixture(scope='function')
def cashier_headers(app, cashier_user):
    return auth_headers(get_auth_token(app, cashier_user.email))


@pytest.fixture(scope='function')
def kitchen_headers(app, kitchen_user):
    return auth_headers(get_auth_token(app, kitchen_user.email))


@pytest.fixture(scope='function')
def tables(db_session):
    """Three active dining tables, numbered 1-3."""
    rows = [DiningTable(number=n, seats=4, is_active=True) for n in (1, 2, 3)]
    db_session.add_all(rows)
    db_session.commit()
    return rows


@pytest.fixture(scope='function')
def supplier(db_session):
    s = Supplier(name="Fresh Farms", contact_person="Sara", email="orders@freshfarms.test", is_active=True)
    db_session.add(s)
    db_session.commit()
    return s


@pytest.fixture(scope='function')
def products(db_session, supplier):
    rows = [
        Product(sku="TOM-001", name="Tomatoes", category="Produce", quantity=10,
                unit_price=2.5, supplier_id=supplier.id, is_active=True),
        Product(sku="OIL-001", name="Olive Oil", category="Pantry", quantity=4,
                unit_price=12.0, supplier_id=supplier.id, is_active=True),
    ]
    db_session.add_all(rows)
    db_session.commit()
    return rows
