"""
Pytest fixtures for the POS backend tests.

Provides test database setup, tenant fixtures (two businesses), stocked
products and identity headers for the test client.
"""

import pytest
from pos_backend import create_app
from pos_backend.extensions import db
from pos_backend.models import Business, Branch, Product


TEST_CONFIG = {
    'TESTING': True,
    'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
    'SQLALCHEMY_TRACK_MODIFICATIONS': False,
    'SALE_RETRY_BACKOFF': 0,
}


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app(TEST_CONFIG)

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
def business_a(db_session):
    """Create Business A (first tenant)."""
    business = Business(name="Business A - Acme Pharmacy")
    db_session.add(business)
    db_session.commit()
    return business


@pytest.fixture(scope='function')
def business_b(db_session):
    """Create Business B (second tenant)."""
    business = Business(name="Business B - Beta Stores")
    db_session.add(business)
    db_session.commit()
    return business


@pytest.fixture(scope='function')
def branch_a(db_session, business_a):
    branch = Branch(business_id=business_a.id, branch_name="A Main", is_main_branch=True)
    db_session.add(branch)
    db_session.commit()
    return branch


@pytest.fixture(scope='function')
def branch_b(db_session, business_b):
    branch = Branch(business_id=business_b.id, branch_name="B Main", is_main_branch=True)
    db_session.add(branch)
    db_session.commit()
    return branch


def make_product(db_session, branch, name, price_cents, stock, threshold=0):
    product = Product(
        business_id=branch.business_id,
        branch_id=branch.id,
        product_name=name,
        selling_price_cents=price_cents,
        quantity_in_stock=stock,
        low_stock_threshold=threshold,
    )
    db_session.add(product)
    db_session.commit()
    return product


@pytest.fixture(scope='function')
def product_p(db_session, branch_a):
    """Product P in Business A: stock 5, price 10.00."""
    return make_product(db_session, branch_a, "Product P", 1000, 5)


@pytest.fixture(scope='function')
def product_r(db_session, branch_a):
    """Second product in Business A: stock 3, price 2.50."""
    return make_product(db_session, branch_a, "Product R", 250, 3)


@pytest.fixture(scope='function')
def product_q(db_session, branch_b):
    """Product Q in Business B."""
    return make_product(db_session, branch_b, "Product Q", 2000, 10)


def auth_headers(business_id: str, user_id: str = "cashier-1", role: str | None = "cashier") -> dict:
    """Identity headers as forwarded by the authenticating gateway."""
    headers = {'X-Business-ID': business_id, 'X-User-ID': user_id}
    if role:
        headers['X-User-Role'] = role
    return headers
