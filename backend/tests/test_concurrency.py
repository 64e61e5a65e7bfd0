# Overview: Concurrency tests for sale recording against a file-backed database.

"""
Concurrent sales run in real threads, each with its own app context and
database session, against a temporary SQLite file (in-memory databases are
per-connection and cannot be shared between threads).
"""

import threading

import pytest

from pos_backend import create_app
from pos_backend.errors import ErrorKind
from pos_backend.extensions import db
from pos_backend.models import Business, Branch, Product, Sale
from pos_backend.services import sales_service
from pos_backend.services.sales_service import SaleError

pytestmark = pytest.mark.concurrency


@pytest.fixture
def file_app(tmp_path):
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': f"sqlite:///{tmp_path / 'concurrency.db'}",
        'SALE_RETRY_BACKOFF': 0.05,
    })

    with app.app_context():
        db.create_all()

    yield app

    with app.app_context():
        db.session.remove()
        db.drop_all()
        db.engine.dispose()


def _seed(app, stocks):
    """Create one business with a product per stock level; returns ids."""
    with app.app_context():
        business = Business(name="Concurrency Shop")
        db.session.add(business)
        db.session.flush()
        branch = Branch(business_id=business.id, branch_name="Main")
        db.session.add(branch)
        db.session.flush()

        product_ids = []
        for i, stock in enumerate(stocks):
            product = Product(
                business_id=business.id,
                branch_id=branch.id,
                product_name=f"Hot Item {i}",
                selling_price_cents=1000,
                quantity_in_stock=stock,
            )
            db.session.add(product)
            db.session.flush()
            product_ids.append(product.id)

        db.session.commit()
        return business.id, branch.id, product_ids


def _run_concurrently(app, item_lists, business_id, branch_id):
    results = []
    lock = threading.Lock()
    barrier = threading.Barrier(len(item_lists))

    def worker(items):
        with app.app_context():
            try:
                barrier.wait()
                result = sales_service.create_sale(business_id, "cashier", branch_id, "cash", items)
                with lock:
                    results.append(result)
            except Exception as exc:
                with lock:
                    results.append(exc)
            finally:
                db.session.remove()

    threads = [threading.Thread(target=worker, args=(items,)) for items in item_lists]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    return results


def _stock(app, product_id):
    with app.app_context():
        return db.session.get(Product, product_id).quantity_in_stock


def test_last_unit_sold_exactly_once(file_app):
    business_id, branch_id, (product_id,) = _seed(file_app, [1])
    items = [{"product_id": product_id, "quantity": 1}]

    results = _run_concurrently(file_app, [items, items], business_id, branch_id)

    succeeded = [r for r in results if isinstance(r, sales_service.SaleResult)]
    failed = [r for r in results if isinstance(r, SaleError)]
    assert len(succeeded) == 1
    assert len(failed) == 1
    assert failed[0].kind is ErrorKind.CONFLICT
    assert str(failed[0]).startswith("insufficient stock")
    assert _stock(file_app, product_id) == 0


def test_concurrent_sales_never_oversell(file_app):
    business_id, branch_id, (product_id,) = _seed(file_app, [10])
    items = [{"product_id": product_id, "quantity": 3}]

    results = _run_concurrently(file_app, [items] * 5, business_id, branch_id)

    succeeded = [r for r in results if isinstance(r, sales_service.SaleResult)]
    assert len(succeeded) == 3
    assert all(isinstance(r, SaleError) and r.kind is ErrorKind.CONFLICT
               for r in results if r not in succeeded)
    assert _stock(file_app, product_id) == 1

    with file_app.app_context():
        assert db.session.query(Sale).count() == 3


def test_opposite_item_order_does_not_deadlock(file_app):
    business_id, branch_id, (first_id, second_id) = _seed(file_app, [10, 10])
    forward = [{"product_id": first_id, "quantity": 1}, {"product_id": second_id, "quantity": 1}]
    backward = list(reversed(forward))

    results = _run_concurrently(file_app, [forward, backward] * 2, business_id, branch_id)

    assert all(isinstance(r, sales_service.SaleResult) for r in results), results
    assert _stock(file_app, first_id) == 6
    assert _stock(file_app, second_id) == 6
