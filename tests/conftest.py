"""
Shared fixtures for the API tests.

Requests are made without an app context held open by the test, so every
request loads its user from the bearer token afresh. Fixtures that touch the
database open their own short-lived app context and hand back plain ids.
"""

import pytest
from datetime import date

from stockroom import create_app
from stockroom.auth import issue_token
from stockroom.capabilities import ROLE_ADMIN, ROLE_USER
from stockroom.config import TestConfig
from stockroom.extensions import db
from stockroom.models.category import Category
from stockroom.models.order import Order, OrderDetail, ORDER_DELIVERED, ORDER_PENDING
from stockroom.models.product import Product
from stockroom.models.supplier import Supplier
from stockroom.models.user import User


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture(scope='function')
def app():
    """Create and configure a new app instance for each test."""
    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def _make_user(app, username, role):
    with app.app_context():
        user = User(username=username, email=f'{username}@stockroom.io', role=role)
        user.set_password('secret123')
        db.session.add(user)
        db.session.commit()
        return {'id': user.id, 'username': username, 'token': issue_token(user)}


@pytest.fixture
def admin_user(app):
    return _make_user(app, 'alice', ROLE_ADMIN)


@pytest.fixture
def regular_user(app):
    return _make_user(app, 'bob', ROLE_USER)


def bearer(user):
    return {'Authorization': f"Bearer {user['token']}"}


@pytest.fixture
def admin_headers(admin_user):
    return bearer(admin_user)


@pytest.fixture
def user_headers(regular_user):
    return bearer(regular_user)


@pytest.fixture
def make_supplier(app):
    def _make(name='Green Valley Farms'):
        with app.app_context():
            supplier = Supplier(name=name, contact='Ana', email='ana@greenvalley.io', address='12 Orchard Rd')
            db.session.add(supplier)
            db.session.commit()
            return supplier.id
    return _make


@pytest.fixture
def make_category(app):
    def _make(name='Produce'):
        with app.app_context():
            category = Category(name=name)
            db.session.add(category)
            db.session.commit()
            return category.id
    return _make


@pytest.fixture
def make_product(app):
    def _make(name='Apples', supplier_id=None, current_stock=10, min_quantity=5, **fields):
        with app.app_context():
            product = Product(name=name, supplier_id=supplier_id, current_stock=current_stock,
                              min_quantity=min_quantity, **fields)
            db.session.add(product)
            db.session.commit()
            return product.id
    return _make


@pytest.fixture
def make_order(app):
    """Insert an order directly; ``lines`` are (product_id, quantity, unit_price) tuples."""
    def _make(supplier_id, lines, status=ORDER_PENDING, order_date=None, delivered_date=None):
        with app.app_context():
            order = Order(supplier_id=supplier_id, status=status, order_date=order_date or date.today())
            if status == ORDER_DELIVERED:
                order.delivered_date = delivered_date or order.order_date
            order.details = [
                OrderDetail(product_id=product_id, supplier_id=supplier_id,
                            requested_quantity=quantity, unit_price=price)
                for product_id, quantity, price in lines
            ]
            order.recompute_total()
            db.session.add(order)
            db.session.commit()
            return order.id
    return _make
