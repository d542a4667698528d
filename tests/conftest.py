"""
Pytest configuration and fixtures shared by the store, ledger and view tests
"""
from datetime import date

import pytest

from app import create_app
from models import db, Product, User


@pytest.fixture
def app():
    """Create the Flask application on a throwaway in-memory database"""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite://',
        'SECRET_KEY': 'test-secret-key',
        'ORDER_SEND_DELAY': 0,
        'FALLBACK_SUPPLIER_EMAIL': None,
    })
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def ctx(app):
    """Push an application context for tests that talk to the services directly"""
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def operator_id(app):
    return make_operator(app, 'maria', email='maria@example.com', display_name='Maria Supplements')


@pytest.fixture
def other_operator_id(app):
    return make_operator(app, 'joao', email='joao@example.com', display_name='Joao Nutrition')


def make_operator(app, username, password='secret-pass', email=None, display_name=None):
    with app.app_context():
        user = User(username=username, email=email, display_name=display_name)
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        return user.id


def product_data(**overrides):
    data = {
        'name': 'Whey Protein',
        'brand': 'Growth',
        'category': 'Protein',
        'quantity': 10,
        'unit': 'kg',
        'purchase_price': 50.0,
        'sale_price': 80.0,
        'min_stock': 0,
        'active': True,
        'published': True,
    }
    data.update(overrides)
    return data


def make_product(owner_id, **overrides):
    """Insert a product directly; requires an active application context"""
    product = Product(owner_id=owner_id, **product_data(**overrides))
    db.session.add(product)
    db.session.commit()
    return product


def create_product(app, owner_id, **overrides):
    with app.app_context():
        return make_product(owner_id, **overrides).id


def login(client, username='maria', password='secret-pass'):
    return client.post('/login', data={'username': username, 'password': password}, follow_redirects=True)


TODAY = date(2026, 3, 10)
