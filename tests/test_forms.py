from datetime import date

import pytest

from errors import AuthError, ValidationError
from forms import parse_customer_form, parse_product_form, parse_sale_form

VALID = {
    'name': 'Whey Protein',
    'brand': 'Growth',
    'category': 'Protein',
    'quantity': '10',
    'unit': 'kg',
    'purchase_price': '50',
    'sale_price': '79,90',
    'purchase_date': '2026-01-15',
    'image_url': 'https://cdn.example.com/whey.PNG',
    'active': 'on',
}


def test_valid_product_form_is_converted():
    data = parse_product_form(VALID)

    assert data['quantity'] == 10
    assert data['sale_price'] == pytest.approx(79.9)
    assert data['min_stock'] == 0
    assert data['purchase_date'] == date(2026, 1, 15)
    assert data['expiry_date'] is None
    assert data['active'] is True
    assert data['published'] is False
    assert data['description'] is None


@pytest.mark.parametrize('field, value', [
    ('name', ''),
    ('name', 'ab'),
    ('brand', ''),
    ('category', 'Snacks'),
    ('unit', ''),
    ('quantity', ''),
    ('quantity', '-1'),
    ('quantity', 'lots'),
    ('quantity', 'nan'),
    ('quantity', 'inf'),
    ('purchase_price', ''),
    ('sale_price', '-5'),
    ('purchase_price', 'inf'),
    ('min_stock', '-Infinity'),
    ('expiry_date', '31/12/2026'),
    ('image_url', 'https://example.com/photo.bmp'),
    ('description', 'x' * 501),
])
def test_invalid_product_field_is_reported(field, value):
    form = dict(VALID, **{field: value})

    with pytest.raises(ValidationError) as excinfo:
        parse_product_form(form)

    assert list(excinfo.value.errors) == [field]


def test_sale_form_requires_positive_values():
    assert parse_sale_form({'quantity': '2', 'amount': '150'}) == (2, 150)

    with pytest.raises(ValidationError) as excinfo:
        parse_sale_form({'quantity': '0', 'amount': ''})

    assert set(excinfo.value.errors) == {'quantity', 'amount'}


def test_non_finite_numbers_are_not_numbers():
    with pytest.raises(ValidationError) as excinfo:
        parse_product_form(dict(VALID, quantity='NaN', purchase_price='inf'))

    assert excinfo.value.errors == {
        'quantity': 'Quantity must be a number.',
        'purchase_price': 'Purchase price must be a number.',
    }

    with pytest.raises(ValidationError) as excinfo:
        parse_sale_form({'quantity': 'nan', 'amount': 'inf'})

    assert set(excinfo.value.errors) == {'quantity', 'amount'}


def test_customer_form():
    customer = parse_customer_form({'name': ' Ana ', 'email': 'ana@example.com', 'phone': '555'})
    assert customer.name == 'Ana'
    assert customer.notes == ''

    with pytest.raises(ValidationError) as excinfo:
        parse_customer_form({'name': 'Ana', 'email': 'not-an-email', 'phone': ''})
    assert set(excinfo.value.errors) == {'email', 'phone'}


def test_auth_error_messages():
    assert 'blocked' in str(AuthError('popup-blocked'))
    assert 'cancelled' in str(AuthError('popup-closed-by-user'))
    assert 'not configured' in str(AuthError('configuration-not-found'))
    assert 'not authorized' in str(AuthError('unauthorized-domain'))
    assert str(AuthError('network-request-failed', 'Network down.')) == 'Error signing in. Network down.'
