# forms.py - validates submitted forms before anything reaches the store
# each parser returns clean python values or raises ValidationError

import math
import re
from datetime import date

from cart import Customer
from errors import ValidationError
from models import CATEGORIES, UNITS

MIN_NAME_LENGTH = 3
MAX_NAME_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 500
MAX_QUANTITY = 999999

IMAGE_URL = re.compile(r'^https?://.+\.(jpg|jpeg|png|gif|webp)$', re.IGNORECASE)
EMAIL = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')

CHECKED = {'on', 'true', '1', 'yes'}


def _text(form, name):
    return (form.get(name) or '').strip()


def _number(form, name, errors, label, required=False, default=None, minimum=0, maximum=None):
    raw = _text(form, name)
    if not raw:
        if required:
            errors[name] = f'{label} is required.'
        return default
    try:
        value = float(raw.replace(',', '.'))
    except ValueError:
        errors[name] = f'{label} must be a number.'
        return default
    if not math.isfinite(value):
        errors[name] = f'{label} must be a number.'
        return default
    if value < minimum:
        errors[name] = f'{label} must be at least {minimum:g}.'
    elif maximum is not None and value > maximum:
        errors[name] = f'{label} must be at most {maximum:g}.'
    return value


def _date(form, name, errors, label):
    raw = _text(form, name)
    if not raw:
        return None
    try:
        return date.fromisoformat(raw)
    except ValueError:
        errors[name] = f'{label} must be a date (YYYY-MM-DD).'
        return None


def _flag(form, name):
    # unticked checkboxes are not submitted at all
    return _text(form, name).lower() in CHECKED


def parse_product_form(form):
    errors = {}
    data = {}

    name = _text(form, 'name')
    if not name:
        errors['name'] = 'Name is required.'
    elif not MIN_NAME_LENGTH <= len(name) <= MAX_NAME_LENGTH:
        errors['name'] = f'Name must be {MIN_NAME_LENGTH} to {MAX_NAME_LENGTH} characters.'
    data['name'] = name

    category = _text(form, 'category')
    if category not in CATEGORIES:
        errors['category'] = 'Category is required.' if not category else 'Unknown category.'
    data['category'] = category

    brand = _text(form, 'brand')
    if not brand:
        errors['brand'] = 'Brand is required.'
    data['brand'] = brand

    unit = _text(form, 'unit')
    if unit not in UNITS:
        errors['unit'] = 'Unit is required.' if not unit else 'Unknown unit.'
    data['unit'] = unit

    data['quantity'] = _number(form, 'quantity', errors, 'Quantity', required=True, maximum=MAX_QUANTITY)
    data['purchase_price'] = _number(form, 'purchase_price', errors, 'Purchase price', required=True)
    data['sale_price'] = _number(form, 'sale_price', errors, 'Sale price', default=0)
    data['min_stock'] = _number(form, 'min_stock', errors, 'Minimum stock', default=0)
    data['purchase_date'] = _date(form, 'purchase_date', errors, 'Purchase date')
    data['expiry_date'] = _date(form, 'expiry_date', errors, 'Expiry date')

    data['supplier'] = _text(form, 'supplier') or None

    description = _text(form, 'description')
    if len(description) > MAX_DESCRIPTION_LENGTH:
        errors['description'] = f'Description must be at most {MAX_DESCRIPTION_LENGTH} characters.'
    data['description'] = description or None

    image_url = _text(form, 'image_url')
    if image_url and not IMAGE_URL.match(image_url):
        errors['image_url'] = 'URL must point to an image (jpg, jpeg, png, gif, webp).'
    data['image_url'] = image_url or None

    data['active'] = _flag(form, 'active')
    data['published'] = _flag(form, 'published')

    if errors:
        raise ValidationError(errors)
    return data


def parse_sale_form(form):
    errors = {}
    quantity = _number(form, 'quantity', errors, 'Quantity', required=True)
    amount = _number(form, 'amount', errors, 'Sale amount', required=True)
    if quantity is not None and 'quantity' not in errors and quantity <= 0:
        errors['quantity'] = 'Quantity must be greater than zero.'
    if amount is not None and 'amount' not in errors and amount <= 0:
        errors['amount'] = 'Sale amount must be greater than zero.'
    if errors:
        raise ValidationError(errors)
    return quantity, amount


def parse_customer_form(form):
    errors = {}
    name = _text(form, 'name')
    email = _text(form, 'email')
    phone = _text(form, 'phone')
    if not name:
        errors['name'] = 'Name is required.'
    if not email:
        errors['email'] = 'Email is required.'
    elif not EMAIL.match(email):
        errors['email'] = 'Enter a valid email address.'
    if not phone:
        errors['phone'] = 'Phone is required.'
    if errors:
        raise ValidationError(errors)
    return Customer(name=name, email=email, phone=phone, notes=_text(form, 'notes'))
