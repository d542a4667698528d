# this file defines the database structure for the supplement inventory
# it uses 3 tables: operators, products (supplements) and sales

import uuid
from datetime import datetime, timezone

from flask_sqlalchemy import SQLAlchemy
from flask_login import UserMixin
from werkzeug.security import generate_password_hash, check_password_hash

db = SQLAlchemy()

UNCATEGORIZED = 'Uncategorized'

CATEGORIES = [
    'Protein',
    'Creatine',
    'Vitamins',
    'Amino Acids',
    'Pre-workout',
    'Thermogenic',
    'Carbohydrates',
    'Other',
]

UNITS = ['kg', 'g', 'ml', 'l', 'units', 'capsules', 'tablets']


def _new_id():
    return str(uuid.uuid4())


def utcnow():
    return datetime.now(timezone.utc)


# table 1: users - operators who own a catalog, also the suppliers visitors order from
class User(UserMixin, db.Model):
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False)
    password_hash = db.Column(db.String(200), nullable=False)  # stored as a secure hash
    display_name = db.Column(db.String(120))
    email = db.Column(db.String(200))
    photo_url = db.Column(db.String(500))

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        return check_password_hash(self.password_hash, password)

    def __repr__(self):
        return f'<User {self.username}>'


# table 2: products - one supplement in an operator's catalog
class Product(db.Model):
    id = db.Column(db.String(36), primary_key=True, default=_new_id)
    name = db.Column(db.String(100), nullable=False)
    brand = db.Column(db.String(100), nullable=False)
    category = db.Column(db.String(50))
    quantity = db.Column(db.Float, nullable=False, default=0)
    unit = db.Column(db.String(20), nullable=False)
    purchase_price = db.Column(db.Float, nullable=False)  # what the operator paid per unit
    sale_price = db.Column(db.Float, nullable=False, default=0)
    min_stock = db.Column(db.Float, nullable=False, default=0)  # 0 never flags low stock
    purchase_date = db.Column(db.Date)
    expiry_date = db.Column(db.Date)
    supplier = db.Column(db.String(200))
    description = db.Column(db.Text)
    image_url = db.Column(db.String(500))
    active = db.Column(db.Boolean, nullable=False, default=True)
    published = db.Column(db.Boolean, nullable=False, default=False)
    owner_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow)

    owner = db.relationship('User', backref=db.backref('products', lazy=True))

    @property
    def is_visible(self):
        return bool(self.published and self.active and (self.quantity or 0) > 0)

    @property
    def category_label(self):
        return self.category or UNCATEGORIZED

    @property
    def unit_profit(self):
        return (self.sale_price or 0) - (self.purchase_price or 0)

    def __repr__(self):
        return f'<Product {self.name}>'


# table 3: sales - snapshot of the product at the time it was sold
# product_id is kept without a foreign key so history survives a delete
class Sale(db.Model):
    id = db.Column(db.String(36), primary_key=True, default=_new_id)
    product_id = db.Column(db.String(36), nullable=False, index=True)
    product_name = db.Column(db.String(100), nullable=False)
    brand = db.Column(db.String(100))
    category = db.Column(db.String(50))
    quantity = db.Column(db.Float, nullable=False)
    amount = db.Column(db.Float, nullable=False)  # total charged, not unit price
    unit_cost = db.Column(db.Float, nullable=False, default=0)
    owner_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)
    sold_at = db.Column(db.DateTime, default=utcnow)

    @property
    def profit(self):
        return self.amount - self.unit_cost * self.quantity

    def __repr__(self):
        return f'<Sale {self.product_name} x{self.quantity}>'
