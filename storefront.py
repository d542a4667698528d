# storefront.py - public, read-only view over every operator's published products

import logging

from errors import store_operation
from models import db, Product

logger = logging.getLogger(__name__)

ALL_CATEGORIES = 'All'


def search(products, term):
    """Case-insensitive substring match over name, brand, category and description."""
    if not term:
        return list(products)
    term = term.lower()
    return [
        p for p in products
        if term in (p.name or '').lower()
        or term in (p.brand or '').lower()
        or term in p.category_label.lower()
        or term in (p.description or '').lower()
    ]


def in_category(products, category):
    if not category or category == ALL_CATEGORIES:
        return list(products)
    return [p for p in products if p.category_label == category]


class StorefrontCatalog:
    def __init__(self):
        self.products = []
        self.last_error = None

    @store_operation('loading storefront products')
    def fetch(self):
        # the query filters on flags only, stock is checked afterwards
        rows = Product.query.filter_by(published=True, active=True).all()
        visible = [p for p in rows if (p.quantity or 0) > 0]
        visible.sort(key=lambda p: (p.category_label, (p.name or '')))
        self.products = visible
        logger.debug('storefront loaded %d products', len(visible))
        return list(visible)

    def get(self, product_id):
        product = db.session.get(Product, product_id)
        if product is None or not product.is_visible:
            return None
        return product

    def search(self, term):
        return search(self.products, term)

    def filter_by_category(self, category, products=None):
        return in_category(self.products if products is None else products, category)

    def categories(self):
        return sorted({p.category_label for p in self.products})
