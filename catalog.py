# catalog.py - the operator's own product catalog
# every query is scoped to owner_id; no operator means an empty catalog

import locale
import logging

import metrics
from errors import NotAuthenticated, ProductNotFound, store_operation
from models import db, Product, User, utcnow

logger = logging.getLogger(__name__)

# fields a patch may never touch
PROTECTED_FIELDS = {'id', 'owner_id', 'created_at'}


def name_key(product):
    return locale.strxfrm((product.name or '').casefold())


class CatalogStore:
    """CRUD over the signed-in operator's products plus the derived
    stock, expiry and profitability metrics.

    ``list()`` returns an empty list when nobody is signed in instead of
    raising NotAuthenticated; the dashboard renders that as an empty
    catalog. Writes without an operator do raise.
    """

    def __init__(self, owner_id=None, expiry_days=30):
        self.owner_id = owner_id
        self.expiry_days = expiry_days
        self.last_error = None
        self._products = None

    @property
    def products(self):
        if self._products is None:
            self.list()
        return self._products

    def _require_owner(self):
        if self.owner_id is None:
            raise NotAuthenticated()

    def _owner_email(self):
        owner = db.session.get(User, self.owner_id)
        return owner.email if owner is not None else None

    @store_operation('loading products')
    def list(self):
        if self.owner_id is None:
            self._products = []
            return []
        items = Product.query.filter_by(owner_id=self.owner_id).all()
        items.sort(key=name_key)
        self._products = items
        return list(items)

    @store_operation('loading product')
    def get(self, product_id):
        self._require_owner()
        product = Product.query.filter_by(id=product_id, owner_id=self.owner_id).first()
        if product is None:
            raise ProductNotFound(product_id)
        return product

    @store_operation('adding product')
    def create(self, data):
        self._require_owner()
        fields = {k: v for k, v in data.items() if k not in PROTECTED_FIELDS}
        if not fields.get('supplier'):
            fields['supplier'] = self._owner_email()
        now = utcnow()
        product = Product(owner_id=self.owner_id, created_at=now, updated_at=now, **fields)
        db.session.add(product)
        db.session.commit()
        logger.info('product %s created by operator %s', product.id, self.owner_id)
        if self._products is not None:
            self._products.append(product)
            self._products.sort(key=name_key)
        return product

    @store_operation('updating product')
    def update(self, product_id, patch):
        product = self.get(product_id)
        for field, value in patch.items():
            if field in PROTECTED_FIELDS:
                continue
            if field == 'supplier' and not value:
                value = self._owner_email()
            setattr(product, field, value)
        product.updated_at = utcnow()
        db.session.commit()
        if self._products is not None:
            self._products.sort(key=name_key)
        return product

    @store_operation('deleting product')
    def delete(self, product_id):
        product = self.get(product_id)
        db.session.delete(product)
        db.session.commit()
        logger.info('product %s deleted by operator %s', product_id, self.owner_id)
        if self._products is not None:
            self._products = [p for p in self._products if p.id != product_id]

    # derived metrics over the loaded catalog

    def low_stock(self):
        return metrics.low_stock(self.products)

    def expiring_within(self, days=None, today=None):
        if days is None:
            days = self.expiry_days
        return metrics.expiring_within(self.products, days, today)

    def total_purchase_value(self):
        return metrics.total_purchase_value(self.products)

    def total_sale_value(self):
        return metrics.total_sale_value(self.products)

    def total_profit(self):
        return metrics.total_profit(self.products)

    def profit_margin(self):
        return metrics.profit_margin(self.products)

    def by_category(self):
        return metrics.by_category(self.products)

    def with_profit(self):
        return [metrics.product_profit(p) for p in self.products]

    def published(self):
        return [p for p in self.products if p.published]

    def unpublished(self):
        return [p for p in self.products if not p.published]
