# ledger.py - sales tracking and realized (actually sold) revenue and profit

import logging
from dataclasses import dataclass, field

from sqlalchemy import update

from errors import (
    InsufficientStock, NotAuthenticated, ProductNotFound, ValidationError, store_operation,
)
from models import db, Product, Sale, utcnow

logger = logging.getLogger(__name__)


@dataclass
class SalesSummary:
    count: int = 0
    revenue: float = 0
    profit: float = 0
    sales: list = field(default_factory=list)


class SalesLedger:
    def __init__(self, owner_id=None):
        self.owner_id = owner_id
        self.last_error = None

    @store_operation('registering sale')
    def register_sale(self, product_id, quantity_sold, sale_amount):
        if self.owner_id is None:
            raise NotAuthenticated()
        if quantity_sold <= 0:
            raise ValidationError({'quantity': 'Quantity must be greater than zero.'})
        product = Product.query.filter_by(id=product_id, owner_id=self.owner_id).first()
        if product is None:
            raise ProductNotFound(product_id)
        if quantity_sold > product.quantity:
            raise InsufficientStock(product.quantity, quantity_sold, product.unit)

        # decrement only if the stock we checked is still there; the sale row
        # is written in the same transaction so both land or neither does
        result = db.session.execute(
            update(Product)
            .where(Product.id == product_id, Product.quantity >= quantity_sold)
            .values(quantity=Product.quantity - quantity_sold, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            db.session.rollback()
            db.session.refresh(product)
            raise InsufficientStock(product.quantity, quantity_sold, product.unit)

        sale = Sale(
            product_id=product.id,
            product_name=product.name,
            brand=product.brand,
            category=product.category,
            quantity=quantity_sold,
            amount=sale_amount,
            unit_cost=product.purchase_price or 0,
            owner_id=self.owner_id,
            sold_at=utcnow(),
        )
        db.session.add(sale)
        db.session.commit()
        logger.info('sale of %g %s of %s registered', quantity_sold, product.unit, product.name)
        return sale

    @store_operation('loading sales')
    def metrics(self):
        if self.owner_id is None:
            return SalesSummary()
        sales = Sale.query.filter_by(owner_id=self.owner_id).order_by(Sale.sold_at.desc()).all()
        return SalesSummary(
            count=len(sales),
            revenue=sum(s.amount for s in sales),
            profit=sum(s.profit for s in sales),
            sales=sales,
        )
