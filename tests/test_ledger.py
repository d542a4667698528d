import pytest
from sqlalchemy import update
from sqlalchemy.orm.attributes import set_committed_value

from conftest import make_product
from errors import InsufficientStock, NotAuthenticated, ProductNotFound, ValidationError
from ledger import SalesLedger
from models import db, Product, Sale


def test_register_sale_records_snapshot_and_decrements_stock(ctx, operator_id):
    product = make_product(operator_id, quantity=20, purchase_price=50)

    sale = SalesLedger(operator_id).register_sale(product.id, 15, 1300)

    db.session.refresh(product)
    assert product.quantity == 5
    assert sale.product_name == 'Whey Protein'
    assert sale.brand == 'Growth'
    assert sale.category == 'Protein'
    assert sale.unit_cost == 50
    assert sale.amount == 1300
    assert sale.owner_id == operator_id


def test_sale_larger_than_stock_leaves_stock_unchanged(ctx, operator_id):
    product = make_product(operator_id, quantity=3)

    with pytest.raises(InsufficientStock) as excinfo:
        SalesLedger(operator_id).register_sale(product.id, 4, 100)

    db.session.refresh(product)
    assert product.quantity == 3
    assert excinfo.value.available == 3
    assert Sale.query.count() == 0


def test_unknown_or_foreign_product_is_not_found(ctx, operator_id, other_operator_id):
    foreign = make_product(other_operator_id)
    ledger = SalesLedger(operator_id)

    with pytest.raises(ProductNotFound):
        ledger.register_sale('missing', 1, 10)
    with pytest.raises(ProductNotFound):
        ledger.register_sale(foreign.id, 1, 10)


def test_register_sale_without_operator_requires_sign_in(ctx, operator_id):
    product = make_product(operator_id, quantity=5)
    ledger = SalesLedger(None)

    with pytest.raises(NotAuthenticated):
        ledger.register_sale(product.id, 1, 80)

    db.session.refresh(product)
    assert product.quantity == 5
    assert ledger.last_error == str(NotAuthenticated())


def test_non_positive_quantity_is_rejected(ctx, operator_id):
    product = make_product(operator_id)

    with pytest.raises(ValidationError):
        SalesLedger(operator_id).register_sale(product.id, 0, 10)


def test_stale_stock_read_cannot_oversell(ctx, operator_id):
    product = make_product(operator_id, quantity=10)
    # another sale took stock down to 2 after this session last read the row
    db.session.execute(
        update(Product).where(Product.id == product.id).values(quantity=2)
        .execution_options(synchronize_session=False)
    )
    db.session.commit()
    db.session.refresh(product)
    set_committed_value(product, 'quantity', 10)

    ledger = SalesLedger(operator_id)
    with pytest.raises(InsufficientStock) as excinfo:
        ledger.register_sale(product.id, 8, 100)

    assert excinfo.value.available == 2
    assert db.session.get(Product, product.id).quantity == 2
    assert Sale.query.count() == 0
    assert ledger.last_error == str(excinfo.value)


def test_metrics_report_realized_revenue_and_profit(ctx, operator_id, other_operator_id):
    mine = make_product(operator_id, quantity=10, purchase_price=50)
    theirs = make_product(other_operator_id, quantity=10, purchase_price=5)
    ledger = SalesLedger(operator_id)
    ledger.register_sale(mine.id, 2, 180)
    ledger.register_sale(mine.id, 1, 70)
    SalesLedger(other_operator_id).register_sale(theirs.id, 1, 10)

    summary = ledger.metrics()

    assert summary.count == 2
    assert summary.revenue == 250
    assert summary.profit == (180 - 100) + (70 - 50)
    assert len(summary.sales) == 2


def test_metrics_without_operator_are_empty(ctx):
    summary = SalesLedger(None).metrics()

    assert summary.count == 0
    assert summary.revenue == 0
    assert summary.sales == []
