# metrics.py - stock, expiry and profitability figures over a list of products
# "potential" metrics: they assume everything on the shelf sells at sale price

from datetime import date, timedelta

from models import UNCATEGORIZED


def low_stock(products):
    return [p for p in products if (p.quantity or 0) <= (p.min_stock or 0)]


def expiring_within(products, days=30, today=None):
    today = today or date.today()
    limit = today + timedelta(days=days)
    return [
        p for p in products
        if p.expiry_date is not None and today <= p.expiry_date <= limit
    ]


def total_purchase_value(products):
    return sum((p.purchase_price or 0) * (p.quantity or 0) for p in products)


def total_sale_value(products):
    return sum((p.sale_price or 0) * (p.quantity or 0) for p in products)


def total_profit(products):
    return sum(
        ((p.sale_price or 0) - (p.purchase_price or 0)) * (p.quantity or 0)
        for p in products
    )


def profit_margin(products):
    cost = total_purchase_value(products)
    if cost == 0:
        return 0
    return (total_sale_value(products) - cost) / cost * 100


def by_category(products):
    groups = {}
    for product in products:
        groups.setdefault(product.category or UNCATEGORIZED, []).append(product)
    return groups


def product_profit(product):
    # per-row figures shown in the inventory and report tables
    unit = (product.sale_price or 0) - (product.purchase_price or 0)
    quantity = product.quantity or 0
    if product.purchase_price:
        margin = unit / product.purchase_price * 100
    else:
        margin = 0
    return {
        'product': product,
        'unit_profit': unit,
        'total_purchase': (product.purchase_price or 0) * quantity,
        'total_sale': (product.sale_price or 0) * quantity,
        'total_profit': unit * quantity,
        'margin': margin,
    }
