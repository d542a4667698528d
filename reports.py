# reports.py - filtered inventory report and its CSV export

import csv
import io

import metrics

CSV_HEADER = [
    'Name', 'Category', 'Brand', 'Quantity', 'Unit',
    'Purchase Price', 'Sale Price', 'Unit Profit', 'Total Purchase Value',
    'Total Sale Value', 'Total Profit', 'Purchase Date', 'Expiry Date',
]


def filter_products(products, category=None, purchased_since=None):
    result = list(products)
    if category:
        result = [p for p in result if p.category == category]
    if purchased_since is not None:
        # products without a purchase date cannot match a date filter
        result = [p for p in result if p.purchase_date and p.purchase_date >= purchased_since]
    return result


def summarize(products):
    return {
        'count': len(products),
        'total_value': metrics.total_purchase_value(products),
        'total_items': sum(p.quantity or 0 for p in products),
        'total_profit': metrics.total_profit(products),
    }


def _date(value):
    return value.isoformat() if value else ''


def csv_rows(products):
    yield CSV_HEADER
    for p in products:
        row = metrics.product_profit(p)
        yield [
            p.name,
            p.category or '',
            p.brand,
            p.quantity,
            p.unit,
            p.purchase_price,
            p.sale_price or 0,
            row['unit_profit'],
            row['total_purchase'],
            row['total_sale'],
            row['total_profit'],
            _date(p.purchase_date),
            _date(p.expiry_date),
        ]


def export_csv(products):
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator='\n')
    writer.writerows(csv_rows(products))
    return buffer.getvalue()
