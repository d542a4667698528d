import csv
import io
from datetime import date

import reports
from models import Product


def item(**kw):
    fields = dict(name='Whey', brand='Growth', category='Protein', quantity=2, unit='kg',
                  purchase_price=50.0, sale_price=80.0)
    fields.update(kw)
    return Product(**fields)


def test_filter_by_category_and_purchase_date():
    old = item(name='old', purchase_date=date(2025, 1, 1))
    new = item(name='new', purchase_date=date(2026, 2, 1))
    undated = item(name='undated')
    vitamin = item(name='vitamin', category='Vitamins', purchase_date=date(2026, 2, 1))
    products = [old, new, undated, vitamin]

    assert reports.filter_products(products, category='Protein') == [old, new, undated]
    assert reports.filter_products(products, purchased_since=date(2026, 1, 1)) == [new, vitamin]
    assert reports.filter_products(products) == products


def test_csv_has_header_plus_one_row_per_product():
    products = [item(name='Whey, chocolate', description='x'), item(name='Line\nbreak')]

    rows = list(csv.reader(io.StringIO(reports.export_csv(products))))

    assert len(rows) == len(products) + 1
    assert len(rows[0]) == 13
    assert rows[0] == reports.CSV_HEADER
    assert rows[1][0] == 'Whey, chocolate'
    assert rows[2][0] == 'Line\nbreak'


def test_csv_row_values():
    product = item(quantity=3, purchase_price=10, sale_price=None, expiry_date=date(2026, 5, 1))

    row = list(reports.csv_rows([product]))[1]

    assert row[6] == 0
    assert row[7] == -10
    assert row[8] == 30
    assert row[9] == 0
    assert row[10] == -30
    assert row[11] == ''
    assert row[12] == '2026-05-01'


def test_empty_export_is_header_only():
    assert reports.export_csv([]).splitlines() == [','.join(reports.CSV_HEADER)]


def test_summarize():
    summary = reports.summarize([item(quantity=2), item(quantity=3, sale_price=40)])

    assert summary['count'] == 2
    assert summary['total_items'] == 5
    assert summary['total_value'] == 250
    assert summary['total_profit'] == 60 - 30
