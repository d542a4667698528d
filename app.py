# app.py - application factory and the operator (back office) routes
# run the development server with: python app.py  (or: flask --app app run)

import locale
import logging
import os
from datetime import date

import click
from flask import (
    Blueprint, Flask, Response, current_app, flash, redirect, render_template, request, url_for,
)
from flask.cli import with_appcontext
from flask_login import (
    LoginManager, current_user, login_required, login_user, logout_user,
    user_logged_in, user_logged_out,
)

import metrics
import reports
import storefront
from cart import format_money
from catalog import CatalogStore
from errors import AuthError, InventoryError, ValidationError
from forms import parse_product_form, parse_sale_form
from ledger import SalesLedger
from models import db, CATEGORIES, UNITS, User

logger = logging.getLogger(__name__)

admin = Blueprint('admin', __name__)

# login manager setup
login_manager = LoginManager()
login_manager.login_view = 'admin.login'


@login_manager.user_loader
def load_user(user_id):
    return db.session.get(User, int(user_id))


def create_app(test_config=None):
    app = Flask(__name__)
    app.config.from_mapping(
        SQLALCHEMY_DATABASE_URI=os.environ.get('DATABASE_URL', 'sqlite:///supplements.db'),
        SQLALCHEMY_TRACK_MODIFICATIONS=False,
        SECRET_KEY=os.environ.get('SECRET_KEY', 'supplement-store-dev-key'),
        ORDER_SEND_DELAY=float(os.environ.get('ORDER_SEND_DELAY', '0.5')),
        EXPIRY_WINDOW_DAYS=int(os.environ.get('EXPIRY_WINDOW_DAYS', '30')),
        FALLBACK_SUPPLIER_NAME=os.environ.get('FALLBACK_SUPPLIER_NAME', 'Supplier'),
        FALLBACK_SUPPLIER_EMAIL=os.environ.get('FALLBACK_SUPPLIER_EMAIL') or None,
        LOG_LEVEL=os.environ.get('LOG_LEVEL', 'INFO'),
    )
    if test_config:
        app.config.update(test_config)

    logging.basicConfig(
        level=app.config['LOG_LEVEL'],
        format='%(asctime)s - %(levelname)s - %(message)s',
    )

    # catalog names are sorted with locale.strxfrm
    try:
        locale.setlocale(locale.LC_COLLATE, '')
    except locale.Error:
        logger.warning('could not apply the environment collation locale, sorting by code point')

    db.init_app(app)
    login_manager.init_app(app)

    from store_views import store
    app.register_blueprint(admin)
    app.register_blueprint(store)
    app.cli.add_command(create_operator_command)

    app.add_template_filter(format_money, 'money')
    app.add_template_filter(format_quantity, 'qty')

    user_logged_in.connect(_log_sign_in, app)
    user_logged_out.connect(_log_sign_out, app)

    with app.app_context():
        db.create_all()

    return app


def format_quantity(value, unit=''):
    return f'{value or 0:g} {unit}'.strip()


def _log_sign_in(sender, user, **extra):
    logger.info('operator %s signed in', user.username)


def _log_sign_out(sender, user, **extra):
    logger.info('operator %s signed out', getattr(user, 'username', user))


@click.command('create-operator')
@click.argument('username')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True)
@click.option('--email', default=None, help='Address storefront orders are sent to.')
@click.option('--display-name', default=None)
@with_appcontext
def create_operator_command(username, password, email, display_name):
    """Create an operator account, or reset its password if it exists."""
    user = User.query.filter_by(username=username).first()
    if user is None:
        user = User(username=username)
        db.session.add(user)
    user.set_password(password)
    if email:
        user.email = email
    if display_name:
        user.display_name = display_name
    db.session.commit()
    click.echo(f'Operator {username} saved.')


def _catalog():
    return CatalogStore(current_user.id, current_app.config['EXPIRY_WINDOW_DAYS'])


# login and logout
@admin.route('/login', methods=['GET', 'POST'])
def login():
    if current_user.is_authenticated:
        return redirect(url_for('admin.index'))
    if request.method == 'POST':
        user = User.query.filter_by(username=request.form.get('username')).first()
        if user and user.check_password(request.form.get('password') or ''):
            login_user(user)
            return redirect(url_for('admin.index'))
        flash(str(AuthError('invalid-credentials', 'Invalid username or password.')), 'danger')
    return render_template('login.html')


@admin.route('/logout')
@login_required
def logout():
    logout_user()
    return redirect(url_for('admin.login'))


# main dashboard - potential (catalog) and realized (sales) metrics side by side
@admin.route('/')
@login_required
def index():
    catalog = _catalog()
    sales = SalesLedger(current_user.id)
    try:
        catalog.list()
        summary = sales.metrics()
    except InventoryError as exc:
        flash(str(exc), 'danger')
        return render_template('dashboard.html', catalog=None, sales=None)
    return render_template('dashboard.html', catalog=catalog, sales=summary)


@admin.route('/inventory')
@login_required
def inventory():
    catalog = _catalog()
    term = request.args.get('q', '').strip()
    category = request.args.get('category') or storefront.ALL_CATEGORIES
    try:
        products = catalog.list()
    except InventoryError as exc:
        flash(str(exc), 'danger')
        products = []
    # the category choices come from the whole catalog, not the filtered rows
    categories = sorted({p.category_label for p in products})
    products = storefront.in_category(storefront.search(products, term), category)
    return render_template(
        'inventory.html',
        rows=[metrics.product_profit(p) for p in products],
        term=term,
        category=category,
        categories=categories,
        all_categories=storefront.ALL_CATEGORIES,
    )


# add new product
@admin.route('/products/new', methods=['GET', 'POST'])
@login_required
def add_product():
    errors = {}
    if request.method == 'POST':
        try:
            product = _catalog().create(parse_product_form(request.form))
        except ValidationError as exc:
            errors = exc.errors
        except InventoryError as exc:
            flash(str(exc), 'danger')
        else:
            flash(f'{product.name} added to stock!', 'success')
            return redirect(url_for('admin.inventory'))
    return render_template(
        'product_form.html', item=None, form=request.form, errors=errors,
        categories=CATEGORIES, units=UNITS,
    )


# edit item details
@admin.route('/products/<product_id>/edit', methods=['GET', 'POST'])
@login_required
def edit_product(product_id):
    catalog = _catalog()
    try:
        product = catalog.get(product_id)
    except InventoryError as exc:
        flash(str(exc), 'danger')
        return redirect(url_for('admin.inventory'))
    errors = {}
    if request.method == 'POST':
        try:
            catalog.update(product_id, parse_product_form(request.form))
        except ValidationError as exc:
            errors = exc.errors
        except InventoryError as exc:
            flash(str(exc), 'danger')
        else:
            flash(f'Changes saved for {product.name}', 'success')
            return redirect(url_for('admin.inventory'))
    return render_template(
        'product_form.html', item=product, form=request.form, errors=errors,
        categories=CATEGORIES, units=UNITS,
    )


# remove product from the catalog; recorded sales keep their snapshot
@admin.route('/products/<product_id>/delete', methods=['POST'])
@login_required
def delete_product(product_id):
    catalog = _catalog()
    try:
        name = catalog.get(product_id).name
        catalog.delete(product_id)
    except InventoryError as exc:
        flash(str(exc), 'danger')
    else:
        flash(f'{name} deleted from the list.', 'warning')
    return redirect(url_for('admin.inventory'))


# sales tracking
@admin.route('/products/<product_id>/sell', methods=['POST'])
@login_required
def sell_product(product_id):
    try:
        quantity, amount = parse_sale_form(request.form)
        sale = SalesLedger(current_user.id).register_sale(product_id, quantity, amount)
    except InventoryError as exc:
        flash(str(exc), 'danger')
    else:
        flash(f'Sale recorded: {sale.quantity:g} {sale.product_name}', 'success')
    return redirect(url_for('admin.inventory'))


def _report_filters():
    category = request.args.get('category') or None
    since = request.args.get('since') or None
    purchased_since = None
    if since:
        try:
            purchased_since = date.fromisoformat(since)
        except ValueError:
            flash('Invalid date filter.', 'warning')
    return category, purchased_since


@admin.route('/reports')
@login_required
def report():
    catalog = _catalog()
    category, purchased_since = _report_filters()
    try:
        products = reports.filter_products(catalog.list(), category, purchased_since)
    except InventoryError as exc:
        flash(str(exc), 'danger')
        products = []
    return render_template(
        'reports.html',
        catalog=catalog,
        products=products,
        summary=reports.summarize(products),
        category=category or '',
        since=request.args.get('since', ''),
        categories=CATEGORIES,
    )


@admin.route('/reports/export.csv')
@login_required
def export_report():
    category, purchased_since = _report_filters()
    products = reports.filter_products(_catalog().list(), category, purchased_since)
    filename = f'inventory_report_{date.today().isoformat()}.csv'
    return Response(
        reports.export_csv(products),
        mimetype='text/csv',
        headers={'Content-Disposition': f'attachment; filename={filename}'},
    )


if __name__ == '__main__':
    create_app().run(debug=True, port=5001)
