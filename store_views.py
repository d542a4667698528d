# store_views.py - public storefront: browse, cart and order checkout
# no login here; the cart is kept in the visitor's session cookie

import logging
import math

from flask import Blueprint, current_app, flash, redirect, render_template, request, session, url_for

from cart import Cart, OrderAggregator
from directory import UserDirectory
from errors import InventoryError, ValidationError
from forms import parse_customer_form
from mailer import MailComposer
from storefront import ALL_CATEGORIES, StorefrontCatalog

logger = logging.getLogger(__name__)

store = Blueprint('store', __name__, url_prefix='/store')

CART_KEY = 'cart'


def load_cart(catalog):
    return Cart.from_session(session.get(CART_KEY), catalog.get)


def save_cart(cart):
    session[CART_KEY] = cart.to_session()


def _quantity_arg(default=1):
    try:
        value = float(request.form.get('quantity', default))
    except (TypeError, ValueError):
        return default
    return value if math.isfinite(value) else default


@store.route('/')
def index():
    catalog = StorefrontCatalog()
    term = request.args.get('q', '').strip()
    category = request.args.get('category') or ALL_CATEGORIES
    try:
        catalog.fetch()
    except InventoryError as exc:
        flash(str(exc), 'danger')
    products = catalog.filter_by_category(category, catalog.search(term))
    return render_template(
        'store/index.html',
        products=products,
        categories=catalog.categories(),
        category=category,
        term=term,
        all_categories=ALL_CATEGORIES,
        cart=load_cart(catalog),
    )


@store.route('/cart')
def view_cart():
    return render_template('store/cart.html', cart=load_cart(StorefrontCatalog()))


@store.route('/cart/add/<product_id>', methods=['POST'])
def add_to_cart(product_id):
    catalog = StorefrontCatalog()
    product = catalog.get(product_id)
    if product is None:
        flash('This product is no longer available.', 'warning')
        return redirect(url_for('store.index'))
    cart = load_cart(catalog)
    item = cart.add_item(product, _quantity_arg())
    save_cart(cart)
    flash(f'{product.name} added to your cart ({item.quantity:g} {product.unit}).', 'success')
    return redirect(url_for('store.index'))


@store.route('/cart/update/<product_id>', methods=['POST'])
def update_cart(product_id):
    cart = load_cart(StorefrontCatalog())
    cart.set_quantity(product_id, _quantity_arg(default=0))
    save_cart(cart)
    return redirect(url_for('store.view_cart'))


@store.route('/cart/remove/<product_id>', methods=['POST'])
def remove_from_cart(product_id):
    cart = load_cart(StorefrontCatalog())
    cart.remove_item(product_id)
    save_cart(cart)
    return redirect(url_for('store.view_cart'))


@store.route('/cart/clear', methods=['POST'])
def clear_cart():
    session.pop(CART_KEY, None)
    return redirect(url_for('store.view_cart'))


@store.route('/checkout', methods=['GET', 'POST'])
def checkout():
    cart = load_cart(StorefrontCatalog())
    if not len(cart):
        flash('Your cart is empty.', 'info')
        return redirect(url_for('store.index'))
    errors = {}
    if request.method == 'POST':
        config = current_app.config
        aggregator = OrderAggregator(
            UserDirectory(config['FALLBACK_SUPPLIER_NAME'], config['FALLBACK_SUPPLIER_EMAIL']),
            MailComposer(),
            send_delay=config['ORDER_SEND_DELAY'],
        )
        try:
            result = aggregator.checkout(cart, parse_customer_form(request.form))
        except ValidationError as exc:
            errors = exc.errors
        else:
            save_cart(cart)
            if result.skipped:
                names = ', '.join(p.contact.display_name for p in result.skipped)
                flash(f'Some items could not be ordered because the supplier has no contact address: {names}.', 'warning')
            return render_template('store/order_sent.html', result=result)
    return render_template('store/checkout.html', cart=cart, form=request.form, errors=errors)
