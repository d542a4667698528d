# cart.py - a visitor's cart and the checkout that splits it per supplier
# the cart lives only in the visitor's session and is never written to the database

import logging
import math
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import List

from directory import Contact
from errors import ValidationError

logger = logging.getLogger(__name__)


def clamp_quantity(quantity, stock):
    # anything that is not a finite number counts as the minimum of one
    if not math.isfinite(quantity):
        quantity = 1
    return min(max(quantity, 1), stock)


@dataclass
class CartItem:
    product: object
    quantity: float

    @property
    def product_id(self):
        return self.product.id

    @property
    def subtotal(self):
        return (self.product.sale_price or 0) * self.quantity


class Cart:
    def __init__(self):
        self._items = {}  # product id -> CartItem, insertion ordered

    @classmethod
    def from_session(cls, data, lookup):
        # products that left the storefront since the last request are dropped
        cart = cls()
        for product_id, quantity in data or []:
            product = lookup(product_id)
            if product is None:
                continue
            cart._items[product.id] = CartItem(product, clamp_quantity(quantity, product.quantity))
        return cart

    def to_session(self):
        return [[item.product_id, item.quantity] for item in self._items.values()]

    @property
    def items(self):
        return list(self._items.values())

    def __len__(self):
        return len(self._items)

    def __contains__(self, product_id):
        return product_id in self._items

    def get(self, product_id):
        return self._items.get(product_id)

    def add_item(self, product, quantity=1):
        item = self._items.get(product.id)
        if item is not None:
            item.product = product
            item.quantity = clamp_quantity(item.quantity + quantity, product.quantity)
        else:
            item = CartItem(product, clamp_quantity(quantity, product.quantity))
            self._items[product.id] = item
        return item

    def set_quantity(self, product_id, quantity):
        if quantity <= 0:
            self.remove_item(product_id)
            return None
        item = self._items.get(product_id)
        if item is None:
            return None
        item.quantity = clamp_quantity(quantity, item.product.quantity)
        return item

    def remove_item(self, product_id):
        self._items.pop(product_id, None)

    def clear(self):
        self._items.clear()

    def total(self):
        return sum(item.subtotal for item in self._items.values())

    def item_count(self):
        return sum(item.quantity for item in self._items.values())


@dataclass
class Customer:
    name: str
    email: str
    phone: str
    notes: str = ''


@dataclass
class SupplierPartition:
    owner_id: object
    contact: Contact
    items: List[CartItem] = field(default_factory=list)

    @property
    def subtotal(self):
        return sum(item.subtotal for item in self.items)

    @property
    def item_count(self):
        return sum(item.quantity for item in self.items)


@dataclass
class CheckoutResult:
    total: float
    messages: list = field(default_factory=list)
    skipped: List[SupplierPartition] = field(default_factory=list)

    @property
    def complete(self):
        return not self.skipped


def format_money(value):
    return f'$ {value or 0:,.2f}'


class OrderAggregator:
    def __init__(self, directory, mailer, send_delay=0.5, sleep=time.sleep):
        self.directory = directory
        self.mailer = mailer
        self.send_delay = send_delay
        self._sleep = sleep

    def partition(self, cart):
        partitions = {}
        for item in cart.items:
            owner_id = item.product.owner_id
            if owner_id not in partitions:
                partitions[owner_id] = SupplierPartition(owner_id, self.directory.lookup(owner_id))
            partitions[owner_id].items.append(item)
        return list(partitions.values())

    def compose(self, partition, customer, placed_at=None):
        placed_at = placed_at or datetime.now()
        subject = f'New order - {customer.name} - {format_money(partition.subtotal)}'
        lines = [
            'NEW ORDER - Supplement Store',
            '',
            f'Date: {placed_at:%Y-%m-%d %H:%M}',
            '',
            '=== CUSTOMER ===',
            f'Name: {customer.name}',
            f'Email: {customer.email}',
            f'Phone: {customer.phone}',
        ]
        if customer.notes:
            lines.append(f'Notes: {customer.notes}')
        lines += ['', f'=== ITEMS - {partition.contact.display_name} ===', '']
        for index, item in enumerate(partition.items, start=1):
            product = item.product
            lines += [
                f'{index}. {product.name}',
                f'   Brand: {product.brand}',
                f'   Category: {product.category_label}',
                f'   Quantity: {item.quantity:g} {product.unit}',
                f'   Unit price: {format_money(product.sale_price or 0)}',
                f'   Subtotal: {format_money(item.subtotal)}',
                '',
            ]
        lines += [
            '=== SUMMARY ===',
            f'Items: {partition.item_count:g}',
            f'TOTAL: {format_money(partition.subtotal)}',
        ]
        return self.mailer.compose(partition.contact.email, subject, '\n'.join(lines))

    def checkout(self, cart, customer):
        if not len(cart):
            raise ValidationError({'cart': 'Your cart is empty.'})
        result = CheckoutResult(total=cart.total())
        placed_at = datetime.now()
        for partition in self.partition(cart):
            if not partition.contact.email:
                logger.warning(
                    'no contact address for supplier %s, %d item(s) not sent',
                    partition.owner_id, len(partition.items),
                )
                result.skipped.append(partition)
                continue
            # pace successive messages so the mail client is not flooded
            if result.messages and self.send_delay:
                self._sleep(self.send_delay)
            message = self.compose(partition, customer, placed_at)
            result.messages.append(self.mailer.send(message))
        cart.clear()
        return result
