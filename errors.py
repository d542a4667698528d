# errors.py - exceptions raised by the store, ledger, cart and form layers
# views catch InventoryError and flash the message back to the user

import logging
from functools import wraps

from sqlalchemy.exc import SQLAlchemyError

from models import db

logger = logging.getLogger(__name__)


class InventoryError(Exception):
    pass


class NotAuthenticated(InventoryError):
    def __init__(self, message='You must be signed in to manage the catalog.'):
        super().__init__(message)


class ValidationError(InventoryError):
    def __init__(self, errors):
        self.errors = dict(errors)
        super().__init__('; '.join(f'{field}: {msg}' for field, msg in self.errors.items()))


class ProductNotFound(InventoryError):
    def __init__(self, product_id):
        self.product_id = product_id
        super().__init__(f'Product {product_id} not found.')


class InsufficientStock(InventoryError):
    def __init__(self, available, requested, unit=''):
        self.available = available
        self.requested = requested
        suffix = f' {unit}' if unit else ''
        super().__init__(
            f'Quantity cannot exceed available stock ({available:g}{suffix}).'
        )


class StoreOperationFailed(InventoryError):
    def __init__(self, message, original=None):
        self.original = original
        super().__init__(message)


# sign-in failures map onto a small fixed set of codes
AUTH_CONFIGURATION_NOT_FOUND = 'configuration-not-found'
AUTH_POPUP_BLOCKED = 'popup-blocked'
AUTH_POPUP_CLOSED = 'popup-closed-by-user'
AUTH_UNAUTHORIZED_DOMAIN = 'unauthorized-domain'

AUTH_MESSAGES = {
    AUTH_CONFIGURATION_NOT_FOUND: 'Sign-in is not configured. Check the application settings.',
    AUTH_POPUP_BLOCKED: 'The sign-in window was blocked by the browser. Allow popups for this site.',
    AUTH_POPUP_CLOSED: 'Sign-in cancelled by the user.',
    AUTH_UNAUTHORIZED_DOMAIN: 'This domain is not authorized for sign-in.',
}


class AuthError(InventoryError):
    def __init__(self, code, detail=''):
        self.code = code
        self.detail = detail
        super().__init__(self.message_for(code, detail))

    @staticmethod
    def message_for(code, detail=''):
        text = AUTH_MESSAGES.get(code)
        if text is None:
            text = detail or 'Unexpected error.'
        return 'Error signing in. ' + text


def store_operation(action):
    """Wrap a store method so database failures roll back, land in
    ``self.last_error`` and surface as StoreOperationFailed."""

    def decorator(func):
        @wraps(func)
        def wrapper(self, *args, **kwargs):
            self.last_error = None
            try:
                return func(self, *args, **kwargs)
            except SQLAlchemyError as exc:
                db.session.rollback()
                self.last_error = f'Error {action}: {exc}'
                logger.error('store operation failed while %s: %s', action, exc)
                raise StoreOperationFailed(self.last_error, original=exc) from exc
            except InventoryError as exc:
                self.last_error = str(exc)
                raise
        return wrapper

    return decorator
