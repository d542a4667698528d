# directory.py - resolves a product owner id to the contact orders are sent to

import logging
from dataclasses import dataclass
from typing import Optional

from models import db, User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Contact:
    display_name: str
    email: Optional[str] = None
    photo_url: Optional[str] = None


class UserDirectory:
    def __init__(self, fallback_name='Supplier', fallback_email=None):
        self.fallback = Contact(display_name=fallback_name, email=fallback_email)
        self._cache = {}

    def lookup(self, owner_id):
        if owner_id in self._cache:
            return self._cache[owner_id]
        user = db.session.get(User, owner_id) if owner_id is not None else None
        if user is None:
            logger.info('no user record for owner %s, using placeholder contact', owner_id)
            contact = self.fallback
        else:
            contact = Contact(
                display_name=user.display_name or user.username or self.fallback.display_name,
                email=user.email or None,
                photo_url=user.photo_url,
            )
        self._cache[owner_id] = contact
        return contact

    def clear(self):
        self._cache.clear()
