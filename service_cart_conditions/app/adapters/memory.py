"""
In-memory collaborators for the Cart Conditions service.
"""

import threading
from typing import Dict, List, Optional, Sequence, Tuple

from shared.logging import get_logger
from ..conditions.models import Cart, CartRef, CustomerRecord, SiteContext


class InMemoryCartStore:
    """Cart lookup backed by a dict keyed by (site, cart_id)."""

    def __init__(self):
        self.logger = get_logger("cart_conditions.cart_store")
        self._carts: Dict[Tuple[str, str], Cart] = {}
        self._lock = threading.Lock()

    def add_cart(self, site: str, cart: Cart) -> None:
        """Store or replace a cart for a site."""
        with self._lock:
            self._carts[(site, cart.cart_id)] = cart
        self.logger.debug("Cart stored", site=site, cart_id=cart.cart_id, user_id=cart.user_id)

    def remove_cart(self, site: str, cart_id: str) -> bool:
        """Remove a cart; returns False when it does not exist."""
        with self._lock:
            return self._carts.pop((site, cart_id), None) is not None

    def list_carts(self, site: SiteContext, user_ids: Sequence[str]) -> List[CartRef]:
        wanted = set(user_ids)
        with self._lock:
            carts = list(self._carts.items())
        return [
            CartRef(cart_id=cart.cart_id, user_id=cart.user_id)
            for (cart_site, _), cart in carts
            if cart_site == site.name and cart.user_id in wanted
        ]

    def load_cart(self, site: SiteContext, cart_id: str, user_id: str) -> Optional[Cart]:
        with self._lock:
            cart = self._carts.get((site.name, cart_id))
        if cart is None or cart.user_id != user_id:
            return None
        return cart


class InMemoryIdentityDirectory:
    """Identity lookup mapping contact ids to customer records."""

    def __init__(self, customers: Optional[Dict[str, str]] = None):
        self._customers: Dict[str, CustomerRecord] = {
            contact_id: CustomerRecord(external_id=external_id)
            for contact_id, external_id in (customers or {}).items()
        }
        self._lock = threading.Lock()

    def register(self, contact_id: str, external_id: str) -> None:
        with self._lock:
            self._customers[contact_id] = CustomerRecord(external_id=external_id)

    def get_user(self, anonymous_id: str) -> Optional[CustomerRecord]:
        with self._lock:
            return self._customers.get(anonymous_id)


class StaticSiteProvider:
    """Site provider returning a fixed site, or None when unset."""

    def __init__(self, site_name: Optional[str] = None):
        self._site = SiteContext(name=site_name) if site_name else None

    def current_site(self) -> Optional[SiteContext]:
        return self._site
