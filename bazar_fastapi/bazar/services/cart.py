"""
In-memory shopping carts.

A ``CartStore`` holds the line items of one browsing session. Every mutator
is a plain synchronous method, so on the event loop a mutation is never
interleaved with another request. Carts live only in process memory and are
lost on restart.

``CartRegistry`` owns all carts of the process, keyed by session id. The app
builds one in ``create_app`` and hands it to routes through a dependency.
"""
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Callable, Dict, List, Optional, Tuple

from ..schemas.cart import CartLineItem
from .units import check_quantity, floor_quantity, order_total

logger = logging.getLogger(__name__)

Listener = Callable[[Tuple[CartLineItem, ...]], None]


class CartStore:
    def __init__(self, session_id: str = "") -> None:
        self.session_id = session_id
        self._items: List[CartLineItem] = []
        self._listeners: List[Listener] = []

    # --- reads ----------------------------------------------------------------
    @property
    def items(self) -> Tuple[CartLineItem, ...]:
        """Lines in insertion order."""
        return tuple(self._items)

    def snapshot(self) -> List[CartLineItem]:
        """Deep copy of the lines, safe to hold across an await."""
        return [line.model_copy(deep=True) for line in self._items]

    def get(self, item_id: str) -> Optional[CartLineItem]:
        for line in self._items:
            if line.id == item_id:
                return line
        return None

    def total(self) -> Decimal:
        return order_total(self._items)

    def __len__(self) -> int:
        return len(self._items)

    # --- mutators -------------------------------------------------------------
    def add_to_cart(self, item: CartLineItem) -> CartLineItem:
        """
        Add a line. If the product is already in the cart its quantity grows
        by the added quantity; the existing name/price/images are kept.
        """
        qty = check_quantity(item.unit, item.quantity)
        for i, line in enumerate(self._items):
            if line.id == item.id:
                merged = line.model_copy(update={"quantity": line.quantity + qty})
                self._items[i] = merged
                logger.debug("cart %s: %s += %s", self.session_id, item.id, qty)
                self._publish()
                return merged

        added = item.model_copy(update={"quantity": qty}, deep=True)
        self._items.append(added)
        logger.debug("cart %s: added %s x %s", self.session_id, item.id, qty)
        self._publish()
        return added

    def remove_from_cart(self, item_id: str) -> None:
        kept = [line for line in self._items if line.id != item_id]
        if len(kept) != len(self._items):
            self._items = kept
            logger.debug("cart %s: removed %s", self.session_id, item_id)
            self._publish()

    def update_quantity(self, item_id: str, quantity) -> Optional[CartLineItem]:
        """
        Replace a line's quantity. The value is rounded to the unit step and
        raised to the unit minimum. Unknown ids are ignored.
        """
        for i, line in enumerate(self._items):
            if line.id == item_id:
                updated = line.model_copy(
                    update={"quantity": floor_quantity(line.unit, quantity)}
                )
                self._items[i] = updated
                logger.debug("cart %s: %s = %s", self.session_id, item_id, updated.quantity)
                self._publish()
                return updated
        return None

    def clear_cart(self) -> None:
        self._items = []
        logger.debug("cart %s: cleared", self.session_id)
        self._publish()

    # --- subscriptions --------------------------------------------------------
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call listener with the new lines after each change. Returns an unsubscribe."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _publish(self) -> None:
        items = self.items
        for listener in list(self._listeners):
            listener(items)


class CartRegistry:
    """All carts of this process, keyed by session id."""

    def __init__(self) -> None:
        self._carts: Dict[str, CartStore] = {}

    def get(self, session_id: str, create: bool = True) -> CartStore:
        """
        The session's cart. With ``create=False`` an unknown session gets an
        empty cart that is not registered, so reads never grow the registry.
        """
        cart = self._carts.get(session_id)
        if cart is None:
            cart = CartStore(session_id)
            if create:
                self._carts[session_id] = cart
        return cart

    def release(self, cart: CartStore) -> None:
        """Drop a cart once it is empty; it is recreated on the next add."""
        if not len(cart) and self._carts.get(cart.session_id) is cart:
            del self._carts[cart.session_id]

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._carts

    def __len__(self) -> int:
        return len(self._carts)
