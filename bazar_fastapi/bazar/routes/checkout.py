from __future__ import annotations
from typing import Optional

from fastapi import APIRouter, Depends

from ..db.store import DataStore
from ..deps import current_user, get_registry, get_store, peek_cart
from ..schemas.orders import CheckoutIn, CheckoutOut
from ..services.auth import CurrentUser
from ..services.cart import CartRegistry, CartStore
from ..services.checkout import CheckoutSubmitter, build_handoff_url

router = APIRouter(prefix="/checkout", tags=["checkout"])


@router.post("", response_model=CheckoutOut)
async def checkout(
    body: CheckoutIn,
    cart: CartStore = Depends(peek_cart),
    registry: CartRegistry = Depends(get_registry),
    store: DataStore = Depends(get_store),
    user: Optional[CurrentUser] = Depends(current_user),
):
    """
    Place an order from the session cart. On success the cart is empty and
    the response carries a wa.me link the storefront opens for the seller.
    """
    order = await CheckoutSubmitter(store, cart).submit_order(user, body, body.expected_total)
    registry.release(cart)
    return CheckoutOut(
        order=order,
        handoff_url=build_handoff_url(order),
        message="order placed",
    )
