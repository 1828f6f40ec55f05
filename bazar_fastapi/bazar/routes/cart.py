# bazar/routes/cart.py
from __future__ import annotations
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends

from ..db.store import DataStore
from ..deps import get_cart, get_registry, get_store, peek_cart
from ..errors import InsufficientStock
from ..schemas.cart import AddToCartIn, CartLineItem, CartOut, UpdateQuantityIn, cart_line_out
from ..services.cart import CartRegistry, CartStore
from ..services.products import AnyProduct, get_product
from ..services.units import floor_quantity

router = APIRouter(prefix="/cart", tags=["cart"])


def _cart_out(cart: CartStore, message: Optional[str] = None) -> CartOut:
    return CartOut(
        items=[cart_line_out(l) for l in cart.items],
        count=len(cart),
        total=cart.total(),
        message=message,
    )


def _check_stock(product: AnyProduct, wanted: Decimal) -> None:
    if wanted > product.stock:
        raise InsufficientStock(
            f"only {product.stock} {product.unit} of {product.name} available"
        )


# GET /cart
@router.get("", response_model=CartOut)
def read_cart(cart: CartStore = Depends(peek_cart)):
    return _cart_out(cart)


# POST /cart/items
@router.post("/items", response_model=CartOut)
async def add_item(
    body: AddToCartIn,
    cart: CartStore = Depends(get_cart),
    store: DataStore = Depends(get_store),
):
    """Look the product up, check stock against what is already in the cart, then add."""
    product = await get_product(store, body.product_id)
    existing = cart.get(product.id)
    _check_stock(product, body.quantity + (existing.quantity if existing else 0))
    line = cart.add_to_cart(CartLineItem.from_product(product, body.quantity))
    return _cart_out(cart, f"{body.quantity} {line.unit} of {product.name} added to cart")


# PATCH /cart/items/{id}
@router.patch("/items/{item_id}", response_model=CartOut)
async def update_item(
    item_id: str,
    body: UpdateQuantityIn,
    cart: CartStore = Depends(peek_cart),
    store: DataStore = Depends(get_store),
):
    line = cart.get(item_id)
    if line is not None:
        product = await get_product(store, item_id)
        _check_stock(product, floor_quantity(line.unit, body.quantity))
        cart.update_quantity(item_id, body.quantity)
    return _cart_out(cart)


# DELETE /cart/items/{id}
@router.delete("/items/{item_id}", response_model=CartOut)
def remove_item(
    item_id: str,
    cart: CartStore = Depends(peek_cart),
    registry: CartRegistry = Depends(get_registry),
):
    cart.remove_from_cart(item_id)
    registry.release(cart)
    return _cart_out(cart, "item removed from cart")


# DELETE /cart
@router.delete("", response_model=CartOut)
def clear(cart: CartStore = Depends(peek_cart), registry: CartRegistry = Depends(get_registry)):
    cart.clear_cart()
    registry.release(cart)
    return _cart_out(cart, "cart cleared")
