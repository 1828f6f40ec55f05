"""
Turn a session cart into a durable order.

The submitter reads a snapshot of the cart, writes one ``orders`` row and
one batch of ``order_items`` rows, and clears the cart only once both writes
succeeded. Any failure leaves the cart untouched so the buyer can retry.

Lines added to the cart while the writes are in flight are not part of the
order and are cleared along with the rest on success.
"""
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Optional
from urllib.parse import quote

from ..db.store import DataStore
from ..errors import EmptyCart, StoreWriteError, TotalMismatch, Unauthenticated, ValidationError
from ..schemas.orders import CustomerInfo, Order, OrderLine, OrderStatus
from ..settings import settings
from .auth import CurrentUser
from .cart import CartStore
from .units import order_total

logger = logging.getLogger(__name__)


class CheckoutSubmitter:
    def __init__(self, store: DataStore, cart: CartStore) -> None:
        self.store = store
        self.cart = cart

    async def submit_order(
        self,
        user: Optional[CurrentUser],
        info: CustomerInfo,
        expected_total: Optional[Decimal] = None,
    ) -> Order:
        if user is None:
            raise Unauthenticated("please sign in before placing an order")
        _check_customer(info)

        lines = self.cart.snapshot()
        if not lines:
            raise EmptyCart("your cart is empty")
        total = order_total(lines)
        if expected_total is not None and Decimal(expected_total) != total:
            raise TotalMismatch(
                f"cart total is {total}, not {expected_total}; please review your order"
            )

        order_row = await self.store.insert("orders", {
            "user_id": user.id,
            "customer_name": info.name,
            "delivery_address": info.address,
            "phone_number": info.phone,
            "payment_method": info.payment_method,
            "total_amount": total,
            "status": OrderStatus.pending.value,
        })
        order_id = str(order_row["id"])

        try:
            item_rows = await self.store.insert_many("order_items", [
                {
                    "order_id": order_id,
                    "product_id": line.id,
                    "product_name": line.name,
                    "unit": line.unit,
                    "quantity": line.quantity,
                    "price": line.price,
                }
                for line in lines
            ])
        except StoreWriteError:
            logger.error("order %s: line items not saved, removing order row", order_id)
            await self._discard(order_id)
            raise

        self.cart.clear_cart()
        logger.info("order %s placed by %s: %s lines, total %s", order_id, user.id, len(lines), total)

        return Order(
            id=order_id,
            user_id=user.id,
            customer_name=order_row["customer_name"],
            delivery_address=order_row["delivery_address"],
            phone_number=order_row["phone_number"],
            payment_method=order_row["payment_method"],
            total_amount=order_row["total_amount"],
            status=order_row["status"],
            created_at=order_row.get("created_at"),
            items=[OrderLine(**{**r, "id": str(r["id"])}) for r in item_rows],
        )

    async def _discard(self, order_id: str) -> None:
        try:
            await self.store.delete("orders", order_id)
        except StoreWriteError as e:
            logger.error("order %s: orphan order row left behind: %s", order_id, e.detail)


def _check_customer(info: CustomerInfo) -> None:
    # model_construct() skips field validation
    missing = [f for f in ("name", "address", "phone") if not (getattr(info, f, "") or "").strip()]
    if missing:
        raise ValidationError(f"missing checkout fields: {', '.join(missing)}")
    if info.payment_method not in ("online", "onplace"):
        raise ValidationError("payment method must be 'online' or 'onplace'")


def build_handoff_url(order: Order, number: Optional[str] = None) -> Optional[str]:
    """
    wa.me link with a prefilled order summary for the seller, or None when no
    seller number is configured.
    """
    number = number or settings.seller_whatsapp_number
    if not number:
        return None
    text = (
        f"New order #{order.id}\n"
        f"Name: {order.customer_name}\n"
        f"Address: {order.delivery_address}\n"
        f"Phone: {order.phone_number}\n"
        f"Payment: {order.payment_method}\n"
        f"Total: {order.total_amount:.2f} {settings.currency}"
    )
    return f"https://wa.me/{number.lstrip('+')}?text={quote(text)}"
