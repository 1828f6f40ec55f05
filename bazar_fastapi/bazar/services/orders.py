# bazar/services/orders.py
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

from ..db.store import DataStore, first
from ..errors import InvalidTransition, NotFound
from ..schemas.orders import NEXT_STATUS, Order, OrderLine, OrderStatus
from .auth import CurrentUser, require_admin, require_user
from .products import count_products
from .profiles import count_clients
from .units import to_decimal

logger = logging.getLogger(__name__)

ORDERS = "orders"
ORDER_ITEMS = "order_items"
CENTS = Decimal("0.01")


def _order_row_to_model(row: Dict[str, Any], lines: List[Dict[str, Any]]) -> Order:
    """Convert a flat order row plus its order_items rows into an Order."""
    return Order(
        id=str(row["id"]),
        user_id=str(row["user_id"]),
        customer_name=row["customer_name"],
        delivery_address=row["delivery_address"],
        phone_number=row["phone_number"],
        payment_method=row["payment_method"],
        total_amount=row["total_amount"],
        status=row["status"],
        created_at=row.get("created_at"),
        items=[
            OrderLine(
                id=str(l["id"]) if l.get("id") is not None else None,
                order_id=str(l["order_id"]),
                product_id=str(l["product_id"]),
                product_name=l["product_name"],
                unit=l["unit"],
                quantity=l["quantity"],
                price=l["price"],
            )
            for l in lines
        ],
    )


async def _with_lines(store: DataStore, rows: List[Dict[str, Any]]) -> List[Order]:
    if not rows:
        return []
    ids = [str(r["id"]) for r in rows]
    line_rows = await store.query(ORDER_ITEMS, {"order_id": ids})
    by_order: Dict[str, List[Dict[str, Any]]] = {}
    for l in line_rows:
        by_order.setdefault(str(l["order_id"]), []).append(l)
    return [_order_row_to_model(r, by_order.get(str(r["id"]), [])) for r in rows]


async def list_orders(
    store: DataStore,
    user: Optional[CurrentUser],
    status: Optional[OrderStatus] = None,
    limit: int = 200,
) -> List[Order]:
    """Newest first. Admins see every order, everyone else only their own."""
    user = require_user(user)
    filters: Dict[str, Any] = {}
    if not user.is_admin:
        filters["user_id"] = user.id
    if status is not None:
        filters["status"] = status.value
    rows = await store.query(ORDERS, filters, order_by="created_at", descending=True, limit=limit)
    return await _with_lines(store, rows)


async def get_order(store: DataStore, user: Optional[CurrentUser], order_id: str) -> Order:
    user = require_user(user)
    row = first(await store.query(ORDERS, {"id": order_id}, limit=1))
    # someone else's order is reported as missing
    if row is None or (not user.is_admin and str(row["user_id"]) != user.id):
        raise NotFound("order not found")
    return (await _with_lines(store, [row]))[0]


async def advance_status(
    store: DataStore,
    user: Optional[CurrentUser],
    order_id: str,
    new_status: OrderStatus,
) -> Order:
    """
    Admin action: move an order one step forward
    (pending -> validated -> delivered). Skips and rollbacks are rejected.
    """
    require_admin(user)
    row = first(await store.query(ORDERS, {"id": order_id}, limit=1))
    if row is None:
        raise NotFound("order not found")

    current = OrderStatus(row["status"])
    expected = NEXT_STATUS.get(current)
    if expected is None:
        raise InvalidTransition(f"order is already {current.value}")
    if new_status != expected:
        raise InvalidTransition(
            f"order is {current.value}; next status is {expected.value}, not {new_status.value}"
        )

    updated = await store.update(ORDERS, order_id, {"status": new_status.value})
    if updated is None:
        raise NotFound("order not found")
    logger.info("order %s: %s -> %s", order_id, current.value, new_status.value)
    return (await _with_lines(store, [updated]))[0]


async def dashboard(
    store: DataStore,
    user: Optional[CurrentUser],
    status: Optional[OrderStatus] = None,
) -> Dict[str, Any]:
    """Admin overview: revenue over all orders, counts, and the (filtered) order list."""
    require_admin(user)
    rows = await store.query(ORDERS, order_by="created_at", descending=True)
    revenue = sum((to_decimal(r["total_amount"]) for r in rows), Decimal("0"))
    shown = [r for r in rows if status is None or r["status"] == status.value]
    return {
        "revenue": revenue,
        "order_count": len(rows),
        "client_count": await count_clients(store),
        "product_count": await count_products(store),
        "average_order_value": (revenue / len(rows)).quantize(CENTS) if rows else Decimal("0"),
        "orders": await _with_lines(store, shown),
    }
