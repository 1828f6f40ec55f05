# bazar/routes/orders.py
from __future__ import annotations
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from ..db.store import DataStore
from ..deps import current_user, get_store
from ..schemas.orders import Order, OrderStatus, StatusUpdateIn
from ..services.auth import CurrentUser
from ..services.orders import advance_status, get_order, list_orders

router = APIRouter(prefix="/orders", tags=["orders"])


@router.get("", response_model=List[Order])
async def list_orders_endpoint(
    status: Optional[OrderStatus] = Query(None),
    store: DataStore = Depends(get_store),
    user: Optional[CurrentUser] = Depends(current_user),
):
    """
    Newest orders first. Shoppers get their own history, admins get every
    order for the back-office table.
    """
    return await list_orders(store, user, status=status)


@router.get("/{order_id}", response_model=Order)
async def get_order_endpoint(
    order_id: str,
    store: DataStore = Depends(get_store),
    user: Optional[CurrentUser] = Depends(current_user),
):
    return await get_order(store, user, order_id)


@router.patch("/{order_id}/status", response_model=Order)
async def update_status_endpoint(
    order_id: str,
    body: StatusUpdateIn,
    store: DataStore = Depends(get_store),
    user: Optional[CurrentUser] = Depends(current_user),
):
    # only the next step is accepted: pending -> validated -> delivered
    return await advance_status(store, user, order_id, body.status)
