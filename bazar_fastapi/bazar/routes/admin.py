from __future__ import annotations
from typing import List, Optional
from fastapi import APIRouter, Depends, Query

from ..db.store import DataStore
from ..deps import current_user, get_store
from ..schemas.orders import DashboardOut, OrderStatus
from ..schemas.profiles import ProfileOut
from ..services.auth import CurrentUser, require_admin
from ..services.orders import dashboard
from ..services.profiles import list_clients

router = APIRouter(prefix="/admin", tags=["admin"])

@router.get("/dashboard", response_model=DashboardOut)
async def dashboard_endpoint(
    status: Optional[OrderStatus] = Query(None),
    store: DataStore = Depends(get_store),
    user: Optional[CurrentUser] = Depends(current_user),
):
    """
    Shop overview for the back-office home page: revenue, counts and the
    order table (optionally filtered by status).
    """
    return await dashboard(store, user, status=status)

@router.get("/clients", response_model=List[ProfileOut])
async def clients_endpoint(
    store: DataStore = Depends(get_store),
    user: Optional[CurrentUser] = Depends(current_user),
):
    require_admin(user)
    return [ProfileOut(**row) for row in await list_clients(store)]
