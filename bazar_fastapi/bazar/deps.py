"""Request-scoped dependencies shared by the routers."""
from __future__ import annotations

import re
import uuid
from typing import Optional

from fastapi import Depends, Header, Request, Response

from .db.store import DataStore
from .services.auth import CurrentUser, get_current_user
from .services.cart import CartRegistry, CartStore
from .services.storage import ObjectStorage
from .settings import settings

SESSION_HEADER = "X-Cart-Session"
_SESSION_ID = re.compile(r"^[A-Za-z0-9_-]{8,64}$")


def get_store(request: Request) -> DataStore:
    return request.app.state.store


def get_storage(request: Request) -> ObjectStorage:
    return request.app.state.storage


def get_registry(request: Request) -> CartRegistry:
    return request.app.state.carts


def cart_session(request: Request, response: Response) -> str:
    """Session id from the cart cookie or header; issues a new cookie when neither is valid."""
    for sid in (request.cookies.get(settings.cart_cookie_name), request.headers.get(SESSION_HEADER)):
        if sid and _SESSION_ID.match(sid):
            return sid
    sid = uuid.uuid4().hex
    response.set_cookie(settings.cart_cookie_name, sid, httponly=True, samesite="lax")
    return sid


def get_cart(
    session_id: str = Depends(cart_session),
    registry: CartRegistry = Depends(get_registry),
) -> CartStore:
    """Cart for routes that add lines; registers the session."""
    return registry.get(session_id)


def peek_cart(
    session_id: str = Depends(cart_session),
    registry: CartRegistry = Depends(get_registry),
) -> CartStore:
    """Cart for every other route; an unknown session reads as empty."""
    return registry.get(session_id, create=False)


async def current_user(
    store: DataStore = Depends(get_store),
    authorization: Optional[str] = Header(None),
) -> Optional[CurrentUser]:
    return await get_current_user(store, authorization)
