# bazar/services/profiles.py
from __future__ import annotations
from typing import Any, Dict, List, Optional, TYPE_CHECKING

from ..db.store import DataStore, first

if TYPE_CHECKING:
    from .auth import CurrentUser

TABLE = "profiles"


async def get_profile(store: DataStore, user_id: str) -> Optional[Dict[str, Any]]:
    if not user_id:
        return None
    return first(await store.query(TABLE, {"id": user_id}, limit=1))


async def update_profile(store: DataStore, user: "CurrentUser", patch: Dict[str, Any]) -> Dict[str, Any]:
    """
    Update the caller's own profile (name/phone/address). Creates the row
    when the auth provider's signup trigger never did.
    """
    patch = {k: v for k, v in patch.items() if k in ("name", "phone", "address")}
    existing = await get_profile(store, user.id)
    if existing is None:
        row = {"id": user.id, "email": user.email, "role": "client", **patch}
        return await store.insert(TABLE, row)
    if not patch:
        return existing
    return await store.update(TABLE, user.id, patch) or existing


async def list_clients(store: DataStore) -> List[Dict[str, Any]]:
    return await store.query(TABLE, {"role": "client"}, order_by="created_at", descending=True)


async def count_clients(store: DataStore) -> int:
    return len(await store.query(TABLE, {"role": "client"}))
