from __future__ import annotations
from typing import Optional

from fastapi import APIRouter, Depends

from ..db.store import DataStore
from ..deps import current_user, get_store
from ..schemas.profiles import ProfileOut, ProfilePatch
from ..services.auth import CurrentUser, require_user
from ..services.profiles import get_profile, update_profile

router = APIRouter(prefix="/profiles", tags=["profiles"])


@router.get("/me", response_model=ProfileOut)
async def read_me(
    store: DataStore = Depends(get_store),
    user: Optional[CurrentUser] = Depends(current_user),
):
    user = require_user(user)
    profile = await get_profile(store, user.id)
    if profile is None:
        # signed up but no profile row yet
        return ProfileOut(id=user.id, email=user.email, role="client")
    return ProfileOut(**profile)


@router.patch("/me", response_model=ProfileOut)
async def update_me(
    body: ProfilePatch,
    store: DataStore = Depends(get_store),
    user: Optional[CurrentUser] = Depends(current_user),
):
    user = require_user(user)
    row = await update_profile(store, user, body.model_dump(exclude_unset=True))
    return ProfileOut(**row)
