from __future__ import annotations
from typing import Optional
from fastapi import APIRouter, Depends

from ..deps import current_user
from ..schemas.profiles import MeOut
from ..services.auth import CurrentUser, require_user

router = APIRouter(prefix="/auth", tags=["auth"])

# Sign-in itself happens against the hosted auth provider; the storefront
# only asks us who the bearer token belongs to.

@router.get("/me", response_model=MeOut)
def me(user: Optional[CurrentUser] = Depends(current_user)):
    user = require_user(user)
    return MeOut(id=user.id, email=user.email, name=user.name, role=user.role)
