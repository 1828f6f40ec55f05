"""
Session lookup against the identity provider.

The storefront signs users in with the hosted auth provider and sends its
access token as ``Authorization: Bearer <jwt>``. We only verify the token
with the shared secret and read ``sub``/``email``; the role comes from the
``profiles`` table.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from jose import JWTError, jwt

from ..db.store import DataStore
from ..errors import Forbidden, Unauthenticated
from ..settings import settings
from .profiles import get_profile

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CurrentUser:
    id: str
    email: Optional[str] = None
    name: Optional[str] = None
    role: str = "client"

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def decode_token(token: str) -> Optional[Dict[str, Any]]:
    """Verified claims, or None for a bad/expired token."""
    if not settings.auth_jwt_secret:
        return None
    audience = settings.auth_jwt_audience
    try:
        claims = jwt.decode(
            token,
            settings.auth_jwt_secret,
            algorithms=[settings.auth_jwt_algorithm],
            audience=audience,
            options={"verify_aud": audience is not None},
        )
    except JWTError as e:
        logger.info("rejected access token: %s", e)
        return None
    if not claims.get("sub"):
        return None
    return claims


async def get_current_user(store: DataStore, authorization: Optional[str]) -> Optional[CurrentUser]:
    """The signed-in user for this request, or None when anonymous."""
    token = bearer_token(authorization)
    if token is None:
        return None
    claims = decode_token(token)
    if claims is None:
        return None

    user_id = str(claims["sub"])
    profile = await get_profile(store, user_id) or {}
    return CurrentUser(
        id=user_id,
        email=claims.get("email") or profile.get("email"),
        name=profile.get("name"),
        role=profile.get("role") or "client",
    )


def require_user(user: Optional[CurrentUser]) -> CurrentUser:
    if user is None:
        raise Unauthenticated("please sign in before continuing")
    return user


def require_admin(user: Optional[CurrentUser]) -> CurrentUser:
    user = require_user(user)
    if not user.is_admin:
        raise Forbidden("admin access required")
    return user
