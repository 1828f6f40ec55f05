from __future__ import annotations
from typing import Literal, Optional

from pydantic import BaseModel, Field


class ProfileOut(BaseModel):
    id: str
    name: Optional[str] = None
    email: Optional[str] = None
    role: Literal["client", "admin"] = "client"
    phone: Optional[str] = None
    address: Optional[str] = None


class ProfilePatch(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    phone: Optional[str] = None
    address: Optional[str] = None


class MeOut(BaseModel):
    id: str
    email: Optional[str] = None
    name: Optional[str] = None
    role: str
