"""
Product shapes.

Rows in the ``products`` table come from several generations of the admin
form: ``images`` may be a list or one URL, ``metadata`` may be missing or JSON
text. ``normalize_product`` turns any of them into one of two variants so the
cart and checkout only ever see a single shape.
"""
from __future__ import annotations

import json
from datetime import datetime
from decimal import Decimal
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field

from ..services.fabrics import fabric_key, get_default_unit
from ..services.units import DEFAULT_UNIT, rule_for
from .common import Amount, Images


class _ProductBase(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    price: Amount
    stock: Amount = Decimal("0")
    images: Images = Field(default_factory=list)
    unit: str = DEFAULT_UNIT
    created_at: Optional[datetime] = None


class FabricProduct(_ProductBase):
    kind: Literal["fabric"] = "fabric"
    fabric_type: str
    fabric_subtype: Optional[str] = None


class GoodsProduct(_ProductBase):
    kind: Literal["goods"] = "goods"


Product = Annotated[Union[FabricProduct, GoodsProduct], Field(discriminator="kind")]


def _metadata(raw: Any) -> Dict[str, Any]:
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            return {}
    return raw if isinstance(raw, dict) else {}


def normalize_product(row: Dict[str, Any]) -> Union[FabricProduct, GoodsProduct]:
    """Map a raw catalog row to its variant. Raises UnknownUnit for bad units."""
    meta = _metadata(row.get("metadata"))
    fabric_type = meta.get("fabricType") or meta.get("fabric_type")
    unit = meta.get("unit")
    if not unit:
        unit = get_default_unit(fabric_type) if fabric_key(fabric_type) else DEFAULT_UNIT
    rule_for(unit)

    common = {
        "id": str(row["id"]),
        "name": row.get("name") or "",
        "description": row.get("description"),
        "price": row.get("price") or 0,
        "stock": row.get("stock") or 0,
        "images": row.get("images"),
        "unit": unit,
        "created_at": row.get("created_at"),
    }
    if fabric_type:
        return FabricProduct(
            **common,
            fabric_type=fabric_type,
            fabric_subtype=meta.get("fabricSubtype") or meta.get("fabric_subtype"),
        )
    return GoodsProduct(**common)


# ---- admin form payloads ------------------------------------------------------
class ProductIn(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    price: Amount = Field(..., ge=0)
    stock: Amount = Field(Decimal("0"), ge=0)
    images: Images = Field(default_factory=list)
    fabric_type: Optional[str] = None
    fabric_subtype: Optional[str] = None
    unit: Optional[str] = None


class ProductPatch(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    price: Optional[Amount] = Field(None, ge=0)
    stock: Optional[Amount] = Field(None, ge=0)
    images: Optional[Images] = None
    fabric_type: Optional[str] = None
    fabric_subtype: Optional[str] = None
    unit: Optional[str] = None


class CategoryOut(BaseModel):
    id: str
    name: str
    image: Optional[str] = None
    count: int = 0


class FabricOut(BaseModel):
    key: str
    name: str
    subtypes: List[str]
    units: List[str]
    default_unit: str
