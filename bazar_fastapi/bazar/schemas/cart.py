from __future__ import annotations
from decimal import Decimal
from typing import List, Optional, Union

from pydantic import BaseModel, Field, field_validator

from ..services.units import DEFAULT_UNIT, KNOWN_UNITS
from .common import Amount, Images, Quantity
from .products import FabricProduct, GoodsProduct


class LineMetadata(BaseModel):
    unit: str = DEFAULT_UNIT
    fabric_type: Optional[str] = None
    fabric_subtype: Optional[str] = None

    @field_validator("unit")
    @classmethod
    def _known_unit(cls, v: str) -> str:
        if v not in KNOWN_UNITS:
            raise ValueError(f"unknown unit: {v!r}")
        return v


class CartLineItem(BaseModel):
    """One product in a cart, keyed by product id."""
    id: str
    name: str
    price: Amount
    quantity: Quantity
    images: Images = Field(default_factory=list)
    metadata: LineMetadata = Field(default_factory=LineMetadata)

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_str(cls, v):
        return str(v)

    @property
    def unit(self) -> str:
        return self.metadata.unit

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity

    @classmethod
    def from_product(
        cls, product: Union[FabricProduct, GoodsProduct], quantity: Decimal
    ) -> "CartLineItem":
        if isinstance(product, FabricProduct):
            meta = LineMetadata(
                unit=product.unit,
                fabric_type=product.fabric_type,
                fabric_subtype=product.fabric_subtype,
            )
        else:
            meta = LineMetadata(unit=product.unit)
        return cls(
            id=product.id,
            name=product.name,
            price=product.price,
            quantity=quantity,
            images=product.images,
            metadata=meta,
        )


# ---- HTTP payloads -----------------------------------------------------------
class AddToCartIn(BaseModel):
    product_id: str
    quantity: Quantity = Field(..., gt=0)


class UpdateQuantityIn(BaseModel):
    quantity: Quantity


class CartLineOut(BaseModel):
    id: str
    name: str
    price: Amount
    quantity: Quantity
    images: List[str]
    unit: str
    fabric_type: Optional[str] = None
    fabric_subtype: Optional[str] = None
    line_total: Amount


class CartOut(BaseModel):
    items: List[CartLineOut]
    count: int
    total: Amount
    message: Optional[str] = None


def cart_line_out(line: CartLineItem) -> CartLineOut:
    return CartLineOut(
        id=line.id,
        name=line.name,
        price=line.price,
        quantity=line.quantity,
        images=line.images,
        unit=line.unit,
        fabric_type=line.metadata.fabric_type,
        fabric_subtype=line.metadata.fabric_subtype,
        line_total=line.line_total,
    )
