from __future__ import annotations
import enum
from datetime import datetime
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from .common import Amount, Quantity


class OrderStatus(str, enum.Enum):
    pending = "pending"
    validated = "validated"
    delivered = "delivered"


# forward-only lifecycle; delivered is terminal
NEXT_STATUS = {
    OrderStatus.pending: OrderStatus.validated,
    OrderStatus.validated: OrderStatus.delivered,
}

PaymentMethod = Literal["online", "onplace"]


class CustomerInfo(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    name: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)
    # the storefront sends camelCase
    payment_method: PaymentMethod = Field(
        ..., validation_alias=AliasChoices("payment_method", "paymentMethod")
    )


class CheckoutIn(CustomerInfo):
    # what the buyer saw on screen; rejected when the cart moved since
    expected_total: Optional[Amount] = Field(
        None, validation_alias=AliasChoices("expected_total", "expectedTotal")
    )


class OrderLine(BaseModel):
    id: Optional[str] = None
    order_id: Optional[str] = None
    product_id: str
    product_name: str
    unit: str
    quantity: Quantity
    price: Amount

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity


class Order(BaseModel):
    id: str
    user_id: str
    customer_name: str
    delivery_address: str
    phone_number: str
    payment_method: PaymentMethod
    total_amount: Amount
    status: OrderStatus
    created_at: Optional[datetime] = None
    items: List[OrderLine] = Field(default_factory=list)


class StatusUpdateIn(BaseModel):
    status: OrderStatus


class CheckoutOut(BaseModel):
    order: Order
    handoff_url: Optional[str] = None
    message: str


class DashboardOut(BaseModel):
    revenue: Amount
    order_count: int
    client_count: int
    product_count: int
    average_order_value: Amount
    orders: List[Order]
