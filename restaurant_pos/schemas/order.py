from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Literal, Optional
from datetime import datetime

DiscountTypeName = Literal["none", "percentage", "fixed"]
OrderStatusName = Literal["pending", "completed", "cancelled"]


# Input schema for a single order line
class OrderItemIn(BaseModel):
    product_id: int
    quantity: int = Field(..., ge=1)
    # Price snapshot; the product's current price is used when omitted
    price_at_order: Optional[float] = Field(None, ge=0)


# Input schema for creating an order
class OrderCreatePayload(BaseModel):
    items: List[OrderItemIn] = Field(..., min_length=1)
    note: Optional[str] = None
    discount_type: DiscountTypeName = "none"
    discount_value: float = Field(0.0, ge=0)

    @field_validator("note")
    @classmethod
    def _blank_note_is_none(cls, v):
        if v is not None and not v.strip():
            return None
        return v


# Editing replaces items, discount and note of a pending order
class OrderEditPayload(OrderCreatePayload):
    pass


# Input schema for cancelling an order
class OrderCancelPayload(BaseModel):
    note: str

    @field_validator("note")
    @classmethod
    def _note_required(cls, v):
        v = (v or "").strip()
        if not v:
            raise ValueError("A cancellation note is required")
        return v


# Output schema for an individual order line item
class OrderItemOut(BaseModel):
    product_id: int
    name: str
    quantity: int
    price_at_order: float
    line_total: float


# Output schema representing the full order details
class OrderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    items: List[OrderItemOut]
    subtotal: float
    discount_type: DiscountTypeName
    discount_value: float
    discount_amount: float
    tax_amount: float
    total: float
    status: OrderStatusName
    note: Optional[str] = None
    cancellation_note: Optional[str] = None
    created_at: datetime
    updated_at: datetime
