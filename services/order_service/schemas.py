from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel

from .models import OrderStatus


class OrderItemCreate(BaseModel):
    product_id: int
    quantity: int = Field(gt=0)

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class OrderCreate(BaseModel):
    shipping_address: Optional[str] = Field(default=None, max_length=500)
    notes: Optional[str] = Field(default=None, max_length=1000)
    # Emptiness is checked by the workflow so the caller gets its business message.
    items: List[OrderItemCreate] = Field(default_factory=list)

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class OrderStatusUpdate(BaseModel):
    status: OrderStatus
    notes: Optional[str] = Field(default=None, max_length=1000)

    @field_validator("status", mode="before")
    @classmethod
    def parse_status(cls, value):
        return OrderStatus.parse(value)


class OrderItemResponse(BaseModel):
    id: int
    product_id: int
    product_name: Optional[str] = None
    quantity: int
    unit_price: float
    total_price: float

    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True


class OrderResponse(BaseModel):
    id: int
    order_number: str
    user_id: str
    order_date: datetime
    status: str
    total_amount: float
    shipping_address: Optional[str] = None
    notes: Optional[str] = None
    items: List[OrderItemResponse] = []
    created_at: datetime

    @field_validator("status", mode="before")
    @classmethod
    def status_label(cls, value):
        return OrderStatus.parse(value).label

    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True


class OrderPage(BaseModel):
    items: List[OrderResponse]
    total_count: int
    page_number: int
    page_size: int
    total_pages: int
    has_previous_page: bool
    has_next_page: bool

    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True


class MessageResponse(BaseModel):
    message: str
