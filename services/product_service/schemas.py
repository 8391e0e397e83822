from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel


class ProductCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=2000)
    sku: Optional[str] = Field(default=None, max_length=50)
    price: Decimal = Field(ge=0, decimal_places=2)
    stock_quantity: int = Field(default=0, ge=0)
    is_available: bool = True

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=2000)
    sku: Optional[str] = Field(default=None, max_length=50)
    price: Optional[Decimal] = Field(default=None, ge=0, decimal_places=2)
    stock_quantity: Optional[int] = Field(default=None, ge=0)
    is_available: Optional[bool] = None

    @field_validator("name", "price", "stock_quantity", "is_available", mode="before")
    @classmethod
    def reject_null(cls, value):
        # Omit a field to leave it unchanged; only description and sku can be cleared.
        if value is None:
            raise ValueError("may not be null")
        return value

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class ProductResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    sku: Optional[str] = None
    price: float
    stock_quantity: int
    is_available: bool
    created_at: datetime

    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True


class ProductPage(BaseModel):
    items: List[ProductResponse]
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
