# storefront/schemas/product_schemas.py

from pydantic import BaseModel, ConfigDict, field_validator
from typing import Optional
from datetime import datetime
from decimal import Decimal

from storefront.schemas.pricing_schemas import Money


class ProductCreate(BaseModel):
    name: str
    category: Optional[str] = None
    price: Decimal
    in_stock: bool = True
    featured: bool = False

    @field_validator('price')
    def non_negative_price(cls, value):
        if value < 0:
            raise ValueError('Must be non-negative')
        return value


class ProductOut(BaseModel):
    id: int
    name: str
    category: Optional[str] = None
    price: Money
    in_stock: bool
    featured: bool

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
