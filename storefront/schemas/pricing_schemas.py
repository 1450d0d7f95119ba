# storefront/schemas/pricing_schemas.py
from pydantic import BaseModel, Field, PlainSerializer
from typing import List, Optional, Union
from typing_extensions import Annotated
from decimal import Decimal

# Decimal internally, plain JSON number on the wire
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class PriceBreakdown(BaseModel):
    original_price: Money
    discounted_price: Money
    savings: Money
    discount_percentage: int
    has_discount: bool


class DiscountPreview(BaseModel):
    original_price: Money
    discounted_price: Money
    savings: Money
    discount_percentage: int
    is_valid: bool
    error: Optional[str] = None


class DiscountPreviewRequest(BaseModel):
    original_price: Union[Decimal, str]
    discount_type: Optional[str] = None
    discount_value: Union[Decimal, str]


# --------------------------
# Cart
# --------------------------
class CartItemIn(BaseModel):
    product_id: int
    quantity: int = Field(default=1, ge=1)


class CartRequest(BaseModel):
    items: List[CartItemIn] = Field(..., min_length=1)


class CartLineOut(BaseModel):
    product_id: Optional[int] = None
    quantity: int
    original_price: Money
    discounted_price: Money
    original_total: Money
    discounted_total: Money
    savings: Money
    has_discount: bool
    discount_id: Optional[int] = None


class CartTotal(BaseModel):
    subtotal: Money
    discounted_subtotal: Money
    total_savings: Money
    item_count: int
    items: List[CartLineOut]
