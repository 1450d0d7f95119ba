# storefront/schemas/discount_schemas.py
from pydantic import BaseModel, ConfigDict
from typing import Any, List, Optional
from datetime import datetime

from storefront.schemas.pricing_schemas import Money, PriceBreakdown
from storefront.schemas.product_schemas import ProductOut

# Inputs accept any JSON value: business rules are checked by the discount
# validator so the admin UI gets the full list of messages, not a 422.

class DiscountCreate(BaseModel):
    product_id: Any = None
    discount_type: Any = None
    discount_value: Any = None
    start_date: Any = None
    end_date: Any = None


class DiscountUpdate(BaseModel):
    """
    Partial update. Only fields present in the request are merged onto the
    stored record; an explicit null end_date makes the discount open-ended.
    """
    product_id: Any = None
    discount_type: Any = None
    discount_value: Any = None
    start_date: Any = None
    end_date: Any = None
    is_active: Optional[bool] = None


class DiscountOut(BaseModel):
    id: int
    product_id: int
    discount_type: str
    discount_value: Money
    start_date: datetime
    end_date: Optional[datetime] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class DiscountWithProductOut(DiscountOut):
    product: Optional[ProductOut] = None


class DiscountValidationResult(BaseModel):
    is_valid: bool
    errors: List[str] = []


# --------------------------
# Product + discount views
# --------------------------
class ProductWithDiscountOut(BaseModel):
    product: ProductOut
    discount: Optional[DiscountOut] = None
    pricing: PriceBreakdown


class MessageResponse(BaseModel):
    message: str
