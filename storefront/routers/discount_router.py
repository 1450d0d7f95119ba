# storefront/routers/discount_router.py
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from storefront.core.db import get_db
from storefront.core.exceptions import NotFoundError
from storefront.schemas.discount_schemas import (
    DiscountCreate,
    DiscountUpdate,
    DiscountOut,
    DiscountWithProductOut,
    MessageResponse,
    ProductWithDiscountOut,
)
from storefront.schemas.pricing_schemas import DiscountPreview, DiscountPreviewRequest
from storefront.services.discount_service import (
    create_discount,
    delete_discount,
    get_all_discounts,
    get_discount_by_id,
    get_products_with_active_discounts,
    update_discount,
)
from storefront.services.pricing_service import preview_discount, price_products
from storefront.utils.check_roles import require_role
from storefront.utils.get_user import get_current_user

router = APIRouter(prefix="/admin/discounts", tags=["Discounts"])


@router.get("", response_model=List[ProductWithDiscountOut])
@require_role(["admin"])
async def route_list_products_with_discounts(
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
):
    """All products, each with its current discount and pricing."""
    pairs = await get_products_with_active_discounts(db)
    return price_products(pairs)


@router.get("/all", response_model=List[DiscountWithProductOut])
@require_role(["admin"])
async def route_get_all_discounts(
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
):
    """Every stored discount, including scheduled, expired and deactivated ones."""
    return await get_all_discounts(db)


@router.post("/preview", response_model=DiscountPreview)
@require_role(["admin"])
async def route_preview_discount(
    payload: DiscountPreviewRequest,
    _user=Depends(get_current_user),
):
    """Price preview for the discount form; nothing is stored."""
    return preview_discount(payload.original_price, payload.discount_type, payload.discount_value)


@router.get("/{discount_id}", response_model=DiscountOut)
@require_role(["admin"])
async def route_get_discount(
    discount_id: str,
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
):
    discount = await get_discount_by_id(db, discount_id)
    if not discount:
        raise NotFoundError("Discount", discount_id)
    return discount


@router.post("", response_model=DiscountOut, status_code=201)
@require_role(["admin"])
async def route_create_discount(
    payload: DiscountCreate,
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
):
    """
    Create a discount for a product. Replaces the product's current active
    discount, if there is one.
    """
    return await create_discount(db, payload)


@router.put("/{discount_id}", response_model=DiscountOut)
@require_role(["admin"])
async def route_update_discount(
    discount_id: str,
    payload: DiscountUpdate,
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
):
    """Partial update; the merged result is validated as a whole."""
    return await update_discount(db, discount_id, payload)


@router.delete("/{discount_id}", response_model=MessageResponse)
@require_role(["admin"])
async def route_delete_discount(
    discount_id: str,
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
):
    """Hard delete; the product goes back to its regular price."""
    if not await delete_discount(db, discount_id):
        raise NotFoundError("Discount", discount_id)
    return MessageResponse(message="Discount deleted successfully")
