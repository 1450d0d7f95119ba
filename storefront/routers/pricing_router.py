# storefront/routers/pricing_router.py
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.db import get_db
from storefront.schemas.pricing_schemas import CartRequest, CartTotal
from storefront.services.pricing_service import calculate_cart

router = APIRouter(prefix="/pricing", tags=["Pricing"])


@router.post("/cart", response_model=CartTotal)
async def cart_total_route(payload: CartRequest, db: AsyncSession = Depends(get_db)):
    """Totals for a cart, with whatever discounts apply right now."""
    return await calculate_cart(db, payload.items)
