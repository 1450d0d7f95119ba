# storefront/routers/products_router.py

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from storefront.core.config import DISCOUNTED_PRODUCTS_DEFAULT_LIMIT, DISCOUNTED_PRODUCTS_MAX_LIMIT
from storefront.core.db import get_db
from storefront.schemas.discount_schemas import ProductWithDiscountOut
from storefront.schemas.product_schemas import ProductCreate, ProductOut
from storefront.services.discount_service import (
    get_discounted_products,
    get_products_with_active_discounts,
)
from storefront.services.pricing_service import calculate_price, price_products
from storefront.services.product_service import create_product
from storefront.utils.check_roles import require_role
from storefront.utils.get_user import get_current_user

router = APIRouter(prefix="/products", tags=["Products"])


# -----------------------------------------------------------
# LIST PRODUCTS WITH PRICING
# -----------------------------------------------------------
@router.get("", response_model=List[ProductWithDiscountOut])
async def list_products_route(
    db: AsyncSession = Depends(get_db),
    category: Optional[str] = Query(None),
    in_stock: Optional[bool] = Query(None),
    featured: Optional[bool] = Query(None),
):
    """
    Catalog listing. Every product comes with its current discount (if any)
    and display-ready pricing.
    """
    pairs = await get_products_with_active_discounts(
        db, category=category, in_stock=in_stock, featured=featured
    )
    return price_products(pairs)


# -----------------------------------------------------------
# PRODUCTS ON SALE
# -----------------------------------------------------------
@router.get("/discounted", response_model=List[ProductWithDiscountOut])
async def discounted_products_route(
    db: AsyncSession = Depends(get_db),
    limit: int = Query(DISCOUNTED_PRODUCTS_DEFAULT_LIMIT, ge=1, le=DISCOUNTED_PRODUCTS_MAX_LIMIT),
):
    """Products with a discount running right now, newest discount first."""
    pairs = await get_discounted_products(db, limit=limit)
    return price_products(pairs)


# -----------------------------------------------------------
# GET PRODUCT BY ID
# -----------------------------------------------------------
@router.get("/{product_id}", response_model=ProductWithDiscountOut)
async def get_product_route(product_id: str, db: AsyncSession = Depends(get_db)):
    return await calculate_price(db, product_id)


# -----------------------------------------------------------
# CREATE PRODUCT
# -----------------------------------------------------------
@router.post("", response_model=ProductOut, status_code=201)
@require_role(["admin"])
async def create_product_route(
    data: ProductCreate,
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
):
    """Add a product to the catalog. Admin only."""
    return await create_product(db, data)
