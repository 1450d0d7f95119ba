# storefront/services/product_service.py
import logging
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from storefront.core.exceptions import NotFoundError, PersistenceError
from storefront.models.product_models import Product
from storefront.schemas.product_schemas import ProductCreate

logger = logging.getLogger(__name__)


def parse_id(value) -> Optional[int]:
    """
    Coerce an identifier from a path or payload. Anything that is not a
    positive integer comes back as None so lookups report "not found".
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    if isinstance(value, str) and value.strip().isdigit():
        parsed = int(value.strip())
        return parsed if parsed > 0 else None
    return None


# ---------------------------------------------------
# CREATE PRODUCT
# ---------------------------------------------------
async def create_product(db: AsyncSession, data: ProductCreate) -> Product:
    try:
        product = Product(**data.model_dump())
        db.add(product)
        await db.commit()
        await db.refresh(product)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception("Failed to create product %r", data.name)
        raise PersistenceError("Error creating product", original=e) from e

    logger.info("Created product %s (%s) at %s", product.id, product.name, product.price)
    return product


# ---------------------------------------------------
# GET PRODUCT
# ---------------------------------------------------
async def get_product(db: AsyncSession, product_id) -> Optional[Product]:
    pid = parse_id(product_id)
    if pid is None:
        return None
    result = await db.execute(select(Product).where(Product.id == pid))
    return result.scalars().first()


async def get_product_or_404(db: AsyncSession, product_id) -> Product:
    product = await get_product(db, product_id)
    if not product:
        raise NotFoundError("Product", product_id)
    return product


async def get_product_price(db: AsyncSession, product_id) -> Optional[Decimal]:
    """Current price of a product, or None if it does not exist."""
    pid = parse_id(product_id)
    if pid is None:
        return None
    result = await db.execute(select(Product.price).where(Product.id == pid))
    return result.scalar_one_or_none()


# ---------------------------------------------------
# LIST PRODUCTS
# ---------------------------------------------------
def product_filters(
    category: Optional[str] = None,
    in_stock: Optional[bool] = None,
    featured: Optional[bool] = None,
    product_ids: Optional[List[int]] = None,
) -> list:
    filters = []
    if category:
        filters.append(Product.category == category)
    if in_stock is not None:
        filters.append(Product.in_stock == in_stock)
    if featured is not None:
        filters.append(Product.featured == featured)
    if product_ids is not None:
        filters.append(Product.id.in_(product_ids))
    return filters


async def list_products(
    db: AsyncSession,
    category: Optional[str] = None,
    in_stock: Optional[bool] = None,
    featured: Optional[bool] = None,
) -> List[Product]:
    query = (
        select(Product)
        .where(*product_filters(category, in_stock, featured))
        .order_by(Product.id)
    )
    result = await db.execute(query)
    return result.scalars().all()
