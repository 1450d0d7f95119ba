# storefront/services/discount_service.py
import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import and_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from storefront.core.exceptions import NotFoundError, PersistenceError, ValidationError
from storefront.models.discount_models import Discount
from storefront.models.product_models import Product
from storefront.schemas.discount_schemas import DiscountCreate, DiscountUpdate
from storefront.services.discount_validator import validate_discount
from storefront.services.eligibility import is_effectively_active
from storefront.services.product_service import get_product_price, parse_id, product_filters
from storefront.utils.decimal_utils import round_rate, to_decimal
from storefront.utils.time_utils import ensure_utc, parse_timestamp, utcnow

logger = logging.getLogger(__name__)

# First attempt plus one retry when the one-active-per-product index rejects
# the write (another request replaced the same product's discount meanwhile).
MAX_WRITE_ATTEMPTS = 2

MUTABLE_FIELDS = ("product_id", "discount_type", "discount_value", "start_date", "end_date", "is_active")


@asynccontextmanager
async def _db_errors(db: AsyncSession, action: str):
    try:
        yield
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception("Database error while %s", action)
        raise PersistenceError(f"Database error while {action}", original=e) from e


def _column_values(data: dict) -> dict:
    """Turn validated input into column values."""
    values = {}
    if "product_id" in data:
        values["product_id"] = parse_id(data["product_id"])
    if "discount_type" in data:
        values["discount_type"] = data["discount_type"]
    if "discount_value" in data:
        values["discount_value"] = round_rate(to_decimal(data["discount_value"]))
    if "start_date" in data:
        values["start_date"] = parse_timestamp(data["start_date"])
    if "end_date" in data:
        values["end_date"] = parse_timestamp(data["end_date"]) if data["end_date"] not in (None, "") else None
    if "is_active" in data:
        values["is_active"] = bool(data["is_active"])
    return values


def _as_dict(discount: Discount) -> dict:
    return {field: getattr(discount, field) for field in MUTABLE_FIELDS}


async def _release_active_slot(
    db: AsyncSession, product_id: int, exclude_id: Optional[int] = None
) -> List[Discount]:
    """
    Delete the product's active discount record(s) so a new one can take the
    slot. Flushes immediately: the unit of work would otherwise emit the new
    INSERT before these DELETEs and trip the unique index.
    """
    query = select(Discount).where(Discount.product_id == product_id, Discount.is_active == True)
    if exclude_id is not None:
        query = query.where(Discount.id != exclude_id)

    result = await db.execute(query)
    released = result.scalars().all()
    if not released:
        return []

    now = utcnow()
    for old in released:
        if is_effectively_active(old, now):
            logger.info("Replacing discount %s on product %s", old.id, product_id)
        elif ensure_utc(old.start_date) > now:
            logger.warning(
                "Dropping scheduled discount %s on product %s (starts %s)",
                old.id,
                product_id,
                old.start_date.isoformat(),
            )
        else:
            logger.info("Clearing expired discount %s on product %s", old.id, product_id)
        await db.delete(old)
    await db.flush()
    return released


# -----------------------
# CREATE
# -----------------------
async def create_discount(db: AsyncSession, payload: DiscountCreate, now: Optional[datetime] = None) -> Discount:
    """
    Validate and store a new discount, replacing whatever active discount
    the product already has. The stored record is always active.
    """
    now = now or utcnow()
    data = payload.model_dump()
    if data.get("start_date") in (None, ""):
        data["start_date"] = now

    async with _db_errors(db, "looking up product price"):
        product_price = await get_product_price(db, data.get("product_id"))

    result = validate_discount(data, product_price, is_update=False, now=now)
    if not result.is_valid:
        raise ValidationError(result.errors)
    if product_price is None:
        raise NotFoundError("Product", data.get("product_id"))

    values = _column_values(data)

    for attempt in range(1, MAX_WRITE_ATTEMPTS + 1):
        async with _db_errors(db, "creating discount"):
            try:
                await _release_active_slot(db, values["product_id"])
                discount = Discount(**values, is_active=True, created_at=now, updated_at=now)
                db.add(discount)
                await db.commit()
            except IntegrityError as e:
                await db.rollback()
                if attempt == MAX_WRITE_ATTEMPTS:
                    logger.error("Could not create discount for product %s: %s", values["product_id"], e)
                    raise PersistenceError("Could not create discount, please retry", original=e) from e
                logger.warning(
                    "Active discount conflict on product %s, retrying (attempt %s)",
                    values["product_id"],
                    attempt,
                )
                continue

            await db.refresh(discount)

        logger.info(
            "Created discount %s on product %s: %s %s",
            discount.id,
            discount.product_id,
            discount.discount_type,
            discount.discount_value,
        )
        return discount


# -----------------------
# READ
# -----------------------
async def get_discount_by_id(db: AsyncSession, discount_id) -> Optional[Discount]:
    did = parse_id(discount_id)
    if did is None:
        return None
    async with _db_errors(db, "loading discount"):
        result = await db.execute(select(Discount).where(Discount.id == did))
        return result.scalar_one_or_none()


async def get_active_discount_for_product(
    db: AsyncSession, product_id, now: Optional[datetime] = None
) -> Optional[Discount]:
    """The discount that applies to the product right now, if any."""
    pid = parse_id(product_id)
    if pid is None:
        return None
    now = now or utcnow()
    query = (
        select(Discount)
        .where(Discount.product_id == pid, Discount.effectively_active(now))
        .order_by(Discount.created_at.desc())
    )
    async with _db_errors(db, "loading active discount"):
        result = await db.execute(query)
        return result.scalars().first()


async def get_active_discounts(db: AsyncSession, now: Optional[datetime] = None) -> List[Discount]:
    now = now or utcnow()
    query = (
        select(Discount)
        .where(Discount.effectively_active(now))
        .order_by(Discount.created_at.desc())
    )
    async with _db_errors(db, "loading active discounts"):
        result = await db.execute(query)
        return result.scalars().all()


async def get_all_discounts(db: AsyncSession) -> List[Discount]:
    """Every stored discount with its product, newest first (admin list)."""
    query = select(Discount).order_by(Discount.created_at.desc(), Discount.id.desc())
    async with _db_errors(db, "loading discounts"):
        result = await db.execute(query)
        return result.scalars().all()


async def get_products_with_active_discounts(
    db: AsyncSession,
    category: Optional[str] = None,
    in_stock: Optional[bool] = None,
    featured: Optional[bool] = None,
    product_ids: Optional[List[int]] = None,
    now: Optional[datetime] = None,
) -> List[Tuple[Product, Optional[Discount]]]:
    """
    Pair every matching product with its current discount (or None) using a
    single outer join.
    """
    now = now or utcnow()
    query = (
        select(Product, Discount)
        .outerjoin(Discount, and_(Discount.product_id == Product.id, Discount.effectively_active(now)))
        .where(*product_filters(category, in_stock, featured, product_ids))
        .order_by(Product.id)
    )
    async with _db_errors(db, "loading products with discounts"):
        result = await db.execute(query)
        return [(product, discount) for product, discount in result.all()]


async def get_discounted_products(
    db: AsyncSession, limit: int = 8, now: Optional[datetime] = None
) -> List[Tuple[Product, Discount]]:
    """Products that currently have a discount, for the storefront sale section."""
    now = now or utcnow()
    query = (
        select(Product, Discount)
        .join(Discount, and_(Discount.product_id == Product.id, Discount.effectively_active(now)))
        .order_by(Discount.created_at.desc())
        .limit(limit)
    )
    async with _db_errors(db, "loading discounted products"):
        result = await db.execute(query)
        return [(product, discount) for product, discount in result.all()]


# -----------------------
# UPDATE
# -----------------------
async def update_discount(db: AsyncSession, discount_id, payload: DiscountUpdate) -> Discount:
    """
    Merge the patch onto the stored record, validate the merged state and
    persist it. If the result is active and its product already holds another
    active discount, that other discount is replaced.
    """
    patch = payload.model_dump(exclude_unset=True)
    # start_date and is_active are required in storage; null means "keep"
    for field in ("start_date", "is_active"):
        if field in patch and patch[field] is None:
            patch.pop(field)

    for attempt in range(1, MAX_WRITE_ATTEMPTS + 1):
        discount = await get_discount_by_id(db, discount_id)
        if not discount:
            raise NotFoundError("Discount", discount_id)

        merged = {**_as_dict(discount), **patch}

        async with _db_errors(db, "looking up product price"):
            product_price = await get_product_price(db, merged.get("product_id"))

        result = validate_discount(merged, product_price, is_update=True)
        if not result.is_valid:
            raise ValidationError(result.errors)
        if product_price is None:
            raise NotFoundError("Product", merged.get("product_id"))

        values = _column_values(merged)

        async with _db_errors(db, "updating discount"):
            try:
                if values["is_active"]:
                    await _release_active_slot(db, values["product_id"], exclude_id=discount.id)
                for key, value in values.items():
                    setattr(discount, key, value)
                discount.updated_at = utcnow()
                await db.commit()
            except IntegrityError as e:
                await db.rollback()
                if attempt == MAX_WRITE_ATTEMPTS:
                    logger.error("Could not update discount %s: %s", discount_id, e)
                    raise PersistenceError("Could not update discount, please retry", original=e) from e
                logger.warning("Active discount conflict updating discount %s, retrying", discount_id)
                continue

            await db.refresh(discount)

        logger.info("Updated discount %s (%s)", discount.id, ", ".join(sorted(patch)) or "no changes")
        return discount


# -----------------------
# DELETE
# -----------------------
async def delete_discount(db: AsyncSession, discount_id) -> bool:
    """
    Hard-delete a discount. Returns False when there was nothing to delete,
    so repeating the call is harmless.
    """
    did = parse_id(discount_id)
    if did is None:
        return False

    async with _db_errors(db, "deleting discount"):
        result = await db.execute(select(Discount).where(Discount.id == did))
        discount = result.scalar_one_or_none()
        if discount is None:
            return False
        await db.delete(discount)
        await db.commit()

    logger.info("Deleted discount %s from product %s", did, discount.product_id)
    return True
