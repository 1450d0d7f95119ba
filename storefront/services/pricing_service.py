# storefront/services/pricing_service.py
"""
Price arithmetic for discounted products.

`compute_price` is the only place the flat/percentage formulas live; listing
views, product pages, cart totals and the admin preview all go through it.
Money is handled as Decimal and rounded half-up to cents as the last step.
"""
import logging
from datetime import datetime
from decimal import Decimal
from typing import Iterable, List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.exceptions import NotFoundError
from storefront.models.discount_models import Discount
from storefront.models.product_models import Product
from storefront.schemas.discount_schemas import DiscountOut, ProductWithDiscountOut
from storefront.schemas.pricing_schemas import (
    CartItemIn,
    CartLineOut,
    CartTotal,
    DiscountPreview,
    PriceBreakdown,
)
from storefront.schemas.product_schemas import ProductOut
from storefront.services.discount_service import get_products_with_active_discounts
from storefront.services.eligibility import is_effectively_active
from storefront.services.product_service import parse_id
from storefront.utils.decimal_utils import ZERO, round_money, round_rate, round_whole, to_decimal
from storefront.utils.time_utils import utcnow

logger = logging.getLogger(__name__)

HUNDRED = Decimal("100")


def _no_discount(price: Decimal) -> PriceBreakdown:
    return PriceBreakdown(
        original_price=price,
        discounted_price=price,
        savings=ZERO,
        discount_percentage=0,
        has_discount=False,
    )


def compute_price(original_price, discount=None, now: Optional[datetime] = None) -> PriceBreakdown:
    """
    Price of one unit after applying `discount`, if it applies at `now`.

    Out-of-range input is clamped, never rejected: the discounted price does
    not go below zero, and a zero price yields a 0% discount. A discount with
    an unknown type or a non-numeric value is ignored, and a price that is not
    a number prices at zero.
    """
    try:
        price = to_decimal(original_price)
    except ValueError:
        logger.warning("Pricing non-numeric price %r as 0", original_price)
        return _no_discount(ZERO)
    if discount is None or not is_effectively_active(discount, now):
        return _no_discount(price)

    try:
        value = to_decimal(discount.discount_value)
    except ValueError:
        logger.warning("Ignoring discount %s with non-numeric value", getattr(discount, "id", None))
        return _no_discount(price)

    if discount.discount_type == "flat":
        discounted = max(ZERO, price - value)
        savings = price - discounted
        percentage = round_whole(savings / price * HUNDRED) if price > 0 else 0
    elif discount.discount_type == "percentage":
        savings = price * value / HUNDRED
        discounted = price - savings
        if discounted < 0:
            discounted = ZERO
            savings = price
        # The configured value, so the badge matches what the admin entered
        percentage = round_whole(value)
    else:
        logger.warning("Ignoring discount %s with unknown type %r", getattr(discount, "id", None), discount.discount_type)
        return _no_discount(price)

    return PriceBreakdown(
        original_price=price,
        discounted_price=round_money(discounted),
        savings=round_money(savings),
        discount_percentage=percentage,
        has_discount=True,
    )


def _quantity(value) -> int:
    try:
        quantity = int(value)
    except (TypeError, ValueError):
        return 1
    return quantity if quantity > 0 else 1


def calculate_cart_total(lines: Iterable[dict], now: Optional[datetime] = None) -> CartTotal:
    """
    Price each cart line independently and add up the totals.

    Each line is a dict with `price`, optional `discount`, optional
    `quantity` (defaults to 1) and optional `product_id`.
    """
    now = now or utcnow()
    subtotal = discounted_subtotal = total_savings = ZERO
    items = []

    for line in lines:
        quantity = _quantity(line.get("quantity", 1))
        discount = line.get("discount")
        breakdown = compute_price(line["price"], discount, now)

        original_total = breakdown.original_price * quantity
        discounted_total = breakdown.discounted_price * quantity
        savings = breakdown.savings * quantity

        subtotal += original_total
        discounted_subtotal += discounted_total
        total_savings += savings

        items.append(CartLineOut(
            product_id=line.get("product_id"),
            quantity=quantity,
            original_price=breakdown.original_price,
            discounted_price=breakdown.discounted_price,
            original_total=round_money(original_total),
            discounted_total=round_money(discounted_total),
            savings=round_money(savings),
            has_discount=breakdown.has_discount,
            discount_id=getattr(discount, "id", None) if breakdown.has_discount else None,
        ))

    return CartTotal(
        subtotal=round_money(subtotal),
        discounted_subtotal=round_money(discounted_subtotal),
        total_savings=round_money(total_savings),
        item_count=len(items),
        items=items,
    )


def preview_discount(original_price, discount_type, discount_value) -> DiscountPreview:
    """
    What-if pricing for the admin discount form. Unlike compute_price this
    reports out-of-range input instead of clamping it.
    """
    try:
        price = to_decimal(original_price)
        value = round_rate(to_decimal(discount_value))
    except ValueError:
        price = None
        value = None

    if price is None or price <= 0 or value <= 0:
        shown = price if price is not None else ZERO
        return DiscountPreview(
            original_price=shown,
            discounted_price=shown,
            savings=ZERO,
            discount_percentage=0,
            is_valid=False,
            error="Invalid price or discount value",
        )

    error = None
    discounted = price
    savings = ZERO
    percentage = ZERO

    if discount_type == "flat":
        if value >= price:
            error = "Flat discount cannot be greater than or equal to product price"
        else:
            discounted = price - value
            savings = value
            percentage = savings / price * HUNDRED
    elif discount_type == "percentage":
        if value >= HUNDRED:
            error = "Percentage discount must be less than 100%"
        else:
            savings = price * value / HUNDRED
            discounted = price - savings
            percentage = value
    else:
        error = "Invalid discount type"

    return DiscountPreview(
        original_price=price,
        discounted_price=round_money(discounted),
        savings=round_money(savings),
        discount_percentage=round_whole(percentage),
        is_valid=error is None,
        error=error,
    )


# ---------------------------------------------------
# Catalog-backed helpers
# ---------------------------------------------------
def price_products(
    pairs: Iterable[Tuple[Product, Optional[Discount]]], now: Optional[datetime] = None
) -> List[ProductWithDiscountOut]:
    now = now or utcnow()
    return [
        ProductWithDiscountOut(
            product=ProductOut.model_validate(product),
            discount=DiscountOut.model_validate(discount) if discount else None,
            pricing=compute_price(product.price, discount, now),
        )
        for product, discount in pairs
    ]


async def calculate_price(db: AsyncSession, product_id) -> ProductWithDiscountOut:
    pid = parse_id(product_id)
    if pid is None:
        raise NotFoundError("Product", product_id)

    now = utcnow()
    pairs = await get_products_with_active_discounts(db, product_ids=[pid], now=now)
    if not pairs:
        raise NotFoundError("Product", product_id)
    return price_products(pairs, now)[0]


async def calculate_cart(db: AsyncSession, items: List[CartItemIn]) -> CartTotal:
    """Cart totals with current discounts, looked up in one query."""
    now = utcnow()
    product_ids = sorted({item.product_id for item in items})
    pairs = await get_products_with_active_discounts(db, product_ids=product_ids, now=now)
    by_id = {product.id: (product, discount) for product, discount in pairs}

    missing = [pid for pid in product_ids if pid not in by_id]
    if missing:
        raise NotFoundError("Product", missing[0])

    lines = []
    for item in items:
        product, discount = by_id[item.product_id]
        lines.append({
            "product_id": product.id,
            "price": product.price,
            "discount": discount,
            "quantity": item.quantity,
        })
    return calculate_cart_total(lines, now)
