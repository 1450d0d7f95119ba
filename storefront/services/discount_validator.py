# storefront/services/discount_validator.py
"""
Rule checks for a candidate discount.

`validate_discount` never raises for bad input: every broken rule is collected
into the returned result so the admin UI can show all of them at once. It does
no I/O; the caller looks up the product price beforehand.
"""
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Mapping, Optional

from storefront.models.discount_models import DISCOUNT_TYPES
from storefront.schemas.discount_schemas import DiscountValidationResult
from storefront.utils.decimal_utils import round_rate, to_decimal
from storefront.utils.time_utils import parse_timestamp, utcnow

# Date-only pickers send midnight in the admin's timezone, so "today" can land
# up to a day behind the server clock. Applies to creation only.
START_DATE_GRACE = timedelta(days=1)


def _is_present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str) and not value.strip():
        return False
    return True


def validate_discount(
    data: Mapping[str, Any],
    product_price: Optional[Decimal] = None,
    is_update: bool = False,
    now: Optional[datetime] = None,
) -> DiscountValidationResult:
    """
    Check a discount's field set.

    Args:
        data: candidate fields (product_id, discount_type, discount_value,
            start_date, end_date). For updates, pass the stored record merged
            with the patch.
        product_price: price of the referenced product, or None if the product
            does not exist. Only consulted for flat discounts.
        is_update: skips the start-date-in-the-past rule.
        now: evaluation instant, defaults to the current UTC time.
    """
    now = now or utcnow()
    errors = []

    product_id = data.get("product_id")
    discount_type = data.get("discount_type")
    raw_value = data.get("discount_value")

    if not _is_present(product_id):
        errors.append("Product ID is required")

    if discount_type not in DISCOUNT_TYPES:
        errors.append('Discount type must be either "flat" or "percentage"')

    value = None
    if not _is_present(raw_value):
        errors.append("Discount value is required")
    else:
        try:
            # Checked at the precision the column stores
            value = round_rate(to_decimal(raw_value))
        except ValueError:
            errors.append("Discount value must be a number")

    if value is not None:
        if value <= 0:
            errors.append("Discount value must be greater than 0")

        if discount_type == "percentage" and value >= 100:
            errors.append("Percentage discount must be less than 100%")

        if discount_type == "flat" and _is_present(product_id):
            if product_price is None:
                errors.append("Invalid product ID")
            elif value >= to_decimal(product_price):
                errors.append("Flat discount cannot be greater than or equal to product price")

    start_date = None
    raw_start = data.get("start_date")
    if _is_present(raw_start):
        start_date = parse_timestamp(raw_start)
        if start_date is None:
            errors.append("Invalid start date")
        elif not is_update and start_date < now - START_DATE_GRACE:
            errors.append("Start date cannot be more than 1 day in the past")

    raw_end = data.get("end_date")
    if _is_present(raw_end):
        end_date = parse_timestamp(raw_end)
        if end_date is None:
            errors.append("Invalid end date")
        elif start_date is not None and end_date <= start_date:
            errors.append("End date must be after start date")

    return DiscountValidationResult(is_valid=not errors, errors=errors)
