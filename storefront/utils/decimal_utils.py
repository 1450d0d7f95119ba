# storefront/utils/decimal_utils.py
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_decimal(value) -> Decimal:
    """
    Convert int/float/str/Decimal to Decimal. Floats go through str() so
    19.99 stays 19.99 instead of its binary expansion.
    Raises ValueError for anything non-numeric (including NaN/Infinity and bools).
    """
    if isinstance(value, bool) or value is None:
        raise ValueError(f"Not a number: {value!r}")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            raise ValueError(f"Not a number: {value!r}")
    if not result.is_finite():
        raise ValueError(f"Not a number: {value!r}")
    return result


def round_money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def round_whole(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


# Scale of the discount_value column
RATE = Decimal("0.0001")


def round_rate(value: Decimal) -> Decimal:
    """
    Round to the precision discount values are stored at. Values too large to
    quantize are returned as-is; they fail the range rules anyway.
    """
    try:
        return value.quantize(RATE, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        return value
