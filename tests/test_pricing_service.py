from datetime import timedelta
from decimal import Decimal

import pytest

from storefront.services.pricing_service import calculate_cart_total, compute_price, preview_discount
from storefront.utils.time_utils import utcnow
from helpers import make_discount


def test_percentage_discount():
    result = compute_price(200, make_discount("percentage", 25))
    assert result.discounted_price == Decimal("150.00")
    assert result.savings == Decimal("50.00")
    assert result.discount_percentage == 25
    assert result.has_discount


def test_flat_discount():
    result = compute_price(100, make_discount("flat", 20))
    assert result.discounted_price == Decimal("80.00")
    assert result.savings == Decimal("20.00")
    assert result.discount_percentage == 20


def test_flat_discount_clamps_at_zero():
    result = compute_price(50, make_discount("flat", 70))
    assert result.discounted_price == Decimal("0.00")
    assert result.savings == Decimal("50.00")
    assert result.discount_percentage == 100


@pytest.mark.parametrize("price", [0, 1, "19.99", Decimal("120.50")])
def test_no_discount_passes_price_through(price):
    result = compute_price(price, None)
    assert result.discounted_price == Decimal(str(price))
    assert result.original_price == Decimal(str(price))
    assert result.savings == 0
    assert result.discount_percentage == 0
    assert result.has_discount is False


def test_zero_price_with_flat_discount_does_not_divide_by_zero():
    result = compute_price(0, make_discount("flat", 10))
    assert result.discounted_price == Decimal("0.00")
    assert result.savings == Decimal("0.00")
    assert result.discount_percentage == 0


def test_flat_percentage_is_rounded_to_whole_number():
    result = compute_price(90, make_discount("flat", 30))
    assert result.discounted_price == Decimal("60.00")
    assert result.discount_percentage == 33


def test_percentage_uses_configured_value():
    result = compute_price("10.01", make_discount("percentage", 33))
    assert result.savings == Decimal("3.30")
    assert result.discounted_price == Decimal("6.71")
    assert result.discount_percentage == 33


def test_original_price_is_not_rounded():
    result = compute_price("19.995", make_discount("percentage", 10))
    assert result.original_price == Decimal("19.995")
    assert result.discounted_price == Decimal("18.00")


@pytest.mark.parametrize("discount", [
    make_discount(is_active=False),
    make_discount(start_date=utcnow() + timedelta(days=1)),
    make_discount(start_date=utcnow() - timedelta(days=10), end_date=utcnow() - timedelta(days=1)),
])
def test_discount_that_does_not_apply_now_is_ignored(discount):
    result = compute_price(100, discount)
    assert result.has_discount is False
    assert result.discounted_price == Decimal("100")


def test_explicit_evaluation_instant():
    now = utcnow()
    discount = make_discount(start_date=now + timedelta(days=1), end_date=now + timedelta(days=2))
    assert compute_price(100, discount, now=now).has_discount is False
    assert compute_price(100, discount, now=now + timedelta(hours=36)).has_discount is True


def test_unknown_discount_type_is_ignored():
    result = compute_price(100, make_discount("bogo", 50))
    assert result.has_discount is False
    assert result.discounted_price == Decimal("100")


@pytest.mark.parametrize("price", [None, "abc", [], "NaN"])
def test_non_numeric_price_is_priced_at_zero(price):
    result = compute_price(price, make_discount("flat", 5))
    assert result.has_discount is False
    assert result.original_price == Decimal("0")
    assert result.discounted_price == Decimal("0")
    assert result.savings == Decimal("0")


def test_cart_total_sums_lines():
    total = calculate_cart_total([
        {"product_id": 1, "price": Decimal("120.00"), "discount": make_discount("percentage", 30), "quantity": 2},
        {"product_id": 2, "price": Decimal("35.00"), "discount": None, "quantity": 1},
        {"product_id": 3, "price": Decimal("240.00"), "discount": make_discount("flat", 40)},
    ])

    assert total.item_count == 3
    assert total.subtotal == Decimal("515.00")
    assert total.discounted_subtotal == Decimal("403.00")
    assert total.total_savings == Decimal("112.00")

    first = total.items[0]
    assert first.quantity == 2
    assert first.original_total == Decimal("240.00")
    assert first.discounted_total == Decimal("168.00")
    assert first.savings == Decimal("72.00")
    assert total.items[2].quantity == 1


def test_cart_bad_quantity_counts_as_one():
    total = calculate_cart_total([{"price": "10", "quantity": "x"}, {"price": "10", "quantity": 0}])
    assert [line.quantity for line in total.items] == [1, 1]
    assert total.subtotal == Decimal("20.00")


def test_empty_cart():
    total = calculate_cart_total([])
    assert total.subtotal == Decimal("0.00")
    assert total.items == []


class TestPreview:
    def test_percentage(self):
        preview = preview_discount("80", "percentage", "25")
        assert preview.is_valid
        assert preview.discounted_price == Decimal("60.00")
        assert preview.discount_percentage == 25

    def test_flat(self):
        preview = preview_discount("80", "flat", "20")
        assert preview.is_valid
        assert preview.savings == Decimal("20.00")
        assert preview.discount_percentage == 25

    def test_flat_not_below_price(self):
        preview = preview_discount("80", "flat", "80")
        assert not preview.is_valid
        assert preview.error == "Flat discount cannot be greater than or equal to product price"
        assert preview.discounted_price == Decimal("80.00")

    def test_percentage_limit(self):
        preview = preview_discount("80", "percentage", "100")
        assert preview.error == "Percentage discount must be less than 100%"

    @pytest.mark.parametrize("price, value", [("0", "10"), ("80", "0"), ("abc", "10")])
    def test_bad_input(self, price, value):
        preview = preview_discount(price, "flat", value)
        assert not preview.is_valid
        assert preview.error == "Invalid price or discount value"

    def test_unknown_type(self):
        assert preview_discount("80", "coupon", "5").error == "Invalid discount type"
