"""Discount calculation"""

from decimal import Decimal

from ..models.base import Amount, quantize_money
from ..models.coupon import Coupon, DiscountType


def calculate_discount(coupon: Coupon, amount: Amount) -> Decimal:
    """
    Discount a coupon gives on `amount`, rounded to the money quantum.

    Percentage coupons take value% of the amount (values are capped at 100
    when the coupon is created). Fixed coupons never exceed the amount.
    """
    amount = Decimal(str(amount)) if not isinstance(amount, Decimal) else amount
    if coupon.type == DiscountType.PERCENTAGE:
        return quantize_money(amount * coupon.value / Decimal(100))
    return quantize_money(min(coupon.value, amount))
