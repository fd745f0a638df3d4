"""Exceptions raised by the marketplace services.

Every error carries a ``status_code`` so an outer surface can map it to a
response without knowing each class.
"""

from decimal import Decimal
from typing import Optional


class MarketplaceError(Exception):
    """Base exception for all marketplace errors."""

    status_code = 400

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


# Carts and stock


class EmptyCart(MarketplaceError):
    """Raised when an order is requested from a missing or empty cart."""

    def __init__(self):
        super().__init__("Cart is empty")


class CartNotFound(MarketplaceError):
    status_code = 404

    def __init__(self, owner: Optional[str] = None):
        self.owner = owner
        super().__init__("Cart not found")


class CartItemNotFound(MarketplaceError):
    status_code = 404

    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__("Product not in cart")


class ProductNotFound(MarketplaceError):
    status_code = 404

    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__("Product not found")


class InsufficientStock(MarketplaceError):
    status_code = 409

    def __init__(self, product_id: str, available: int, requested: int):
        self.product_id = product_id
        self.available = available
        self.requested = requested
        super().__init__("Insufficient stock")


# Coupons


class DuplicateCouponCode(MarketplaceError):
    status_code = 409

    def __init__(self, code: str):
        self.code = code
        super().__init__(f"Coupon code already exists: {code}")


class CouponValidationError(MarketplaceError):
    """Base for the rules a coupon must pass before it can be applied."""


class CouponNotFound(CouponValidationError):
    status_code = 404

    def __init__(self, code: str):
        self.code = code
        super().__init__("Coupon not found")


class CouponInactive(CouponValidationError):
    def __init__(self, code: str):
        self.code = code
        super().__init__("Coupon is inactive")


class CouponExpired(CouponValidationError):
    def __init__(self, code: str):
        self.code = code
        super().__init__("Coupon has expired or not yet active")


class MinimumPurchaseNotMet(CouponValidationError):
    def __init__(self, code: str, minimum: Decimal):
        self.code = code
        self.minimum = minimum
        super().__init__(f"Minimum purchase amount is {minimum}")


class UsageLimitReached(CouponValidationError):
    def __init__(self, code: str):
        self.code = code
        super().__init__("Coupon usage limit reached")


class UserUsageLimitReached(CouponValidationError):
    def __init__(self, code: str, user_id: str):
        self.code = code
        self.user_id = user_id
        super().__init__("User usage limit reached")


class InvalidCoupon(MarketplaceError):
    """Wraps a coupon rule failure with the code the caller supplied."""

    def __init__(self, code: str, reason: str):
        self.code = code
        self.reason = reason
        super().__init__(f'Coupon "{code}" is invalid: {reason}')


# Orders


class OrderNotFound(MarketplaceError):
    status_code = 404

    def __init__(self, order_id: str):
        self.order_id = order_id
        super().__init__("Order not found")


class InvalidStatus(MarketplaceError):
    def __init__(self, status: str):
        self.status = status
        super().__init__(f"Invalid status: {status}")


class InvalidStatusTransition(MarketplaceError):
    def __init__(self, old_status: str, new_status: str):
        self.old_status = old_status
        self.new_status = new_status
        super().__init__(f"Cannot revert order status from {old_status} to {new_status}")
