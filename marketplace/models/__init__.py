# Marketplace Models

from .base import Page, SoftDeleteModel, quantize_money, utcnow
from .product import Product
from .cart import (
    Cart,
    CartItem,
    CartLine,
    CartOwner,
    ResolvedCart,
    SessionOwner,
    UserOwner,
    AddToCartRequest,
    UpdateCartItemRequest,
    CartResponse,
)
from .coupon import (
    Coupon,
    CouponCreate,
    CouponUpdate,
    CouponUsage,
    CouponStatus,
    CouponQuote,
    DiscountType,
    ValidateCouponRequest,
    normalize_code,
)
from .order import (
    Order,
    OrderItem,
    OrderStatus,
    OrderResult,
    AppliedCoupon,
    CreateOrderRequest,
    STATUS_PRIORITY,
    can_transition,
)

__all__ = [
    "Page",
    "SoftDeleteModel",
    "quantize_money",
    "utcnow",
    "Product",
    "Cart",
    "CartItem",
    "CartLine",
    "CartOwner",
    "ResolvedCart",
    "SessionOwner",
    "UserOwner",
    "AddToCartRequest",
    "UpdateCartItemRequest",
    "CartResponse",
    "Coupon",
    "CouponCreate",
    "CouponUpdate",
    "CouponUsage",
    "CouponStatus",
    "CouponQuote",
    "DiscountType",
    "ValidateCouponRequest",
    "normalize_code",
    "Order",
    "OrderItem",
    "OrderStatus",
    "OrderResult",
    "AppliedCoupon",
    "CreateOrderRequest",
    "STATUS_PRIORITY",
    "can_transition",
]
