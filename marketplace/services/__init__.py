# Service layer

from ..database import cart_db, coupon_db, order_db, product_db
from ..events import dispatcher
from .cart_service import CartService
from .coupon_service import CouponService
from .discount_service import calculate_discount
from .order_service import OrderService
from .stock_service import StockService

stock_service = StockService(product_db)
cart_service = CartService(cart_db, product_db)
coupon_service = CouponService(coupon_db)
order_service = OrderService(
    orders=order_db,
    products=product_db,
    carts=cart_service,
    stock=stock_service,
    coupons=coupon_service,
    dispatcher=dispatcher,
)

__all__ = [
    "CartService",
    "CouponService",
    "OrderService",
    "StockService",
    "calculate_discount",
    "stock_service",
    "cart_service",
    "coupon_service",
    "order_service",
]
