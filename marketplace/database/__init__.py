# Database modules

from .products import product_db, ProductDatabase
from .carts import cart_db, CartDatabase
from .coupons import coupon_db, CouponDatabase
from .orders import order_db, OrderDatabase
from .transaction import Transaction, TransactionState, transactional

__all__ = [
    "product_db",
    "ProductDatabase",
    "cart_db",
    "CartDatabase",
    "coupon_db",
    "CouponDatabase",
    "order_db",
    "OrderDatabase",
    "Transaction",
    "TransactionState",
    "transactional",
]
