"""
Marketplace order core

Carts, stock, coupons and orders for a marketplace backend. The order
workflow reserves stock, applies coupons and stores the order as one
compensating transaction over in-memory document stores.
"""

__version__ = "1.0.0"
