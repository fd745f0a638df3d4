#!/usr/bin/env python3
"""
Place one order against a seeded in-memory marketplace.

Usage:
    python scripts/run_order.py --user buyer-1 --qty 2 --coupon WELCOME10
"""

import argparse
import logging
import os
import sys
from datetime import timedelta
from decimal import Decimal

from dotenv import load_dotenv

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from marketplace.core import setup_logging
from marketplace.database import product_db
from marketplace.errors import MarketplaceError
from marketplace.events import ORDER_CREATED, dispatcher
from marketplace.models import CouponCreate, DiscountType, Product, UserOwner, utcnow
from marketplace.services import cart_service, coupon_service, order_service

logger = logging.getLogger("run_order")


def seed() -> None:
    """Seed products and coupons"""
    product_db.add_product(Product(id="prod-001", title="Wireless Headphones", price=Decimal("100.00"), stock=10, seller_id="seller-1"))
    product_db.add_product(Product(id="prod-002", title="Stand Mixer", price=Decimal("50.00"), stock=3, seller_id="seller-2"))

    now = utcnow()
    coupon_service.create_coupon(CouponCreate(
        code="WELCOME10",
        type=DiscountType.PERCENTAGE,
        value=Decimal("10"),
        minimum_purchase=Decimal("50"),
        start_date=now - timedelta(days=1),
        expiration_date=now + timedelta(days=30),
        created_by="admin",
    ))
    coupon_service.create_coupon(CouponCreate(
        code="FLAT20OFF",
        type=DiscountType.FIXED,
        value=Decimal("20"),
        start_date=now - timedelta(days=1),
        expiration_date=now + timedelta(days=30),
        max_usage=100,
        created_by="admin",
    ))


def main() -> int:
    load_dotenv()

    parser = argparse.ArgumentParser(description="Place one order and print the result.")
    parser.add_argument("--user", default="buyer-1", help="Buyer user ID")
    parser.add_argument("--product", default="prod-001", help="Product to put in the cart")
    parser.add_argument("--qty", type=int, default=1, help="Quantity to order")
    parser.add_argument("--coupon", action="append", default=[], help="Coupon code (repeatable)")
    parser.add_argument("--log-level", default=None, help="Override MARKETPLACE_LOG_LEVEL")
    args = parser.parse_args()

    setup_logging(args.log_level)
    seed()
    dispatcher.subscribe(ORDER_CREATED, lambda event: logger.info(f"notify seller {event['seller_id']} of {event['order_id']}"))

    try:
        cart_service.add_item(UserOwner(user_id=args.user), args.product, args.qty)
        result = order_service.create_order(args.user, args.coupon)
    except MarketplaceError as e:
        print(f"Order failed: {e.message}")
        return 1

    print("\n=== RESULT ===")
    print(result.model_dump_json(indent=2))
    print("stock:", {p.id: p.stock for p in product_db.list_products()})
    return 0


if __name__ == "__main__":
    sys.exit(main())
