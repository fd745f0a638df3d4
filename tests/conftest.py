"""Pytest fixtures: fresh in-memory stores and services per test."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from marketplace.database import CartDatabase, CouponDatabase, OrderDatabase, ProductDatabase
from marketplace.events import LOW_STOCK, ORDER_CANCELLED, ORDER_CREATED, NotificationDispatcher
from marketplace.models import CouponCreate, Product, UserOwner
from marketplace.services import CartService, CouponService, OrderService, StockService

NOW = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def product_db() -> ProductDatabase:
    db = ProductDatabase()
    db.add_product(Product(id="ITEM001", title="Headphones", price=Decimal("50.00"), stock=10, seller_id="seller-1"))
    db.add_product(Product(id="ITEM002", title="Stand Mixer", price=Decimal("25.00"), stock=5, seller_id="seller-2"))
    db.add_product(Product(id="ITEM003", title="Cooler", price=Decimal("30.00"), stock=0, seller_id="seller-1"))  # Out of stock
    return db


@pytest.fixture
def cart_db() -> CartDatabase:
    return CartDatabase()


@pytest.fixture
def coupon_db() -> CouponDatabase:
    return CouponDatabase()


@pytest.fixture
def order_db() -> OrderDatabase:
    return OrderDatabase()


@pytest.fixture
def events() -> list:
    """(event, payload) pairs seen by the dispatcher"""
    return []


@pytest.fixture
def dispatcher(events) -> NotificationDispatcher:
    d = NotificationDispatcher()
    for name in (ORDER_CREATED, ORDER_CANCELLED, LOW_STOCK):
        d.subscribe(name, lambda payload, name=name: events.append((name, payload)))
    return d


@pytest.fixture
def stock_service(product_db) -> StockService:
    return StockService(product_db)


@pytest.fixture
def cart_service(cart_db, product_db) -> CartService:
    return CartService(cart_db, product_db)


@pytest.fixture
def coupon_service(coupon_db, clock) -> CouponService:
    return CouponService(coupon_db, clock=clock)


@pytest.fixture
def order_service(order_db, product_db, cart_service, stock_service, coupon_service, dispatcher, clock) -> OrderService:
    return OrderService(
        orders=order_db,
        products=product_db,
        carts=cart_service,
        stock=stock_service,
        coupons=coupon_service,
        dispatcher=dispatcher,
        clock=clock,
    )


@pytest.fixture
def make_coupon(coupon_service):
    """Create a coupon valid around NOW; keyword arguments override defaults"""

    def _make(code="TEST10", **overrides):
        data = dict(
            code=code,
            type="percentage",
            value=Decimal("10"),
            minimum_purchase=Decimal("50"),
            start_date=NOW - timedelta(days=1),
            expiration_date=NOW + timedelta(days=1),
            created_by="admin-1",
        )
        data.update(overrides)
        return coupon_service.create_coupon(CouponCreate(**data))

    return _make


@pytest.fixture
def user_cart(cart_service):
    """user-1 has 2 x ITEM001 in the cart: total 100.00"""
    owner = UserOwner(user_id="user-1")
    cart_service.add_item(owner, "ITEM001", 2)
    return owner
