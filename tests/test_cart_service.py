"""Tests for cart operations."""
from decimal import Decimal

import pytest
from pydantic import ValidationError

from marketplace.database import Transaction
from marketplace.errors import CartItemNotFound, CartNotFound, InsufficientStock, ProductNotFound
from marketplace.models import SessionOwner, UserOwner

USER = UserOwner(user_id="user-1")
GUEST = SessionOwner(session_id="guest-abc")


def test_first_add_creates_cart(cart_service, cart_db):
    response = cart_service.add_item(USER, "ITEM001", 2)

    assert response.message == "Cart created and item added"
    assert cart_db.find_by_owner(USER) is response.cart
    assert [(i.product_id, i.quantity) for i in response.cart.items] == [("ITEM001", 2)]


def test_adding_same_product_increments_quantity(cart_service):
    cart_service.add_item(USER, "ITEM001", 2)
    response = cart_service.add_item(USER, "ITEM001", 3)

    assert response.message == "Product quantity updated in cart"
    assert len(response.cart.items) == 1
    assert response.cart.items[0].quantity == 5


def test_adding_another_product(cart_service):
    cart_service.add_item(USER, "ITEM001")
    response = cart_service.add_item(USER, "ITEM002")
    assert response.message == "Product added to cart"
    assert [i.product_id for i in response.cart.items] == ["ITEM001", "ITEM002"]


def test_add_unknown_product(cart_service, cart_db):
    with pytest.raises(ProductNotFound):
        cart_service.add_item(USER, "NOPE")
    assert cart_db.find_by_owner(USER) is None


def test_add_more_than_stock(cart_service):
    cart_service.add_item(USER, "ITEM002", 4)
    with pytest.raises(InsufficientStock):
        cart_service.add_item(USER, "ITEM002", 2)


def test_add_requires_positive_quantity(cart_service):
    with pytest.raises(ValidationError):
        cart_service.add_item(USER, "ITEM001", 0)


def test_user_and_guest_carts_are_separate(cart_service, cart_db):
    cart_service.add_item(USER, "ITEM001")
    cart_service.add_item(GUEST, "ITEM002")

    assert cart_db.find_by_owner(USER).items[0].product_id == "ITEM001"
    assert cart_db.find_by_owner(GUEST).items[0].product_id == "ITEM002"
    assert cart_db.find_by_owner(SessionOwner(session_id="user-1")) is None


def test_update_item_quantity(cart_service):
    cart_service.add_item(USER, "ITEM001", 1)
    response = cart_service.update_item_quantity(USER, "ITEM001", 4)
    assert response.cart.items[0].quantity == 4


def test_update_errors(cart_service):
    with pytest.raises(CartNotFound):
        cart_service.update_item_quantity(USER, "ITEM001", 1)

    cart_service.add_item(USER, "ITEM001", 1)
    with pytest.raises(CartItemNotFound):
        cart_service.update_item_quantity(USER, "ITEM002", 1)
    with pytest.raises(InsufficientStock):
        cart_service.update_item_quantity(USER, "ITEM001", 11)


def test_remove_item(cart_service):
    cart_service.add_item(USER, "ITEM001")
    cart_service.add_item(USER, "ITEM002")
    response = cart_service.remove_item(USER, "ITEM001")

    assert [i.product_id for i in response.cart.items] == ["ITEM002"]
    with pytest.raises(CartItemNotFound):
        cart_service.remove_item(USER, "ITEM001")


def test_clear_cart_keeps_the_cart(cart_service, cart_db):
    cart_service.add_item(USER, "ITEM001")
    response = cart_service.clear_cart(USER)

    assert response.cart.items == []
    assert cart_db.find_by_owner(USER) is not None


def test_read_cart_snapshots_prices(cart_service, product_db):
    cart_service.add_item(USER, "ITEM001", 2)
    cart_service.add_item(USER, "ITEM002", 1)
    resolved = cart_service.read_cart(USER)

    product_db.get_product("ITEM001").price = Decimal("999.00")

    assert resolved.lines[0].unit_price == Decimal("50.00")
    assert resolved.lines[0].seller_id == "seller-1"
    assert resolved.subtotal == Decimal("125.00")


def test_read_cart_without_cart(cart_service):
    assert cart_service.read_cart(USER) is None


def test_read_cart_with_vanished_product(cart_service, product_db):
    cart_service.add_item(USER, "ITEM001")
    del product_db.products["ITEM001"]
    with pytest.raises(ProductNotFound):
        cart_service.read_cart(USER)


def test_take_cart_empties_it(cart_service, cart_db):
    cart_service.add_item(USER, "ITEM001", 2)
    resolved = cart_service.take_cart(USER)

    assert [(l.product_id, l.quantity) for l in resolved.lines] == [("ITEM001", 2)]
    assert cart_db.find_by_owner(USER).items == []
    # A second taker finds nothing left
    assert cart_service.take_cart(USER).lines == []


def test_take_cart_without_cart(cart_service):
    assert cart_service.take_cart(USER) is None


def test_take_cart_rollback_returns_items_on_top_of_new_ones(cart_service, cart_db):
    cart_service.add_item(USER, "ITEM001", 2)
    tx = Transaction("checkout")
    cart_service.take_cart(USER, transaction=tx)

    cart_service.add_item(USER, "ITEM001", 1)
    cart_service.add_item(USER, "ITEM002", 1)
    tx.rollback()

    items = {i.product_id: i.quantity for i in cart_db.find_by_owner(USER).items}
    assert items == {"ITEM001": 3, "ITEM002": 1}


def test_take_cart_with_vanished_product_keeps_items(cart_service, cart_db, product_db):
    cart_service.add_item(USER, "ITEM001")
    del product_db.products["ITEM001"]

    with pytest.raises(ProductNotFound):
        cart_service.take_cart(USER)
    assert [i.product_id for i in cart_db.find_by_owner(USER).items] == ["ITEM001"]


def test_merge_assigns_guest_cart_when_user_has_none(cart_service, cart_db):
    guest_cart = cart_service.add_item(GUEST, "ITEM001", 2).cart
    merged = cart_service.merge_carts("user-1", "guest-abc")

    assert merged.id == guest_cart.id
    assert merged.owner == USER
    assert cart_db.find_by_owner(GUEST) is None
    assert cart_db.find_by_owner(USER) is merged


def test_merge_sums_quantities(cart_service, cart_db):
    cart_service.add_item(USER, "ITEM001", 1)
    cart_service.add_item(GUEST, "ITEM001", 2)
    cart_service.add_item(GUEST, "ITEM002", 3)

    merged = cart_service.merge_carts("user-1", "guest-abc")

    assert {i.product_id: i.quantity for i in merged.items} == {"ITEM001": 3, "ITEM002": 3}
    assert cart_db.find_by_owner(GUEST) is None
    assert len(cart_db.list_carts()) == 1


def test_merge_without_guest_cart(cart_service):
    assert cart_service.merge_carts("user-1", "guest-abc") is None


def test_merge_requires_both_ids(cart_service):
    with pytest.raises(ValueError):
        cart_service.merge_carts("user-1", "")
