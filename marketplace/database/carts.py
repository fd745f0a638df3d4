"""Cart storage"""

import threading
from typing import Optional

from ..models.base import utcnow
from ..models.cart import Cart, CartItem, CartOwner


class CartDatabase:
    """In-memory cart storage, at most one cart per owner"""

    def __init__(self):
        self.carts: dict[str, Cart] = {}
        self._by_owner: dict[CartOwner, str] = {}
        self._lock = threading.RLock()

    def get_cart(self, cart_id: str) -> Optional[Cart]:
        """Get a cart by ID"""
        return self.carts.get(cart_id)

    def find_by_owner(self, owner: CartOwner) -> Optional[Cart]:
        """Get the cart belonging to a user or guest session"""
        cart_id = self._by_owner.get(owner)
        return self.carts.get(cart_id) if cart_id else None

    def get_or_create_cart(self, owner: CartOwner) -> tuple[Cart, bool]:
        """Get the owner's cart, creating it if needed; flag says if it was new"""
        with self._lock:
            cart = self.find_by_owner(owner)
            if cart:
                return cart, False
            cart = Cart(owner=owner)
            self.carts[cart.id] = cart
            self._by_owner[owner] = cart.id
            return cart, True

    def save(self, cart: Cart) -> Cart:
        """Persist changes made to a cart"""
        with self._lock:
            cart.updated_at = utcnow()
            self.carts[cart.id] = cart
            self._by_owner[cart.owner] = cart.id
        return cart

    def take_items(self, owner: CartOwner) -> Optional[tuple[Cart, list[CartItem]]]:
        """
        Empty the owner's cart and hand back what it held.

        Done under the lock so that, of two concurrent checkouts of one
        cart, only the first gets the items.
        """
        with self._lock:
            cart = self.find_by_owner(owner)
            if not cart:
                return None
            items, cart.items = cart.items, []
            self.save(cart)
            return cart, items

    def return_items(self, owner: CartOwner, items: list[CartItem]) -> Cart:
        """Put taken items back, on top of anything added since"""
        with self._lock:
            cart, _ = self.get_or_create_cart(owner)
            for item in items:
                existing = cart.find_item(item.product_id)
                if existing:
                    existing.quantity += item.quantity
                else:
                    cart.items.append(item)
            return self.save(cart)

    def reassign(self, cart: Cart, owner: CartOwner) -> Cart:
        """Move a cart to a new owner"""
        with self._lock:
            existing = self.find_by_owner(owner)
            if existing and existing.id != cart.id:
                raise ValueError(f"{owner} already has a cart")
            self._by_owner.pop(cart.owner, None)
            cart.owner = owner
            return self.save(cart)

    def delete_cart(self, cart_id: str) -> bool:
        """Delete a cart"""
        with self._lock:
            cart = self.carts.pop(cart_id, None)
            if not cart:
                return False
            self._by_owner.pop(cart.owner, None)
            return True

    def list_carts(self) -> list[Cart]:
        return list(self.carts.values())


# Singleton instance
cart_db = CartDatabase()
