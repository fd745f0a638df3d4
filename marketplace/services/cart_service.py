"""Cart operations for users and guest sessions"""

import logging
from typing import Optional

from ..database.carts import CartDatabase
from ..database.products import ProductDatabase
from ..database.transaction import Transaction, transactional
from ..errors import CartItemNotFound, CartNotFound, InsufficientStock, ProductNotFound
from ..models.cart import (
    AddToCartRequest,
    Cart,
    CartItem,
    CartLine,
    CartOwner,
    CartResponse,
    ResolvedCart,
    SessionOwner,
    UpdateCartItemRequest,
    UserOwner,
)

logger = logging.getLogger(__name__)


class CartService:
    """Cart reads and writes on behalf of a user or guest session"""

    def __init__(self, carts: CartDatabase, products: ProductDatabase):
        self.carts = carts
        self.products = products

    def get_cart(self, owner: CartOwner) -> Cart:
        cart = self.carts.find_by_owner(owner)
        if not cart:
            raise CartNotFound(str(owner))
        return cart

    def read_cart(self, owner: CartOwner) -> Optional[ResolvedCart]:
        """
        Load the owner's cart with each item resolved to a product snapshot.

        Returns None when the owner has no cart. Prices are copied at read
        time, so later price changes do not affect what was read.
        """
        cart = self.carts.find_by_owner(owner)
        if not cart:
            return None
        return ResolvedCart(cart=cart, lines=self._resolve_lines(cart.items))

    def take_cart(self, owner: CartOwner, transaction: Optional[Transaction] = None) -> Optional[ResolvedCart]:
        """
        Empty the owner's cart and return what it held, resolved like read_cart.

        Two checkouts racing on one cart cannot both get its items; the
        loser sees an empty cart. Rolling back the transaction puts the
        items back.
        """
        taken = self.carts.take_items(owner)
        if taken is None:
            return None
        cart, items = taken

        with transactional(transaction, name=f"take-cart:{owner}") as tx:
            if items:
                tx.on_rollback(
                    f"return items to cart {cart.id}",
                    lambda: self.carts.return_items(owner, items),
                )
            return ResolvedCart(cart=cart, lines=self._resolve_lines(items))

    def add_item(self, owner: CartOwner, product_id: str, quantity: int = 1) -> CartResponse:
        """Add an item to the cart, creating the cart on first use"""
        request = AddToCartRequest(product_id=product_id, quantity=quantity)

        product = self.products.get_product(request.product_id)
        if not product:
            raise ProductNotFound(request.product_id)

        cart = self.carts.find_by_owner(owner)
        existing_item = cart.find_item(product.id) if cart else None
        wanted = request.quantity + (existing_item.quantity if existing_item else 0)
        if product.stock < wanted:
            raise InsufficientStock(product.id, available=product.stock, requested=wanted)

        cart, created = self.carts.get_or_create_cart(owner)
        if existing_item:
            existing_item.quantity = wanted
            message = "Product quantity updated in cart"
        else:
            cart.items.append(CartItem(product_id=product.id, quantity=request.quantity))
            message = "Cart created and item added" if created else "Product added to cart"

        self.carts.save(cart)
        logger.info(f"Cart {cart.id} ({owner}): {message} [{product.id} x{request.quantity}]")
        return CartResponse(cart=cart, message=message)

    def update_item_quantity(self, owner: CartOwner, product_id: str, quantity: int) -> CartResponse:
        """Set an item's quantity"""
        request = UpdateCartItemRequest(quantity=quantity)
        cart = self.get_cart(owner)

        item = cart.find_item(product_id)
        if not item:
            raise CartItemNotFound(product_id)

        product = self.products.get_product(product_id)
        if not product:
            raise ProductNotFound(product_id)
        if request.quantity > product.stock:
            raise InsufficientStock(product_id, available=product.stock, requested=request.quantity)

        item.quantity = request.quantity
        self.carts.save(cart)
        return CartResponse(cart=cart, message="Cart item quantity updated")

    def remove_item(self, owner: CartOwner, product_id: str) -> CartResponse:
        """Remove an item from the cart"""
        cart = self.get_cart(owner)
        if not cart.find_item(product_id):
            raise CartItemNotFound(product_id)

        cart.items = [i for i in cart.items if i.product_id != product_id]
        self.carts.save(cart)
        return CartResponse(cart=cart, message="Product removed from cart")

    def clear_cart(self, owner: CartOwner) -> CartResponse:
        """Remove every item; the cart itself stays"""
        cart = self.get_cart(owner)
        cart.items = []
        self.carts.save(cart)
        return CartResponse(cart=cart, message="Cart cleared successfully")

    def merge_carts(self, user_id: str, session_id: str) -> Optional[Cart]:
        """
        Fold a guest cart into the user's cart after login.

        If the user has no cart the guest cart simply changes hands.
        Otherwise quantities are summed per product and the guest cart is
        deleted. Returns None when there is no guest cart to merge.
        """
        if not user_id or not session_id:
            raise ValueError("user_id and session_id are required")

        user_owner = UserOwner(user_id=user_id)
        guest_cart = self.carts.find_by_owner(SessionOwner(session_id=session_id))
        if not guest_cart:
            return None

        user_cart = self.carts.find_by_owner(user_owner)
        if not user_cart:
            logger.info(f"Guest cart {guest_cart.id} assigned to user {user_id}")
            return self.carts.reassign(guest_cart, user_owner)

        for guest_item in guest_cart.items:
            item = user_cart.find_item(guest_item.product_id)
            if item:
                item.quantity += guest_item.quantity
            else:
                user_cart.items.append(guest_item.model_copy())

        self.carts.save(user_cart)
        self.carts.delete_cart(guest_cart.id)
        logger.info(f"Guest cart {guest_cart.id} merged into {user_cart.id}")
        return user_cart

    def _resolve_lines(self, items: list[CartItem]) -> list[CartLine]:
        lines = []
        for item in items:
            product = self.products.get_product(item.product_id)
            if not product:
                raise ProductNotFound(item.product_id)
            lines.append(
                CartLine(
                    product_id=product.id,
                    title=product.title,
                    seller_id=product.seller_id,
                    unit_price=product.price,
                    quantity=item.quantity,
                )
            )
        return lines
