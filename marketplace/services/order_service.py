"""Order creation and lifecycle"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Callable, Iterable, Optional, Union

from ..database.orders import OrderDatabase
from ..database.products import ProductDatabase
from ..database.transaction import Transaction, transactional
from ..errors import (
    CouponValidationError,
    EmptyCart,
    InvalidCoupon,
    InvalidStatus,
    OrderNotFound,
)
from ..events import ORDER_CANCELLED, ORDER_CREATED, NotificationDispatcher
from ..models.base import quantize_money, utcnow
from ..models.cart import UserOwner
from ..models.coupon import normalize_code
from ..models.order import (
    AppliedCoupon,
    CreateOrderRequest,
    Order,
    OrderItem,
    OrderResult,
    OrderStatus,
)
from .cart_service import CartService
from .coupon_service import CouponService
from .discount_service import calculate_discount
from .stock_service import StockService

logger = logging.getLogger(__name__)


class OrderService:
    """Turns carts into orders and moves orders through their lifecycle"""

    def __init__(
        self,
        orders: OrderDatabase,
        products: ProductDatabase,
        carts: CartService,
        stock: StockService,
        coupons: CouponService,
        dispatcher: NotificationDispatcher,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.orders = orders
        self.products = products
        self.carts = carts
        self.stock = stock
        self.coupons = coupons
        self.dispatcher = dispatcher
        self.clock = clock

    def create_order(
        self,
        user_id: str,
        coupon_codes: Optional[Iterable[str]] = None,
        transaction: Optional[Transaction] = None,
    ) -> OrderResult:
        """
        Place an order from the user's cart.

        Steps: take the cart's items (emptying it), take stock for every line,
        total the lines, validate each coupon against that total, store the
        order and record coupon usage. All of it runs in one transaction:
        if any step raises, every earlier step is undone and no order exists.

        When `transaction` is given the work joins it and the caller decides
        when to commit. Notifications go out only after the commit.

        Each coupon discounts the undiscounted total; discounts are summed
        and the final amount never drops below zero.
        """
        request = CreateOrderRequest(user_id=user_id, coupons=list(coupon_codes or []))
        owner = UserOwner(user_id=request.user_id)

        with transactional(transaction, name=f"order:{request.user_id}") as tx:
            resolved = self.carts.take_cart(owner, transaction=tx)
            if resolved is None or not resolved.lines:
                raise EmptyCart()

            for line in resolved.lines:
                self.stock.check_stock(line.product_id, line.quantity)
                self.stock.decrease_stock(line.product_id, line.quantity, transaction=tx)

            total_amount = quantize_money(resolved.subtotal)

            total_discount = Decimal("0")
            applied: list[AppliedCoupon] = []
            seen_codes: set[str] = set()
            for code in request.coupons:
                normalized = normalize_code(code)
                if normalized in seen_codes:
                    raise InvalidCoupon(code, "Coupon already applied to this order")
                seen_codes.add(normalized)

                try:
                    coupon = self.coupons.validate_coupon_for_user(
                        code, request.user_id, total_amount
                    )
                except CouponValidationError as e:
                    raise InvalidCoupon(code, e.message) from e

                discount = calculate_discount(coupon, total_amount)
                total_discount += discount
                applied.append(
                    AppliedCoupon(coupon_id=coupon.id, code=coupon.code, discount=discount)
                )

            final_amount = quantize_money(max(total_amount - total_discount, Decimal("0")))

            now = self.clock()
            order = Order(
                user_id=request.user_id,
                items=[
                    OrderItem(product_id=line.product_id, quantity=line.quantity, price=line.unit_price)
                    for line in resolved.lines
                ],
                total_amount=total_amount,
                discount=quantize_money(total_discount),
                final_amount=final_amount,
                applied_coupons=[a.coupon_id for a in applied],
                status=OrderStatus.PENDING,
                created_at=now,
                updated_at=now,
            )
            self.orders.insert_order(order)
            tx.on_rollback(f"drop order {order.id}", lambda: self.orders.delete_order(order.id))

            for a in applied:
                try:
                    self.coupons.apply_coupon_to_order(a.code, request.user_id, transaction=tx)
                except CouponValidationError as e:
                    raise InvalidCoupon(a.code, e.message) from e

            seller_ids = sorted({line.seller_id for line in resolved.lines})
            tx.on_commit(lambda: self._notify(ORDER_CREATED, order, seller_ids))

        logger.info(
            f"Order {order.id} created for user {order.user_id}: "
            f"total={order.total_amount} discount={order.discount} final={order.final_amount}"
        )
        return OrderResult(
            order=order,
            applied_coupons=applied,
            message="Order created successfully",
        )

    def get_order(self, order_id: str) -> Order:
        order = self.orders.get_order(order_id)
        if not order:
            raise OrderNotFound(order_id)
        return order

    def update_order_status(self, order_id: str, new_status: Union[str, OrderStatus]) -> Order:
        """
        Move an order to `new_status`.

        Allowed only when the new status has an equal or higher priority
        (pending < cancelled < shipped < delivered). Cancelling puts the
        ordered quantities back into stock.
        """
        try:
            status = OrderStatus(new_status)
        except ValueError:
            raise InvalidStatus(str(new_status)) from None

        with Transaction(f"status:{order_id}") as tx:
            order, previous = self.orders.transition_status(order_id, status)
            tx.on_rollback(
                f"revert order {order.id} to {previous.value}",
                lambda: self.orders.update_status(order.id, previous),
            )

            # Only the caller that actually moved the order into cancelled restocks
            cancelling = status == OrderStatus.CANCELLED and previous != OrderStatus.CANCELLED
            if cancelling:
                for item in order.items:
                    self.stock.increase_stock(item.product_id, item.quantity, transaction=tx)

        logger.info(f"Order {order.id} status: {previous.value} -> {status.value}")

        if cancelling:
            seller_ids = sorted({
                p.seller_id
                for p in self.products.get_products([i.product_id for i in order.items])
            })
            self._notify(ORDER_CANCELLED, order, seller_ids)
        return order

    def list_orders(self, limit: Optional[int] = None) -> list[Order]:
        return self.orders.list_orders(limit=limit)

    def list_user_orders(self, user_id: str) -> list[Order]:
        return self.orders.list_orders(user_id=user_id)

    def list_deleted_orders(self) -> list[Order]:
        return self.orders.list_orders(deleted=True)

    def soft_delete_order(self, order_id: str) -> Order:
        order = self.get_order(order_id)
        order.soft_delete(self.clock())
        return order

    def restore_order(self, order_id: str) -> Order:
        order = self.get_order(order_id)
        order.restore()
        return order

    def _notify(self, event: str, order: Order, seller_ids: list[str]) -> None:
        for seller_id in seller_ids:
            self.dispatcher.emit(
                event,
                {
                    "order_id": order.id,
                    "buyer_id": order.user_id,
                    "seller_id": seller_id,
                    "status": order.status.value,
                },
            )
