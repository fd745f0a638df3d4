"""Order storage"""

import threading
from typing import Optional

from ..errors import InvalidStatusTransition, OrderNotFound
from ..models.base import utcnow
from ..models.order import Order, OrderStatus, can_transition


class OrderDatabase:
    """In-memory order storage"""

    def __init__(self):
        self.orders: dict[str, Order] = {}
        self._lock = threading.RLock()

    def insert_order(self, order: Order) -> Order:
        """Store a newly placed order"""
        with self._lock:
            if order.id in self.orders:
                raise ValueError(f"Order {order.id} already exists")
            self.orders[order.id] = order
        return order

    def get_order(self, order_id: str) -> Optional[Order]:
        """Get an order by ID"""
        return self.orders.get(order_id)

    def update_status(self, order_id: str, status: OrderStatus) -> Optional[Order]:
        """Update order status"""
        with self._lock:
            order = self.get_order(order_id)
            if not order:
                return None

            order.status = status
            order.updated_at = utcnow()
            return order

    def transition_status(self, order_id: str, status: OrderStatus) -> tuple[Order, OrderStatus]:
        """
        Move an order to `status` if the priority table allows it.

        The read, the check and the write happen under one lock, so of two
        concurrent callers only one sees the old status.

        Returns:
            The order and the status it had before this call.
        """
        with self._lock:
            order = self.get_order(order_id)
            if not order:
                raise OrderNotFound(order_id)

            previous = order.status
            if not can_transition(previous, status):
                raise InvalidStatusTransition(previous.value, status.value)

            order.status = status
            order.updated_at = utcnow()
            return order, previous

    def list_orders(
        self,
        user_id: Optional[str] = None,
        deleted: bool = False,
        limit: Optional[int] = None,
    ) -> list[Order]:
        """List orders, newest first"""
        orders = [
            o for o in self.orders.values()
            if o.is_deleted == deleted
            and (user_id is None or o.user_id == user_id)
        ]
        orders.sort(key=lambda o: o.created_at, reverse=True)
        return orders[:limit] if limit is not None else orders

    def delete_order(self, order_id: str) -> bool:
        """Remove an order outright; only used to undo an uncommitted insert"""
        with self._lock:
            return self.orders.pop(order_id, None) is not None


# Singleton instance
order_db = OrderDatabase()
