"""Low-stock alerts for products sitting in carts"""

import logging
from typing import Optional

from ..core.config import settings
from ..database.carts import CartDatabase
from ..database.products import ProductDatabase
from ..events import LOW_STOCK, NotificationDispatcher

logger = logging.getLogger(__name__)


class LowStockNotifier:
    """
    Warns cart owners when a product in their cart is about to run out.

    Each cart item is flagged once it has been reported, so repeated runs
    stay quiet until stock rises above the threshold again and the flag is
    cleared. Scheduling is left to the caller.
    """

    def __init__(
        self,
        carts: CartDatabase,
        products: ProductDatabase,
        dispatcher: NotificationDispatcher,
        threshold: Optional[int] = None,
    ):
        self.carts = carts
        self.products = products
        self.dispatcher = dispatcher
        self.threshold = settings.low_stock_threshold if threshold is None else threshold

    def run_once(self) -> int:
        """Scan every cart once; returns how many alerts were emitted"""
        emitted = 0
        for cart in self.carts.list_carts():
            changed = False
            for item in cart.items:
                product = self.products.get_product(item.product_id)
                if not product:
                    continue

                if product.stock <= self.threshold and not item.low_stock_notified:
                    self.dispatcher.emit(
                        LOW_STOCK,
                        {
                            "owner": str(cart.owner),
                            "user_id": getattr(cart.owner, "user_id", None),
                            "product_id": product.id,
                            "title": product.title,
                            "stock": product.stock,
                        },
                    )
                    item.low_stock_notified = True
                    changed = True
                    emitted += 1
                elif product.stock > self.threshold and item.low_stock_notified:
                    item.low_stock_notified = False
                    changed = True

            if changed:
                self.carts.save(cart)

        logger.info(f"Low stock scan done: {emitted} alert(s)")
        return emitted
