"""Product storage"""

import threading
from typing import Optional

from ..models.product import Product


class ProductDatabase:
    """In-memory product database"""

    def __init__(self):
        self.products: dict[str, Product] = {}
        self._lock = threading.RLock()

    def add_product(self, product: Product) -> Product:
        """Insert or replace a product"""
        with self._lock:
            self.products[product.id] = product
        return product

    def get_product(self, product_id: str) -> Optional[Product]:
        """Get a product by ID"""
        return self.products.get(product_id)

    def get_products(self, product_ids: list[str]) -> list[Product]:
        """Get the products that exist among the given IDs"""
        return [self.products[pid] for pid in product_ids if pid in self.products]

    def list_products(self, include_deleted: bool = False) -> list[Product]:
        """List products, hiding soft-deleted ones by default"""
        return [
            p for p in self.products.values()
            if include_deleted or not p.is_deleted
        ]

    def update_stock(self, product_id: str, quantity_change: int) -> bool:
        """
        Update product stock.

        The check and the write happen under one lock, so concurrent
        decrements can never take stock below zero.

        Args:
            product_id: Product to update
            quantity_change: Positive to add, negative to remove

        Returns:
            True if successful, False if the product is missing or the
            change would make stock negative
        """
        with self._lock:
            product = self.products.get(product_id)
            if not product:
                return False

            new_quantity = product.stock + quantity_change
            if new_quantity < 0:
                return False

            product.stock = new_quantity
            return True


# Singleton instance
product_db = ProductDatabase()
