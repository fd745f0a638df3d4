"""Stock ledger over the product store"""

import logging
from typing import Optional

from ..database.products import ProductDatabase
from ..database.transaction import Transaction
from ..errors import InsufficientStock, ProductNotFound
from ..models.product import Product

logger = logging.getLogger(__name__)


class StockService:
    """Checks and moves per-product stock counts"""

    def __init__(self, products: ProductDatabase):
        self.products = products

    def check_stock(self, product_id: str, quantity: int) -> Product:
        """Fail unless the product exists with at least `quantity` in stock"""
        _check_quantity(quantity)
        product = self.products.get_product(product_id)
        if not product:
            raise ProductNotFound(product_id)
        if product.stock < quantity:
            raise InsufficientStock(product_id, available=product.stock, requested=quantity)
        return product

    def decrease_stock(
        self,
        product_id: str,
        quantity: int,
        transaction: Optional[Transaction] = None,
    ) -> Product:
        """Take `quantity` out of stock as a single conditional update"""
        _check_quantity(quantity)
        if not self.products.update_stock(product_id, -quantity):
            # The update refused; work out why for the caller
            product = self.products.get_product(product_id)
            if not product:
                raise ProductNotFound(product_id)
            raise InsufficientStock(product_id, available=product.stock, requested=quantity)

        if transaction is not None:
            transaction.on_rollback(
                f"restock {product_id} x{quantity}",
                lambda: self.increase_stock(product_id, quantity),
            )

        product = self.products.get_product(product_id)
        logger.info(f"Stock decreased: {product_id} -{quantity} (stock={product.stock})")
        return product

    def increase_stock(
        self,
        product_id: str,
        quantity: int,
        transaction: Optional[Transaction] = None,
    ) -> Product:
        """Put `quantity` back into stock; there is no upper bound"""
        _check_quantity(quantity)
        if not self.products.update_stock(product_id, quantity):
            raise ProductNotFound(product_id)

        if transaction is not None:
            transaction.on_rollback(
                f"unstock {product_id} x{quantity}",
                lambda: self.products.update_stock(product_id, -quantity),
            )

        product = self.products.get_product(product_id)
        logger.info(f"Stock increased: {product_id} +{quantity} (stock={product.stock})")
        return product


def _check_quantity(quantity: int) -> None:
    if quantity <= 0:
        raise ValueError("quantity must be > 0")
