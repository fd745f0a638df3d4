# Background jobs

from .low_stock import LowStockNotifier

__all__ = ["LowStockNotifier"]
