"""Product models"""

from datetime import datetime
from decimal import Decimal

from pydantic import Field

from .base import SoftDeleteModel, new_id, utcnow


class Product(SoftDeleteModel):
    """Product in the catalog"""
    id: str = Field(default_factory=new_id)
    title: str
    price: Decimal = Field(ge=0)
    stock: int = Field(ge=0, default=0)
    seller_id: str
    created_at: datetime = Field(default_factory=utcnow)
