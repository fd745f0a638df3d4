"""Order models"""

import uuid
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .base import SoftDeleteModel, utcnow


class OrderStatus(str, Enum):
    PENDING = "pending"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


# Status may only move to an equal or higher priority.
# Cancelled sits below shipped, so a cancelled order can still be shipped.
STATUS_PRIORITY: dict[OrderStatus, int] = {
    OrderStatus.PENDING: 1,
    OrderStatus.CANCELLED: 2,
    OrderStatus.SHIPPED: 3,
    OrderStatus.DELIVERED: 4,
}


def can_transition(current: OrderStatus, new: OrderStatus) -> bool:
    return STATUS_PRIORITY[new] >= STATUS_PRIORITY[current]


def new_order_id() -> str:
    return f"ORD-{uuid.uuid4().hex[:8].upper()}"


class OrderItem(BaseModel):
    """Item in an order, priced at purchase time"""
    model_config = ConfigDict(frozen=True)

    product_id: str
    quantity: int = Field(ge=1)
    price: Decimal = Field(ge=0)

    @property
    def total_price(self) -> Decimal:
        return self.price * self.quantity


class Order(SoftDeleteModel):
    """Placed order"""
    id: str = Field(default_factory=new_order_id)
    user_id: str
    items: tuple[OrderItem, ...]
    total_amount: Decimal = Field(ge=0)
    discount: Decimal = Field(default=Decimal("0"), ge=0)
    final_amount: Decimal = Field(ge=0)
    applied_coupons: tuple[str, ...] = ()
    status: OrderStatus = OrderStatus.PENDING
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class AppliedCoupon(BaseModel):
    """Coupon accepted for an order and the discount it gave"""
    coupon_id: str
    code: str
    discount: Decimal


class CreateOrderRequest(BaseModel):
    """Request to turn the user's cart into an order"""
    user_id: str
    coupons: list[str] = Field(default_factory=list)


class OrderResult(BaseModel):
    """Response from order creation"""
    order: Order
    applied_coupons: list[AppliedCoupon]
    message: Optional[str] = None
