"""Cart models"""

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .base import new_id, utcnow


class UserOwner(BaseModel):
    """Cart owned by a registered user"""
    model_config = ConfigDict(frozen=True)

    kind: Literal["user"] = "user"
    user_id: str

    def __str__(self) -> str:
        return f"user:{self.user_id}"


class SessionOwner(BaseModel):
    """Cart owned by an anonymous session"""
    model_config = ConfigDict(frozen=True)

    kind: Literal["session"] = "session"
    session_id: str

    def __str__(self) -> str:
        return f"session:{self.session_id}"


# A cart belongs to exactly one of a user or a guest session
CartOwner = Annotated[Union[UserOwner, SessionOwner], Field(discriminator="kind")]


class CartItem(BaseModel):
    """Item in a shopping cart"""
    product_id: str
    quantity: int = Field(ge=1)
    low_stock_notified: bool = False


class Cart(BaseModel):
    """Shopping cart"""
    id: str = Field(default_factory=new_id)
    owner: CartOwner
    items: list[CartItem] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    def find_item(self, product_id: str) -> Optional[CartItem]:
        return next(
            (item for item in self.items if item.product_id == product_id),
            None,
        )


class CartLine(BaseModel):
    """Cart item resolved against the product it points to"""
    model_config = ConfigDict(frozen=True)

    product_id: str
    title: str
    seller_id: str
    unit_price: Decimal
    quantity: int

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


class ResolvedCart(BaseModel):
    """Cart with product snapshots taken at read time"""
    cart: Cart
    lines: list[CartLine]

    @property
    def subtotal(self) -> Decimal:
        return sum((line.line_total for line in self.lines), Decimal("0"))


class AddToCartRequest(BaseModel):
    """Request to add item to cart"""
    product_id: str
    quantity: int = Field(default=1, gt=0)


class UpdateCartItemRequest(BaseModel):
    """Request to update cart item quantity"""
    quantity: int = Field(gt=0)


class CartResponse(BaseModel):
    """Cart plus a short description of what changed"""
    cart: Cart
    message: Optional[str] = None
