"""Shared model helpers"""

import math
import uuid
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Generic, Optional, TypeVar, Union

from pydantic import BaseModel

from ..core.config import settings

T = TypeVar("T")

Amount = Union[Decimal, int, float, str]


def utcnow() -> datetime:
    """Current time as an aware UTC datetime"""
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def new_id() -> str:
    return uuid.uuid4().hex


def quantize_money(amount: Amount) -> Decimal:
    """Round an amount to the configured money quantum (half-up)"""
    if not isinstance(amount, Decimal):
        amount = Decimal(str(amount))
    return amount.quantize(settings.money_quantum, rounding=ROUND_HALF_UP)


class SoftDeleteModel(BaseModel):
    """Document that is hidden rather than removed"""

    deleted_at: Optional[datetime] = None

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def soft_delete(self, at: Optional[datetime] = None) -> None:
        self.deleted_at = at or utcnow()

    def restore(self) -> None:
        self.deleted_at = None


class Page(BaseModel, Generic[T]):
    """One page of a listing"""
    items: list[T]
    page: int
    limit: int
    total: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0
