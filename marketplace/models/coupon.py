"""Coupon models"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ..core.config import settings
from .base import SoftDeleteModel, as_utc, new_id, utcnow


class DiscountType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class CouponStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


def normalize_code(code: str) -> str:
    """Coupon codes are stored trimmed and upper-cased"""
    return code.strip().upper()


class CouponUsage(BaseModel):
    """One user's entry in a coupon's usage ledger"""
    user_id: str
    usage_count: int = Field(default=1, ge=1)
    used_at: datetime = Field(default_factory=utcnow)


class CouponCreate(BaseModel):
    """Fields accepted when a coupon is created"""
    code: str
    type: DiscountType
    value: Decimal = Field(ge=0)
    minimum_purchase: Decimal = Field(default=Decimal("0"), ge=0)
    start_date: datetime
    expiration_date: datetime
    max_usage: Optional[int] = Field(default=None, ge=1)
    max_usage_per_user: int = Field(default=1, ge=1)
    status: CouponStatus = CouponStatus.ACTIVE
    created_by: str

    @field_validator("code", mode="before")
    @classmethod
    def normalize_code_field(cls, value):
        if isinstance(value, str):
            return normalize_code(value)
        return value

    @field_validator("code")
    @classmethod
    def check_code_length(cls, value: str) -> str:
        if len(value) < settings.coupon_code_min_length:
            raise ValueError(
                f"Code must be at least {settings.coupon_code_min_length} characters"
            )
        if len(value) > settings.coupon_code_max_length:
            raise ValueError(
                f"Code must not exceed {settings.coupon_code_max_length} characters"
            )
        return value

    @field_validator("start_date", "expiration_date")
    @classmethod
    def aware_dates(cls, value: datetime) -> datetime:
        return as_utc(value)

    @model_validator(mode="after")
    def check_rules(self):
        if self.type == DiscountType.PERCENTAGE and self.value > 100:
            raise ValueError("Percentage value cannot exceed 100%")
        if self.expiration_date <= self.start_date:
            raise ValueError("Expiration date must be after start date")
        return self


class CouponUpdate(BaseModel):
    """Partial update; merged into the stored coupon and re-validated"""
    code: Optional[str] = None
    type: Optional[DiscountType] = None
    value: Optional[Decimal] = None
    minimum_purchase: Optional[Decimal] = None
    start_date: Optional[datetime] = None
    expiration_date: Optional[datetime] = None
    max_usage: Optional[int] = None
    max_usage_per_user: Optional[int] = None
    status: Optional[CouponStatus] = None


class Coupon(CouponCreate, SoftDeleteModel):
    """Stored coupon with its usage ledger"""
    id: str = Field(default_factory=new_id)
    used_by: list[CouponUsage] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow)

    def usage_for(self, user_id: str) -> Optional[CouponUsage]:
        return next((u for u in self.used_by if u.user_id == user_id), None)

    def user_usage_count(self, user_id: str) -> int:
        return sum(u.usage_count for u in self.used_by if u.user_id == user_id)

    def is_active_at(self, now: datetime) -> bool:
        return self.start_date <= now <= self.expiration_date


class ValidateCouponRequest(BaseModel):
    """Request to check a code against a purchase amount"""
    code: str
    purchase_amount: Decimal = Field(gt=0)
    user_id: Optional[str] = None


class CouponQuote(BaseModel):
    """Discount a code would give for a purchase amount"""
    code: str
    type: DiscountType
    value: Decimal
    discount_amount: Decimal
