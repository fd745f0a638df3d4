"""Coupon management, validation and redemption"""

import logging
from datetime import datetime
from typing import Callable, Optional

from ..core.config import settings
from ..database.coupons import CouponDatabase
from ..database.transaction import Transaction
from ..errors import (
    CouponExpired,
    CouponInactive,
    CouponNotFound,
    CouponValidationError,
    MinimumPurchaseNotMet,
    UsageLimitReached,
    UserUsageLimitReached,
)
from ..models.base import Amount, Page, quantize_money, utcnow
from ..models.coupon import (
    Coupon,
    CouponCreate,
    CouponQuote,
    CouponStatus,
    CouponUpdate,
    ValidateCouponRequest,
)
from .discount_service import calculate_discount

logger = logging.getLogger(__name__)


class CouponService:
    """Coupon rules on top of the coupon store"""

    def __init__(
        self,
        coupons: CouponDatabase,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.coupons = coupons
        self.clock = clock

    # Management

    def create_coupon(self, data: CouponCreate) -> Coupon:
        coupon = Coupon(**data.model_dump(), created_at=self.clock())
        self.coupons.insert_coupon(coupon)
        logger.info(f"Coupon {coupon.code} created by {coupon.created_by}")
        return coupon

    def get_coupon(self, coupon_id: str) -> Coupon:
        coupon = self.coupons.get_coupon(coupon_id)
        if not coupon or coupon.is_deleted:
            raise CouponNotFound(coupon_id)
        return coupon

    def list_coupons(
        self,
        page: int = 1,
        limit: Optional[int] = None,
        created_by: Optional[str] = None,
    ) -> Page[Coupon]:
        """List live coupons, optionally only those one user created"""
        page = max(page, 1)
        limit = min(max(limit or settings.default_page_size, 1), settings.max_page_size)
        coupons = self.coupons.list_coupons(created_by=created_by)
        start = (page - 1) * limit
        return Page[Coupon](
            items=coupons[start:start + limit],
            page=page,
            limit=limit,
            total=len(coupons),
        )

    def update_coupon(self, coupon_id: str, changes: CouponUpdate) -> Coupon:
        """Apply a partial update; the merged coupon must still be valid"""
        self.get_coupon(coupon_id)
        return self.coupons.update_coupon(coupon_id, changes.model_dump(exclude_unset=True))

    def delete_coupon(self, coupon_id: str) -> Coupon:
        coupon = self.get_coupon(coupon_id)
        coupon.soft_delete(self.clock())
        return coupon

    def restore_coupon(self, coupon_id: str) -> Coupon:
        coupon = self.coupons.get_coupon(coupon_id)
        if not coupon:
            raise CouponNotFound(coupon_id)
        coupon.restore()
        return coupon

    # Validation

    def validate_coupon_for_user(
        self,
        code: str,
        user_id: Optional[str],
        purchase_amount: Amount,
    ) -> Coupon:
        """
        Check every rule a coupon must pass for this user and amount.

        Rules are checked in order and the first failure is raised. Nothing
        is written: the usage ledger only changes in apply_coupon_to_order.

        Raises:
            CouponNotFound, CouponInactive, CouponExpired,
            MinimumPurchaseNotMet, UsageLimitReached, UserUsageLimitReached
        """
        try:
            return self._check_rules(code, user_id, quantize_money(purchase_amount))
        except CouponValidationError as e:
            logger.warning(f"[Coupon Validation Failed] {code}: {e.message}")
            raise

    def _check_rules(self, code, user_id, purchase_amount) -> Coupon:
        coupon = self.coupons.find_by_code(code)
        if not coupon:
            raise CouponNotFound(code)

        if coupon.status != CouponStatus.ACTIVE:
            raise CouponInactive(coupon.code)

        if not coupon.is_active_at(self.clock()):
            raise CouponExpired(coupon.code)

        if purchase_amount < coupon.minimum_purchase:
            raise MinimumPurchaseNotMet(coupon.code, coupon.minimum_purchase)

        if coupon.max_usage and len(coupon.used_by) >= coupon.max_usage:
            raise UsageLimitReached(coupon.code)

        if user_id and coupon.user_usage_count(user_id) >= coupon.max_usage_per_user:
            raise UserUsageLimitReached(coupon.code, user_id)

        return coupon

    def quote(self, request: ValidateCouponRequest) -> CouponQuote:
        """Validate a code and report the discount it would give"""
        coupon = self.validate_coupon_for_user(
            request.code, request.user_id, request.purchase_amount
        )
        return CouponQuote(
            code=coupon.code,
            type=coupon.type,
            value=coupon.value,
            discount_amount=calculate_discount(coupon, request.purchase_amount),
        )

    def can_user_use_coupon(self, coupon_id: str, user_id: str) -> bool:
        """Cheap eligibility check that ignores the purchase amount"""
        coupon = self.coupons.get_coupon(coupon_id)
        if not coupon or coupon.is_deleted or coupon.status != CouponStatus.ACTIVE:
            return False
        if not coupon.is_active_at(self.clock()):
            return False
        if coupon.max_usage and len(coupon.used_by) >= coupon.max_usage:
            return False
        return coupon.user_usage_count(user_id) < coupon.max_usage_per_user

    # Redemption

    def apply_coupon_to_order(
        self,
        code: str,
        user_id: str,
        transaction: Optional[Transaction] = None,
    ) -> Coupon:
        """Record one use of the coupon by the user"""
        previous = self.coupons.record_usage(code, user_id, used_at=self.clock())
        if transaction is not None:
            transaction.on_rollback(
                f"release coupon {code} for {user_id}",
                lambda: self.coupons.restore_usage(code, user_id, previous),
            )
        coupon = self.coupons.find_by_code(code)
        logger.info(f"Coupon {coupon.code} used by {user_id}")
        return coupon
