"""Coupon storage"""

import threading
from datetime import datetime
from typing import Optional

from ..errors import (
    CouponNotFound,
    DuplicateCouponCode,
    UsageLimitReached,
    UserUsageLimitReached,
)
from ..models.base import utcnow
from ..models.coupon import Coupon, CouponUsage, normalize_code


class CouponDatabase:
    """In-memory coupon storage keyed by ID, unique by code"""

    def __init__(self):
        self.coupons: dict[str, Coupon] = {}
        self._lock = threading.RLock()

    def insert_coupon(self, coupon: Coupon) -> Coupon:
        """Add a new coupon; codes must be unique"""
        with self._lock:
            if self._find(coupon.code, include_deleted=True):
                raise DuplicateCouponCode(coupon.code)
            self.coupons[coupon.id] = coupon
        return coupon

    def update_coupon(self, coupon_id: str, changes: dict) -> Coupon:
        """
        Merge `changes` into a coupon and store the re-validated result.

        The merge reads the usage ledger under the lock, so a use recorded
        concurrently is never dropped by the update.
        """
        with self._lock:
            current = self.get_coupon(coupon_id)
            if not current:
                raise CouponNotFound(coupon_id)

            coupon = Coupon.model_validate({**current.model_dump(), **changes})
            other = self._find(coupon.code, include_deleted=True)
            if other and other.id != coupon.id:
                raise DuplicateCouponCode(coupon.code)
            self.coupons[coupon.id] = coupon
            return coupon

    def get_coupon(self, coupon_id: str) -> Optional[Coupon]:
        """Get a coupon by ID"""
        return self.coupons.get(coupon_id)

    def find_by_code(self, code: str, include_deleted: bool = False) -> Optional[Coupon]:
        """Look a coupon up by its normalized code"""
        return self._find(normalize_code(code), include_deleted)

    def list_coupons(
        self,
        created_by: Optional[str] = None,
        deleted: bool = False,
    ) -> list[Coupon]:
        """List coupons, oldest first"""
        results = [
            c for c in self.coupons.values()
            if c.is_deleted == deleted
            and (created_by is None or c.created_by == created_by)
        ]
        results.sort(key=lambda c: c.created_at)
        return results

    def record_usage(
        self,
        code: str,
        user_id: str,
        used_at: Optional[datetime] = None,
    ) -> Optional[CouponUsage]:
        """
        Count one more use of a coupon by a user.

        Both usage limits are checked again under the lock, so two callers
        that validated the coupon concurrently cannot push it past a limit.

        Returns:
            The user's ledger entry as it was before this use (None if the
            user had no entry), to hand back to restore_usage on rollback.
        """
        with self._lock:
            coupon = self.find_by_code(code)
            if not coupon:
                raise CouponNotFound(code)

            if coupon.max_usage and len(coupon.used_by) >= coupon.max_usage:
                raise UsageLimitReached(coupon.code)

            if coupon.user_usage_count(user_id) >= coupon.max_usage_per_user:
                raise UserUsageLimitReached(coupon.code, user_id)

            existing = coupon.usage_for(user_id)
            previous = existing.model_copy() if existing else None
            if existing:
                existing.usage_count += 1
                existing.used_at = used_at or utcnow()
            else:
                coupon.used_by.append(
                    CouponUsage(user_id=user_id, usage_count=1, used_at=used_at or utcnow())
                )
            return previous

    def restore_usage(
        self,
        code: str,
        user_id: str,
        previous: Optional[CouponUsage],
    ) -> None:
        """Put a user's ledger entry back to what record_usage returned"""
        with self._lock:
            coupon = self.find_by_code(code, include_deleted=True)
            if not coupon:
                return
            coupon.used_by = [u for u in coupon.used_by if u.user_id != user_id]
            if previous is not None:
                coupon.used_by.append(previous)

    def _find(self, normalized: str, include_deleted: bool) -> Optional[Coupon]:
        return next(
            (
                c for c in self.coupons.values()
                if c.code == normalized and (include_deleted or not c.is_deleted)
            ),
            None,
        )


# Singleton instance
coupon_db = CouponDatabase()
