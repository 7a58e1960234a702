"""
Coupon evaluation.

``evaluate_coupon`` is pure: it never touches ``used_count``. Quoting a
coupon (``apply_coupon``) is therefore read-only, and usage is only counted
when an order carrying the coupon is placed (see ``services.checkout``).
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from sqlalchemy.orm import Session

from storefront.core.errors import (
    CouponExpiredError,
    CouponInactiveError,
    CouponNotFoundError,
    MinimumAmountError,
    UsageLimitExceededError,
)
from storefront.core.timeutils import now_utc
from storefront.db import repository
from storefront.db.models import Coupon, DiscountType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CouponQuote:
    coupon_code: str
    discount_amount: int
    final_amount: int


def compute_discount(coupon: Coupon, cart_total: int) -> int:
    if coupon.discount_type == DiscountType.PERCENTAGE.value:
        raw = Decimal(cart_total) * Decimal(coupon.discount_value) / Decimal(100)
        discount = int(raw.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
        if coupon.max_discount_amount is not None and discount > coupon.max_discount_amount:
            discount = coupon.max_discount_amount
    elif coupon.discount_type == DiscountType.FLAT.value:
        discount = coupon.discount_value
    else:
        discount = 0
    return min(discount, cart_total)


def evaluate_coupon(coupon: Optional[Coupon], cart_total: int, now: Optional[datetime] = None) -> CouponQuote:
    """
    Validate ``coupon`` for a cart worth ``cart_total`` and quote the discount.

    Checks run in a fixed order and the first failure is raised: missing,
    inactive, expired, usage limit reached, minimum order amount.
    """
    if coupon is None:
        raise CouponNotFoundError()
    if not coupon.is_active:
        raise CouponInactiveError()
    if (now or now_utc()) > coupon.expiry_date:
        raise CouponExpiredError()
    if coupon.usage_limit is not None and coupon.used_count >= coupon.usage_limit:
        raise UsageLimitExceededError()
    if cart_total < (coupon.min_order_amount or 0):
        raise MinimumAmountError(coupon.min_order_amount)

    discount = compute_discount(coupon, cart_total)
    return CouponQuote(coupon_code=coupon.code, discount_amount=discount, final_amount=cart_total - discount)


def apply_coupon(db: Session, code: str, cart_total: int) -> CouponQuote:
    coupon = repository.get_coupon_by_code(db, code)
    quote = evaluate_coupon(coupon, cart_total)
    logger.info("coupon quoted code=%s total=%s discount=%s", quote.coupon_code, cart_total, quote.discount_amount)
    return quote
