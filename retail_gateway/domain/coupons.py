"""Coupon eligibility and discount calculation"""

from dataclasses import dataclass
from datetime import date
from typing import Optional
from retail_gateway.domain.exceptions import CouponRejectedError


@dataclass
class CouponTerms:
    """Coupon attributes that drive eligibility"""

    code: str
    discount_type: str  # "percentage" or "fixed"
    discount_value: int  # percent points or cents
    is_active: bool
    uses_count: int = 0
    max_uses: Optional[int] = None
    min_purchase_cents: int = 0
    start_date: Optional[date] = None
    end_date: Optional[date] = None


def evaluate_coupon(coupon: CouponTerms, amount_cents: int, today: date | None = None) -> int:
    """
    Return the discount in cents a coupon grants on `amount_cents`.

    Raises CouponRejectedError when the coupon is inactive, outside its
    validity window, exhausted or the purchase is below its minimum.
    """
    today = today or date.today()

    if not coupon.is_active:
        raise CouponRejectedError(f"Coupon {coupon.code} is inactive")
    if coupon.start_date and today < coupon.start_date:
        raise CouponRejectedError(f"Coupon {coupon.code} is not valid yet")
    if coupon.end_date and today > coupon.end_date:
        raise CouponRejectedError(f"Coupon {coupon.code} has expired")
    if coupon.max_uses is not None and coupon.uses_count >= coupon.max_uses:
        raise CouponRejectedError(f"Coupon {coupon.code} has no uses left")
    if amount_cents < coupon.min_purchase_cents:
        raise CouponRejectedError(
            f"Coupon {coupon.code} requires a minimum purchase of {coupon.min_purchase_cents} cents"
        )

    if coupon.discount_type == "percentage":
        discount = amount_cents * coupon.discount_value // 100
    elif coupon.discount_type == "fixed":
        discount = coupon.discount_value
    else:
        raise CouponRejectedError(f"Unknown discount type '{coupon.discount_type}'")

    return min(discount, amount_cents)
