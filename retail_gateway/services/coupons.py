"""Coupon lookup, eligibility check and usage accounting"""

from datetime import date
from typing import Tuple
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from retail_gateway.domain.coupons import CouponTerms, evaluate_coupon
from retail_gateway.domain.exceptions import CouponRejectedError, DependencyError, NotFoundError
from retail_gateway.infrastructure.database.models import Coupon
from retail_gateway.infrastructure.database.repositories import CouponRepository


def _terms(coupon: Coupon) -> CouponTerms:
    return CouponTerms(
        code=coupon.code,
        discount_type=coupon.discount_type,
        discount_value=coupon.discount_value,
        is_active=coupon.is_active,
        uses_count=coupon.uses_count,
        max_uses=coupon.max_uses,
        min_purchase_cents=coupon.min_purchase_cents,
        start_date=coupon.start_date,
        end_date=coupon.end_date,
    )


def validate_coupon(
    db: Session,
    company_id: str,
    code: str,
    amount_cents: int,
    today: date | None = None,
) -> Tuple[Coupon, int]:
    """Find a coupon by code and compute the discount it grants on amount_cents"""
    try:
        coupon = CouponRepository(db).get_by_code(company_id, code)
    except SQLAlchemyError as e:
        raise DependencyError("Could not load coupon") from e

    if coupon is None:
        raise NotFoundError("Coupon", code.upper())

    return coupon, evaluate_coupon(_terms(coupon), amount_cents, today)


def apply_coupon(db: Session, company_id: str, coupon_id: str) -> Coupon:
    """Consume one use of a coupon"""
    repo = CouponRepository(db)
    try:
        coupon = repo.get(company_id, coupon_id)
        if coupon is None:
            raise NotFoundError("Coupon", coupon_id)
        if not coupon.is_active:
            raise CouponRejectedError(f"Coupon {coupon.code} is inactive")
        if not repo.increment_uses(company_id, coupon_id):
            raise CouponRejectedError(f"Coupon {coupon.code} has no uses left")
        db.commit()
    except (NotFoundError, CouponRejectedError):
        db.rollback()
        raise
    except SQLAlchemyError as e:
        db.rollback()
        raise DependencyError(f"Could not apply coupon {coupon_id}") from e

    db.refresh(coupon)
    return coupon
