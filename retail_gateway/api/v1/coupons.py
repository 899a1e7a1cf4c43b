"""Coupon validation and usage endpoints"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from retail_gateway.api.v1.schemas import CouponSchema, CouponValidationResponse
from retail_gateway.api.dependencies import get_auth_context
from retail_gateway.domain.models import AuthContext
from retail_gateway.infrastructure.database.session import get_db
from retail_gateway.services.coupons import apply_coupon, validate_coupon

router = APIRouter()


@router.get("/coupons/validate/{code}", response_model=CouponValidationResponse)
def validate_coupon_code(
    code: str,
    amount_cents: int = Query(..., ge=0),
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
):
    """Discount a coupon grants on a purchase of amount_cents"""
    coupon, discount_cents = validate_coupon(db, auth.company_id, code, amount_cents)
    return CouponValidationResponse(coupon_id=coupon.id, code=coupon.code, discount_cents=discount_cents)


@router.post("/coupons/{coupon_id}/apply", response_model=CouponSchema)
def apply_coupon_use(
    coupon_id: str,
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
):
    """Consume one use of a coupon"""
    return apply_coupon(db, auth.company_id, coupon_id)
