"""Structural validation of a cart before checkout"""

from retail_gateway.domain.exceptions import ValidationError
from retail_gateway.domain.installments import installment_sum_within_tolerance
from retail_gateway.domain.models import CartSubmission, PAYMENT_METHODS, INSTALLMENT_STATUSES


def validate_cart(cart: CartSubmission) -> None:
    """
    Check a cart submission, raising ValidationError on the first offending field.

    Rules:
    - At least one item; each with quantity > 0, unit price > 0,
      total = quantity * unit price and a non-negative discount
    - Known payment method, installments >= 1
    - Subtotal = sum of item totals, non-negative discount,
      total = subtotal - discount,
      total > 0 (zero-total sales are refused as policy) and at
      least one cent per installment
    - Installment details, when given, match the installment count and
      sum to the total within one cent per installment
    - Tenant, branch and creator identifiers present

    Coupon eligibility is not re-checked here; the coupon discount is
    expected to be folded into `discount_cents` already.
    """
    if not cart.items:
        raise ValidationError("items", "Cart must contain at least one item")

    for index, item in enumerate(cart.items):
        prefix = f"items[{index}]"
        if not item.product_id:
            raise ValidationError(f"{prefix}.product_id", "Product is required")
        if item.quantity <= 0:
            raise ValidationError(f"{prefix}.quantity", "Quantity must be positive")
        if item.unit_price_cents <= 0:
            raise ValidationError(f"{prefix}.unit_price_cents", "Unit price must be positive")
        if item.total_price_cents != item.quantity * item.unit_price_cents:
            raise ValidationError(f"{prefix}.total_price_cents", "Item total must equal quantity * unit price")
        if item.discount_cents < 0:
            raise ValidationError(f"{prefix}.discount_cents", "Discount cannot be negative")

    if not cart.client_id and cart.client_id is not None:
        raise ValidationError("client_id", "Client id cannot be empty")

    if cart.payment_method not in PAYMENT_METHODS:
        raise ValidationError("payment_method", f"Payment method must be one of {', '.join(PAYMENT_METHODS)}")

    if cart.installments < 1:
        raise ValidationError("installments", "Installments must be at least 1")

    if cart.subtotal_cents < 0:
        raise ValidationError("subtotal_cents", "Subtotal cannot be negative")
    if cart.subtotal_cents != sum(item.total_price_cents for item in cart.items):
        raise ValidationError("subtotal_cents", "Subtotal must equal the sum of item totals")
    if cart.discount_cents < 0:
        raise ValidationError("discount_cents", "Discount cannot be negative")
    if cart.coupon_discount_cents < 0:
        raise ValidationError("coupon_discount_cents", "Coupon discount cannot be negative")
    if cart.total_amount_cents != cart.subtotal_cents - cart.discount_cents:
        raise ValidationError("total_amount_cents", "Total must equal subtotal minus discount")
    if cart.total_amount_cents <= 0:
        raise ValidationError("total_amount_cents", "Total must be greater than zero")
    if cart.installments > cart.total_amount_cents:
        raise ValidationError("installments", "Each installment must be at least one cent")

    if cart.installment_details:
        if len(cart.installment_details) != cart.installments:
            raise ValidationError("installment_details", "Installment details must match the number of installments")
        for index, detail in enumerate(cart.installment_details):
            if detail.amount_cents <= 0:
                raise ValidationError(f"installment_details[{index}].amount_cents", "Installment amount must be positive")
            if detail.status not in INSTALLMENT_STATUSES:
                raise ValidationError(f"installment_details[{index}].status", "Installment status must be pending or paid")
        if not installment_sum_within_tolerance(cart.installment_details, cart.total_amount_cents):
            raise ValidationError("installment_details", "Installment amounts must add up to the total")

    for name in ("company_id", "branch_id", "created_by"):
        if not getattr(cart, name):
            raise ValidationError(name, f"{name} is required")
