"""Domain-specific exceptions"""

from typing import Any, Dict, Optional


class DomainException(Exception):
    """Base exception for domain layer"""

    status_code = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ValidationError(DomainException):
    """Cart, installment or client data is malformed or missing"""

    status_code = 422

    def __init__(self, field: str, message: str):
        super().__init__(message, details={"field": field})
        self.field = field


class NotFoundError(DomainException):
    """Referenced entity does not exist within the caller's tenant"""

    status_code = 404

    def __init__(self, resource: str, resource_id: Any = None):
        message = f"{resource} not found"
        if resource_id:
            message = f"{resource} {resource_id} not found"
        super().__init__(message, details={"resource": resource, "id": resource_id})


class AuthorizationError(DomainException):
    """Principal or tenant identifier missing"""

    status_code = 401


class ForbiddenError(AuthorizationError):
    """Principal tried to act on another tenant's data"""

    status_code = 403


class InvalidStatusTransitionError(DomainException):
    """Requested status change is not allowed from the current status"""

    status_code = 409

    def __init__(self, resource: str, current: str, requested: str):
        super().__init__(
            f"{resource} cannot move from '{current}' to '{requested}'",
            details={"current_status": current, "requested_status": requested},
        )


class InsufficientStockError(DomainException):
    """Product stock is lower than the quantity being sold"""

    status_code = 409

    def __init__(self, product_id: str, requested: int):
        super().__init__(
            f"Insufficient stock for product {product_id}",
            details={"product_id": product_id, "requested_quantity": requested},
        )


class CouponRejectedError(DomainException):
    """Coupon is inactive, expired, exhausted or not applicable"""

    status_code = 400


class DependencyError(DomainException):
    """Data store is unreachable or rejected a write"""

    status_code = 503
