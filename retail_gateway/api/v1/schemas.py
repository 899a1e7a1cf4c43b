"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, ConfigDict, Field
from datetime import date, datetime
from typing import List, Optional

from retail_gateway.domain.models import CartItem, CartSubmission, Installment


class CartItemSchema(BaseModel):
    """Single product line of a cart"""

    product_id: str = Field(..., description="Product identifier")
    product_name: str = Field(..., description="Product name at sale time")
    quantity: int
    unit_price_cents: int
    total_price_cents: int
    discount_cents: int = 0


class InstallmentDetailSchema(BaseModel):
    """Installment computed by the point of sale"""

    amount_cents: int
    due_date: date
    status: str = "pending"


class CartSubmissionRequest(BaseModel):
    """Request body for POST /api/sales/cart"""

    items: List[CartItemSchema]
    client_id: Optional[str] = None
    payment_method: str
    installments: int = 1
    installment_details: List[InstallmentDetailSchema] = Field(default_factory=list)
    subtotal_cents: int
    discount_cents: int = 0
    total_amount_cents: int
    coupon_id: Optional[str] = None
    coupon_discount_cents: int = 0
    notes: Optional[str] = None
    company_id: str
    branch_id: str
    created_by: str

    def to_domain(self) -> CartSubmission:
        return CartSubmission(
            items=[
                CartItem(
                    product_id=item.product_id,
                    product_name=item.product_name,
                    quantity=item.quantity,
                    unit_price_cents=item.unit_price_cents,
                    total_price_cents=item.total_price_cents,
                    discount_cents=item.discount_cents,
                )
                for item in self.items
            ],
            payment_method=self.payment_method,
            subtotal_cents=self.subtotal_cents,
            discount_cents=self.discount_cents,
            total_amount_cents=self.total_amount_cents,
            company_id=self.company_id,
            branch_id=self.branch_id,
            created_by=self.created_by,
            installments=self.installments,
            installment_details=[
                Installment(due_date=d.due_date, amount_cents=d.amount_cents, status=d.status)
                for d in self.installment_details
            ],
            client_id=self.client_id,
            coupon_id=self.coupon_id,
            coupon_discount_cents=self.coupon_discount_cents,
            notes=self.notes,
        )


class SaleItemSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    product_id: str
    product_name: str
    quantity: int
    unit_price_cents: int
    total_price_cents: int
    discount_cents: int


class InstallmentSchema(BaseModel):
    """Single installment of a sale"""

    model_config = ConfigDict(from_attributes=True)

    id: str
    sale_id: str
    installment_number: int
    total_installments: int
    amount_cents: int
    due_date: date
    status: str
    paid_at: Optional[datetime] = None


class SaleResponse(BaseModel):
    """Response for POST /api/sales/cart"""

    id: str
    client_id: Optional[str] = None
    subtotal_cents: int
    discount_cents: int
    total_price_cents: int
    payment_method: str
    installments: int
    sale_date: date
    company_id: str
    branch_id: str
    created_by: str
    created_at: datetime
    items: List[SaleItemSchema]
    installment_schedule: List[InstallmentSchema]
    financial_entry_id: Optional[str] = None
    warnings: List[str] = Field(default_factory=list)


class InstallmentStatusUpdate(BaseModel):
    """Request body for PATCH /api/installments/{id}/status"""

    status: str = Field(..., description='"pending" or "paid"')


class ClientDebtResponse(BaseModel):
    """Debt summary of one client"""

    client_id: str
    debt_status: str
    overdue_amount_cents: int
    overdue_installments_count: int
    first_overdue_date: Optional[date] = None
    days_since_first_overdue: int = 0
    debt_status_updated_at: Optional[datetime] = None


class BatchDebtResponse(BaseModel):
    """Response for POST /api/clients/update-all-debt-status"""

    updated_count: int
    total_clients: int
    failed: int
    regular: int
    debtor: int
    defaulter: int


class OverdueClientSchema(BaseModel):
    """Client flagged as debtor or defaulter"""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    client_type: str
    debt_status: str
    overdue_amount_cents: int
    overdue_installments_count: int
    first_overdue_date: Optional[date] = None
    debt_status_updated_at: Optional[datetime] = None


class OverdueInstallmentSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    installment_id: str
    sale_id: str
    installment_number: int
    amount_cents: int
    due_date: date


class ClientDebtInfoResponse(BaseModel):
    """Response for GET /api/clients/{id}/debt-info"""

    client_id: str
    client_name: str
    debt_status: str
    overdue_amount_cents: int
    overdue_installments_count: int
    first_overdue_date: Optional[date] = None
    days_since_first_overdue: int
    overdue_installments: List[OverdueInstallmentSchema]


class MoneyTransferCreate(BaseModel):
    """Request body for POST /api/money-transfers"""

    from_branch_id: str
    to_branch_id: str
    amount_cents: int
    description: str
    transfer_type: str = "operational"
    transfer_date: Optional[date] = None
    notes: Optional[str] = None


class MoneyTransferUpdate(BaseModel):
    """Request body for PATCH /api/money-transfers/{id}"""

    status: str
    approved_by: Optional[str] = None
    notes: Optional[str] = None


class MoneyTransferSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    company_id: str
    from_branch_id: str
    to_branch_id: str
    amount_cents: int
    description: str
    transfer_type: str
    status: str
    transfer_date: date
    completed_date: Optional[datetime] = None
    approved_by: Optional[str] = None
    notes: Optional[str] = None
    created_by: str


class FinancialEntrySchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    branch_id: str
    type: str
    amount_cents: int
    description: str
    category: str
    status: str
    reference_id: Optional[str] = None
    reference_type: Optional[str] = None
    entry_date: datetime


class CouponValidationResponse(BaseModel):
    """Response for GET /api/coupons/validate/{code}"""

    coupon_id: str
    code: str
    discount_cents: int


class CouponSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    code: str
    name: str
    discount_type: str
    discount_value: int
    uses_count: int
    max_uses: Optional[int] = None
    is_active: bool
