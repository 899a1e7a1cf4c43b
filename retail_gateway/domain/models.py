"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional

PAYMENT_METHODS = ("dinheiro", "pix", "cartao_credito", "cartao_debito", "boleto")
INSTALLMENT_STATUSES = ("pending", "paid")

DEBT_REGULAR = "regular"
DEBT_DEBTOR = "debtor"
DEBT_DEFAULTER = "defaulter"

TRANSFER_PENDING = "pending"
TRANSFER_APPROVED = "approved"
TRANSFER_COMPLETED = "completed"
TRANSFER_REJECTED = "rejected"
TRANSFER_TYPES = ("operational", "investment", "emergency", "reimbursement")


@dataclass
class CartItem:
    """Single product line in a cart"""

    product_id: str
    product_name: str
    quantity: int
    unit_price_cents: int
    total_price_cents: int
    discount_cents: int = 0


@dataclass
class Installment:
    """Single payment in a repayment plan"""

    due_date: date
    amount_cents: int
    status: str = "pending"


@dataclass
class CartSubmission:
    """Cart handed over by the point of sale for checkout"""

    items: List[CartItem]
    payment_method: str
    subtotal_cents: int
    discount_cents: int
    total_amount_cents: int
    company_id: str
    branch_id: str
    created_by: str
    installments: int = 1
    installment_details: List[Installment] = field(default_factory=list)
    client_id: Optional[str] = None
    coupon_id: Optional[str] = None
    coupon_discount_cents: int = 0
    notes: Optional[str] = None


@dataclass
class OverdueInstallment:
    """Pending installment whose due date has passed"""

    installment_id: str
    sale_id: str
    installment_number: int
    amount_cents: int
    due_date: date


@dataclass
class ClientDebtSummary:
    """Debt classification of a client at a given date"""

    debt_status: str
    overdue_amount_cents: int
    overdue_installments_count: int
    first_overdue_date: Optional[date]
    days_since_first_overdue: int = 0
    updated_at: Optional[datetime] = None


@dataclass
class BatchDebtResult:
    """Outcome of a tenant-wide debt reconciliation"""

    total_clients: int = 0
    updated: int = 0
    failed: int = 0
    regular: int = 0
    debtor: int = 0
    defaulter: int = 0


@dataclass
class ClientDebtInfo:
    """Live view of a client's debt, computed without touching the cached fields"""

    client_id: str
    client_name: str
    summary: ClientDebtSummary
    overdue_installments: List[OverdueInstallment] = field(default_factory=list)


@dataclass
class AuthContext:
    """Trusted principal and tenant supplied with every request"""

    user_id: str
    company_id: str
    branch_id: Optional[str] = None
