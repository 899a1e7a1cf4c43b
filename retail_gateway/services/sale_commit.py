"""
Sale Commit Workflow.

Turns a validated cart into durable records:
- Transaction A (all-or-none): stock decrements, Sale, SaleItems, Installments
- Transaction B: one income FinancialEntry for the sale

A failure in transaction B does not undo the sale; it is logged, counted and
returned to the caller as a warning.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import List, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from retail_gateway.config import settings
from retail_gateway.domain.cart import validate_cart
from retail_gateway.domain.exceptions import (
    DependencyError,
    DomainException,
    ForbiddenError,
    InsufficientStockError,
    NotFoundError,
)
from retail_gateway.domain.installments import generate_installment_plan
from retail_gateway.domain.models import AuthContext, CartSubmission
from retail_gateway.infrastructure.database.models import InstallmentRecord, Sale
from retail_gateway.infrastructure.database.repositories import (
    BranchRepository,
    ClientRepository,
    FinancialEntryRepository,
    InstallmentRepository,
    ProductRepository,
    SaleRepository,
)
from retail_gateway.infrastructure.observability.metrics import sale_side_effect_failures_counter

logger = logging.getLogger(__name__)

LEDGER_ENTRY_WARNING = "financial_entry_not_created"


@dataclass
class SaleCommitResult:
    """Committed sale plus the outcome of its secondary ledger write"""

    sale: Sale
    installments: List[InstallmentRecord]
    financial_entry_id: Optional[str] = None
    warnings: List[str] = field(default_factory=list)


def commit_sale(
    db: Session,
    cart: CartSubmission,
    auth: AuthContext,
    today: date | None = None,
) -> SaleCommitResult:
    """
    Commit a point-of-sale cart.

    Flow:
    1. Validate the cart structure (ValidationError, nothing persisted)
    2. Check the cart belongs to the caller (tenant and creator) and that branch/client exist
    3. Decrement stock, persist sale, items and installments in one transaction
    4. Post the income ledger entry in a second transaction

    When no installment details are supplied and more than one installment
    is requested, the plan is generated here (monthly, remainder on the last).

    Raises:
        ValidationError, ForbiddenError, NotFoundError, InsufficientStockError,
        DependencyError (sale could not be written)
    """
    validate_cart(cart)
    if cart.company_id != auth.company_id:
        raise ForbiddenError("Cart belongs to another company")
    if cart.created_by != auth.user_id:
        raise ForbiddenError("Cart was created by another user")

    today = today or date.today()
    now = datetime.now(timezone.utc)

    try:
        _check_references(db, cart)
        _take_stock(db, cart)

        plan = list(cart.installment_details)
        if not plan and cart.installments > 1:
            plan = generate_installment_plan(cart.total_amount_cents, cart.installments, start_date=today)

        sale = SaleRepository(db).create_sale(cart, sale_date=today, installments=cart.installments)
        installments = InstallmentRepository(db).create_for_sale(sale, plan, paid_at=now)
        db.commit()

    except DomainException:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        db.rollback()
        raise DependencyError("Could not persist sale") from e

    result = SaleCommitResult(sale=sale, installments=installments)

    sale_id = sale.id
    try:
        entry = post_sale_income(db, sale, now)
        db.commit()
        result.financial_entry_id = entry.id
    except SQLAlchemyError as e:
        db.rollback()
        sale_side_effect_failures_counter.labels(effect="financial_entry").inc()
        logger.error(
            f"Ledger entry for sale {sale_id} failed: {e}",
            extra={"company_id": auth.company_id, "sale_id": sale_id, "step": "sale_ledger_entry"},
        )
        result.warnings.append(LEDGER_ENTRY_WARNING)

    return result


def post_sale_income(db: Session, sale: Sale, entry_date: datetime):
    """Create the income ledger entry mirroring a sale"""
    units = sum(item.quantity for item in sale.items)
    return FinancialEntryRepository(db).create_entry(
        company_id=sale.company_id,
        branch_id=sale.branch_id,
        created_by=sale.created_by,
        entry_type="income",
        amount_cents=sale.total_price_cents,
        description=f"Sale {sale.id} - {units} unit(s)",
        category=settings.sale_ledger_category,
        reference_id=sale.id,
        reference_type="sale",
        entry_date=entry_date,
        status="paid",
    )


def _check_references(db: Session, cart: CartSubmission) -> None:
    if BranchRepository(db).get(cart.company_id, cart.branch_id) is None:
        raise NotFoundError("Branch", cart.branch_id)
    if cart.client_id and ClientRepository(db).get(cart.company_id, cart.client_id) is None:
        raise NotFoundError("Client", cart.client_id)


def _take_stock(db: Session, cart: CartSubmission) -> None:
    products = ProductRepository(db)
    for item in cart.items:
        if products.decrement_stock(cart.company_id, cart.branch_id, item.product_id, item.quantity):
            continue
        product = products.get(cart.company_id, item.product_id)
        if product is None or product.branch_id != cart.branch_id:
            raise NotFoundError("Product", item.product_id)
        raise InsufficientStockError(item.product_id, item.quantity)
