"""Inter-branch money transfers and their ledger postings"""

import logging
from datetime import date, datetime, timezone
from typing import Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from retail_gateway.config import settings
from retail_gateway.domain.exceptions import DependencyError, DomainException, NotFoundError, ValidationError
from retail_gateway.domain.models import TRANSFER_APPROVED, TRANSFER_PENDING, TRANSFER_TYPES
from retail_gateway.domain.transfers import check_transition, triggers_ledger_posting
from retail_gateway.infrastructure.database.models import MoneyTransfer
from retail_gateway.infrastructure.database.repositories import (
    BranchRepository,
    FinancialEntryRepository,
    MoneyTransferRepository,
)
from retail_gateway.infrastructure.observability.metrics import transfer_completions_counter

logger = logging.getLogger(__name__)


def create_transfer(
    db: Session,
    company_id: str,
    created_by: str,
    from_branch_id: str,
    to_branch_id: str,
    amount_cents: int,
    description: str,
    transfer_type: str = "operational",
    transfer_date: date | None = None,
    notes: Optional[str] = None,
) -> MoneyTransfer:
    """Register a pending transfer between two branches of the same tenant"""
    if amount_cents <= 0:
        raise ValidationError("amount_cents", "Amount must be positive")
    if not description:
        raise ValidationError("description", "Description is required")
    if transfer_type not in TRANSFER_TYPES:
        raise ValidationError("transfer_type", f"Transfer type must be one of {', '.join(TRANSFER_TYPES)}")
    if from_branch_id == to_branch_id:
        raise ValidationError("to_branch_id", "Origin and destination branches must differ")

    branches = BranchRepository(db)
    try:
        for branch_id in (from_branch_id, to_branch_id):
            if branches.get(company_id, branch_id) is None:
                raise NotFoundError("Branch", branch_id)

        transfer = MoneyTransferRepository(db).create(
            MoneyTransfer(
                company_id=company_id,
                created_by=created_by,
                from_branch_id=from_branch_id,
                to_branch_id=to_branch_id,
                amount_cents=amount_cents,
                description=description,
                transfer_type=transfer_type,
                status=TRANSFER_PENDING,
                transfer_date=transfer_date or date.today(),
                notes=notes,
            )
        )
        db.commit()
    except DomainException:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        db.rollback()
        raise DependencyError("Could not persist money transfer") from e

    return transfer


def update_transfer_status(
    db: Session,
    company_id: str,
    transfer_id: str,
    status: str,
    approved_by: Optional[str] = None,
    notes: Optional[str] = None,
) -> MoneyTransfer:
    """
    Apply a status change to a transfer.

    The row is locked while the current status is checked, and the
    completion ledger entries are written in the same transaction as the
    status change. A repeated request for the current status changes
    nothing, so completing twice still leaves exactly two entries.
    """
    repo = MoneyTransferRepository(db)
    posted = False

    try:
        transfer = repo.get_for_update(company_id, transfer_id)
        if transfer is None:
            raise NotFoundError("Money transfer", transfer_id)

        previous = transfer.status
        if not check_transition(previous, status):
            db.commit()  # release the row lock
            return transfer

        transfer.status = status
        if status == TRANSFER_APPROVED and approved_by:
            transfer.approved_by = approved_by
        if notes is not None:
            transfer.notes = notes

        if triggers_ledger_posting(previous, status):
            completed_at = datetime.now(timezone.utc)
            transfer.completed_date = completed_at
            _post_completion_entries(db, transfer, completed_at)
            posted = True

        db.commit()

    except DomainException:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        db.rollback()
        raise DependencyError(f"Could not update money transfer {transfer_id}") from e

    if posted:
        transfer_completions_counter.inc()
        logger.info(
            "Money transfer completed",
            extra={
                "company_id": company_id,
                "transfer_id": transfer_id,
                "step": "transfer_completed",
                "amount_cents": transfer.amount_cents,
            },
        )
    return transfer


def _post_completion_entries(db: Session, transfer: MoneyTransfer, completed_at: datetime) -> None:
    """Expense at the origin branch, income at the destination, same amount"""
    entries = FinancialEntryRepository(db)
    label = transfer.description or "Inter-branch transfer"
    for entry_type, branch_id, description in (
        ("expense", transfer.from_branch_id, f"Transfer sent - {label}"),
        ("income", transfer.to_branch_id, f"Transfer received - {label}"),
    ):
        entries.create_entry(
            company_id=transfer.company_id,
            branch_id=branch_id,
            created_by=transfer.created_by,
            entry_type=entry_type,
            amount_cents=transfer.amount_cents,
            description=description,
            category=settings.transfer_ledger_category,
            reference_id=transfer.id,
            reference_type="money_transfer",
            entry_date=completed_at,
            status="paid",
        )
