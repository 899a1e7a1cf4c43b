"""
Debt Classifier service.

Recomputes the cached debt summary of clients from their installments.
Each recompute is its own transaction: the client row is either fully
rewritten or left untouched.
"""

import logging
from datetime import date, datetime, timezone
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from retail_gateway.config import settings
from retail_gateway.domain.debt import classify_debt
from retail_gateway.domain.exceptions import DependencyError, DomainException, NotFoundError
from retail_gateway.domain.models import (
    BatchDebtResult,
    ClientDebtInfo,
    ClientDebtSummary,
    DEBT_DEBTOR,
    DEBT_DEFAULTER,
)
from retail_gateway.infrastructure.database.repositories import ClientRepository, InstallmentRepository
from retail_gateway.infrastructure.observability.logging import log_debt_recomputed
from retail_gateway.infrastructure.observability.metrics import debt_recompute_failures_counter, record_debt_status

logger = logging.getLogger(__name__)


def recompute_client_debt(
    db: Session,
    company_id: str,
    client_id: str,
    today: date | None = None,
) -> ClientDebtSummary:
    """
    Recompute and persist one client's debt summary.

    Flow:
    1. Load the client within the tenant (NotFoundError otherwise)
    2. Fetch pending installments of the client's sales due before today
    3. Classify (regular / debtor / defaulter)
    4. Overwrite the summary fields and debt_status_updated_at, commit

    Raises:
        NotFoundError: client missing or owned by another tenant
        DependencyError: the store failed; nothing was written
    """
    today = today or date.today()
    clients = ClientRepository(db)

    try:
        client = clients.get(company_id, client_id)
        if client is None:
            raise NotFoundError("Client", client_id)

        overdue = InstallmentRepository(db).get_overdue_for_client(company_id, client_id, today)
        summary = classify_debt(overdue, today, settings.defaulter_after_days)
        summary.updated_at = datetime.now(timezone.utc)

        clients.save_debt_summary(client, summary, summary.updated_at)
        db.commit()

    except DomainException:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        db.rollback()
        raise DependencyError(f"Could not recompute debt of client {client_id}") from e

    record_debt_status(summary.debt_status)
    log_debt_recomputed(company_id, client_id, summary.debt_status, summary.overdue_amount_cents)
    return summary


def recompute_all_clients(db: Session, company_id: str, today: date | None = None) -> BatchDebtResult:
    """
    Reconcile every client of a tenant that has at least one sale.

    A failure on one client is logged and counted; the batch carries on.
    """
    today = today or date.today()
    result = BatchDebtResult()

    try:
        client_ids = ClientRepository(db).get_ids_with_sales(company_id)
    except SQLAlchemyError as e:
        db.rollback()
        raise DependencyError(f"Could not list clients of company {company_id}") from e

    result.total_clients = len(client_ids)

    for client_id in client_ids:
        try:
            summary = recompute_client_debt(db, company_id, client_id, today)
        except DomainException as e:
            result.failed += 1
            debt_recompute_failures_counter.labels(trigger="batch").inc()
            logger.error(
                f"Debt recompute failed for client {client_id}: {e}",
                extra={"company_id": company_id, "client_id": client_id},
            )
            continue

        result.updated += 1
        if summary.debt_status == DEBT_DEFAULTER:
            result.defaulter += 1
        elif summary.debt_status == DEBT_DEBTOR:
            result.debtor += 1
        else:
            result.regular += 1

    logger.info(
        "Debt reconciliation finished",
        extra={
            "company_id": company_id,
            "step": "debt_batch_complete",
            "total_clients": result.total_clients,
            "updated": result.updated,
            "failed": result.failed,
            "regular": result.regular,
            "debtor": result.debtor,
            "defaulter": result.defaulter,
        },
    )
    return result


def client_debt_info(db: Session, company_id: str, client_id: str, today: date | None = None) -> ClientDebtInfo:
    """Live debt view of a client; the cached summary columns are neither read nor written"""
    today = today or date.today()

    try:
        client = ClientRepository(db).get(company_id, client_id)
        if client is None:
            raise NotFoundError("Client", client_id)
        overdue = InstallmentRepository(db).get_overdue_for_client(company_id, client_id, today)
    except SQLAlchemyError as e:
        raise DependencyError(f"Could not load debt of client {client_id}") from e

    return ClientDebtInfo(
        client_id=client.id,
        client_name=client.name,
        summary=classify_debt(overdue, today, settings.defaulter_after_days),
        overdue_installments=overdue,
    )
