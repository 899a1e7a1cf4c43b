"""Installment status changes and the debt recompute they trigger"""

import logging
from datetime import date, datetime, timezone
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from retail_gateway.domain.exceptions import (
    DependencyError,
    DomainException,
    InvalidStatusTransitionError,
    NotFoundError,
    ValidationError,
)
from retail_gateway.domain.models import INSTALLMENT_STATUSES
from retail_gateway.infrastructure.database.models import InstallmentRecord
from retail_gateway.infrastructure.database.repositories import InstallmentRepository
from retail_gateway.infrastructure.observability.metrics import debt_recompute_failures_counter
from retail_gateway.services.debt_classifier import recompute_client_debt

logger = logging.getLogger(__name__)


def update_installment_status(
    db: Session,
    company_id: str,
    installment_id: str,
    status: str,
    today: date | None = None,
) -> InstallmentRecord:
    """
    Move an installment to `status` and refresh the owning client's debt.

    pending -> paid is the only transition; asking for the current status
    is a no-op and paid -> pending is refused. After a payment the client's
    debt summary is recomputed in the same request. A failure there is
    logged and left for the batch reconciliation.
    """
    if status not in INSTALLMENT_STATUSES:
        raise ValidationError("status", 'Status must be "pending" or "paid"')

    repo = InstallmentRepository(db)
    try:
        installment = repo.get(company_id, installment_id)
    except SQLAlchemyError as e:
        raise DependencyError(f"Could not load installment {installment_id}") from e

    if installment is None:
        raise NotFoundError("Installment", installment_id)
    if installment.status == status:
        return installment
    if installment.status == "paid":
        raise InvalidStatusTransitionError("Installment", installment.status, status)

    try:
        installment.status = "paid"
        installment.paid_at = datetime.now(timezone.utc)
        client_id = installment.sale.client_id
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise DependencyError(f"Could not update installment {installment_id}") from e

    if client_id:
        try:
            recompute_client_debt(db, company_id, client_id, today)
        except DomainException as e:
            debt_recompute_failures_counter.labels(trigger="installment_paid").inc()
            logger.error(
                f"Debt recompute after payment of installment {installment_id} failed: {e}",
                extra={"company_id": company_id, "client_id": client_id, "installment_id": installment_id},
            )

    return installment
