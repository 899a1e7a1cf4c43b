"""
Periodic client debt reconciliation.

Recomputes the debt status of every client that has sales, for one company
or for every company with sales. Meant to run from cron once a day so that
installments crossing their due date move clients to debtor, and debtors
crossing the defaulter threshold are flagged without any payment event.

Usage:
    python -m retail_gateway.jobs.reconcile_debt
    python -m retail_gateway.jobs.reconcile_debt --company-id <company>
"""

import argparse
import logging
import sys
from datetime import date
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from retail_gateway.config import settings
from retail_gateway.domain.exceptions import DomainException
from retail_gateway.domain.models import BatchDebtResult
from retail_gateway.infrastructure.database.repositories import SaleRepository
from retail_gateway.infrastructure.database.session import SessionLocal
from retail_gateway.infrastructure.observability.logging import setup_logging
from retail_gateway.services.debt_classifier import recompute_all_clients

logger = logging.getLogger(__name__)


def reconcile(db: Session, company_ids: Optional[List[str]] = None, today: date | None = None) -> dict:
    """Run the batch recompute per company; a failing company does not stop the others"""
    if not company_ids:
        company_ids = SaleRepository(db).list_company_ids()

    results = {}
    for company_id in company_ids:
        try:
            results[company_id] = recompute_all_clients(db, company_id, today)
        except DomainException as e:
            logger.error(f"Debt reconciliation failed for company {company_id}: {e}", extra={"company_id": company_id})
            results[company_id] = None
    return results


def _format(company_id: str, result: Optional[BatchDebtResult]) -> str:
    if result is None:
        return f"{company_id}: FAILED"
    return (
        f"{company_id}: {result.updated}/{result.total_clients} updated "
        f"(regular={result.regular}, debtor={result.debtor}, defaulter={result.defaulter}, failed={result.failed})"
    )


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Recompute client debt status from overdue installments")
    parser.add_argument("--company-id", action="append", dest="company_ids", help="Company to reconcile (repeatable)")
    args = parser.parse_args(argv)

    setup_logging(settings.log_level)

    db = SessionLocal()
    try:
        results = reconcile(db, args.company_ids)
    except SQLAlchemyError as e:
        print(f"ERROR: could not list companies: {e}", file=sys.stderr)
        return 1
    finally:
        db.close()

    for company_id, result in results.items():
        print(_format(company_id, result))

    return 1 if any(result is None or result.failed for result in results.values()) else 0


if __name__ == "__main__":
    sys.exit(main())
