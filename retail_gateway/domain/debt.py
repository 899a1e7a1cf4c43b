"""Debt classification - derives a client's debt status from overdue installments"""

from datetime import date
from typing import List
from retail_gateway.domain.models import (
    ClientDebtSummary,
    OverdueInstallment,
    DEBT_REGULAR,
    DEBT_DEBTOR,
    DEBT_DEFAULTER,
)
from retail_gateway.utils.date_utils import days_between

DEFAULTER_AFTER_DAYS = 90


def select_overdue(installments: List[OverdueInstallment], today: date) -> List[OverdueInstallment]:
    """Keep only installments whose due date is strictly before today"""
    return [inst for inst in installments if inst.due_date < today]


def determine_debt_status(days_since_first_overdue: int | None, defaulter_after_days: int = DEFAULTER_AFTER_DAYS) -> str:
    """
    Map the age of the oldest overdue installment to a debt status.

    - no overdue installment: regular
    - 0 .. defaulter_after_days-1 days: debtor
    - defaulter_after_days or more: defaulter
    """
    if days_since_first_overdue is None:
        return DEBT_REGULAR
    if days_since_first_overdue >= defaulter_after_days:
        return DEBT_DEFAULTER
    return DEBT_DEBTOR


def classify_debt(
    overdue_installments: List[OverdueInstallment],
    today: date,
    defaulter_after_days: int = DEFAULTER_AFTER_DAYS,
) -> ClientDebtSummary:
    """
    Main entry point: summarize a client's pending installments as of `today`.

    Ages are whole calendar days between the oldest due date and today, the
    same definition for every caller (API, batch job, debt-info view).
    """
    overdue = select_overdue(overdue_installments, today)

    if not overdue:
        return ClientDebtSummary(
            debt_status=DEBT_REGULAR,
            overdue_amount_cents=0,
            overdue_installments_count=0,
            first_overdue_date=None,
        )

    first_overdue_date = min(inst.due_date for inst in overdue)
    days_overdue = days_between(first_overdue_date, today)

    return ClientDebtSummary(
        debt_status=determine_debt_status(days_overdue, defaulter_after_days),
        overdue_amount_cents=sum(inst.amount_cents for inst in overdue),
        overdue_installments_count=len(overdue),
        first_overdue_date=first_overdue_date,
        days_since_first_overdue=days_overdue,
    )
