"""Installment plan generation for deferred-payment sales"""

from datetime import date
from typing import List
from retail_gateway.domain.models import Installment
from retail_gateway.utils.date_utils import add_months


def generate_installment_plan(
    amount_cents: int,
    num_installments: int,
    start_date: date | None = None,
) -> List[Installment]:
    """
    Split a sale total into monthly installments.

    Requirements:
    - Equal installments, the last one absorbs the rounding remainder
      (at most num_installments-1 cents of drift, sum is always exact)
    - First installment due one calendar month after start_date,
      each following one a calendar month later

    Args:
        amount_cents: Total amount to split into installments
        num_installments: Number of payments
        start_date: Sale date (default: today)

    Returns:
        List of pending Installment objects with due dates and amounts

    Example:
        R$ 100.00 in 3x on 2024-01-31 ->
        [33.33 @ 2024-02-29, 33.33 @ 2024-03-31, 33.34 @ 2024-04-30]
    """
    if amount_cents <= 0 or num_installments <= 0:
        return []

    if start_date is None:
        start_date = date.today()

    base_amount = amount_cents // num_installments
    remainder = amount_cents % num_installments

    installments = []
    for i in range(num_installments):
        # Offsets are always taken from start_date so month-end clamping never accumulates
        due_date = add_months(start_date, i + 1)
        amount = base_amount + (remainder if i == num_installments - 1 else 0)
        installments.append(Installment(due_date=due_date, amount_cents=amount))

    return installments


def installment_sum_within_tolerance(installments: List[Installment], total_cents: int) -> bool:
    """Sum of installment amounts matches the total within one cent per installment"""
    drift = abs(sum(inst.amount_cents for inst in installments) - total_cents)
    return drift <= len(installments)
