"""Unit tests for installment plan generation"""

import pytest
from datetime import date
from retail_gateway.domain.installments import generate_installment_plan, installment_sum_within_tolerance
from retail_gateway.domain.models import Installment


def test_generate_installment_plan_equal_split():
    """Test plan with evenly divisible amount"""
    amount = 30000  # R$ 300.00
    installments = generate_installment_plan(amount, 3, start_date=date(2024, 1, 10))

    assert len(installments) == 3
    assert all(inst.amount_cents == 10000 for inst in installments)  # Each R$ 100.00
    assert all(inst.status == "pending" for inst in installments)
    assert sum(inst.amount_cents for inst in installments) == amount


def test_generate_installment_plan_rounding():
    """Test last installment absorbs remainder"""
    amount = 10000  # R$ 100.00
    installments = generate_installment_plan(amount, 3, start_date=date(2024, 1, 10))

    assert [inst.amount_cents for inst in installments] == [3333, 3333, 3334]
    assert sum(inst.amount_cents for inst in installments) == amount


def test_generate_installment_plan_dates():
    """Test monthly due dates starting one month after the sale"""
    installments = generate_installment_plan(30000, 3, start_date=date(2024, 3, 15))

    assert [inst.due_date for inst in installments] == [
        date(2024, 4, 15),
        date(2024, 5, 15),
        date(2024, 6, 15),
    ]


def test_generate_installment_plan_month_end_clamping():
    """Jan 31 maps to the last day of shorter months without drifting"""
    installments = generate_installment_plan(40000, 4, start_date=date(2024, 1, 31))

    assert [inst.due_date for inst in installments] == [
        date(2024, 2, 29),
        date(2024, 3, 31),
        date(2024, 4, 30),
        date(2024, 5, 31),
    ]


def test_generate_installment_plan_single_payment():
    installments = generate_installment_plan(2500, 1, start_date=date(2024, 1, 10))

    assert len(installments) == 1
    assert installments[0].amount_cents == 2500
    assert installments[0].due_date == date(2024, 2, 10)


@pytest.mark.parametrize("amount,count", [(0, 3), (-100, 3), (1000, 0)])
def test_generate_installment_plan_empty(amount, count):
    """Test handling of zero amount or zero installments"""
    assert generate_installment_plan(amount, count) == []


@pytest.mark.parametrize("amount,count", [(1, 1), (99, 2), (100001, 7), (2500, 12)])
def test_generate_installment_plan_sum_is_exact(amount, count):
    installments = generate_installment_plan(amount, count, start_date=date(2024, 6, 1))
    assert sum(inst.amount_cents for inst in installments) == amount


def test_sum_tolerance_allows_one_cent_per_installment():
    plan = [Installment(due_date=date(2024, 2, 1), amount_cents=3333) for _ in range(3)]

    assert installment_sum_within_tolerance(plan, 10000)  # 1 cent short
    assert installment_sum_within_tolerance(plan, 10002)  # 3 cents short
    assert not installment_sum_within_tolerance(plan, 10003)  # 4 cents short
