"""Integration tests for debt recompute and installment payments"""

import pytest
from datetime import date, timedelta
from unittest.mock import patch

from retail_gateway.api.v1.schemas import CartSubmissionRequest
from retail_gateway.domain.debt import classify_debt
from retail_gateway.domain.exceptions import DependencyError, InvalidStatusTransitionError, NotFoundError
from retail_gateway.infrastructure.database.models import Client, InstallmentRecord
from retail_gateway.services.debt_classifier import client_debt_info, recompute_all_clients, recompute_client_debt
from retail_gateway.services.installments import update_installment_status
from retail_gateway.services.sale_commit import commit_sale
from tests.conftest import CASHIER, COMPANY_ID, OTHER_COMPANY_ID

TODAY = date(2024, 6, 30)


def _sell_on_credit(db, cart_payload, client_id, due_dates):
    """Commit a R$ 25.00 sale split over the given due dates"""
    count = len(due_dates)
    amounts = [2500 // count] * count
    amounts[-1] += 2500 - sum(amounts)
    payload = cart_payload(
        client_id=client_id,
        payment_method="cartao_credito",
        installments=count,
        installment_details=[
            {"amount_cents": amount, "due_date": due.isoformat()} for amount, due in zip(amounts, due_dates)
        ],
    )
    return commit_sale(db, CartSubmissionRequest(**payload).to_domain(), CASHIER, today=TODAY)


def test_recompute_debtor(db, cart_payload, customer):
    """One installment 40 days late -> debtor"""
    _sell_on_credit(db, cart_payload, customer.id, [TODAY - timedelta(days=40)])

    summary = recompute_client_debt(db, COMPANY_ID, customer.id, today=TODAY)

    assert summary.debt_status == "debtor"
    assert summary.overdue_amount_cents == 2500
    assert summary.overdue_installments_count == 1

    stored = db.get(Client, customer.id)
    assert stored.debt_status == "debtor"
    assert stored.overdue_amount_cents == 2500
    assert stored.first_overdue_date == TODAY - timedelta(days=40)
    assert stored.debt_status_updated_at is not None


def test_recompute_defaulter(db, cart_payload, customer):
    _sell_on_credit(db, cart_payload, customer.id, [TODAY - timedelta(days=95)])

    summary = recompute_client_debt(db, COMPANY_ID, customer.id, today=TODAY)

    assert summary.debt_status == "defaulter"
    assert db.get(Client, customer.id).debt_status == "defaulter"


def test_recompute_ignores_future_installments(db, cart_payload, customer):
    _sell_on_credit(db, cart_payload, customer.id, [TODAY - timedelta(days=10), TODAY + timedelta(days=20)])

    summary = recompute_client_debt(db, COMPANY_ID, customer.id, today=TODAY)

    assert summary.overdue_installments_count == 1
    assert summary.overdue_amount_cents == 1250


def test_recompute_unknown_client(db):
    with pytest.raises(NotFoundError):
        recompute_client_debt(db, COMPANY_ID, "missing", today=TODAY)


def test_recompute_other_company_client_not_found(db, customer):
    with pytest.raises(NotFoundError):
        recompute_client_debt(db, OTHER_COMPANY_ID, customer.id, today=TODAY)


def test_paying_installment_refreshes_client(db, cart_payload, customer):
    """Paying the only overdue installment brings the client back to regular"""
    result = _sell_on_credit(db, cart_payload, customer.id, [TODAY - timedelta(days=40)])
    recompute_client_debt(db, COMPANY_ID, customer.id, today=TODAY)
    assert db.get(Client, customer.id).debt_status == "debtor"

    installment = update_installment_status(db, COMPANY_ID, result.installments[0].id, "paid", today=TODAY)

    assert installment.status == "paid"
    assert installment.paid_at is not None
    client = db.get(Client, customer.id)
    assert client.debt_status == "regular"
    assert client.overdue_amount_cents == 0
    assert client.first_overdue_date is None


def test_paying_twice_is_noop(db, cart_payload, customer):
    result = _sell_on_credit(db, cart_payload, customer.id, [TODAY - timedelta(days=5)])
    installment_id = result.installments[0].id

    first = update_installment_status(db, COMPANY_ID, installment_id, "paid", today=TODAY)
    paid_at = first.paid_at
    second = update_installment_status(db, COMPANY_ID, installment_id, "paid", today=TODAY)

    assert second.paid_at == paid_at


def test_paid_installment_cannot_reopen(db, cart_payload, customer):
    result = _sell_on_credit(db, cart_payload, customer.id, [TODAY - timedelta(days=5)])
    installment_id = result.installments[0].id
    update_installment_status(db, COMPANY_ID, installment_id, "paid", today=TODAY)

    with pytest.raises(InvalidStatusTransitionError):
        update_installment_status(db, COMPANY_ID, installment_id, "pending", today=TODAY)


def test_payment_survives_recompute_failure(db, cart_payload, customer):
    result = _sell_on_credit(db, cart_payload, customer.id, [TODAY - timedelta(days=5)])
    installment_id = result.installments[0].id

    with patch(
        "retail_gateway.services.installments.recompute_client_debt",
        side_effect=DependencyError("store unavailable"),
    ):
        installment = update_installment_status(db, COMPANY_ID, installment_id, "paid", today=TODAY)

    assert installment.status == "paid"
    assert db.get(InstallmentRecord, installment_id).status == "paid"


def test_batch_recompute_counts_statuses(db, cart_payload, customer, branch):
    late = Client(company_id=COMPANY_ID, branch_id=branch.id, name="Joao Souza")
    on_time = Client(company_id=COMPANY_ID, branch_id=branch.id, name="Ana Lima")
    no_sales = Client(company_id=COMPANY_ID, branch_id=branch.id, name="Pedro Alves")
    db.add_all([late, on_time, no_sales])
    db.commit()

    _sell_on_credit(db, cart_payload, customer.id, [TODAY - timedelta(days=30)])
    _sell_on_credit(db, cart_payload, late.id, [TODAY - timedelta(days=120)])
    _sell_on_credit(db, cart_payload, on_time.id, [TODAY + timedelta(days=30)])

    result = recompute_all_clients(db, COMPANY_ID, today=TODAY)

    assert result.total_clients == 3
    assert result.updated == 3
    assert result.failed == 0
    assert (result.regular, result.debtor, result.defaulter) == (1, 1, 1)
    assert db.get(Client, no_sales.id).debt_status_updated_at is None


def test_batch_continues_after_client_failure(db, cart_payload, customer, branch):
    other = Client(company_id=COMPANY_ID, branch_id=branch.id, name="Joao Souza")
    db.add(other)
    db.commit()
    _sell_on_credit(db, cart_payload, customer.id, [TODAY - timedelta(days=30)])
    _sell_on_credit(db, cart_payload, other.id, [TODAY - timedelta(days=30)])

    calls = {"n": 0}

    def flaky_classify(*args, **kwargs):
        calls["n"] += 1
        if calls["n"] == 1:
            raise DependencyError("store unavailable")
        return classify_debt(*args, **kwargs)

    with patch("retail_gateway.services.debt_classifier.classify_debt", side_effect=flaky_classify):
        result = recompute_all_clients(db, COMPANY_ID, today=TODAY)

    assert result.total_clients == 2
    assert result.failed == 1
    assert result.updated == 1


def test_debt_info_does_not_touch_cached_fields(db, cart_payload, customer):
    _sell_on_credit(db, cart_payload, customer.id, [TODAY - timedelta(days=40), TODAY - timedelta(days=10)])

    info = client_debt_info(db, COMPANY_ID, customer.id, today=TODAY)

    assert info.summary.debt_status == "debtor"
    assert info.summary.days_since_first_overdue == 40
    assert [inst.installment_number for inst in info.overdue_installments] == [1, 2]
    client = db.get(Client, customer.id)
    assert client.debt_status == "regular"
    assert client.debt_status_updated_at is None
