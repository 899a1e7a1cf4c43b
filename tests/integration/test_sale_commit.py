"""Integration tests for the sale commit workflow against the database"""

import pytest
from datetime import date
from unittest.mock import patch
from sqlalchemy.exc import SQLAlchemyError

from retail_gateway.api.v1.schemas import CartSubmissionRequest
from retail_gateway.domain.exceptions import ForbiddenError, InsufficientStockError, NotFoundError, ValidationError
from retail_gateway.domain.models import AuthContext
from retail_gateway.infrastructure.database.models import FinancialEntry, InstallmentRecord, Product, Sale
from retail_gateway.services.sale_commit import LEDGER_ENTRY_WARNING, commit_sale
from tests.conftest import CASHIER, OTHER_COMPANY_ID, USER_ID

SALE_DAY = date(2024, 1, 10)


def _submission(payload: dict):
    return CartSubmissionRequest(**payload).to_domain()


def test_commit_pix_sale_posts_one_income_entry(db, cart_payload):
    """2 x R$ 10.00 + 1 x R$ 5.00 paid by pix -> R$ 25.00 sale and one R$ 25.00 income"""
    result = commit_sale(db, _submission(cart_payload()), CASHIER, today=SALE_DAY)

    sale = db.query(Sale).one()
    assert sale.total_price_cents == 2500
    assert sale.payment_method == "pix"
    assert len(sale.items) == 2
    assert result.installments == []
    assert result.warnings == []

    entries = db.query(FinancialEntry).all()
    assert len(entries) == 1
    assert entries[0].id == result.financial_entry_id
    assert entries[0].type == "income"
    assert entries[0].amount_cents == 2500
    assert entries[0].category == "vendas"
    assert entries[0].reference_id == sale.id
    assert entries[0].reference_type == "sale"


def test_commit_decrements_stock(db, cart_payload, products):
    commit_sale(db, _submission(cart_payload()), CASHIER, today=SALE_DAY)

    shirt, socks = products
    assert db.get(Product, shirt.id).stock == 8
    assert db.get(Product, socks.id).stock == 9


def test_commit_with_installment_details(db, cart_payload):
    """R$ 300.00 in 3x with supplied due dates -> three pending R$ 100.00 installments"""
    payload = cart_payload(
        items=[
            {
                "product_id": cart_payload()["items"][0]["product_id"],
                "product_name": "Camiseta",
                "quantity": 3,
                "unit_price_cents": 10000,
                "total_price_cents": 30000,
            }
        ],
        payment_method="cartao_credito",
        installments=3,
        subtotal_cents=30000,
        total_amount_cents=30000,
        installment_details=[
            {"amount_cents": 10000, "due_date": "2024-02-10"},
            {"amount_cents": 10000, "due_date": "2024-03-10"},
            {"amount_cents": 10000, "due_date": "2024-04-10"},
        ],
    )

    result = commit_sale(db, _submission(payload), CASHIER, today=SALE_DAY)

    rows = (
        db.query(InstallmentRecord)
        .filter(InstallmentRecord.sale_id == result.sale.id)
        .order_by(InstallmentRecord.installment_number)
        .all()
    )
    assert [row.installment_number for row in rows] == [1, 2, 3]
    assert all(row.total_installments == 3 for row in rows)
    assert all(row.amount_cents == 10000 for row in rows)
    assert all(row.status == "pending" for row in rows)
    assert [row.due_date for row in rows] == [date(2024, 2, 10), date(2024, 3, 10), date(2024, 4, 10)]


def test_commit_generates_plan_when_details_missing(db, cart_payload):
    """Without details the server splits the total monthly, remainder on the last"""
    payload = cart_payload(payment_method="boleto", installments=3)

    result = commit_sale(db, _submission(payload), CASHIER, today=SALE_DAY)

    assert [inst.installment_number for inst in result.installments] == [1, 2, 3]
    assert [inst.amount_cents for inst in result.installments] == [833, 833, 834]
    assert sum(inst.amount_cents for inst in result.installments) == 2500
    assert [inst.due_date for inst in result.installments] == [
        date(2024, 2, 10),
        date(2024, 3, 10),
        date(2024, 4, 10),
    ]


def test_paid_installment_detail_gets_paid_at(db, cart_payload):
    payload = cart_payload(
        payment_method="cartao_credito",
        installments=2,
        installment_details=[
            {"amount_cents": 1250, "due_date": "2024-01-10", "status": "paid"},
            {"amount_cents": 1250, "due_date": "2024-02-10"},
        ],
    )

    result = commit_sale(db, _submission(payload), CASHIER, today=SALE_DAY)

    first, second = result.installments
    assert first.status == "paid" and first.paid_at is not None
    assert second.status == "pending" and second.paid_at is None


def test_zero_total_persists_nothing(db, cart_payload):
    payload = cart_payload(discount_cents=2500, total_amount_cents=0)

    with pytest.raises(ValidationError) as exc_info:
        commit_sale(db, _submission(payload), CASHIER, today=SALE_DAY)

    assert exc_info.value.field == "total_amount_cents"
    assert db.query(Sale).count() == 0
    assert db.query(FinancialEntry).count() == 0


def test_cart_of_another_company_is_forbidden(db, cart_payload):
    outsider = AuthContext(user_id=USER_ID, company_id=OTHER_COMPANY_ID)

    with pytest.raises(ForbiddenError):
        commit_sale(db, _submission(cart_payload()), outsider, today=SALE_DAY)
    assert db.query(Sale).count() == 0


def test_cart_created_by_another_user_is_forbidden(db, cart_payload):
    """The recorded creator must be the authenticated caller"""
    with pytest.raises(ForbiddenError):
        commit_sale(db, _submission(cart_payload(created_by="someone-else")), CASHIER, today=SALE_DAY)
    assert db.query(Sale).count() == 0
    assert db.query(FinancialEntry).count() == 0


def test_more_installments_than_cents_persists_nothing(db, cart_payload):
    """A plan that would need zero-amount installments is refused up front"""
    payload = cart_payload(
        items=[
            {
                "product_id": cart_payload()["items"][1]["product_id"],
                "product_name": "Meia",
                "quantity": 1,
                "unit_price_cents": 2,
                "total_price_cents": 2,
            }
        ],
        payment_method="boleto",
        installments=3,
        subtotal_cents=2,
        total_amount_cents=2,
    )

    with pytest.raises(ValidationError) as exc_info:
        commit_sale(db, _submission(payload), CASHIER, today=SALE_DAY)

    assert exc_info.value.field == "installments"
    assert db.query(Sale).count() == 0
    assert db.query(InstallmentRecord).count() == 0


def test_unknown_client_is_not_found(db, cart_payload):
    with pytest.raises(NotFoundError):
        commit_sale(db, _submission(cart_payload(client_id="missing")), CASHIER, today=SALE_DAY)


def test_insufficient_stock_rolls_back_everything(db, cart_payload, products):
    """A failing second item leaves the first item's stock untouched"""
    payload = cart_payload()
    payload["items"][1].update(quantity=11, total_price_cents=5500)
    payload.update(subtotal_cents=7500, total_amount_cents=7500)

    with pytest.raises(InsufficientStockError):
        commit_sale(db, _submission(payload), CASHIER, today=SALE_DAY)

    shirt, socks = products
    assert db.get(Product, shirt.id).stock == 10
    assert db.get(Product, socks.id).stock == 10
    assert db.query(Sale).count() == 0


def test_unknown_product_is_not_found(db, cart_payload):
    payload = cart_payload()
    payload["items"][0]["product_id"] = "missing"

    with pytest.raises(NotFoundError):
        commit_sale(db, _submission(payload), CASHIER, today=SALE_DAY)
    assert db.query(Sale).count() == 0


def test_ledger_failure_keeps_sale_and_warns(db, cart_payload):
    """A failed income entry is reported as a warning, the sale stays committed"""
    with patch(
        "retail_gateway.services.sale_commit.FinancialEntryRepository.create_entry",
        side_effect=SQLAlchemyError("ledger unavailable"),
    ):
        result = commit_sale(db, _submission(cart_payload()), CASHIER, today=SALE_DAY)

    assert result.financial_entry_id is None
    assert result.warnings == [LEDGER_ENTRY_WARNING]
    assert db.query(Sale).count() == 1
    assert db.query(FinancialEntry).count() == 0
