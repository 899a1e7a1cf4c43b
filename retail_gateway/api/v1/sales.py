"""POST /api/sales/cart - point-of-sale checkout endpoint"""

import time
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session
from typing import List

from retail_gateway.api.v1.schemas import CartSubmissionRequest, InstallmentSchema, SaleItemSchema, SaleResponse
from retail_gateway.api.dependencies import get_auth_context, get_request_id
from retail_gateway.domain.exceptions import NotFoundError
from retail_gateway.domain.models import AuthContext
from retail_gateway.infrastructure.database.session import get_db
from retail_gateway.infrastructure.database.repositories import InstallmentRepository, SaleRepository
from retail_gateway.infrastructure.observability.logging import log_sale_committed
from retail_gateway.infrastructure.observability.metrics import record_sale
from retail_gateway.services.sale_commit import commit_sale

router = APIRouter()


@router.post("/sales/cart", response_model=SaleResponse, status_code=status.HTTP_201_CREATED)
def submit_cart(
    request_body: CartSubmissionRequest,
    request: Request,
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
):
    """
    Commit a cart as a sale.

    Flow:
    1. Validate the cart and the caller's tenant
    2. Decrement stock, persist sale, items and installments atomically
    3. Post the income ledger entry (failure returned as a warning)
    4. Return the sale with its installment schedule
    """
    start_time = time.time()
    request_id = get_request_id(request)

    result = commit_sale(db, request_body.to_domain(), auth)
    sale = result.sale

    duration_ms = (time.time() - start_time) * 1000
    record_sale(sale.payment_method, sale.total_price_cents)
    log_sale_committed(
        request_id=request_id,
        company_id=sale.company_id,
        sale_id=sale.id,
        total_cents=sale.total_price_cents,
        installments=len(result.installments),
        ledger_posted=result.financial_entry_id is not None,
        duration_ms=duration_ms,
    )

    return SaleResponse(
        id=sale.id,
        client_id=sale.client_id,
        subtotal_cents=sale.subtotal_cents,
        discount_cents=sale.discount_cents,
        total_price_cents=sale.total_price_cents,
        payment_method=sale.payment_method,
        installments=sale.installments,
        sale_date=sale.sale_date,
        company_id=sale.company_id,
        branch_id=sale.branch_id,
        created_by=sale.created_by,
        created_at=sale.created_at,
        items=[SaleItemSchema.model_validate(item) for item in sale.items],
        installment_schedule=[InstallmentSchema.model_validate(inst) for inst in result.installments],
        financial_entry_id=result.financial_entry_id,
        warnings=result.warnings,
    )


@router.get("/sales/{sale_id}/installments", response_model=List[InstallmentSchema])
def list_sale_installments(
    sale_id: str,
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
):
    """Installments of a sale ordered by installment number"""
    if SaleRepository(db).get(auth.company_id, sale_id) is None:
        raise NotFoundError("Sale", sale_id)

    return InstallmentRepository(db).get_by_sale(auth.company_id, sale_id)
