"""Client debt status endpoints"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from retail_gateway.api.v1.schemas import (
    BatchDebtResponse,
    ClientDebtInfoResponse,
    ClientDebtResponse,
    OverdueClientSchema,
    OverdueInstallmentSchema,
)
from retail_gateway.api.dependencies import get_auth_context
from retail_gateway.domain.models import AuthContext
from retail_gateway.infrastructure.database.session import get_db
from retail_gateway.infrastructure.database.repositories import ClientRepository
from retail_gateway.services.debt_classifier import client_debt_info, recompute_all_clients, recompute_client_debt

router = APIRouter()


# Fixed paths are declared before /clients/{client_id}/... so they are matched first


@router.post("/clients/update-all-debt-status", response_model=BatchDebtResponse)
def update_all_debt_status(
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
):
    """Reconcile the debt status of every client of the caller's company"""
    result = recompute_all_clients(db, auth.company_id)
    return BatchDebtResponse(
        updated_count=result.updated,
        total_clients=result.total_clients,
        failed=result.failed,
        regular=result.regular,
        debtor=result.debtor,
        defaulter=result.defaulter,
    )


@router.get("/clients/overdue", response_model=List[OverdueClientSchema])
def list_overdue_clients(
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
):
    """Clients flagged as debtor or defaulter by the last recompute"""
    return ClientRepository(db).get_overdue(auth.company_id)


@router.post("/clients/{client_id}/update-debt-status", response_model=ClientDebtResponse)
def update_client_debt_status(
    client_id: str,
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
):
    """Recompute and persist one client's debt summary"""
    summary = recompute_client_debt(db, auth.company_id, client_id)
    return ClientDebtResponse(
        client_id=client_id,
        debt_status=summary.debt_status,
        overdue_amount_cents=summary.overdue_amount_cents,
        overdue_installments_count=summary.overdue_installments_count,
        first_overdue_date=summary.first_overdue_date,
        days_since_first_overdue=summary.days_since_first_overdue,
        debt_status_updated_at=summary.updated_at,
    )


@router.get("/clients/{client_id}/debt-info", response_model=ClientDebtInfoResponse)
def get_client_debt_info(
    client_id: str,
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
):
    """Live debt view computed from installments, without updating the client"""
    info = client_debt_info(db, auth.company_id, client_id)
    return ClientDebtInfoResponse(
        client_id=info.client_id,
        client_name=info.client_name,
        debt_status=info.summary.debt_status,
        overdue_amount_cents=info.summary.overdue_amount_cents,
        overdue_installments_count=info.summary.overdue_installments_count,
        first_overdue_date=info.summary.first_overdue_date,
        days_since_first_overdue=info.summary.days_since_first_overdue,
        overdue_installments=[OverdueInstallmentSchema.model_validate(inst) for inst in info.overdue_installments],
    )
