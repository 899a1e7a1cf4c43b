"""Inter-branch money transfer endpoints"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from retail_gateway.api.v1.schemas import MoneyTransferCreate, MoneyTransferSchema, MoneyTransferUpdate
from retail_gateway.api.dependencies import get_auth_context
from retail_gateway.domain.models import AuthContext
from retail_gateway.infrastructure.database.session import get_db
from retail_gateway.infrastructure.database.repositories import MoneyTransferRepository
from retail_gateway.services.money_transfers import create_transfer, update_transfer_status

router = APIRouter()


@router.post("/money-transfers", response_model=MoneyTransferSchema, status_code=status.HTTP_201_CREATED)
def post_money_transfer(
    request_body: MoneyTransferCreate,
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
):
    """Request a transfer between two branches; it starts as pending"""
    return create_transfer(
        db,
        company_id=auth.company_id,
        created_by=auth.user_id,
        from_branch_id=request_body.from_branch_id,
        to_branch_id=request_body.to_branch_id,
        amount_cents=request_body.amount_cents,
        description=request_body.description,
        transfer_type=request_body.transfer_type,
        transfer_date=request_body.transfer_date,
        notes=request_body.notes,
    )


@router.get("/money-transfers", response_model=List[MoneyTransferSchema])
def list_money_transfers(
    status_filter: Optional[List[str]] = Query(default=None, alias="status"),
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
):
    """Transfers of the caller's company, newest first, optionally filtered by status"""
    return MoneyTransferRepository(db).list_transfers(auth.company_id, status_filter)


@router.patch("/money-transfers/{transfer_id}", response_model=MoneyTransferSchema)
def patch_money_transfer(
    transfer_id: str,
    request_body: MoneyTransferUpdate,
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
):
    """
    Approve, reject or complete a transfer.

    Completing posts an expense at the origin branch and an income at the
    destination. Repeating the current status changes nothing.
    """
    return update_transfer_status(
        db,
        company_id=auth.company_id,
        transfer_id=transfer_id,
        status=request_body.status,
        approved_by=request_body.approved_by or auth.user_id,
        notes=request_body.notes,
    )
