"""GET /api/financial - ledger entries of a company"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from retail_gateway.api.v1.schemas import FinancialEntrySchema
from retail_gateway.api.dependencies import get_auth_context
from retail_gateway.domain.models import AuthContext
from retail_gateway.infrastructure.database.session import get_db
from retail_gateway.infrastructure.database.repositories import FinancialEntryRepository

router = APIRouter()


@router.get("/financial", response_model=List[FinancialEntrySchema])
def list_financial_entries(
    branch_id: Optional[str] = None,
    reference_id: Optional[str] = None,
    limit: int = Query(default=100, ge=1, le=500),
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
):
    """Most recent ledger entries, optionally narrowed to a branch or a source record"""
    return FinancialEntryRepository(db).list_entries(
        auth.company_id,
        branch_id=branch_id,
        reference_id=reference_id,
        limit=limit,
    )
