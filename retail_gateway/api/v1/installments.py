"""PATCH /api/installments/{id}/status - record installment payments"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from retail_gateway.api.v1.schemas import InstallmentSchema, InstallmentStatusUpdate
from retail_gateway.api.dependencies import get_auth_context
from retail_gateway.domain.models import AuthContext
from retail_gateway.infrastructure.database.session import get_db
from retail_gateway.services.installments import update_installment_status

router = APIRouter()


@router.patch("/installments/{installment_id}/status", response_model=InstallmentSchema)
def patch_installment_status(
    installment_id: str,
    request_body: InstallmentStatusUpdate,
    auth: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db),
):
    """
    Mark an installment as paid.

    The owning client's debt summary is recomputed before responding.
    """
    return update_installment_status(db, auth.company_id, installment_id, request_body.status)
