"""HTTP routes for reconciliation."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from tenancy.application.services import AssignmentService
from tenancy.application.value_objects import CurrentUser
from tenancy.dependencies.authentication import get_current_user
from tenancy.dependencies.services import get_assignment_service
from tenancy.domain.exceptions import TenancyError
from tenancy.presentation.errors import to_http_exception
from tenancy.presentation.reconciliation.models import ReconciliationReportResponse

router = APIRouter(
    prefix="/reconciliation",
    tags=["reconciliation"],
)


@router.post(
    "/sweep",
    summary="Reconcile everything",
    description=(
        "Recompute every room's occupant count and every active tenant's "
        "balance and payment status, repairing any drift"
    ),
    responses={
        200: {"description": "Sweep completed"},
        403: {"description": "Administrators only"},
    },
)
async def sweep(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[AssignmentService, Depends(get_assignment_service)],
) -> ReconciliationReportResponse:
    """Run a full reconciliation sweep. Safe to repeat."""
    try:
        report = await service.sweep(current_user)
        return ReconciliationReportResponse.from_report(report)

    except TenancyError as e:
        raise to_http_exception(e)
    except Exception:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to run reconciliation sweep",
        )
