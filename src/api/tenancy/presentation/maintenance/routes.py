"""HTTP routes for the maintenance desk."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status

from tenancy.application.services import MaintenanceService
from tenancy.application.value_objects import CurrentUser, MaintenanceFilter
from tenancy.dependencies.authentication import get_current_user
from tenancy.dependencies.services import get_maintenance_service
from tenancy.domain.exceptions import TenancyError
from tenancy.domain.value_objects import (
    MaintenanceRequestId,
    MaintenanceStatus,
    RoomId,
    TenantId,
)
from tenancy.presentation.errors import invalid_id, to_http_exception
from tenancy.presentation.maintenance.models import (
    MaintenanceRequestResponse,
    SubmitMaintenanceRequest,
    UpdateMaintenanceStatusRequest,
)

router = APIRouter(
    prefix="/maintenance",
    tags=["maintenance"],
)


@router.post("", status_code=status.HTTP_201_CREATED)
async def submit_request(
    request: SubmitMaintenanceRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[MaintenanceService, Depends(get_maintenance_service)],
) -> MaintenanceRequestResponse:
    """File a maintenance request against the tenant's room.

    Raises:
        HTTPException: 400 if the tenant ID is invalid
        HTTPException: 403 if the caller may not file for this tenant
        HTTPException: 409 if the tenant has no room
    """
    try:
        tenant_id = TenantId.from_string(request.tenant_id)
    except ValueError:
        raise invalid_id("tenant")

    try:
        filed = await service.submit_request(
            current_user,
            tenant_id,
            title=request.title,
            description=request.description,
            priority=request.priority,
        )
        return MaintenanceRequestResponse.from_domain(filed)

    except TenancyError as e:
        raise to_http_exception(e)
    except Exception:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to submit maintenance request",
        )


@router.get("", response_model=list[MaintenanceRequestResponse])
async def list_requests(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[MaintenanceService, Depends(get_maintenance_service)],
    request_status: Annotated[MaintenanceStatus | None, Query(alias="status")] = None,
    room_id: str | None = None,
    tenant_id: str | None = None,
) -> list[MaintenanceRequestResponse]:
    """List maintenance requests, newest first."""
    try:
        filters = MaintenanceFilter(
            status=request_status,
            room_id=RoomId.from_string(room_id) if room_id else None,
            tenant_id=TenantId.from_string(tenant_id) if tenant_id else None,
        )
    except ValueError:
        raise invalid_id("room or tenant")

    try:
        requests = await service.list_requests(current_user, filters)
        return [MaintenanceRequestResponse.from_domain(r) for r in requests]

    except TenancyError as e:
        raise to_http_exception(e)
    except Exception:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to list maintenance requests",
        )


@router.post("/{request_id}/status")
async def update_request_status(
    request_id: str,
    request: UpdateMaintenanceStatusRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[MaintenanceService, Depends(get_maintenance_service)],
) -> MaintenanceRequestResponse:
    """Move a request to a new status.

    Raises:
        HTTPException: 404 if the request does not exist
        HTTPException: 409 if the transition is not allowed
    """
    try:
        request_id_obj = MaintenanceRequestId.from_string(request_id)
    except ValueError:
        raise invalid_id("maintenance request")

    try:
        updated = await service.update_request_status(
            current_user, request_id_obj, request.status
        )
        return MaintenanceRequestResponse.from_domain(updated)

    except TenancyError as e:
        raise to_http_exception(e)
    except Exception:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update maintenance request",
        )
