"""HTTP routes for the tenant directory and room assignment."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from tenancy.application.services import AssignmentService, TenantService
from tenancy.application.value_objects import CurrentUser, TenantFilter
from tenancy.dependencies.authentication import get_current_user
from tenancy.dependencies.services import (
    get_assignment_service,
    get_tenant_service,
)
from tenancy.domain.exceptions import TenancyError
from tenancy.domain.value_objects import PaymentStatus, RoomId, TenantId, UserId
from tenancy.presentation.errors import invalid_id, to_http_exception
from tenancy.presentation.tenants.models import (
    AssignmentResponse,
    AssignRoomRequest,
    CreateTenantRequest,
    TenantResponse,
    UnassignRoomRequest,
    UpdateTenantRequest,
)

router = APIRouter(
    prefix="/tenants",
    tags=["tenants"],
)


def parse_tenant_id(tenant_id: str) -> TenantId:
    try:
        return TenantId.from_string(tenant_id)
    except ValueError:
        raise invalid_id("tenant")


def _parse_room_id(room_id: str) -> RoomId:
    try:
        return RoomId.from_string(room_id)
    except ValueError:
        raise invalid_id("room")


def _parse_user_id(user_id: str) -> UserId:
    try:
        return UserId.from_string(user_id)
    except ValueError:
        raise invalid_id("user")


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    summary="Register tenant",
    responses={
        201: {"description": "Tenant registered"},
        403: {"description": "Caller may not register this tenant"},
        404: {"description": "Room not found"},
        409: {"description": "Room full or user already registered"},
        422: {"description": "Invalid tenant data"},
    },
)
async def create_tenant(
    request: CreateTenantRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[TenantService, Depends(get_tenant_service)],
) -> TenantResponse:
    """Register a tenant, optionally assigning a room in the same request.

    A tenant registering themselves only applies for the room; it is
    assigned when an administrator approves the application.

    Args:
        request: Tenant details
        current_user: Current authenticated user
        service: Tenant service

    Returns:
        TenantResponse for the new tenant

    Raises:
        HTTPException: 400 if a room or user ID is malformed
        HTTPException: 409 if the room is full
        HTTPException: 422 if the email or lease dates are invalid
        HTTPException: 500 for unexpected errors
    """
    room_id = _parse_room_id(request.room_id) if request.room_id else None
    user_id = _parse_user_id(request.user_id) if request.user_id else None

    try:
        tenant = await service.create_tenant(
            current_user,
            name=request.name,
            email=request.email,
            lease_start=request.lease_start,
            lease_end=request.lease_end,
            phone=request.phone,
            emergency_contact=request.emergency_contact,
            address=request.address,
            user_id=user_id,
            room_id=room_id,
            opening_charge=request.opening_charge,
        )
        return TenantResponse.from_domain(tenant)

    except TenancyError as e:
        raise to_http_exception(e)
    except Exception:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create tenant",
        )


@router.get(
    "",
    response_model=list[TenantResponse],
    summary="List tenants",
    description="List tenants; tenant-role callers see only their own record",
)
async def list_tenants(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[TenantService, Depends(get_tenant_service)],
    payment_status: PaymentStatus | None = None,
    room_id: str | None = None,
    unassigned: bool = False,
    include_archived: bool = False,
) -> list[TenantResponse]:
    """List tenants with balances checked against the ledgers."""
    filters = TenantFilter(
        payment_status=payment_status,
        room_id=_parse_room_id(room_id) if room_id else None,
        unassigned_only=unassigned,
        include_archived=include_archived,
    )
    try:
        tenants = await service.list_tenants(current_user, filters)
        return [TenantResponse.from_domain(tenant) for tenant in tenants]

    except TenancyError as e:
        raise to_http_exception(e)
    except Exception:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to list tenants",
        )


@router.get("/{tenant_id}")
async def get_tenant(
    tenant_id: str,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[TenantService, Depends(get_tenant_service)],
) -> TenantResponse:
    """Get a tenant by ID.

    Raises:
        HTTPException: 400 if the tenant ID is invalid
        HTTPException: 403 if the caller may not read this tenant
        HTTPException: 404 if the tenant does not exist
    """
    tenant_id_obj = parse_tenant_id(tenant_id)

    try:
        tenant = await service.get_tenant(current_user, tenant_id_obj)
        return TenantResponse.from_domain(tenant)

    except TenancyError as e:
        raise to_http_exception(e)
    except Exception:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to get tenant",
        )


@router.patch("/{tenant_id}")
async def update_tenant(
    tenant_id: str,
    request: UpdateTenantRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[TenantService, Depends(get_tenant_service)],
) -> TenantResponse:
    """Partially update a tenant profile.

    Raises:
        HTTPException: 400 if the body sets room_id, balance or
            payment_status
        HTTPException: 404 if the tenant does not exist
        HTTPException: 422 if a field is invalid
    """
    tenant_id_obj = parse_tenant_id(tenant_id)
    patch = request.to_patch()
    if patch.get("user_id"):
        patch["user_id"] = _parse_user_id(patch["user_id"])

    try:
        tenant = await service.update_tenant(current_user, tenant_id_obj, patch)
        return TenantResponse.from_domain(tenant)

    except TenancyError as e:
        raise to_http_exception(e)
    except Exception:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update tenant",
        )


@router.post("/{tenant_id}/archive")
async def archive_tenant(
    tenant_id: str,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[TenantService, Depends(get_tenant_service)],
) -> TenantResponse:
    """Archive a tenant whose lease has ended.

    Raises:
        HTTPException: 409 if the tenant is still assigned to a room
    """
    tenant_id_obj = parse_tenant_id(tenant_id)

    try:
        tenant = await service.archive_tenant(current_user, tenant_id_obj)
        return TenantResponse.from_domain(tenant)

    except TenancyError as e:
        raise to_http_exception(e)
    except Exception:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to archive tenant",
        )


@router.post("/{tenant_id}/assign-room")
async def assign_room(
    tenant_id: str,
    request: AssignRoomRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[AssignmentService, Depends(get_assignment_service)],
) -> AssignmentResponse:
    """Assign a tenant to a room.

    Raises:
        HTTPException: 404 if the tenant or room does not exist
        HTTPException: 409 if the room is full, under maintenance, or the
            tenant is already in another room
    """
    tenant_id_obj = parse_tenant_id(tenant_id)
    room_id_obj = _parse_room_id(request.room_id)

    try:
        result = await service.assign_tenant_to_room(
            current_user, tenant_id_obj, room_id_obj, notes=request.notes
        )
        return AssignmentResponse.from_result(result)

    except TenancyError as e:
        raise to_http_exception(e)
    except Exception:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to assign room",
        )


@router.post("/{tenant_id}/unassign-room")
async def unassign_room(
    tenant_id: str,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[AssignmentService, Depends(get_assignment_service)],
    request: UnassignRoomRequest | None = None,
) -> AssignmentResponse:
    """Release a tenant's room. A tenant without a room is left as is."""
    tenant_id_obj = parse_tenant_id(tenant_id)

    try:
        result = await service.unassign_tenant(
            current_user,
            tenant_id_obj,
            notes=request.notes if request else None,
        )
        return AssignmentResponse.from_result(result)

    except TenancyError as e:
        raise to_http_exception(e)
    except Exception:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to unassign room",
        )


@router.post("/{tenant_id}/approve-application")
async def approve_application(
    tenant_id: str,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[AssignmentService, Depends(get_assignment_service)],
    request: UnassignRoomRequest | None = None,
) -> AssignmentResponse:
    """Move a self-registered tenant into the room they applied for.

    Raises:
        HTTPException: 403 if the caller may not manage assignments
        HTTPException: 404 if the tenant or requested room does not exist
        HTTPException: 409 if there is no pending application or the room is
            full or under maintenance
    """
    tenant_id_obj = parse_tenant_id(tenant_id)

    try:
        result = await service.approve_room_application(
            current_user,
            tenant_id_obj,
            notes=request.notes if request else None,
        )
        return AssignmentResponse.from_result(result)

    except TenancyError as e:
        raise to_http_exception(e)
    except Exception:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to approve room application",
        )
