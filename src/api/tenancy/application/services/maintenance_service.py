"""Maintenance desk application service.

Tenants file repair requests against the room they occupy; staff and
administrators move them through their lifecycle. Filing an emergency
request does not take the room out of service; an administrator sets the
room's maintenance flag explicitly.
"""

from __future__ import annotations

from tenancy.application.access_policy import (
    AccessScope,
    Action,
    owns,
    require,
    require_tenant_access,
)
from tenancy.application.observability import (
    DefaultMaintenanceServiceProbe,
    MaintenanceServiceProbe,
)
from tenancy.application.value_objects import CurrentUser, MaintenanceFilter
from tenancy.domain.aggregates import MaintenanceRequest
from tenancy.domain.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
)
from tenancy.domain.value_objects import (
    MaintenancePriority,
    MaintenanceRequestId,
    MaintenanceStatus,
    TenantId,
)
from tenancy.ports.repositories import (
    IMaintenanceRequestRepository,
    ITenantRepository,
    ITransactionScope,
)


class MaintenanceService:
    """Application service for maintenance requests."""

    def __init__(
        self,
        maintenance_repository: IMaintenanceRequestRepository,
        tenant_repository: ITenantRepository,
        session: ITransactionScope,
        probe: MaintenanceServiceProbe | None = None,
    ):
        self._requests = maintenance_repository
        self._tenants = tenant_repository
        self._session = session
        self._probe = probe or DefaultMaintenanceServiceProbe()

    async def submit_request(
        self,
        actor: CurrentUser,
        tenant_id: TenantId,
        title: str,
        description: str,
        priority: MaintenancePriority = MaintenancePriority.MEDIUM,
    ) -> MaintenanceRequest:
        """File a request against the tenant's current room.

        Raises:
            AuthorizationError: If the caller may not file for this tenant
            NotFoundError: If the tenant does not exist
            ConflictError: If the tenant has no room
            ValidationError: If the title is blank
        """
        require(actor, Action.SUBMIT_MAINTENANCE)

        async with self._session.begin():
            tenant = await self._tenants.get_by_id(tenant_id)
            if tenant is None:
                raise NotFoundError(
                    f"Tenant {tenant_id} not found", {"tenant_id": tenant_id.value}
                )
            require_tenant_access(actor, Action.SUBMIT_MAINTENANCE, tenant)
            if tenant.room_id is None:
                raise ConflictError(
                    f"Tenant {tenant_id} has no room to file a request against",
                    {"tenant_id": tenant_id.value},
                )
            request = MaintenanceRequest.submit(
                tenant_id=tenant.id,
                room_id=tenant.room_id,
                title=title,
                description=description,
                priority=priority,
            )
            await self._requests.add(request)

        self._probe.request_submitted(
            request_id=request.id.value,
            tenant_id=tenant_id.value,
            room_id=request.room_id.value,
            priority=request.priority.value,
        )
        return request

    async def update_request_status(
        self,
        actor: CurrentUser,
        request_id: MaintenanceRequestId,
        new_status: MaintenanceStatus,
    ) -> MaintenanceRequest:
        """Move a request through its lifecycle.

        Tenant-role callers may only cancel their own open requests.

        Raises:
            AuthorizationError: If the caller may not make this change
            NotFoundError: If the request does not exist
            ConflictError: If the transition is not permitted
        """
        scope = require(actor, Action.UPDATE_MAINTENANCE)

        async with self._session.begin():
            request = await self._requests.get_by_id(request_id)
            if request is None:
                self._probe.request_not_found(request_id=request_id.value)
                raise NotFoundError(
                    f"Maintenance request {request_id} not found",
                    {"request_id": request_id.value},
                )
            if scope == AccessScope.OWN:
                await self._check_tenant_cancellation(actor, request, new_status)

            old_status = request.status
            request.transition_to(new_status)
            await self._requests.save(request)

        self._probe.request_status_changed(
            request_id=request_id.value,
            old_status=old_status.value,
            new_status=new_status.value,
        )
        return request

    async def list_requests(
        self, actor: CurrentUser, filters: MaintenanceFilter | None = None
    ) -> list[MaintenanceRequest]:
        """List requests, newest first. Tenants see only their own."""
        scope = require(actor, Action.READ_MAINTENANCE)
        filters = filters or MaintenanceFilter()

        async with self._session.begin():
            tenant_id = filters.tenant_id
            if scope == AccessScope.OWN:
                own = await self._tenants.get_by_user_id(actor.user_id)
                if own is None or (tenant_id is not None and tenant_id != own.id):
                    requests: list[MaintenanceRequest] = []
                    self._probe.requests_listed(count=0)
                    return requests
                tenant_id = own.id
            requests = await self._requests.list_matching(
                status=filters.status,
                room_id=filters.room_id,
                tenant_id=tenant_id,
            )

        self._probe.requests_listed(count=len(requests))
        return requests

    async def _check_tenant_cancellation(
        self,
        actor: CurrentUser,
        request: MaintenanceRequest,
        new_status: MaintenanceStatus,
    ) -> None:
        tenant = await self._tenants.get_by_id(request.tenant_id)
        if tenant is None or not owns(actor, tenant):
            raise AuthorizationError(
                "You may only change your own maintenance requests",
                {"role": actor.role.value},
            )
        if (
            new_status != MaintenanceStatus.CANCELLED
            or request.status != MaintenanceStatus.OPEN
        ):
            raise AuthorizationError(
                "Tenants may only cancel their own open requests",
                {"role": actor.role.value, "status": request.status.value},
            )
