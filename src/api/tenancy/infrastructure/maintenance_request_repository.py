"""PostgreSQL implementation of IMaintenanceRequestRepository."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tenancy.domain.aggregates import MaintenanceRequest
from tenancy.domain.value_objects import (
    MaintenancePriority,
    MaintenanceRequestId,
    MaintenanceStatus,
    RoomId,
    TenantId,
)
from tenancy.infrastructure.models import MaintenanceRequestModel
from tenancy.ports.repositories import IMaintenanceRequestRepository


class MaintenanceRequestRepository(IMaintenanceRequestRepository):
    """Repository for maintenance requests in PostgreSQL.

    Requests are edited by one person at a time (the desk moves them along
    a linear lifecycle), so saves are plain upserts without a version check.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, request: MaintenanceRequest) -> None:
        self._session.add(
            MaintenanceRequestModel(
                id=request.id.value,
                tenant_id=request.tenant_id.value,
                room_id=request.room_id.value,
                title=request.title,
                description=request.description,
                priority=request.priority.value,
                status=request.status.value,
                submitted_at=request.submitted_at,
                resolved_at=request.resolved_at,
            )
        )
        await self._session.flush()

    async def save(self, request: MaintenanceRequest) -> None:
        stmt = select(MaintenanceRequestModel).where(
            MaintenanceRequestModel.id == request.id.value
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        if model is None:
            await self.add(request)
            return
        model.title = request.title
        model.description = request.description
        model.priority = request.priority.value
        model.status = request.status.value
        model.resolved_at = request.resolved_at
        await self._session.flush()

    async def get_by_id(
        self, request_id: MaintenanceRequestId
    ) -> MaintenanceRequest | None:
        stmt = (
            select(MaintenanceRequestModel)
            .where(MaintenanceRequestModel.id == request_id.value)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_domain(model) if model is not None else None

    async def list_matching(
        self,
        status: MaintenanceStatus | None = None,
        room_id: RoomId | None = None,
        tenant_id: TenantId | None = None,
    ) -> list[MaintenanceRequest]:
        stmt = select(MaintenanceRequestModel)
        if status is not None:
            stmt = stmt.where(MaintenanceRequestModel.status == status.value)
        if room_id is not None:
            stmt = stmt.where(MaintenanceRequestModel.room_id == room_id.value)
        if tenant_id is not None:
            stmt = stmt.where(MaintenanceRequestModel.tenant_id == tenant_id.value)
        stmt = stmt.order_by(
            MaintenanceRequestModel.submitted_at.desc(),
            MaintenanceRequestModel.id.desc(),
        ).execution_options(populate_existing=True)
        result = await self._session.execute(stmt)
        return [self._to_domain(model) for model in result.scalars().all()]

    @staticmethod
    def _to_domain(model: MaintenanceRequestModel) -> MaintenanceRequest:
        return MaintenanceRequest(
            id=MaintenanceRequestId(value=model.id),
            tenant_id=TenantId(value=model.tenant_id),
            room_id=RoomId(value=model.room_id),
            title=model.title,
            description=model.description,
            priority=MaintenancePriority(model.priority),
            submitted_at=model.submitted_at,
            status=MaintenanceStatus(model.status),
            resolved_at=model.resolved_at,
        )
