"""PostgreSQL implementation of IAssignmentLogRepository."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tenancy.domain.aggregates import RoomAssignmentLog
from tenancy.domain.value_objects import (
    AssignmentAction,
    AssignmentLogId,
    RoomId,
    TenantId,
    UserId,
)
from tenancy.infrastructure.models import RoomAssignmentLogModel
from tenancy.ports.repositories import IAssignmentLogRepository


class AssignmentLogRepository(IAssignmentLogRepository):
    """Append-only audit log of room assignments in PostgreSQL."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, entry: RoomAssignmentLog) -> None:
        self._session.add(
            RoomAssignmentLogModel(
                id=entry.id.value,
                tenant_id=entry.tenant_id.value,
                room_id=entry.room_id.value,
                action=entry.action.value,
                actor_id=entry.actor_id.value if entry.actor_id else None,
                notes=entry.notes,
                occurred_at=entry.occurred_at,
            )
        )
        await self._session.flush()

    async def list_by_tenant(self, tenant_id: TenantId) -> list[RoomAssignmentLog]:
        stmt = (
            select(RoomAssignmentLogModel)
            .where(RoomAssignmentLogModel.tenant_id == tenant_id.value)
            .order_by(RoomAssignmentLogModel.occurred_at, RoomAssignmentLogModel.id)
        )
        result = await self._session.execute(stmt)
        return [
            RoomAssignmentLog(
                id=AssignmentLogId(value=model.id),
                tenant_id=TenantId(value=model.tenant_id),
                room_id=RoomId(value=model.room_id),
                action=AssignmentAction(model.action),
                occurred_at=model.occurred_at,
                actor_id=UserId(value=model.actor_id) if model.actor_id else None,
                notes=model.notes,
            )
            for model in result.scalars().all()
        ]
