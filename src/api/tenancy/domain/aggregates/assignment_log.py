"""Audit entry for room assignment changes."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime

from tenancy.domain.value_objects import (
    AssignmentAction,
    AssignmentLogId,
    RoomId,
    TenantId,
    UserId,
)


@dataclass(frozen=True)
class RoomAssignmentLog:
    """Records who linked or unlinked a tenant and a room, and when."""

    id: AssignmentLogId
    tenant_id: TenantId
    room_id: RoomId
    action: AssignmentAction
    occurred_at: datetime
    actor_id: UserId | None = None
    notes: str | None = None

    @classmethod
    def record(
        cls,
        tenant_id: TenantId,
        room_id: RoomId,
        action: AssignmentAction,
        actor_id: UserId | None = None,
        notes: str | None = None,
    ) -> RoomAssignmentLog:
        return cls(
            id=AssignmentLogId.generate(),
            tenant_id=tenant_id,
            room_id=room_id,
            action=action,
            occurred_at=datetime.now(UTC),
            actor_id=actor_id,
            notes=notes,
        )
