"""Maintenance request aggregate."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime

from tenancy.domain.exceptions import ConflictError, ValidationError
from tenancy.domain.value_objects import (
    MaintenancePriority,
    MaintenanceRequestId,
    MaintenanceStatus,
    RoomId,
    TenantId,
)

ALLOWED_TRANSITIONS: dict[MaintenanceStatus, frozenset[MaintenanceStatus]] = {
    MaintenanceStatus.OPEN: frozenset(
        {MaintenanceStatus.IN_PROGRESS, MaintenanceStatus.CANCELLED}
    ),
    MaintenanceStatus.IN_PROGRESS: frozenset(
        {MaintenanceStatus.COMPLETED, MaintenanceStatus.CANCELLED}
    ),
    MaintenanceStatus.COMPLETED: frozenset(),
    MaintenanceStatus.CANCELLED: frozenset(),
}


@dataclass
class MaintenanceRequest:
    """A repair request filed by a tenant against their room."""

    id: MaintenanceRequestId
    tenant_id: TenantId
    room_id: RoomId
    title: str
    description: str
    priority: MaintenancePriority
    submitted_at: datetime
    status: MaintenanceStatus = MaintenanceStatus.OPEN
    resolved_at: datetime | None = None

    @classmethod
    def submit(
        cls,
        tenant_id: TenantId,
        room_id: RoomId,
        title: str,
        description: str,
        priority: MaintenancePriority = MaintenancePriority.MEDIUM,
    ) -> MaintenanceRequest:
        title = (title or "").strip()
        if not title:
            raise ValidationError("Request title is required", {"field": "title"})
        return cls(
            id=MaintenanceRequestId.generate(),
            tenant_id=tenant_id,
            room_id=room_id,
            title=title,
            description=(description or "").strip(),
            priority=priority,
            submitted_at=datetime.now(UTC),
        )

    def transition_to(self, new_status: MaintenanceStatus) -> None:
        """Move the request to a new status.

        Completing or cancelling a request stamps ``resolved_at``.

        Raises:
            ConflictError: If the transition is not permitted
        """
        if new_status not in ALLOWED_TRANSITIONS[self.status]:
            raise ConflictError(
                f"Cannot move maintenance request from {self.status} to "
                f"{new_status}",
                {
                    "request_id": self.id.value,
                    "from": self.status.value,
                    "to": new_status.value,
                },
            )
        self.status = new_status
        if new_status.is_terminal:
            self.resolved_at = datetime.now(UTC)
