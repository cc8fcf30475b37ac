"""Protocol for assignment service observability.

The assignment service performs every operation that touches more than one
entity, so its probe carries the events operators care most about: capacity
rejections and deferred balance updates.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class AssignmentServiceProbe(Protocol):
    """Domain probe for cross-entity operations."""

    def tenant_assigned(self, tenant_id: str, room_id: str, occupant_count: int) -> None:
        """Record that a tenant was linked to a room."""
        ...

    def tenant_unassigned(
        self, tenant_id: str, room_id: str, occupant_count: int
    ) -> None:
        """Record that a tenant was unlinked from a room."""
        ...

    def assignment_rejected(self, tenant_id: str, room_id: str, reason: str) -> None:
        """Record that an assignment was refused."""
        ...

    def room_application_approved(
        self, tenant_id: str, room_id: str, occupant_count: int
    ) -> None:
        """Record that a tenant moved into the room they applied for."""
        ...

    def room_application_rejected(self, tenant_id: str, reason: str) -> None:
        """Record that approving a room application was refused."""
        ...

    def payment_applied(
        self, tenant_id: str, payment_id: str, balance: str, payment_status: str
    ) -> None:
        """Record that a payment was applied to a tenant's balance."""
        ...

    def balance_update_deferred(
        self, tenant_id: str, payment_id: str, error: str
    ) -> None:
        """Record that a payment was stored but the balance update failed."""
        ...

    def room_type_changed(
        self, room_id: str, room_type: str, max_occupants: int
    ) -> None:
        """Record that a room changed type."""
        ...

    def rent_accrued(self, tenant_id: str, period: str, amount: str) -> None:
        """Record that a month of rent was charged."""
        ...

    def with_context(self, context: ObservationContext) -> AssignmentServiceProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultAssignmentServiceProbe:
    """Default implementation of AssignmentServiceProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging."""
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(
        self, context: ObservationContext
    ) -> DefaultAssignmentServiceProbe:
        """Create a new probe with observation context bound."""
        return DefaultAssignmentServiceProbe(logger=self._logger, context=context)

    def tenant_assigned(self, tenant_id: str, room_id: str, occupant_count: int) -> None:
        """Record that a tenant was linked to a room."""
        self._logger.info(
            "tenant_assigned",
            tenant_id=tenant_id,
            room_id=room_id,
            occupant_count=occupant_count,
            **self._get_context_kwargs(),
        )

    def tenant_unassigned(
        self, tenant_id: str, room_id: str, occupant_count: int
    ) -> None:
        """Record that a tenant was unlinked from a room."""
        self._logger.info(
            "tenant_unassigned",
            tenant_id=tenant_id,
            room_id=room_id,
            occupant_count=occupant_count,
            **self._get_context_kwargs(),
        )

    def assignment_rejected(self, tenant_id: str, room_id: str, reason: str) -> None:
        """Record that an assignment was refused."""
        self._logger.warning(
            "assignment_rejected",
            tenant_id=tenant_id,
            room_id=room_id,
            reason=reason,
            **self._get_context_kwargs(),
        )

    def room_application_approved(
        self, tenant_id: str, room_id: str, occupant_count: int
    ) -> None:
        """Record that a tenant moved into the room they applied for."""
        self._logger.info(
            "room_application_approved",
            tenant_id=tenant_id,
            room_id=room_id,
            occupant_count=occupant_count,
            **self._get_context_kwargs(),
        )

    def room_application_rejected(self, tenant_id: str, reason: str) -> None:
        """Record that approving a room application was refused."""
        self._logger.warning(
            "room_application_rejected",
            tenant_id=tenant_id,
            reason=reason,
            **self._get_context_kwargs(),
        )

    def payment_applied(
        self, tenant_id: str, payment_id: str, balance: str, payment_status: str
    ) -> None:
        """Record that a payment was applied to a tenant's balance."""
        self._logger.info(
            "payment_applied",
            tenant_id=tenant_id,
            payment_id=payment_id,
            balance=balance,
            payment_status=payment_status,
            **self._get_context_kwargs(),
        )

    def balance_update_deferred(
        self, tenant_id: str, payment_id: str, error: str
    ) -> None:
        """Record that a payment was stored but the balance update failed."""
        self._logger.error(
            "balance_update_deferred",
            tenant_id=tenant_id,
            payment_id=payment_id,
            error=error,
            **self._get_context_kwargs(),
        )

    def room_type_changed(
        self, room_id: str, room_type: str, max_occupants: int
    ) -> None:
        """Record that a room changed type."""
        self._logger.info(
            "room_type_changed",
            room_id=room_id,
            room_type=room_type,
            max_occupants=max_occupants,
            **self._get_context_kwargs(),
        )

    def rent_accrued(self, tenant_id: str, period: str, amount: str) -> None:
        """Record that a month of rent was charged."""
        self._logger.info(
            "rent_accrued",
            tenant_id=tenant_id,
            period=period,
            amount=amount,
            **self._get_context_kwargs(),
        )
