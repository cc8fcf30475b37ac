"""Protocol for maintenance desk observability."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class MaintenanceServiceProbe(Protocol):
    """Domain probe for maintenance request operations."""

    def request_submitted(
        self, request_id: str, tenant_id: str, room_id: str, priority: str
    ) -> None:
        """Record that a maintenance request was filed."""
        ...

    def request_status_changed(
        self, request_id: str, old_status: str, new_status: str
    ) -> None:
        """Record that a request moved through its lifecycle."""
        ...

    def request_not_found(self, request_id: str) -> None:
        """Record that a maintenance request was not found."""
        ...

    def requests_listed(self, count: int) -> None:
        """Record that maintenance requests were listed."""
        ...

    def with_context(self, context: ObservationContext) -> MaintenanceServiceProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultMaintenanceServiceProbe:
    """Default implementation of MaintenanceServiceProbe using structlog."""

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
    ) -> DefaultMaintenanceServiceProbe:
        """Create a new probe with observation context bound."""
        return DefaultMaintenanceServiceProbe(logger=self._logger, context=context)

    def request_submitted(
        self, request_id: str, tenant_id: str, room_id: str, priority: str
    ) -> None:
        """Record that a maintenance request was filed."""
        log = (
            self._logger.warning if priority == "emergency" else self._logger.info
        )
        log(
            "maintenance_request_submitted",
            request_id=request_id,
            tenant_id=tenant_id,
            room_id=room_id,
            priority=priority,
            **self._get_context_kwargs(),
        )

    def request_status_changed(
        self, request_id: str, old_status: str, new_status: str
    ) -> None:
        """Record that a request moved through its lifecycle."""
        self._logger.info(
            "maintenance_request_status_changed",
            request_id=request_id,
            old_status=old_status,
            new_status=new_status,
            **self._get_context_kwargs(),
        )

    def request_not_found(self, request_id: str) -> None:
        """Record that a maintenance request was not found."""
        self._logger.debug(
            "maintenance_request_not_found",
            request_id=request_id,
            **self._get_context_kwargs(),
        )

    def requests_listed(self, count: int) -> None:
        """Record that maintenance requests were listed."""
        self._logger.debug(
            "maintenance_requests_listed",
            count=count,
            **self._get_context_kwargs(),
        )
