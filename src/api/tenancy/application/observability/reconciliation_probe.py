"""Protocol for reconciliation observability.

Drift events are the signal that a partial write happened somewhere and was
repaired on read, so they are logged at warning level.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class ReconciliationProbe(Protocol):
    """Domain probe for reconciliation of cached counters."""

    def occupancy_drift_repaired(
        self, room_id: str, cached_count: int, live_count: int
    ) -> None: ...

    def balance_drift_repaired(
        self,
        tenant_id: str,
        cached_balance: str,
        balance: str,
        cached_status: str,
        payment_status: str,
    ) -> None: ...

    def repair_write_skipped(self, entity: str, entity_id: str) -> None:
        """Record that a repaired value lost a race and was not persisted."""
        ...

    def sweep_completed(
        self,
        rooms_checked: int,
        tenants_checked: int,
        rooms_repaired: int,
        tenants_repaired: int,
    ) -> None: ...

    def with_context(self, context: ObservationContext) -> ReconciliationProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultReconciliationProbe:
    """Default implementation of ReconciliationProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultReconciliationProbe:
        """Create a new probe with observation context bound."""
        return DefaultReconciliationProbe(logger=self._logger, context=context)

    def occupancy_drift_repaired(
        self, room_id: str, cached_count: int, live_count: int
    ) -> None:
        self._logger.warning(
            "occupancy_drift_repaired",
            room_id=room_id,
            cached_count=cached_count,
            live_count=live_count,
            **self._get_context_kwargs(),
        )

    def balance_drift_repaired(
        self,
        tenant_id: str,
        cached_balance: str,
        balance: str,
        cached_status: str,
        payment_status: str,
    ) -> None:
        self._logger.warning(
            "balance_drift_repaired",
            tenant_id=tenant_id,
            cached_balance=cached_balance,
            balance=balance,
            cached_status=cached_status,
            payment_status=payment_status,
            **self._get_context_kwargs(),
        )

    def repair_write_skipped(self, entity: str, entity_id: str) -> None:
        """Record that a repaired value lost a race and was not persisted."""
        self._logger.debug(
            "repair_write_skipped",
            entity=entity,
            entity_id=entity_id,
            **self._get_context_kwargs(),
        )

    def sweep_completed(
        self,
        rooms_checked: int,
        tenants_checked: int,
        rooms_repaired: int,
        tenants_repaired: int,
    ) -> None:
        self._logger.info(
            "reconciliation_sweep_completed",
            rooms_checked=rooms_checked,
            tenants_checked=tenants_checked,
            rooms_repaired=rooms_repaired,
            tenants_repaired=tenants_repaired,
            **self._get_context_kwargs(),
        )
