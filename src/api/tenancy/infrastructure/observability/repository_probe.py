"""Domain probes for tenancy repository operations.

Following Domain-Oriented Observability patterns, these probes capture
persistence events: rows written, compare-and-swap writes refused, and
uniqueness violations reported by the database.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class RoomRepositoryProbe(Protocol):
    """Domain probe for room repository operations."""

    def room_saved(self, room_id: str, version: int) -> None:
        """Record that a room row was written."""
        ...

    def room_deleted(self, room_id: str) -> None:
        """Record that a room row was deleted."""
        ...

    def stale_write_rejected(
        self, aggregate: str, aggregate_id: str, expected_version: int
    ) -> None:
        """Record that a compare-and-swap write found a newer version."""
        ...

    def duplicate_room_number(self, number: str) -> None:
        """Record that the database rejected a duplicate room number."""
        ...

    def with_context(self, context: ObservationContext) -> RoomRepositoryProbe:
        """Create a new probe with observation context bound."""
        ...


class TenantRepositoryProbe(Protocol):
    """Domain probe for tenant repository operations."""

    def tenant_saved(self, tenant_id: str, version: int) -> None:
        """Record that a tenant row was written."""
        ...

    def stale_write_rejected(
        self, aggregate: str, aggregate_id: str, expected_version: int
    ) -> None:
        """Record that a compare-and-swap write found a newer version."""
        ...

    def with_context(self, context: ObservationContext) -> TenantRepositoryProbe:
        """Create a new probe with observation context bound."""
        ...


class LedgerRepositoryProbe(Protocol):
    """Domain probe for payment and charge repository operations."""

    def payment_inserted(self, payment_id: str, tenant_id: str) -> None:
        """Record that a payment row was inserted."""
        ...

    def charge_inserted(self, charge_id: str, tenant_id: str) -> None:
        """Record that a charge row was inserted."""
        ...

    def duplicate_idempotency_key(self, tenant_id: str) -> None:
        """Record that an idempotency key was already used for the tenant."""
        ...

    def duplicate_charge_period(self, tenant_id: str, period: str) -> None:
        """Record that rent for the period was already posted."""
        ...

    def with_context(self, context: ObservationContext) -> LedgerRepositoryProbe:
        """Create a new probe with observation context bound."""
        ...


class _StructlogProbe:
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

    def stale_write_rejected(
        self, aggregate: str, aggregate_id: str, expected_version: int
    ) -> None:
        """Record that a compare-and-swap write found a newer version."""
        self._logger.info(
            "stale_write_rejected",
            aggregate=aggregate,
            aggregate_id=aggregate_id,
            expected_version=expected_version,
            **self._get_context_kwargs(),
        )


class DefaultRoomRepositoryProbe(_StructlogProbe):
    """Default implementation of RoomRepositoryProbe using structlog."""

    def with_context(self, context: ObservationContext) -> DefaultRoomRepositoryProbe:
        """Create a new probe with observation context bound."""
        return DefaultRoomRepositoryProbe(logger=self._logger, context=context)

    def room_saved(self, room_id: str, version: int) -> None:
        """Record that a room row was written."""
        self._logger.debug(
            "room_saved",
            room_id=room_id,
            version=version,
            **self._get_context_kwargs(),
        )

    def room_deleted(self, room_id: str) -> None:
        """Record that a room row was deleted."""
        self._logger.debug(
            "room_row_deleted",
            room_id=room_id,
            **self._get_context_kwargs(),
        )

    def duplicate_room_number(self, number: str) -> None:
        """Record that the database rejected a duplicate room number."""
        self._logger.warning(
            "duplicate_room_number_rejected",
            number=number,
            **self._get_context_kwargs(),
        )


class DefaultTenantRepositoryProbe(_StructlogProbe):
    """Default implementation of TenantRepositoryProbe using structlog."""

    def with_context(
        self, context: ObservationContext
    ) -> DefaultTenantRepositoryProbe:
        """Create a new probe with observation context bound."""
        return DefaultTenantRepositoryProbe(logger=self._logger, context=context)

    def tenant_saved(self, tenant_id: str, version: int) -> None:
        """Record that a tenant row was written."""
        self._logger.debug(
            "tenant_saved",
            tenant_id=tenant_id,
            version=version,
            **self._get_context_kwargs(),
        )


class DefaultLedgerRepositoryProbe(_StructlogProbe):
    """Default implementation of LedgerRepositoryProbe using structlog."""

    def with_context(
        self, context: ObservationContext
    ) -> DefaultLedgerRepositoryProbe:
        """Create a new probe with observation context bound."""
        return DefaultLedgerRepositoryProbe(logger=self._logger, context=context)

    def payment_inserted(self, payment_id: str, tenant_id: str) -> None:
        """Record that a payment row was inserted."""
        self._logger.debug(
            "payment_inserted",
            payment_id=payment_id,
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def charge_inserted(self, charge_id: str, tenant_id: str) -> None:
        """Record that a charge row was inserted."""
        self._logger.debug(
            "charge_inserted",
            charge_id=charge_id,
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def duplicate_idempotency_key(self, tenant_id: str) -> None:
        """Record that an idempotency key was already used for the tenant."""
        self._logger.info(
            "duplicate_idempotency_key",
            tenant_id=tenant_id,
            **self._get_context_kwargs(),
        )

    def duplicate_charge_period(self, tenant_id: str, period: str) -> None:
        """Record that rent for the period was already posted."""
        self._logger.info(
            "duplicate_charge_period_rejected",
            tenant_id=tenant_id,
            period=period,
            **self._get_context_kwargs(),
        )
