"""Protocol for payment and charge ledger observability."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class PaymentLedgerProbe(Protocol):
    """Domain probe for ledger operations."""

    def payment_recorded(self, payment_id: str, tenant_id: str, amount: str) -> None:
        """Record that a payment was appended to the ledger."""
        ...

    def payment_replayed(
        self, payment_id: str, tenant_id: str, idempotency_key: str
    ) -> None:
        """Record that an idempotency key matched an earlier payment."""
        ...

    def payment_page_fetched(self, tenant_id: str, count: int) -> None:
        """Record that one page of payment history was read."""
        ...

    def charge_posted(
        self, charge_id: str, tenant_id: str, amount: str, due_date: str
    ) -> None:
        """Record that a charge was posted."""
        ...

    def duplicate_charge_period(self, tenant_id: str, period: str) -> None:
        """Record that rent for a period was already accrued."""
        ...

    def with_context(self, context: ObservationContext) -> PaymentLedgerProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultPaymentLedgerProbe:
    """Default implementation of PaymentLedgerProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultPaymentLedgerProbe:
        """Create a new probe with observation context bound."""
        return DefaultPaymentLedgerProbe(logger=self._logger, context=context)

    def payment_recorded(self, payment_id: str, tenant_id: str, amount: str) -> None:
        self._logger.info(
            "payment_recorded",
            payment_id=payment_id,
            tenant_id=tenant_id,
            amount=amount,
            **self._get_context_kwargs(),
        )

    def payment_replayed(
        self, payment_id: str, tenant_id: str, idempotency_key: str
    ) -> None:
        self._logger.info(
            "payment_replayed",
            payment_id=payment_id,
            tenant_id=tenant_id,
            idempotency_key=idempotency_key,
            **self._get_context_kwargs(),
        )

    def payment_page_fetched(self, tenant_id: str, count: int) -> None:
        self._logger.debug(
            "payment_page_fetched",
            tenant_id=tenant_id,
            count=count,
            **self._get_context_kwargs(),
        )

    def charge_posted(
        self, charge_id: str, tenant_id: str, amount: str, due_date: str
    ) -> None:
        self._logger.info(
            "charge_posted",
            charge_id=charge_id,
            tenant_id=tenant_id,
            amount=amount,
            due_date=due_date,
            **self._get_context_kwargs(),
        )

    def duplicate_charge_period(self, tenant_id: str, period: str) -> None:
        self._logger.warning(
            "duplicate_charge_period",
            tenant_id=tenant_id,
            period=period,
            **self._get_context_kwargs(),
        )
