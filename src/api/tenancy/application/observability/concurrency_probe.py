"""Protocol for optimistic-concurrency observability."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class ConcurrencyProbe(Protocol):
    """Domain probe for compare-and-swap retries."""

    def conflict_retry(self, operation: str, attempt: int, error: str) -> None:
        """Record that a unit of work lost a compare-and-swap and is retried."""
        ...

    def conflict_retries_exhausted(self, operation: str, attempts: int) -> None:
        """Record that a unit of work gave up after repeated conflicts."""
        ...

    def with_context(self, context: ObservationContext) -> ConcurrencyProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultConcurrencyProbe:
    """Default implementation of ConcurrencyProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultConcurrencyProbe:
        """Create a new probe with observation context bound."""
        return DefaultConcurrencyProbe(logger=self._logger, context=context)

    def conflict_retry(self, operation: str, attempt: int, error: str) -> None:
        """Record that a unit of work lost a compare-and-swap and is retried."""
        self._logger.info(
            "conflict_retry",
            operation=operation,
            attempt=attempt,
            error=error,
            **self._get_context_kwargs(),
        )

    def conflict_retries_exhausted(self, operation: str, attempts: int) -> None:
        """Record that a unit of work gave up after repeated conflicts."""
        self._logger.warning(
            "conflict_retries_exhausted",
            operation=operation,
            attempts=attempts,
            **self._get_context_kwargs(),
        )
