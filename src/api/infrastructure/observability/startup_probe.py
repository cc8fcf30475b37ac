"""Domain probe for application startup and lifecycle events.

Following Domain-Oriented Observability patterns, this probe captures
domain-significant events during application initialization and shutdown.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class LifecycleProbe(Protocol):
    """Domain probe for application lifecycle operations."""

    def application_started(self, version: str, storage_backend: str) -> None:
        """Record that the application finished starting up."""
        ...

    def application_stopped(self) -> None:
        """Record that the application shut down."""
        ...

    def database_engine_created(self, connection: str) -> None:
        """Record that the database engine was created."""
        ...

    def database_pool_closed(self) -> None:
        """Record that the database connection pool was closed."""
        ...

    def with_context(self, context: ObservationContext) -> LifecycleProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultLifecycleProbe:
    """Default implementation of LifecycleProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultLifecycleProbe:
        """Create a new probe with observation context bound."""
        return DefaultLifecycleProbe(logger=self._logger, context=context)

    def application_started(self, version: str, storage_backend: str) -> None:
        """Record that the application finished starting up."""
        self._logger.info(
            "application_started",
            version=version,
            storage_backend=storage_backend,
            **self._get_context_kwargs(),
        )

    def application_stopped(self) -> None:
        """Record that the application shut down."""
        self._logger.info("application_stopped", **self._get_context_kwargs())

    def database_engine_created(self, connection: str) -> None:
        """Record that the database engine was created."""
        self._logger.info(
            "database_engine_created",
            connection=connection,
            **self._get_context_kwargs(),
        )

    def database_pool_closed(self) -> None:
        """Record that the database connection pool was closed."""
        self._logger.info("database_pool_closed", **self._get_context_kwargs())
