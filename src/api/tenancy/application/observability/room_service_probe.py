"""Protocol for room service observability.

Defines the interface for domain probes that capture application-level
domain events for room registry operations.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class RoomServiceProbe(Protocol):
    """Domain probe for room service operations."""

    def room_created(self, room_id: str, number: str) -> None:
        """Record that a room was created."""
        ...

    def room_updated(self, room_id: str, fields: list[str]) -> None:
        """Record that a room was updated."""
        ...

    def room_deleted(self, room_id: str) -> None:
        """Record that a room was deleted."""
        ...

    def room_not_found(self, room_id: str) -> None:
        """Record that a room was not found."""
        ...

    def rooms_listed(self, count: int) -> None:
        """Record that rooms were listed."""
        ...

    def duplicate_room_number(self, number: str) -> None:
        """Record that a duplicate room number was rejected."""
        ...

    def forbidden_fields_rejected(self, room_id: str, fields: list[str]) -> None:
        """Record that a patch tried to set service-owned fields."""
        ...

    def with_context(self, context: ObservationContext) -> RoomServiceProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultRoomServiceProbe:
    """Default implementation of RoomServiceProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultRoomServiceProbe:
        """Create a new probe with observation context bound."""
        return DefaultRoomServiceProbe(logger=self._logger, context=context)

    def room_created(self, room_id: str, number: str) -> None:
        """Record that a room was created."""
        self._logger.info(
            "room_created",
            room_id=room_id,
            number=number,
            **self._get_context_kwargs(),
        )

    def room_updated(self, room_id: str, fields: list[str]) -> None:
        """Record that a room was updated."""
        self._logger.info(
            "room_updated",
            room_id=room_id,
            fields=fields,
            **self._get_context_kwargs(),
        )

    def room_deleted(self, room_id: str) -> None:
        """Record that a room was deleted."""
        self._logger.info(
            "room_deleted",
            room_id=room_id,
            **self._get_context_kwargs(),
        )

    def room_not_found(self, room_id: str) -> None:
        """Record that a room was not found."""
        self._logger.debug(
            "room_not_found",
            room_id=room_id,
            **self._get_context_kwargs(),
        )

    def rooms_listed(self, count: int) -> None:
        """Record that rooms were listed."""
        self._logger.debug(
            "rooms_listed",
            count=count,
            **self._get_context_kwargs(),
        )

    def duplicate_room_number(self, number: str) -> None:
        """Record that a duplicate room number was rejected."""
        self._logger.warning(
            "duplicate_room_number",
            number=number,
            **self._get_context_kwargs(),
        )

    def forbidden_fields_rejected(self, room_id: str, fields: list[str]) -> None:
        """Record that a patch tried to set service-owned fields."""
        self._logger.warning(
            "room_forbidden_fields_rejected",
            room_id=room_id,
            fields=fields,
            **self._get_context_kwargs(),
        )
