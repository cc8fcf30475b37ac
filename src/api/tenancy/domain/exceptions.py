"""Domain exceptions for the tenancy bounded context.

Every error a caller can correct is one of five kinds. All of them carry a
human-readable message and optional structured details so the presentation
layer can render a corrective message without parsing strings.
"""

from __future__ import annotations

from typing import Any


class TenancyError(Exception):
    """Base class for all tenancy domain errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(TenancyError):
    """Raised when input is malformed or out of range.

    Validation happens before any write, so a ValidationError guarantees
    that nothing was persisted.
    """

    pass


class NotFoundError(TenancyError):
    """Raised when a referenced room, tenant or request does not exist."""

    pass


class ConflictError(TenancyError):
    """Raised when an operation would violate an invariant.

    Examples: room at capacity, duplicate room number, deleting an occupied
    room, archiving an assigned tenant, or optimistic-concurrency retries
    exhausted.
    """

    pass


class ForbiddenFieldError(TenancyError):
    """Raised when a caller tries to set a service-owned field directly.

    Occupancy, balance, payment status and room links are maintained by the
    assignment and reconciliation service only.
    """

    def __init__(self, fields: list[str] | tuple[str, ...]):
        names = sorted(fields)
        super().__init__(
            f"Field(s) cannot be set directly: {', '.join(names)}",
            details={"fields": names},
        )
        self.fields = tuple(names)


class AuthorizationError(TenancyError):
    """Raised when the caller's role does not permit the operation."""

    pass
