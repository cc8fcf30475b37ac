"""Persistence exceptions for the tenancy bounded context.

These exceptions are raised by repository implementations. The application
layer either handles them (stale versions are retried) or lets them surface
through the domain taxonomy they extend.
"""

from tenancy.domain.exceptions import ConflictError, ValidationError


class StaleVersionError(Exception):
    """Raised when a compare-and-swap write finds a newer version stored.

    The caller loaded an aggregate, somebody else wrote it in the meantime,
    and the write was refused. The assignment service retries the whole
    unit of work a bounded number of times before surfacing ConflictError.
    """

    def __init__(self, aggregate: str, aggregate_id: str, expected_version: int):
        super().__init__(
            f"{aggregate} {aggregate_id} changed concurrently "
            f"(expected version {expected_version})"
        )
        self.aggregate = aggregate
        self.aggregate_id = aggregate_id
        self.expected_version = expected_version


class DuplicateRoomNumberError(ValidationError, ConflictError):
    """Raised when a room number is already taken.

    Room numbers are globally unique. This is both a validation failure
    (the input is rejected before anything is written) and a conflict with
    existing state, so handlers catching either kind see it.
    """

    pass


class DuplicateChargePeriodError(ConflictError):
    """Raised when rent for a month has already been accrued for a tenant."""

    pass


class DuplicateIdempotencyKeyError(ConflictError):
    """Raised when a payment with the same idempotency key already exists.

    The payment ledger resolves this by returning the original payment.
    """

    pass
