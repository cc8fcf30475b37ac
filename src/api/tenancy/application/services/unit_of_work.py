"""Transaction boundary with bounded optimistic-concurrency retries."""

from __future__ import annotations

from typing import AsyncContextManager, Awaitable, Callable, TypeVar

from tenancy.application.observability import (
    ConcurrencyProbe,
    DefaultConcurrencyProbe,
)
from tenancy.domain.exceptions import ConflictError
from tenancy.ports.exceptions import StaleVersionError
from tenancy.ports.repositories import ITransactionScope

T = TypeVar("T")

DEFAULT_MAX_CONFLICT_RETRIES = 3


class UnitOfWork:
    """Runs work inside a transaction scope.

    ``run`` retries the whole piece of work when a compare-and-swap write
    inside it raises StaleVersionError. The transaction rolls back before
    each retry, and the work reloads its aggregates, so every attempt
    decides from fresh state. After ``max_conflict_retries`` retries the
    conflict is surfaced as ConflictError.
    """

    def __init__(
        self,
        session: ITransactionScope,
        max_conflict_retries: int = DEFAULT_MAX_CONFLICT_RETRIES,
        probe: ConcurrencyProbe | None = None,
    ):
        if max_conflict_retries < 0:
            raise ValueError("max_conflict_retries must not be negative")
        self._session = session
        self._max_conflict_retries = max_conflict_retries
        self._probe = probe or DefaultConcurrencyProbe()

    def begin(self) -> AsyncContextManager:
        """Open a single transaction with no retry."""
        return self._session.begin()

    async def run(self, operation: str, work: Callable[[], Awaitable[T]]) -> T:
        """Run ``work`` in a transaction, retrying on lost compare-and-swap.

        Raises:
            ConflictError: If every attempt lost a race
        """
        attempts = self._max_conflict_retries + 1
        for attempt in range(1, attempts + 1):
            try:
                async with self._session.begin():
                    return await work()
            except StaleVersionError as e:
                if attempt < attempts:
                    self._probe.conflict_retry(
                        operation=operation, attempt=attempt, error=str(e)
                    )

        self._probe.conflict_retries_exhausted(operation=operation, attempts=attempts)
        raise ConflictError(
            f"{operation} could not complete because of concurrent changes; "
            "please retry",
            {"operation": operation, "attempts": attempts},
        )
