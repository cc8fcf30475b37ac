"""Storage dependency: selects the repository backend from settings."""

from functools import lru_cache
from typing import AsyncGenerator

from infrastructure.database.dependencies import get_sessionmaker
from infrastructure.settings import get_ledger_settings
from tenancy.infrastructure import (
    InMemoryTenancyStore,
    TenancyStorage,
    in_memory_storage,
    sql_storage,
)


@lru_cache
def get_in_memory_store() -> InMemoryTenancyStore:
    """Process-wide store for ``TENANCY_STORAGE_BACKEND=memory``."""
    return InMemoryTenancyStore()


async def get_storage() -> AsyncGenerator[TenancyStorage, None]:
    """Provide the repositories for one request (FastAPI dependency).

    With the SQL backend a session is opened for the request and closed
    afterwards; services open their own transactions on it.
    """
    if get_ledger_settings().storage_backend == "memory":
        yield in_memory_storage(get_in_memory_store())
        return

    async with get_sessionmaker()() as session:
        yield sql_storage(session)
