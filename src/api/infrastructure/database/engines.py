"""Async engine factory for the ledger database (asyncpg driver)."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy.engine import URL
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

if TYPE_CHECKING:
    from infrastructure.settings import DatabaseSettings

__all__ = [
    "APPLICATION_NAME",
    "build_async_url",
    "create_write_engine",
]

APPLICATION_NAME = "tenancy-ledger"


def build_async_url(settings: DatabaseSettings) -> str:
    """Render the asyncpg URL, percent-encoding credentials."""
    return URL.create(
        drivername="postgresql+asyncpg",
        username=settings.username,
        password=settings.password.get_secret_value(),
        host=settings.host,
        port=settings.port,
        database=settings.database,
    ).render_as_string(hide_password=False)


def create_write_engine(settings: DatabaseSettings) -> AsyncEngine:
    """Create the engine shared by every ledger transaction.

    Reconciling reads may repair cached counters, so reads and writes share
    one pool. The pool keeps ``pool_min_connections`` open and may grow to
    ``pool_max_connections``.
    """
    return create_async_engine(
        build_async_url(settings),
        pool_size=settings.pool_min_connections,
        max_overflow=settings.pool_max_connections - settings.pool_min_connections,
        pool_pre_ping=True,
        connect_args={"server_settings": {"application_name": APPLICATION_NAME}},
    )
