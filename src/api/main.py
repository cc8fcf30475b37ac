"""Main FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from infrastructure.database.dependencies import close_database_connections
from infrastructure.logging import configure_logging
from infrastructure.observability import DefaultLifecycleProbe
from infrastructure.settings import get_ledger_settings, get_settings
from infrastructure.version import __version__
from tenancy.presentation import router as tenancy_router
from tenancy.presentation.errors import TenancyHTTPException, tenancy_error_handler

configure_logging(debug=get_settings().debug)


@asynccontextmanager
async def tenancy_lifespan(app: FastAPI):
    """Application lifespan context.

    Manages:
    - Startup and shutdown events
    - Database engine lifecycle (created lazily, disposed on shutdown)
    """
    probe = DefaultLifecycleProbe()
    probe.application_started(
        version=__version__,
        storage_backend=get_ledger_settings().storage_backend,
    )

    yield

    await close_database_connections()
    probe.application_stopped()


app = FastAPI(
    title=get_settings().app_name,
    description="Rooms, tenants and payments for a boarding house",
    version=__version__,
    lifespan=tenancy_lifespan,
)

app.add_exception_handler(TenancyHTTPException, tenancy_error_handler)

# Include Tenancy bounded context routes
app.include_router(tenancy_router)


@app.get("/health")
def health():
    """Basic health check endpoint."""
    return {"status": "ok"}
