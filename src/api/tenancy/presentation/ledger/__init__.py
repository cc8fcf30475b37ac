"""Payment and charge routes and models."""

from tenancy.presentation.ledger.routes import router

__all__ = ["router"]
