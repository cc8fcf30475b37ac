"""Reconciliation routes and models."""

from tenancy.presentation.reconciliation.routes import router

__all__ = ["router"]
