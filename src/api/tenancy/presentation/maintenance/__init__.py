"""Maintenance desk routes and models."""

from tenancy.presentation.maintenance.routes import router

__all__ = ["router"]
