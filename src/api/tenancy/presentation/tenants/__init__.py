"""Tenant directory routes and models."""

from tenancy.presentation.tenants.routes import router

__all__ = ["router"]
