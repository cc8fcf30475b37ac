"""Tenancy presentation layer - aggregate-based organization.

Each package holds the routes and models for one area of the ledger:
rooms, tenants, a tenant's payments and charges, maintenance requests and
reconciliation.
"""

from __future__ import annotations

from fastapi import APIRouter

from tenancy.presentation import ledger, maintenance, reconciliation, rooms, tenants

# Auth is enforced per-endpoint; each handler declares get_current_user and
# the application layer decides what the caller's role may do.
router = APIRouter(
    prefix="/tenancy",
    tags=["tenancy"],
)

router.include_router(rooms.router)
router.include_router(tenants.router)
router.include_router(ledger.router)
router.include_router(maintenance.router)
router.include_router(reconciliation.router)

__all__ = ["router"]
