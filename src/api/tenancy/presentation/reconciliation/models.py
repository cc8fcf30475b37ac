"""Pydantic models for reconciliation responses."""

from __future__ import annotations

from pydantic import BaseModel, Field

from tenancy.application.value_objects import ReconciliationReport


class ReconciliationReportResponse(BaseModel):
    """Summary of a reconciliation sweep."""

    rooms_checked: int = Field(..., description="Rooms examined")
    tenants_checked: int = Field(..., description="Active tenants examined")
    rooms_repaired: list[str] = Field(
        default_factory=list, description="Rooms whose occupant count was wrong"
    )
    tenants_repaired: list[str] = Field(
        default_factory=list, description="Tenants whose balance or status was wrong"
    )

    @classmethod
    def from_report(cls, report: ReconciliationReport) -> ReconciliationReportResponse:
        return cls(
            rooms_checked=report.rooms_checked,
            tenants_checked=report.tenants_checked,
            rooms_repaired=list(report.rooms_repaired),
            tenants_repaired=list(report.tenants_repaired),
        )
