"""PostgreSQL implementation of IChargeRepository."""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tenancy.domain.aggregates import Charge
from tenancy.domain.value_objects import ChargeId, TenantId, to_money
from tenancy.infrastructure.models import ChargeModel
from tenancy.infrastructure.observability import (
    DefaultLedgerRepositoryProbe,
    LedgerRepositoryProbe,
)
from tenancy.ports.exceptions import DuplicateChargePeriodError
from tenancy.ports.repositories import IChargeRepository

CHARGE_PERIOD_CONSTRAINT = "uq_charges_tenant_period"


class ChargeRepository(IChargeRepository):
    """Repository for the charge history in PostgreSQL."""

    def __init__(
        self,
        session: AsyncSession,
        probe: LedgerRepositoryProbe | None = None,
    ) -> None:
        self._session = session
        self._probe = probe or DefaultLedgerRepositoryProbe()

    async def add(self, charge: Charge) -> None:
        """Insert a charge.

        Raises:
            DuplicateChargePeriodError: If rent for the period was already
                accrued for the tenant
        """
        self._session.add(
            ChargeModel(
                id=charge.id.value,
                tenant_id=charge.tenant_id.value,
                amount=charge.amount,
                due_date=charge.due_date,
                description=charge.description,
                period=charge.period,
                posted_at=charge.posted_at,
            )
        )
        try:
            await self._session.flush()
        except IntegrityError as e:
            if CHARGE_PERIOD_CONSTRAINT in str(e) and charge.period is not None:
                self._probe.duplicate_charge_period(
                    charge.tenant_id.value, charge.period.isoformat()
                )
                raise DuplicateChargePeriodError(
                    f"Rent for {charge.period:%B %Y} was already accrued",
                    {
                        "tenant_id": charge.tenant_id.value,
                        "period": charge.period.isoformat(),
                    },
                ) from e
            raise
        self._probe.charge_inserted(charge.id.value, charge.tenant_id.value)

    async def list_by_tenant(self, tenant_id: TenantId) -> list[Charge]:
        stmt = (
            select(ChargeModel)
            .where(ChargeModel.tenant_id == tenant_id.value)
            .order_by(ChargeModel.due_date, ChargeModel.posted_at, ChargeModel.id)
        )
        result = await self._session.execute(stmt)
        return [self._to_domain(model) for model in result.scalars().all()]

    async def total_for_tenant(self, tenant_id: TenantId) -> Decimal:
        stmt = select(func.coalesce(func.sum(ChargeModel.amount), 0)).where(
            ChargeModel.tenant_id == tenant_id.value
        )
        result = await self._session.execute(stmt)
        return to_money(result.scalar_one())

    @staticmethod
    def _to_domain(model: ChargeModel) -> Charge:
        return Charge(
            id=ChargeId(value=model.id),
            tenant_id=TenantId(value=model.tenant_id),
            amount=Decimal(model.amount),
            due_date=model.due_date,
            description=model.description,
            posted_at=model.posted_at,
            period=model.period,
        )
