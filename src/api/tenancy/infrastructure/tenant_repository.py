"""PostgreSQL implementation of ITenantRepository.

Updates are compare-and-swap on ``version``, like rooms. The live count of
tenants per room is the source of truth for room occupancy.
"""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tenancy.domain.aggregates import Tenant
from tenancy.domain.exceptions import ConflictError
from tenancy.domain.value_objects import PaymentStatus, RoomId, TenantId, UserId
from tenancy.infrastructure.models import TenantModel
from tenancy.infrastructure.observability import (
    DefaultTenantRepositoryProbe,
    TenantRepositoryProbe,
)
from tenancy.ports.exceptions import StaleVersionError
from tenancy.ports.repositories import ITenantRepository

USER_ID_CONSTRAINT = "uq_tenants_user_id"


class TenantRepository(ITenantRepository):
    """Repository managing Tenant aggregates in PostgreSQL."""

    def __init__(
        self,
        session: AsyncSession,
        probe: TenantRepositoryProbe | None = None,
    ) -> None:
        self._session = session
        self._probe = probe or DefaultTenantRepositoryProbe()

    async def add(self, tenant: Tenant) -> None:
        """Insert a new tenant.

        Raises:
            ConflictError: If the login is already linked to another tenant
        """
        self._session.add(TenantModel(id=tenant.id.value, **self._columns(tenant)))
        try:
            await self._session.flush()
        except IntegrityError as e:
            _raise_user_conflict(tenant, e)
            raise
        self._probe.tenant_saved(tenant.id.value, tenant.version)

    async def save(self, tenant: Tenant) -> None:
        """Conditionally update a tenant on its version.

        Raises:
            StaleVersionError: If the stored version differs
            ConflictError: If the login is already linked to another tenant
        """
        columns = self._columns(tenant)
        columns["version"] = tenant.version + 1
        stmt = (
            update(TenantModel)
            .where(
                TenantModel.id == tenant.id.value,
                TenantModel.version == tenant.version,
            )
            .values(**columns)
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self._session.execute(stmt)
        except IntegrityError as e:
            _raise_user_conflict(tenant, e)
            raise
        if result.rowcount != 1:
            self._probe.stale_write_rejected("Tenant", tenant.id.value, tenant.version)
            raise StaleVersionError("Tenant", tenant.id.value, tenant.version)
        tenant.version += 1
        self._probe.tenant_saved(tenant.id.value, tenant.version)

    async def get_by_id(self, tenant_id: TenantId) -> Tenant | None:
        stmt = (
            select(TenantModel)
            .where(TenantModel.id == tenant_id.value)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_domain(model) if model is not None else None

    async def get_by_user_id(self, user_id: UserId) -> Tenant | None:
        stmt = (
            select(TenantModel)
            .where(TenantModel.user_id == user_id.value)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_domain(model) if model is not None else None

    async def list_all(self) -> list[Tenant]:
        stmt = (
            select(TenantModel)
            .order_by(TenantModel.name, TenantModel.id)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        return [self._to_domain(model) for model in result.scalars().all()]

    async def count_by_room(self, room_id: RoomId) -> int:
        stmt = (
            select(func.count())
            .select_from(TenantModel)
            .where(TenantModel.room_id == room_id.value)
        )
        result = await self._session.execute(stmt)
        return int(result.scalar_one())

    @staticmethod
    def _columns(tenant: Tenant) -> dict:
        return {
            "name": tenant.name,
            "email": tenant.email,
            "phone": tenant.phone,
            "emergency_contact": tenant.emergency_contact,
            "address": tenant.address,
            "user_id": tenant.user_id.value if tenant.user_id else None,
            "room_id": tenant.room_id.value if tenant.room_id else None,
            "requested_room_id": (
                tenant.requested_room_id.value if tenant.requested_room_id else None
            ),
            "lease_start": tenant.lease_start,
            "lease_end": tenant.lease_end,
            "balance": tenant.balance,
            "payment_status": tenant.payment_status.value,
            "archived": tenant.archived,
            "version": tenant.version,
        }

    @staticmethod
    def _to_domain(model: TenantModel) -> Tenant:
        return Tenant(
            id=TenantId(value=model.id),
            name=model.name,
            email=model.email,
            lease_start=model.lease_start,
            lease_end=model.lease_end,
            phone=model.phone,
            emergency_contact=model.emergency_contact,
            address=model.address,
            user_id=UserId(value=model.user_id) if model.user_id else None,
            room_id=RoomId(value=model.room_id) if model.room_id else None,
            requested_room_id=(
                RoomId(value=model.requested_room_id)
                if model.requested_room_id
                else None
            ),
            balance=Decimal(model.balance),
            payment_status=PaymentStatus(model.payment_status),
            archived=model.archived,
            version=model.version,
        )


def _raise_user_conflict(tenant: Tenant, error: IntegrityError) -> None:
    """Translate a violation of the one-tenant-per-login constraint."""
    if USER_ID_CONSTRAINT in str(error):
        raise ConflictError(
            f"User {tenant.user_id} already has a tenant record",
            {"user_id": tenant.user_id.value if tenant.user_id else None},
        ) from error
