"""Unit tests for the payment, charge and tenant SQL repositories."""

from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import IntegrityError

from tenancy.domain.aggregates import Charge, Payment, Tenant
from tenancy.domain.exceptions import ConflictError
from tenancy.domain.value_objects import PaymentMethod, RoomId, TenantId, UserId
from tenancy.infrastructure.charge_repository import ChargeRepository
from tenancy.infrastructure.models import PaymentModel
from tenancy.infrastructure.payment_repository import PaymentRepository
from tenancy.infrastructure.tenant_repository import TenantRepository
from tenancy.ports.exceptions import (
    DuplicateChargePeriodError,
    DuplicateIdempotencyKeyError,
    StaleVersionError,
)


@pytest.fixture
def mock_session():
    session = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def mock_probe():
    return MagicMock()


def integrity_error(constraint: str) -> IntegrityError:
    return IntegrityError(
        "INSERT ...",
        {},
        Exception(f'duplicate key value violates unique constraint "{constraint}"'),
    )


def make_payment(key: str | None = None) -> Payment:
    return Payment.record(
        tenant_id=TenantId.generate(),
        amount="100",
        payment_date=date(2025, 3, 1),
        method=PaymentMethod.CASH,
        idempotency_key=key,
    )


class TestPaymentRepository:
    """Tests for PaymentRepository."""

    @pytest.mark.asyncio
    async def test_inserts_payment(self, mock_session, mock_probe):
        repository = PaymentRepository(session=mock_session, probe=mock_probe)
        payment = make_payment("k-1")

        await repository.add(payment)

        added = mock_session.add.call_args[0][0]
        assert isinstance(added, PaymentModel)
        assert added.amount == Decimal("100.00")
        assert added.method == "cash"
        assert added.idempotency_key == "k-1"
        mock_probe.payment_inserted.assert_called_once_with(
            payment.id.value, payment.tenant_id.value
        )

    @pytest.mark.asyncio
    async def test_duplicate_key_is_translated(self, mock_session, mock_probe):
        repository = PaymentRepository(session=mock_session, probe=mock_probe)
        mock_session.flush.side_effect = integrity_error(
            "uq_payments_tenant_idempotency_key"
        )
        payment = make_payment("k-1")

        with pytest.raises(DuplicateIdempotencyKeyError):
            await repository.add(payment)

        mock_probe.duplicate_idempotency_key.assert_called_once_with(
            payment.tenant_id.value
        )

    @pytest.mark.asyncio
    async def test_total_defaults_to_zero(self, mock_session):
        repository = PaymentRepository(session=mock_session)
        result = MagicMock()
        result.scalar_one.return_value = 0
        mock_session.execute.return_value = result

        assert await repository.total_for_tenant(TenantId.generate()) == Decimal(
            "0.00"
        )

    @pytest.mark.asyncio
    async def test_list_page_maps_rows(self, mock_session):
        repository = PaymentRepository(session=mock_session)
        payment = make_payment()
        model = PaymentModel(
            id=payment.id.value,
            tenant_id=payment.tenant_id.value,
            amount=payment.amount,
            payment_date=payment.payment_date,
            method="cash",
            reference_number=None,
            notes=None,
            idempotency_key=None,
            status="recorded",
            recorded_at=payment.recorded_at,
        )
        result = MagicMock()
        result.scalars.return_value.all.return_value = [model]
        mock_session.execute.return_value = result

        page = await repository.list_page(payment.tenant_id, limit=10, after=payment)

        assert page == [payment]


class TestChargeRepository:
    """Tests for ChargeRepository."""

    @pytest.mark.asyncio
    async def test_duplicate_period_is_translated(self, mock_session, mock_probe):
        repository = ChargeRepository(session=mock_session, probe=mock_probe)
        mock_session.flush.side_effect = integrity_error("uq_charges_tenant_period")
        charge = Charge.post(
            tenant_id=TenantId.generate(),
            amount="450",
            due_date=date(2025, 3, 6),
            description="Rent",
            period=date(2025, 3, 1),
        )

        with pytest.raises(DuplicateChargePeriodError):
            await repository.add(charge)


class TestTenantRepository:
    """Tests for TenantRepository."""

    def make_tenant(self) -> Tenant:
        return Tenant.create(
            name="Ada",
            email="ada@example.com",
            lease_start=date(2025, 1, 1),
            lease_end=date(2025, 12, 31),
            user_id=UserId(value="kc-1"),
        )

    @pytest.mark.asyncio
    async def test_linked_login_conflict(self, mock_session):
        repository = TenantRepository(session=mock_session)
        mock_session.flush.side_effect = integrity_error("uq_tenants_user_id")

        with pytest.raises(ConflictError):
            await repository.add(self.make_tenant())

    @pytest.mark.asyncio
    async def test_relinking_taken_login_on_save_conflicts(
        self, mock_session, mock_probe
    ):
        repository = TenantRepository(session=mock_session, probe=mock_probe)
        mock_session.execute.side_effect = integrity_error("uq_tenants_user_id")
        tenant = self.make_tenant()

        with pytest.raises(ConflictError) as exc_info:
            await repository.save(tenant)

        assert exc_info.value.details == {"user_id": "kc-1"}
        assert tenant.version == 0
        mock_probe.tenant_saved.assert_not_called()

    @pytest.mark.asyncio
    async def test_other_integrity_errors_on_save_propagate(self, mock_session):
        repository = TenantRepository(session=mock_session)
        mock_session.execute.side_effect = integrity_error("ck_tenants_lease_order")

        with pytest.raises(IntegrityError):
            await repository.save(self.make_tenant())

    @pytest.mark.asyncio
    async def test_stale_save(self, mock_session, mock_probe):
        repository = TenantRepository(session=mock_session, probe=mock_probe)
        result = MagicMock()
        result.rowcount = 0
        mock_session.execute.return_value = result
        tenant = self.make_tenant()

        with pytest.raises(StaleVersionError):
            await repository.save(tenant)

        assert tenant.version == 0
        mock_probe.stale_write_rejected.assert_called_once_with(
            "Tenant", tenant.id.value, 0
        )

    @pytest.mark.asyncio
    async def test_count_by_room(self, mock_session):
        repository = TenantRepository(session=mock_session)
        result = MagicMock()
        result.scalar_one.return_value = 2
        mock_session.execute.return_value = result

        assert await repository.count_by_room(RoomId.generate()) == 2
