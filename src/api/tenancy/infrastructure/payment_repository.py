"""PostgreSQL implementation of IPaymentRepository.

Payments are append-only: there is no update or delete path.
"""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import func, select, tuple_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tenancy.domain.aggregates import Payment
from tenancy.domain.value_objects import (
    PaymentId,
    PaymentMethod,
    PaymentRecordStatus,
    TenantId,
    to_money,
)
from tenancy.infrastructure.models import PaymentModel
from tenancy.infrastructure.observability import (
    DefaultLedgerRepositoryProbe,
    LedgerRepositoryProbe,
)
from tenancy.ports.exceptions import DuplicateIdempotencyKeyError
from tenancy.ports.repositories import IPaymentRepository

IDEMPOTENCY_KEY_CONSTRAINT = "uq_payments_tenant_idempotency_key"


class PaymentRepository(IPaymentRepository):
    """Repository for the payment ledger in PostgreSQL."""

    def __init__(
        self,
        session: AsyncSession,
        probe: LedgerRepositoryProbe | None = None,
    ) -> None:
        self._session = session
        self._probe = probe or DefaultLedgerRepositoryProbe()

    async def add(self, payment: Payment) -> None:
        """Insert a payment.

        Raises:
            DuplicateIdempotencyKeyError: If the tenant already has a
                payment with the same idempotency key
        """
        self._session.add(
            PaymentModel(
                id=payment.id.value,
                tenant_id=payment.tenant_id.value,
                amount=payment.amount,
                payment_date=payment.payment_date,
                method=payment.method.value,
                reference_number=payment.reference_number,
                notes=payment.notes,
                idempotency_key=payment.idempotency_key,
                status=payment.status.value,
                recorded_at=payment.recorded_at,
            )
        )
        try:
            await self._session.flush()
        except IntegrityError as e:
            if IDEMPOTENCY_KEY_CONSTRAINT in str(e):
                self._probe.duplicate_idempotency_key(payment.tenant_id.value)
                raise DuplicateIdempotencyKeyError(
                    "Payment with this idempotency key already exists",
                    {"idempotency_key": payment.idempotency_key},
                ) from e
            raise
        self._probe.payment_inserted(payment.id.value, payment.tenant_id.value)

    async def get_by_idempotency_key(
        self, tenant_id: TenantId, key: str
    ) -> Payment | None:
        stmt = select(PaymentModel).where(
            PaymentModel.tenant_id == tenant_id.value,
            PaymentModel.idempotency_key == key,
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_domain(model) if model is not None else None

    async def list_page(
        self,
        tenant_id: TenantId,
        limit: int,
        after: Payment | None = None,
    ) -> list[Payment]:
        """Fetch one page of payments with keyset pagination.

        The cursor is the (payment_date, id) pair of the last payment on the
        previous page, so pages stay stable while new payments arrive.
        """
        stmt = select(PaymentModel).where(PaymentModel.tenant_id == tenant_id.value)
        if after is not None:
            stmt = stmt.where(
                tuple_(PaymentModel.payment_date, PaymentModel.id)
                < tuple_(after.payment_date, after.id.value)
            )
        stmt = stmt.order_by(
            PaymentModel.payment_date.desc(), PaymentModel.id.desc()
        ).limit(limit)
        result = await self._session.execute(stmt)
        return [self._to_domain(model) for model in result.scalars().all()]

    async def total_for_tenant(self, tenant_id: TenantId) -> Decimal:
        stmt = select(func.coalesce(func.sum(PaymentModel.amount), 0)).where(
            PaymentModel.tenant_id == tenant_id.value
        )
        result = await self._session.execute(stmt)
        return to_money(result.scalar_one())

    @staticmethod
    def _to_domain(model: PaymentModel) -> Payment:
        return Payment(
            id=PaymentId(value=model.id),
            tenant_id=TenantId(value=model.tenant_id),
            amount=Decimal(model.amount),
            payment_date=model.payment_date,
            method=PaymentMethod(model.method),
            recorded_at=model.recorded_at,
            reference_number=model.reference_number,
            notes=model.notes,
            idempotency_key=model.idempotency_key,
            status=PaymentRecordStatus(model.status),
        )
