"""Payment record for the tenancy context."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, date, datetime
from decimal import Decimal

from tenancy.domain.aggregates.charge import validate_positive_amount
from tenancy.domain.exceptions import ValidationError
from tenancy.domain.value_objects import (
    PaymentId,
    PaymentMethod,
    PaymentRecordStatus,
    TenantId,
)

MAX_IDEMPOTENCY_KEY_LENGTH = 255


@dataclass(frozen=True)
class Payment:
    """An immutable payment received from a tenant.

    Payments are never edited or destroyed; they are the audit trail the
    balance is recomputed from.
    """

    id: PaymentId
    tenant_id: TenantId
    amount: Decimal
    payment_date: date
    method: PaymentMethod
    recorded_at: datetime
    reference_number: str | None = None
    notes: str | None = None
    idempotency_key: str | None = None
    status: PaymentRecordStatus = PaymentRecordStatus.RECORDED

    @classmethod
    def record(
        cls,
        tenant_id: TenantId,
        amount: Decimal | int | str,
        payment_date: date,
        method: PaymentMethod,
        reference_number: str | None = None,
        notes: str | None = None,
        idempotency_key: str | None = None,
    ) -> Payment:
        """Create a new payment record.

        Raises:
            ValidationError: If the amount is not positive or the
                idempotency key is blank or too long
        """
        if idempotency_key is not None:
            idempotency_key = idempotency_key.strip()
            if not idempotency_key:
                raise ValidationError(
                    "Idempotency key must not be blank",
                    {"field": "idempotency_key"},
                )
            if len(idempotency_key) > MAX_IDEMPOTENCY_KEY_LENGTH:
                raise ValidationError(
                    f"Idempotency key must be at most "
                    f"{MAX_IDEMPOTENCY_KEY_LENGTH} characters",
                    {"field": "idempotency_key"},
                )
        return cls(
            id=PaymentId.generate(),
            tenant_id=tenant_id,
            amount=validate_positive_amount(amount),
            payment_date=payment_date,
            method=method,
            recorded_at=datetime.now(UTC),
            reference_number=reference_number or None,
            notes=notes or None,
            idempotency_key=idempotency_key,
        )
