"""Charge record for the tenancy context.

Charges are the "accrued" half of a tenant's balance: rent accruals,
deposits and fees. Like payments they are append-only.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, date, datetime
from decimal import Decimal

from tenancy.domain.exceptions import ValidationError
from tenancy.domain.value_objects import ChargeId, TenantId, to_money


def first_of_month(day: date) -> date:
    """Normalize a date to the first day of its month."""
    return day.replace(day=1)


def validate_positive_amount(amount: Decimal | int | str) -> Decimal:
    """Normalize and require a strictly positive monetary amount."""
    try:
        value = to_money(amount)
    except ValueError as e:
        raise ValidationError(str(e), {"field": "amount"}) from e
    if value <= 0:
        raise ValidationError(
            "amount must be greater than zero",
            {"field": "amount", "value": str(value)},
        )
    return value


@dataclass(frozen=True)
class Charge:
    """An amount posted against a tenant.

    ``period`` is set for rent accruals only and is unique per tenant so a
    month's rent is charged at most once.
    """

    id: ChargeId
    tenant_id: TenantId
    amount: Decimal
    due_date: date
    description: str
    posted_at: datetime
    period: date | None = None

    @classmethod
    def post(
        cls,
        tenant_id: TenantId,
        amount: Decimal | int | str,
        due_date: date,
        description: str,
        period: date | None = None,
    ) -> Charge:
        """Create a new charge.

        Raises:
            ValidationError: If amount is not positive or description is blank
        """
        cleaned = (description or "").strip()
        if not cleaned:
            raise ValidationError(
                "Charge description is required", {"field": "description"}
            )
        return cls(
            id=ChargeId.generate(),
            tenant_id=tenant_id,
            amount=validate_positive_amount(amount),
            due_date=due_date,
            description=cleaned,
            posted_at=datetime.now(UTC),
            period=first_of_month(period) if period is not None else None,
        )
