"""Unit tests for balance and payment-status rules."""

from datetime import date
from decimal import Decimal

import pytest

from tenancy.domain.aggregates import Charge
from tenancy.domain.billing import (
    compute_balance,
    next_payment_status,
    oldest_outstanding_due_date,
    settle_payment_status,
)
from tenancy.domain.value_objects import PaymentStatus, TenantId

TODAY = date(2025, 3, 15)

PAID = PaymentStatus.PAID
PENDING = PaymentStatus.PENDING
OVERDUE = PaymentStatus.OVERDUE


def charge(amount: str, due: date) -> Charge:
    return Charge.post(
        tenant_id=TenantId.generate(),
        amount=amount,
        due_date=due,
        description="Rent",
    )


def test_balance_is_charges_minus_payments():
    assert compute_balance(Decimal("500.00"), Decimal("120.00")) == Decimal("380.00")
    assert compute_balance(Decimal("0.00"), Decimal("50.00")) == Decimal("-50.00")


class TestOldestOutstanding:
    """Payments cover charges first-in-first-out by due date."""

    def test_none_when_fully_covered(self):
        charges = [charge("100", date(2025, 1, 5)), charge("100", date(2025, 2, 5))]
        assert oldest_outstanding_due_date(charges, Decimal("200.00")) is None

    def test_partial_payment_leaves_oldest_open(self):
        charges = [charge("100", date(2025, 2, 5)), charge("100", date(2025, 1, 5))]
        assert oldest_outstanding_due_date(charges, Decimal("50.00")) == date(
            2025, 1, 5
        )

    def test_first_charge_covered_moves_to_next(self):
        charges = [charge("100", date(2025, 1, 5)), charge("100", date(2025, 2, 5))]
        assert oldest_outstanding_due_date(charges, Decimal("100.00")) == date(
            2025, 2, 5
        )


class TestNextPaymentStatus:
    """The permitted transitions and only those."""

    @pytest.mark.parametrize(
        ("current", "balance", "oldest_due", "expected"),
        [
            # pending -> paid
            (PENDING, "0", None, PAID),
            (PENDING, "-10", None, PAID),
            # pending -> overdue
            (PENDING, "100", date(2025, 3, 1), OVERDUE),
            # pending stays pending while nothing is past due
            (PENDING, "100", date(2025, 3, 20), PENDING),
            (PENDING, "100", TODAY, PENDING),
            # overdue -> paid
            (OVERDUE, "0", None, PAID),
            # overdue stays overdue after a partial payment
            (OVERDUE, "40", date(2025, 3, 1), OVERDUE),
            (OVERDUE, "40", date(2025, 3, 20), OVERDUE),
            # paid -> pending on a new charge
            (PAID, "100", date(2025, 3, 20), PENDING),
            # paid never jumps straight to overdue
            (PAID, "100", date(2025, 3, 1), PENDING),
            (PAID, "0", None, PAID),
        ],
    )
    def test_transition(self, current, balance, oldest_due, expected):
        assert (
            next_payment_status(current, Decimal(balance), oldest_due, TODAY)
            == expected
        )


class TestSettlePaymentStatus:
    """Settling runs the state machine to a fixed point."""

    def test_paid_with_past_due_charge_ends_overdue(self):
        assert (
            settle_payment_status(PAID, Decimal("100"), date(2025, 3, 1), TODAY)
            == OVERDUE
        )

    def test_paid_with_future_charge_ends_pending(self):
        assert (
            settle_payment_status(PAID, Decimal("100"), date(2025, 4, 1), TODAY)
            == PENDING
        )

    def test_overdue_partial_payment_stays_overdue(self):
        assert (
            settle_payment_status(OVERDUE, Decimal("10"), date(2025, 4, 1), TODAY)
            == OVERDUE
        )
