"""Balance and payment-status rules.

Pure functions shared by the assignment service and reconciliation. A
tenant's balance is always recomputable as charges minus payments; the
payment status follows a small state machine driven by that balance and by
the due date of the oldest charge that payments have not yet covered.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Iterable

from tenancy.domain.aggregates.charge import Charge
from tenancy.domain.value_objects import PaymentStatus

ZERO = Decimal("0.00")


def compute_balance(total_charged: Decimal, total_paid: Decimal) -> Decimal:
    """Balance owed: positive means the tenant owes, negative is credit."""
    return total_charged - total_paid


def oldest_outstanding_due_date(
    charges: Iterable[Charge], total_paid: Decimal
) -> date | None:
    """Due date of the oldest charge not fully covered by payments.

    Payments are allocated to charges first-in-first-out by due date.

    Returns:
        The due date, or None when every charge is covered
    """
    remaining = total_paid
    for charge in sorted(charges, key=lambda c: (c.due_date, c.posted_at)):
        if remaining >= charge.amount:
            remaining -= charge.amount
            continue
        return charge.due_date
    return None


def next_payment_status(
    current: PaymentStatus,
    balance: Decimal,
    oldest_due: date | None,
    today: date,
) -> PaymentStatus:
    """Advance the payment-status state machine.

    Permitted transitions:
        pending -> paid      (balance resolves to <= 0)
        pending -> overdue   (oldest outstanding charge is past due)
        overdue -> paid      (balance resolves to <= 0)
        paid    -> pending   (a new charge leaves a positive balance)

    Anything else keeps the current status, so an overdue tenant who makes
    a partial payment stays overdue until the balance is cleared.
    """
    if balance <= ZERO:
        return PaymentStatus.PAID
    if current == PaymentStatus.PAID:
        return PaymentStatus.PENDING
    if current == PaymentStatus.OVERDUE:
        return PaymentStatus.OVERDUE
    if oldest_due is not None and oldest_due < today:
        return PaymentStatus.OVERDUE
    return PaymentStatus.PENDING


def settle_payment_status(
    current: PaymentStatus,
    balance: Decimal,
    oldest_due: date | None,
    today: date,
) -> PaymentStatus:
    """Apply the state machine until it stops moving.

    A paid tenant whose new charge is already past due goes through pending
    to overdue in one reconciliation rather than across two reads.
    """
    status = current
    while True:
        following = next_payment_status(status, balance, oldest_due, today)
        if following == status:
            return status
        status = following
