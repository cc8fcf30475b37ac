"""Pydantic models for payment and charge API requests and responses."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from tenancy.application.value_objects import PaymentReceipt
from tenancy.domain.aggregates import Charge, Payment, Tenant
from tenancy.domain.value_objects import (
    PaymentMethod,
    PaymentRecordStatus,
    PaymentStatus,
)


class RecordPaymentRequest(BaseModel):
    """Request model for applying a payment.

    Send an ``Idempotency-Key`` header to make retries safe.
    """

    amount: Decimal = Field(..., description="Amount received, greater than zero")
    method: PaymentMethod = Field(..., description="How the payment was made")
    payment_date: date | None = Field(
        default=None, description="Date of payment (defaults to today)"
    )
    reference_number: str | None = Field(
        default=None, description="Bank or receipt reference", max_length=128
    )
    notes: str | None = Field(default=None, description="Free text")


class PostChargeRequest(BaseModel):
    """Request model for a one-off charge (fee, repair, deposit)."""

    amount: Decimal = Field(..., description="Amount owed, greater than zero")
    due_date: date = Field(..., description="Date the charge falls due")
    description: str = Field(..., description="What the charge is for", min_length=1)


class AccrueRentRequest(BaseModel):
    """Request model for accruing one month of rent."""

    period: date = Field(..., description="Any day in the month to charge")


class PaymentResponse(BaseModel):
    """Response model for a payment."""

    id: str = Field(..., description="Payment ID (ULID format)")
    tenant_id: str = Field(..., description="Tenant ID")
    amount: Decimal = Field(..., description="Amount received")
    payment_date: date = Field(..., description="Date of payment")
    method: PaymentMethod = Field(..., description="Payment method")
    reference_number: str | None = None
    notes: str | None = None
    idempotency_key: str | None = None
    status: PaymentRecordStatus = Field(..., description="Always recorded")
    recorded_at: datetime = Field(..., description="When the ledger took it")

    @classmethod
    def from_domain(cls, payment: Payment) -> PaymentResponse:
        return cls(
            id=payment.id.value,
            tenant_id=payment.tenant_id.value,
            amount=payment.amount,
            payment_date=payment.payment_date,
            method=payment.method,
            reference_number=payment.reference_number,
            notes=payment.notes,
            idempotency_key=payment.idempotency_key,
            status=payment.status,
            recorded_at=payment.recorded_at,
        )


class PaymentReceiptResponse(BaseModel):
    """Response model for an applied payment.

    ``balance`` and ``payment_status`` are null when ``settled`` is false:
    the payment is recorded but the balance is brought up to date on the
    next read of the tenant.
    """

    payment: PaymentResponse
    balance: Decimal | None = None
    payment_status: PaymentStatus | None = None
    replayed: bool = Field(..., description="Idempotency key matched a payment")
    settled: bool = Field(..., description="Balance updated in this request")

    @classmethod
    def from_receipt(cls, receipt: PaymentReceipt) -> PaymentReceiptResponse:
        return cls(
            payment=PaymentResponse.from_domain(receipt.payment),
            balance=receipt.balance,
            payment_status=receipt.payment_status,
            replayed=receipt.replayed,
            settled=receipt.settled,
        )


class ChargeResponse(BaseModel):
    """Response model for a charge."""

    id: str = Field(..., description="Charge ID (ULID format)")
    tenant_id: str = Field(..., description="Tenant ID")
    amount: Decimal = Field(..., description="Amount owed")
    due_date: date = Field(..., description="Due date")
    description: str = Field(..., description="What the charge is for")
    period: date | None = Field(default=None, description="Rent month, if rent")
    posted_at: datetime = Field(..., description="When the charge was posted")

    @classmethod
    def from_domain(cls, charge: Charge) -> ChargeResponse:
        return cls(
            id=charge.id.value,
            tenant_id=charge.tenant_id.value,
            amount=charge.amount,
            due_date=charge.due_date,
            description=charge.description,
            period=charge.period,
            posted_at=charge.posted_at,
        )


class ChargePostedResponse(BaseModel):
    """A posted charge with the tenant's resulting standing."""

    charge: ChargeResponse
    balance: Decimal
    payment_status: PaymentStatus

    @classmethod
    def from_domain(cls, charge: Charge, tenant: Tenant) -> ChargePostedResponse:
        return cls(
            charge=ChargeResponse.from_domain(charge),
            balance=tenant.balance,
            payment_status=tenant.payment_status,
        )
