"""Unit tests for the payment and charge routes."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest
from fastapi import status

from tenancy.application.services import AssignmentService, PaymentLedger
from tenancy.application.value_objects import PaymentReceipt
from tenancy.dependencies.services import get_assignment_service, get_payment_ledger
from tenancy.domain.aggregates import Payment
from tenancy.domain.exceptions import NotFoundError, ValidationError
from tenancy.domain.value_objects import PaymentMethod, PaymentStatus, TenantId
from tenancy.ports.exceptions import DuplicateChargePeriodError


@pytest.fixture
def mock_assignment_service() -> AsyncMock:
    return AsyncMock(spec=AssignmentService)


@pytest.fixture
def mock_payment_ledger() -> AsyncMock:
    return AsyncMock(spec=PaymentLedger)


@pytest.fixture
def test_client(make_client, mock_assignment_service, mock_payment_ledger):
    return make_client(
        {
            get_assignment_service: mock_assignment_service,
            get_payment_ledger: mock_payment_ledger,
        }
    )


def make_payment(tenant_id: TenantId) -> Payment:
    return Payment.record(
        tenant_id=tenant_id,
        amount="200",
        payment_date=date(2025, 3, 1),
        method=PaymentMethod.CASH,
        idempotency_key="k-1",
    )


class TestApplyPayment:
    """Tests for POST /tenancy/tenants/{tenant_id}/payments."""

    def test_new_payment_is_201(self, test_client, mock_assignment_service):
        tenant_id = TenantId.generate()
        mock_assignment_service.apply_payment.return_value = PaymentReceipt(
            payment=make_payment(tenant_id),
            balance=Decimal("250.00"),
            payment_status=PaymentStatus.PENDING,
        )

        response = test_client.post(
            f"/tenancy/tenants/{tenant_id}/payments",
            json={"amount": "200", "method": "cash"},
            headers={"Idempotency-Key": "k-1"},
        )

        assert response.status_code == status.HTTP_201_CREATED
        body = response.json()
        assert body["replayed"] is False
        assert body["settled"] is True
        assert body["payment_status"] == "pending"
        assert body["payment"]["idempotency_key"] == "k-1"
        kwargs = mock_assignment_service.apply_payment.call_args.kwargs
        assert kwargs["idempotency_key"] == "k-1"
        assert kwargs["method"] == PaymentMethod.CASH

    def test_replay_is_200(self, test_client, mock_assignment_service):
        tenant_id = TenantId.generate()
        mock_assignment_service.apply_payment.return_value = PaymentReceipt(
            payment=make_payment(tenant_id),
            balance=Decimal("250.00"),
            payment_status=PaymentStatus.PENDING,
            replayed=True,
        )

        response = test_client.post(
            f"/tenancy/tenants/{tenant_id}/payments",
            json={"amount": "200", "method": "cash"},
            headers={"Idempotency-Key": "k-1"},
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["replayed"] is True

    def test_unsettled_balance_is_reported(self, test_client, mock_assignment_service):
        tenant_id = TenantId.generate()
        mock_assignment_service.apply_payment.return_value = PaymentReceipt(
            payment=make_payment(tenant_id),
            balance=None,
            payment_status=None,
            settled=False,
        )

        response = test_client.post(
            f"/tenancy/tenants/{tenant_id}/payments",
            json={"amount": "200", "method": "cash"},
        )

        assert response.status_code == status.HTTP_201_CREATED
        body = response.json()
        assert body["settled"] is False
        assert body["balance"] is None

    def test_non_positive_amount_is_422(self, test_client, mock_assignment_service):
        mock_assignment_service.apply_payment.side_effect = ValidationError(
            "Payment amount must be greater than zero", {"amount": "0.00"}
        )

        response = test_client.post(
            f"/tenancy/tenants/{TenantId.generate()}/payments",
            json={"amount": "0", "method": "cash"},
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.json()["details"] == {"amount": "0.00"}

    def test_unknown_tenant_is_404(self, test_client, mock_assignment_service):
        mock_assignment_service.apply_payment.side_effect = NotFoundError(
            "Tenant not found"
        )

        response = test_client.post(
            f"/tenancy/tenants/{TenantId.generate()}/payments",
            json={"amount": "10", "method": "other"},
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_invalid_tenant_id_is_400(self, test_client, mock_assignment_service):
        response = test_client.post(
            "/tenancy/tenants/nope/payments",
            json={"amount": "10", "method": "cash"},
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        mock_assignment_service.apply_payment.assert_not_called()


class TestListPayments:
    """Tests for GET /tenancy/tenants/{tenant_id}/payments."""

    def test_streams_history(self, test_client, mock_payment_ledger):
        tenant_id = TenantId.generate()
        payments = [make_payment(tenant_id), make_payment(tenant_id)]

        class History:
            async def __aiter__(self):
                for payment in payments:
                    yield payment

        mock_payment_ledger.list_payments.return_value = History()

        response = test_client.get(f"/tenancy/tenants/{tenant_id}/payments")

        assert response.status_code == status.HTTP_200_OK
        assert [p["id"] for p in response.json()] == [p.id.value for p in payments]


class TestCharges:
    """Tests for the charge routes."""

    def test_duplicate_rent_period_is_409(self, test_client, mock_assignment_service):
        mock_assignment_service.accrue_rent.side_effect = DuplicateChargePeriodError(
            "Rent for March 2025 was already accrued", {"period": "2025-03-01"}
        )

        response = test_client.post(
            f"/tenancy/tenants/{TenantId.generate()}/charges/rent",
            json={"period": "2025-03-20"},
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        assert mock_assignment_service.accrue_rent.call_args[0][2] == date(
            2025, 3, 20
        )

    def test_charge_failure_is_500(self, test_client, mock_assignment_service):
        mock_assignment_service.post_charge.side_effect = RuntimeError("boom")

        response = test_client.post(
            f"/tenancy/tenants/{TenantId.generate()}/charges",
            json={"amount": "25", "due_date": "2025-03-01", "description": "Key"},
        )

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json()["detail"] == "Failed to post charge"
