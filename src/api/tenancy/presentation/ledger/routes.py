"""HTTP routes for a tenant's payments and charges."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Header, HTTPException, Response, status

from tenancy.application.services import AssignmentService, PaymentLedger
from tenancy.application.value_objects import CurrentUser
from tenancy.dependencies.authentication import get_current_user
from tenancy.dependencies.services import get_assignment_service, get_payment_ledger
from tenancy.domain.exceptions import TenancyError
from tenancy.presentation.errors import to_http_exception
from tenancy.presentation.ledger.models import (
    AccrueRentRequest,
    ChargePostedResponse,
    ChargeResponse,
    PaymentReceiptResponse,
    PaymentResponse,
    PostChargeRequest,
    RecordPaymentRequest,
)
from tenancy.presentation.tenants.routes import parse_tenant_id

router = APIRouter(
    prefix="/tenants",
    tags=["ledger"],
)


@router.post(
    "/{tenant_id}/payments",
    status_code=status.HTTP_201_CREATED,
    summary="Apply payment",
    responses={
        200: {"description": "Idempotency key matched an earlier payment"},
        201: {"description": "Payment recorded"},
        404: {"description": "Tenant not found"},
        422: {"description": "Amount not positive"},
    },
)
async def apply_payment(
    tenant_id: str,
    request: RecordPaymentRequest,
    response: Response,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[AssignmentService, Depends(get_assignment_service)],
    idempotency_key: Annotated[str | None, Header()] = None,
) -> PaymentReceiptResponse:
    """Record a payment and update the tenant's balance.

    A repeated ``Idempotency-Key`` returns the original payment with 200
    and writes nothing.

    Raises:
        HTTPException: 400 if the tenant ID is invalid
        HTTPException: 404 if the tenant does not exist
        HTTPException: 422 if the amount is not positive
    """
    tenant_id_obj = parse_tenant_id(tenant_id)

    try:
        receipt = await service.apply_payment(
            current_user,
            tenant_id_obj,
            amount=request.amount,
            method=request.method,
            payment_date=request.payment_date,
            reference_number=request.reference_number,
            notes=request.notes,
            idempotency_key=idempotency_key,
        )
        if receipt.replayed:
            response.status_code = status.HTTP_200_OK
        return PaymentReceiptResponse.from_receipt(receipt)

    except TenancyError as e:
        raise to_http_exception(e)
    except Exception:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to apply payment",
        )


@router.get("/{tenant_id}/payments", response_model=list[PaymentResponse])
async def list_payments(
    tenant_id: str,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    ledger: Annotated[PaymentLedger, Depends(get_payment_ledger)],
) -> list[PaymentResponse]:
    """List a tenant's payments, newest first."""
    tenant_id_obj = parse_tenant_id(tenant_id)

    try:
        history = await ledger.list_payments(current_user, tenant_id_obj)
        return [PaymentResponse.from_domain(p) async for p in history]

    except TenancyError as e:
        raise to_http_exception(e)
    except Exception:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to list payments",
        )


@router.post("/{tenant_id}/charges", status_code=status.HTTP_201_CREATED)
async def post_charge(
    tenant_id: str,
    request: PostChargeRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[AssignmentService, Depends(get_assignment_service)],
) -> ChargePostedResponse:
    """Post a one-off charge against a tenant."""
    tenant_id_obj = parse_tenant_id(tenant_id)

    try:
        charge, tenant = await service.post_charge(
            current_user,
            tenant_id_obj,
            amount=request.amount,
            due_date=request.due_date,
            description=request.description,
        )
        return ChargePostedResponse.from_domain(charge, tenant)

    except TenancyError as e:
        raise to_http_exception(e)
    except Exception:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to post charge",
        )


@router.post("/{tenant_id}/charges/rent", status_code=status.HTTP_201_CREATED)
async def accrue_rent(
    tenant_id: str,
    request: AccrueRentRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[AssignmentService, Depends(get_assignment_service)],
) -> ChargePostedResponse:
    """Charge one month of rent at the tenant's room price.

    Raises:
        HTTPException: 409 if rent for the month was already accrued or the
            tenant has no room
    """
    tenant_id_obj = parse_tenant_id(tenant_id)

    try:
        charge, tenant = await service.accrue_rent(
            current_user, tenant_id_obj, request.period
        )
        return ChargePostedResponse.from_domain(charge, tenant)

    except TenancyError as e:
        raise to_http_exception(e)
    except Exception:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to accrue rent",
        )


@router.get("/{tenant_id}/charges", response_model=list[ChargeResponse])
async def list_charges(
    tenant_id: str,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[AssignmentService, Depends(get_assignment_service)],
) -> list[ChargeResponse]:
    """List a tenant's charges, oldest due date first."""
    tenant_id_obj = parse_tenant_id(tenant_id)

    try:
        charges = await service.list_charges(current_user, tenant_id_obj)
        return [ChargeResponse.from_domain(charge) for charge in charges]

    except TenancyError as e:
        raise to_http_exception(e)
    except Exception:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to list charges",
        )
