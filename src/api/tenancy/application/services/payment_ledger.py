"""Payment and charge ledgers for the tenancy bounded context.

Both ledgers are append-only. Neither touches ``Tenant.balance``: the
assignment service derives the balance from them, which keeps the ledgers
replayable and the balance always recomputable.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import AsyncIterator, Callable

from tenancy.application.access_policy import Action, require_tenant_access
from tenancy.application.observability import (
    DefaultPaymentLedgerProbe,
    PaymentLedgerProbe,
)
from tenancy.application.value_objects import CurrentUser
from tenancy.domain.aggregates import Charge, Payment
from tenancy.domain.exceptions import NotFoundError
from tenancy.domain.value_objects import PaymentMethod, TenantId
from tenancy.ports.exceptions import (
    DuplicateChargePeriodError,
    DuplicateIdempotencyKeyError,
)
from tenancy.ports.repositories import (
    IChargeRepository,
    IPaymentRepository,
    ITenantRepository,
    ITransactionScope,
)

DEFAULT_PAGE_SIZE = 50


class PaymentHistory:
    """Lazy, finite, restartable view of a tenant's payments.

    Iterating fetches one page at a time, newest payment first, each page in
    its own short transaction. Every ``async for`` starts again from the
    newest payment, so the same history can be walked any number of times.
    """

    def __init__(
        self,
        tenant_id: TenantId,
        payment_repository: IPaymentRepository,
        session: ITransactionScope,
        probe: PaymentLedgerProbe,
        page_size: int = DEFAULT_PAGE_SIZE,
    ):
        if page_size < 1:
            raise ValueError("page_size must be at least 1")
        self._tenant_id = tenant_id
        self._payments = payment_repository
        self._session = session
        self._probe = probe
        self._page_size = page_size

    @property
    def tenant_id(self) -> TenantId:
        return self._tenant_id

    async def pages(self) -> AsyncIterator[list[Payment]]:
        """Yield successive non-empty pages."""
        after: Payment | None = None
        while True:
            async with self._session.begin():
                page = await self._payments.list_page(
                    self._tenant_id, limit=self._page_size, after=after
                )
            self._probe.payment_page_fetched(
                tenant_id=self._tenant_id.value, count=len(page)
            )
            if page:
                yield page
            if len(page) < self._page_size:
                return
            after = page[-1]

    async def __aiter__(self) -> AsyncIterator[Payment]:
        async for page in self.pages():
            for payment in page:
                yield payment

    async def to_list(self) -> list[Payment]:
        """Materialize the whole history."""
        return [payment async for payment in self]


class PaymentLedger:
    """Application service for the append-only payment ledger.

    Each operation runs in its own transaction. ``record_payment`` commits
    the payment on its own so that it survives even if a later balance
    update fails.
    """

    def __init__(
        self,
        payment_repository: IPaymentRepository,
        tenant_repository: ITenantRepository,
        session: ITransactionScope,
        probe: PaymentLedgerProbe | None = None,
        clock: Callable[[], date] = date.today,
        page_size: int = DEFAULT_PAGE_SIZE,
    ):
        self._payments = payment_repository
        self._tenants = tenant_repository
        self._session = session
        self._probe = probe or DefaultPaymentLedgerProbe()
        self._clock = clock
        self._page_size = page_size

    async def record_payment(
        self,
        tenant_id: TenantId,
        amount: Decimal | int | str,
        method: PaymentMethod,
        payment_date: date | None = None,
        reference_number: str | None = None,
        notes: str | None = None,
        idempotency_key: str | None = None,
    ) -> tuple[Payment, bool]:
        """Append a payment for a tenant.

        When an idempotency key is given and the tenant already has a
        payment under that key, the earlier payment is returned and nothing
        is written.

        Args:
            tenant_id: Tenant the payment applies to
            amount: Amount received, strictly positive
            method: How the payment was made
            payment_date: Date of payment (defaults to today)
            reference_number: Optional external reference
            notes: Optional free text
            idempotency_key: Optional caller-supplied de-duplication key

        Returns:
            Tuple of (payment, created); created is False for a replay

        Raises:
            ValidationError: If the amount or key is invalid
            NotFoundError: If the tenant does not exist
        """
        payment = Payment.record(
            tenant_id=tenant_id,
            amount=amount,
            payment_date=payment_date or self._clock(),
            method=method,
            reference_number=reference_number,
            notes=notes,
            idempotency_key=idempotency_key,
        )

        try:
            async with self._session.begin():
                tenant = await self._tenants.get_by_id(tenant_id)
                if tenant is None:
                    raise NotFoundError(
                        f"Tenant {tenant_id} not found",
                        {"tenant_id": tenant_id.value},
                    )

                if payment.idempotency_key is not None:
                    existing = await self._payments.get_by_idempotency_key(
                        tenant_id, payment.idempotency_key
                    )
                    if existing is not None:
                        self._probe.payment_replayed(
                            payment_id=existing.id.value,
                            tenant_id=tenant_id.value,
                            idempotency_key=payment.idempotency_key,
                        )
                        return existing, False

                await self._payments.add(payment)
        except DuplicateIdempotencyKeyError:
            # A concurrent request with the same key committed first.
            async with self._session.begin():
                existing = await self._payments.get_by_idempotency_key(
                    tenant_id, payment.idempotency_key or ""
                )
            if existing is None:
                raise
            self._probe.payment_replayed(
                payment_id=existing.id.value,
                tenant_id=tenant_id.value,
                idempotency_key=payment.idempotency_key,
            )
            return existing, False

        self._probe.payment_recorded(
            payment_id=payment.id.value,
            tenant_id=tenant_id.value,
            amount=str(payment.amount),
        )
        return payment, True

    async def list_payments(
        self, actor: CurrentUser, tenant_id: TenantId
    ) -> PaymentHistory:
        """Return the tenant's payment history, newest first.

        Access is checked up front; the history itself is fetched lazily.

        Raises:
            NotFoundError: If the tenant does not exist
            AuthorizationError: If the caller may not read this tenant
        """
        async with self._session.begin():
            tenant = await self._tenants.get_by_id(tenant_id)
        if tenant is None:
            raise NotFoundError(
                f"Tenant {tenant_id} not found", {"tenant_id": tenant_id.value}
            )
        require_tenant_access(actor, Action.READ_TENANTS, tenant)
        return PaymentHistory(
            tenant_id=tenant_id,
            payment_repository=self._payments,
            session=self._session,
            probe=self._probe,
            page_size=self._page_size,
        )

    async def find_by_idempotency_key(
        self, tenant_id: TenantId, key: str
    ) -> Payment | None:
        async with self._session.begin():
            return await self._payments.get_by_idempotency_key(tenant_id, key)

    async def total_paid(self, tenant_id: TenantId) -> Decimal:
        async with self._session.begin():
            return await self._payments.total_for_tenant(tenant_id)


class ChargeLedger:
    """The charge history a tenant's balance accrues from.

    Unlike PaymentLedger, charges are always posted as part of a larger unit
    of work (a charge and the balance it moves commit together), so these
    methods run inside the caller's transaction.
    """

    def __init__(
        self,
        charge_repository: IChargeRepository,
        probe: PaymentLedgerProbe | None = None,
    ):
        self._charges = charge_repository
        self._probe = probe or DefaultPaymentLedgerProbe()

    async def post_charge(self, charge: Charge) -> Charge:
        """Append a validated charge.

        Raises:
            DuplicateChargePeriodError: If the charge's rent period was
                already accrued for the tenant
        """
        try:
            await self._charges.add(charge)
        except DuplicateChargePeriodError:
            self._probe.duplicate_charge_period(
                tenant_id=charge.tenant_id.value,
                period=charge.period.isoformat() if charge.period else "",
            )
            raise
        self._probe.charge_posted(
            charge_id=charge.id.value,
            tenant_id=charge.tenant_id.value,
            amount=str(charge.amount),
            due_date=charge.due_date.isoformat(),
        )
        return charge

    async def list_charges(self, tenant_id: TenantId) -> list[Charge]:
        return await self._charges.list_by_tenant(tenant_id)

    async def total_charged(self, tenant_id: TenantId) -> Decimal:
        return await self._charges.total_for_tenant(tenant_id)
