"""Service wiring for the tenancy bounded context.

Composes storage with application services. FastAPI caches each
dependency per request, so the services of one request share one unit of
work, one reconciler and one set of repositories.
"""

from typing import Annotated

from fastapi import Depends

from infrastructure.settings import LedgerSettings, get_ledger_settings
from shared_kernel.observability_context import ObservationContext
from tenancy.application.observability import (
    DefaultAssignmentServiceProbe,
    DefaultConcurrencyProbe,
    DefaultMaintenanceServiceProbe,
    DefaultPaymentLedgerProbe,
    DefaultReconciliationProbe,
    DefaultRoomServiceProbe,
    DefaultTenantServiceProbe,
)
from tenancy.application.services import (
    AssignmentService,
    ChargeLedger,
    MaintenanceService,
    PaymentLedger,
    Reconciler,
    RoomService,
    TenantService,
    UnitOfWork,
)
from tenancy.dependencies.authentication import get_observation_context
from tenancy.dependencies.storage import get_storage
from tenancy.infrastructure import TenancyStorage

StorageDep = Annotated[TenancyStorage, Depends(get_storage)]
ContextDep = Annotated[ObservationContext, Depends(get_observation_context)]
LedgerSettingsDep = Annotated[LedgerSettings, Depends(get_ledger_settings)]


def get_unit_of_work(
    storage: StorageDep,
    context: ContextDep,
    settings: LedgerSettingsDep,
) -> UnitOfWork:
    return UnitOfWork(
        session=storage.transactions,
        max_conflict_retries=settings.max_conflict_retries,
        probe=DefaultConcurrencyProbe().with_context(context),
    )


def get_reconciler(storage: StorageDep, context: ContextDep) -> Reconciler:
    return Reconciler(
        room_repository=storage.rooms,
        tenant_repository=storage.tenants,
        payment_repository=storage.payments,
        charge_repository=storage.charges,
        probe=DefaultReconciliationProbe().with_context(context),
    )


def get_payment_ledger(
    storage: StorageDep,
    context: ContextDep,
    settings: LedgerSettingsDep,
) -> PaymentLedger:
    return PaymentLedger(
        payment_repository=storage.payments,
        tenant_repository=storage.tenants,
        session=storage.transactions,
        probe=DefaultPaymentLedgerProbe().with_context(context),
        page_size=settings.payment_page_size,
    )


def get_charge_ledger(storage: StorageDep, context: ContextDep) -> ChargeLedger:
    return ChargeLedger(
        charge_repository=storage.charges,
        probe=DefaultPaymentLedgerProbe().with_context(context),
    )


def get_assignment_service(
    storage: StorageDep,
    context: ContextDep,
    settings: LedgerSettingsDep,
    payment_ledger: Annotated[PaymentLedger, Depends(get_payment_ledger)],
    charge_ledger: Annotated[ChargeLedger, Depends(get_charge_ledger)],
    reconciler: Annotated[Reconciler, Depends(get_reconciler)],
    unit_of_work: Annotated[UnitOfWork, Depends(get_unit_of_work)],
) -> AssignmentService:
    """Get AssignmentService instance.

    Args:
        storage: Repositories for the request
        context: Observation context bound to the service probe
        settings: Ledger settings (rent grace period)
        payment_ledger: Ledger the service records payments in
        charge_ledger: Ledger the service posts charges to
        reconciler: Shared reconciler
        unit_of_work: Shared unit of work

    Returns:
        AssignmentService instance
    """
    return AssignmentService(
        room_repository=storage.rooms,
        tenant_repository=storage.tenants,
        assignment_log_repository=storage.assignment_logs,
        payment_ledger=payment_ledger,
        charge_ledger=charge_ledger,
        reconciler=reconciler,
        unit_of_work=unit_of_work,
        probe=DefaultAssignmentServiceProbe().with_context(context),
        rent_grace_days=settings.rent_grace_days,
    )


def get_room_service(
    storage: StorageDep,
    context: ContextDep,
    reconciler: Annotated[Reconciler, Depends(get_reconciler)],
    unit_of_work: Annotated[UnitOfWork, Depends(get_unit_of_work)],
) -> RoomService:
    return RoomService(
        room_repository=storage.rooms,
        reconciler=reconciler,
        unit_of_work=unit_of_work,
        probe=DefaultRoomServiceProbe().with_context(context),
    )


def get_tenant_service(
    storage: StorageDep,
    context: ContextDep,
    charge_ledger: Annotated[ChargeLedger, Depends(get_charge_ledger)],
    assignment_service: Annotated[AssignmentService, Depends(get_assignment_service)],
    reconciler: Annotated[Reconciler, Depends(get_reconciler)],
    unit_of_work: Annotated[UnitOfWork, Depends(get_unit_of_work)],
) -> TenantService:
    return TenantService(
        tenant_repository=storage.tenants,
        assignment_log_repository=storage.assignment_logs,
        charge_ledger=charge_ledger,
        assignment_service=assignment_service,
        reconciler=reconciler,
        unit_of_work=unit_of_work,
        probe=DefaultTenantServiceProbe().with_context(context),
    )


def get_maintenance_service(
    storage: StorageDep, context: ContextDep
) -> MaintenanceService:
    return MaintenanceService(
        maintenance_repository=storage.maintenance_requests,
        tenant_repository=storage.tenants,
        session=storage.transactions,
        probe=DefaultMaintenanceServiceProbe().with_context(context),
    )
