"""Domain-Oriented Observability for the tenancy application layer.

Probes for application service operations following Domain-Oriented
Observability patterns.
"""

from tenancy.application.observability.assignment_service_probe import (
    AssignmentServiceProbe,
    DefaultAssignmentServiceProbe,
)
from tenancy.application.observability.authentication_probe import (
    AuthenticationProbe,
    DefaultAuthenticationProbe,
)
from tenancy.application.observability.concurrency_probe import (
    ConcurrencyProbe,
    DefaultConcurrencyProbe,
)
from tenancy.application.observability.maintenance_service_probe import (
    DefaultMaintenanceServiceProbe,
    MaintenanceServiceProbe,
)
from tenancy.application.observability.payment_ledger_probe import (
    DefaultPaymentLedgerProbe,
    PaymentLedgerProbe,
)
from tenancy.application.observability.reconciliation_probe import (
    DefaultReconciliationProbe,
    ReconciliationProbe,
)
from tenancy.application.observability.room_service_probe import (
    DefaultRoomServiceProbe,
    RoomServiceProbe,
)
from tenancy.application.observability.tenant_service_probe import (
    DefaultTenantServiceProbe,
    TenantServiceProbe,
)

__all__ = [
    "AssignmentServiceProbe",
    "DefaultAssignmentServiceProbe",
    "AuthenticationProbe",
    "DefaultAuthenticationProbe",
    "ConcurrencyProbe",
    "DefaultConcurrencyProbe",
    "MaintenanceServiceProbe",
    "DefaultMaintenanceServiceProbe",
    "PaymentLedgerProbe",
    "DefaultPaymentLedgerProbe",
    "ReconciliationProbe",
    "DefaultReconciliationProbe",
    "RoomServiceProbe",
    "DefaultRoomServiceProbe",
    "TenantServiceProbe",
    "DefaultTenantServiceProbe",
]
