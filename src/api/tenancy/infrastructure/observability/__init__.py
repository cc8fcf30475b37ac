"""Domain-Oriented Observability for tenancy infrastructure.

Probes for repository operations following Domain-Oriented Observability patterns.
"""

from tenancy.infrastructure.observability.repository_probe import (
    DefaultLedgerRepositoryProbe,
    DefaultRoomRepositoryProbe,
    DefaultTenantRepositoryProbe,
    LedgerRepositoryProbe,
    RoomRepositoryProbe,
    TenantRepositoryProbe,
)

__all__ = [
    "LedgerRepositoryProbe",
    "DefaultLedgerRepositoryProbe",
    "RoomRepositoryProbe",
    "DefaultRoomRepositoryProbe",
    "TenantRepositoryProbe",
    "DefaultTenantRepositoryProbe",
]
