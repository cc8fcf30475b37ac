"""Process-level probes: startup, shutdown and the database engine."""

from infrastructure.observability.startup_probe import (
    DefaultLifecycleProbe,
    LifecycleProbe,
)

__all__ = [
    "DefaultLifecycleProbe",
    "LifecycleProbe",
]
