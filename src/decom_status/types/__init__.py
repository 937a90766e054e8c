"""Type definitions and protocols for decom-status application.

This package provides:
- Data models (immutable dataclasses)
- Protocol definitions (structural subtyping interfaces)
- Type aliases (PEP 695 modern syntax)
"""

from decom_status.types.aliases import (
    DecommissionView,
    DrainingView,
)
from decom_status.types.models import (
    ZERO_TIME,
    DerivedMetrics,
    InProgress,
    NotDraining,
    NotDrainingReason,
    PoolDecommissionSnapshot,
    Starting,
)
from decom_status.types.protocols import (
    SnapshotSource,
)

__all__ = [
    # Type aliases
    "DecommissionView",
    "DrainingView",
    # Data models
    "ZERO_TIME",
    "DerivedMetrics",
    "InProgress",
    "NotDraining",
    "NotDrainingReason",
    "PoolDecommissionSnapshot",
    "Starting",
    # Protocols
    "SnapshotSource",
]
