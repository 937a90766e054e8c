"""Protocol definitions for component interfaces.

This module defines structural subtyping protocols that establish
contracts for core application components without requiring inheritance.
"""

from typing import Protocol, runtime_checkable

from decom_status.types.models import PoolDecommissionSnapshot


@runtime_checkable
class SnapshotSource(Protocol):
    """Protocol for components that fetch pool decommission snapshots.

    Implemented by the admin API client; test doubles implement it to drive
    the watcher without any network access.
    """

    async def list_pools_status(self) -> list[PoolDecommissionSnapshot]:
        """Fetch one snapshot per pool known to the cluster.

        Returns:
            Snapshots in the order reported by the cluster

        Raises:
            AdminAPIError: If the status query fails
        """
        ...
