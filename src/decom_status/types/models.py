"""Data models for decom-status application.

This module defines immutable dataclasses used throughout the application
for type-safe data transfer between the snapshot source, the progress
calculator and the report renderer.
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum

# Zero timestamp the admin API reports for pools that never started
ZERO_TIME: datetime = datetime(1, 1, 1, tzinfo=UTC)


@dataclass(slots=True, frozen=True)
class PoolDecommissionSnapshot:
    """Immutable point-in-time reading of one pool's decommission counters.

    Sizes are free-space counters: ``start_size`` is the free bytes when the
    decommission began, ``current_size`` the free bytes at sampling time.
    As data leaves the pool, free space grows, so ``current_size`` normally
    increases towards ``total_size``.
    """

    pool_id: int
    command_line: str
    start_time: datetime | None
    total_size: int
    start_size: int
    current_size: int
    complete: bool = False
    failed: bool = False
    canceled: bool = False

    @property
    def is_started(self) -> bool:
        """Return True if the decommission has a real start timestamp."""
        if self.start_time is None:
            return False
        if self.start_time.tzinfo is None:
            return self.start_time > ZERO_TIME.replace(tzinfo=None)
        return self.start_time > ZERO_TIME

    @property
    def display_id(self) -> int:
        """Return the one-based pool number shown to users."""
        return self.pool_id + 1


class NotDrainingReason(Enum):
    """Why a pool is excluded from the decommission report."""

    NOT_STARTED = "not_started"
    COMPLETE = "complete"
    FAILED = "failed"
    CANCELED = "canceled"


@dataclass(slots=True, frozen=True)
class DerivedMetrics:
    """Immutable progress metrics derived from one snapshot and ``now``.

    ``eta`` and ``remaining_seconds`` are only set while the decommission is
    strictly between 0% and 100% of the initially used bytes.
    """

    initial_used: int
    bytes_freed: int
    used_now: int
    total_size: int
    elapsed_seconds: float
    progress_fraction: float
    speed_bytes_per_sec: float
    usage_fraction: float
    eta: datetime | None
    remaining_seconds: int | None


@dataclass(slots=True, frozen=True)
class NotDraining:
    """Pool is not actively draining and is left out of the report."""

    snapshot: PoolDecommissionSnapshot
    reason: NotDrainingReason


@dataclass(slots=True, frozen=True)
class Starting:
    """Pool is draining but counters do not yet support a projection."""

    snapshot: PoolDecommissionSnapshot
    elapsed_seconds: float


@dataclass(slots=True, frozen=True)
class InProgress:
    """Pool is draining with enough signal to report rate and progress."""

    snapshot: PoolDecommissionSnapshot
    metrics: DerivedMetrics
