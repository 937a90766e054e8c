"""Pure calculation functions for decommission progress and ETA estimation.

This module provides stateless, side-effect-free functions for turning one
pool decommission snapshot plus an explicit ``now`` into a classified view:

- Terminal state classification (not started, complete, failed, canceled)
- Noise suppression for early or non-monotonic samples
- Progress fraction, average transfer rate and pool usage
- Linear ETA projection from the full-history average rate

All functions use immutable dataclasses for inputs and outputs and never
raise for any combination of counters, so one odd pool cannot abort a report.
"""

import logging
import math
from datetime import datetime, timedelta

from decom_status.types.aliases import DecommissionView
from decom_status.types.models import (
    DerivedMetrics,
    InProgress,
    NotDraining,
    NotDrainingReason,
    PoolDecommissionSnapshot,
    Starting,
)

logger = logging.getLogger(__name__)

# Rates extrapolated from the first seconds of a decommission are unstable
MIN_ELAPSED_SECONDS: float = 10.0

# timedelta.max is ~999999999 days
_MAX_REMAINING_SECONDS = 999_999_999 * 86400


def classify(snapshot: PoolDecommissionSnapshot) -> NotDrainingReason | None:
    """Classify whether a pool is actively draining.

    Args:
        snapshot: Pool decommission snapshot

    Returns:
        Reason the pool is not draining, or None if it is draining

    Examples:
        >>> snap = PoolDecommissionSnapshot(0, "pool", None, 100, 0, 0)
        >>> classify(snap)
        <NotDrainingReason.NOT_STARTED: 'not_started'>
    """
    if not snapshot.is_started:
        return NotDrainingReason.NOT_STARTED
    if snapshot.complete:
        return NotDrainingReason.COMPLETE
    if snapshot.failed:
        return NotDrainingReason.FAILED
    if snapshot.canceled:
        return NotDrainingReason.CANCELED
    return None


def elapsed_since_start(snapshot: PoolDecommissionSnapshot, *, now: datetime) -> float:
    """Return seconds between the decommission start and ``now``.

    Returns 0.0 for snapshots without a start time, and a negative value if
    the start time lies in the future (clock skew between client and cluster).
    """
    if snapshot.start_time is None:
        return 0.0
    try:
        return (now - snapshot.start_time).total_seconds()
    except (OverflowError, TypeError):
        # Mixed naive/aware timestamps or out-of-range values carry no signal
        return 0.0


def calculate_eta(
    *,
    elapsed_seconds: float,
    progress_fraction: float,
    now: datetime,
) -> tuple[datetime, int] | None:
    """Project the completion time assuming a constant average rate.

    The total duration is ``elapsed / progress``; the remaining duration is
    that total minus ``elapsed``, truncated to whole seconds.

    Args:
        elapsed_seconds: Seconds since the decommission started (must be positive)
        progress_fraction: Fraction of the initial data already moved
        now: Reference instant the projection is anchored to

    Returns:
        Tuple of (ETA, remaining seconds), or None unless 0 < progress < 1
        and the result is representable

    Examples:
        >>> eta = calculate_eta(elapsed_seconds=60.0, progress_fraction=0.5,
        ...                     now=datetime(2024, 1, 1, 12, 0, 0))
        >>> eta
        (datetime.datetime(2024, 1, 1, 12, 1), 60)
    """
    if not 0.0 < progress_fraction < 1.0 or elapsed_seconds <= 0:
        return None

    total_estimated = elapsed_seconds / progress_fraction
    if not math.isfinite(total_estimated):
        return None
    remaining_seconds = int(total_estimated - elapsed_seconds)

    if not 0 <= remaining_seconds < _MAX_REMAINING_SECONDS:
        return None

    try:
        return now + timedelta(seconds=remaining_seconds), remaining_seconds
    except OverflowError:
        return None


def _derive_metrics(snapshot: PoolDecommissionSnapshot, *, now: datetime) -> DerivedMetrics:
    """Derive progress metrics from a snapshot that passed the signal guards.

    Callers must ensure ``initial_used > 0`` and ``elapsed > 0``; ``evaluate``
    does this before calling.

    Args:
        snapshot: Pool decommission snapshot with trustworthy counters
        now: Current instant

    Returns:
        DerivedMetrics for the snapshot
    """
    initial_used = snapshot.total_size - snapshot.start_size
    bytes_freed = snapshot.current_size - snapshot.start_size
    used_now = snapshot.total_size - snapshot.current_size
    elapsed_seconds = elapsed_since_start(snapshot, now=now)

    progress_fraction = bytes_freed / initial_used
    speed_bytes_per_sec = bytes_freed / elapsed_seconds
    usage_fraction = used_now / snapshot.total_size if snapshot.total_size > 0 else 0.0

    projection = calculate_eta(
        elapsed_seconds=elapsed_seconds,
        progress_fraction=progress_fraction,
        now=now,
    )
    eta, remaining_seconds = projection if projection is not None else (None, None)

    return DerivedMetrics(
        initial_used=initial_used,
        bytes_freed=bytes_freed,
        used_now=used_now,
        total_size=snapshot.total_size,
        elapsed_seconds=elapsed_seconds,
        progress_fraction=progress_fraction,
        speed_bytes_per_sec=speed_bytes_per_sec,
        usage_fraction=usage_fraction,
        eta=eta,
        remaining_seconds=remaining_seconds,
    )


def evaluate(snapshot: PoolDecommissionSnapshot, *, now: datetime) -> DecommissionView:
    """Classify one pool and compute its progress metrics where meaningful.

    Args:
        snapshot: Pool decommission snapshot
        now: Current instant (explicit so results are reproducible)

    Returns:
        NotDraining if the pool has not started or reached a terminal state;
        Starting if freed bytes, initially used bytes or elapsed time give no
        trustworthy rate yet; InProgress with metrics otherwise.

    Edge cases:
        - Counters that regress (current < start) yield Starting
        - Start time in the future yields Starting
        - Freed bytes at or above the initial estimate yield InProgress
          without an ETA

    Examples:
        >>> start = datetime(2024, 1, 1, 12, 0, 0)
        >>> snap = PoolDecommissionSnapshot(0, "p", start, 2000, 1000, 1000)
        >>> type(evaluate(snap, now=start + timedelta(seconds=60))).__name__
        'Starting'
    """
    reason = classify(snapshot)
    if reason is not None:
        logger.debug(
            "Pool not draining",
            extra={"pool_id": snapshot.pool_id, "reason": reason.value},
        )
        return NotDraining(snapshot=snapshot, reason=reason)

    initial_used = snapshot.total_size - snapshot.start_size
    bytes_freed = snapshot.current_size - snapshot.start_size
    elapsed_seconds = elapsed_since_start(snapshot, now=now)

    if bytes_freed <= 0 or initial_used <= 0 or elapsed_seconds <= MIN_ELAPSED_SECONDS:
        logger.debug(
            "Pool draining without enough signal for a projection",
            extra={
                "pool_id": snapshot.pool_id,
                "bytes_freed": bytes_freed,
                "initial_used": initial_used,
                "elapsed_seconds": elapsed_seconds,
            },
        )
        return Starting(snapshot=snapshot, elapsed_seconds=elapsed_seconds)

    metrics = _derive_metrics(snapshot, now=now)
    logger.debug(
        "Pool decommission in progress",
        extra={
            "pool_id": snapshot.pool_id,
            "progress_fraction": metrics.progress_fraction,
            "has_eta": metrics.eta is not None,
        },
    )
    return InProgress(snapshot=snapshot, metrics=metrics)
