"""Report assembly and text rendering for pool decommission status.

This module ties the progress calculator to the fixed text layout printed by
the CLI. It evaluates every snapshot, skips pools that are not draining, and
renders one block per draining pool. If no pool is draining the report is a
single fixed message.

Rendering failures are isolated per pool: a pool whose block cannot be
rendered keeps its header and degrades to the "starting" placeholder
instead of aborting the whole report.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime

from decom_status.core.calculation import evaluate
from decom_status.types.aliases import DecommissionView, DrainingView
from decom_status.types.models import (
    InProgress,
    NotDraining,
    PoolDecommissionSnapshot,
    Starting,
)
from decom_status.utils.formatting import (
    format_duration,
    format_percent,
    format_rate,
    format_relative_time,
    format_size,
    format_timestamp,
)

__all__ = [
    "NO_POOLS_MESSAGE",
    "STARTING_MESSAGE",
    "DecommissionReport",
    "build_report",
    "render_report",
    "render_view",
]

logger = logging.getLogger(__name__)

NO_POOLS_MESSAGE = "No pools are currently being decommissioned."
STARTING_MESSAGE = "Decommissioning is starting, ETA not yet available..."

_INDENT = "  "


@dataclass(slots=True, frozen=True)
class DecommissionReport:
    """Aggregate of one poll: draining views in cluster order."""

    generated_at: datetime
    views: tuple[DrainingView, ...] = field(default_factory=tuple)
    skipped: int = 0

    @property
    def has_draining(self) -> bool:
        """Return True if at least one pool is being decommissioned."""
        return bool(self.views)


def build_report(
    snapshots: Sequence[PoolDecommissionSnapshot],
    *,
    now: datetime,
) -> DecommissionReport:
    """Evaluate every snapshot and keep the pools that are draining.

    Args:
        snapshots: One snapshot per pool, in cluster order
        now: Current instant shared by every pool of this poll

    Returns:
        DecommissionReport with draining views and the number of skipped pools
    """
    views: list[DrainingView] = []
    skipped = 0

    for snapshot in snapshots:
        view: DecommissionView = evaluate(snapshot, now=now)
        match view:
            case NotDraining():
                skipped += 1
            case Starting() | InProgress():
                views.append(view)

    logger.info(
        "Decommission report assembled",
        extra={"pools": len(snapshots), "draining": len(views), "skipped": skipped},
    )
    return DecommissionReport(generated_at=now, views=tuple(views), skipped=skipped)


def _header_lines(snapshot: PoolDecommissionSnapshot, *, now: datetime) -> list[str]:
    lines = [f"Pool #{snapshot.display_id}: {snapshot.command_line}"]
    if snapshot.start_time is None:
        return lines

    try:
        started = format_timestamp(snapshot.start_time)
    except (ValueError, OverflowError) as exc:
        logger.warning(
            "Could not format pool start time",
            extra={"pool_id": snapshot.pool_id, "error": str(exc)},
        )
        return lines

    try:
        ago = format_relative_time(snapshot.start_time, now)
    except (OverflowError, TypeError) as exc:
        # Naive and aware instants cannot be compared
        logger.debug(
            "Could not compute relative start time",
            extra={"pool_id": snapshot.pool_id, "error": str(exc)},
        )
        lines.append(f"{_INDENT}Started: {started}")
    else:
        lines.append(f"{_INDENT}Started: {started} ({ago} ago)")
    return lines


def _progress_lines(view: InProgress) -> list[str]:
    metrics = view.metrics
    lines = [
        f"{_INDENT}Progress: {format_size(metrics.bytes_freed)} / "
        f"{format_size(metrics.initial_used)} freed ({format_percent(metrics.progress_fraction)})",
        f"{_INDENT}Current usage: {format_size(max(metrics.used_now, 0))} / "
        f"{format_size(max(metrics.total_size, 0))} ({format_percent(metrics.usage_fraction)})",
        f"{_INDENT}Speed: {format_rate(metrics.speed_bytes_per_sec)}",
    ]
    if metrics.eta is not None and metrics.remaining_seconds is not None:
        lines.append(
            f"{_INDENT}ETA: {format_timestamp(metrics.eta)} ({format_duration(metrics.remaining_seconds)} remaining)"
        )
    return lines


def render_view(view: DrainingView, *, now: datetime) -> list[str]:
    """Render one draining pool as text lines, ending with a blank separator.

    Args:
        view: Starting or InProgress view of a pool
        now: Current instant, used for the relative start time

    Returns:
        Lines of the pool block without trailing newlines
    """
    snapshot = view.snapshot
    lines = _header_lines(snapshot, now=now)
    try:
        match view:
            case InProgress():
                body = _progress_lines(view)
            case Starting():
                body = [f"{_INDENT}{STARTING_MESSAGE}"]
    except (ValueError, OverflowError, TypeError) as exc:
        logger.warning(
            "Could not render pool progress, showing placeholder",
            extra={"pool_id": snapshot.pool_id, "error": str(exc)},
        )
        body = [f"{_INDENT}{STARTING_MESSAGE}"]

    lines.extend(body)
    lines.append("")
    return lines


def render_report(report: DecommissionReport) -> str:
    """Render a full report as printable text.

    Returns:
        The pool blocks joined by newlines, or the single "no pools" line
    """
    if not report.has_draining:
        return f"{NO_POOLS_MESSAGE}\n"

    lines: list[str] = []
    for view in report.views:
        lines.extend(render_view(view, now=report.generated_at))
    return "\n".join(lines) + "\n"
