"""Polling of pool decommission status.

Provides a one-shot poll and an async generator that polls at a fixed
interval. Polls run strictly one after another; each one fetches a fresh
snapshot list and builds a new report from scratch, so nothing is shared
between polls except the snapshot source.
"""

import asyncio
import logging
from collections.abc import AsyncGenerator, Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Final

from decom_status.core.admin_client import AdminAPIError
from decom_status.core.report import DecommissionReport, build_report
from decom_status.types.protocols import SnapshotSource
from decom_status.utils.logging import clear_poll_id, new_poll_id, set_poll_id

__all__ = [
    "WATCH_INTERVAL_SECONDS",
    "PollResult",
    "local_now",
    "poll_once",
    "watch_decommission",
]

logger = logging.getLogger(__name__)

WATCH_INTERVAL_SECONDS: Final[float] = 10.0


@dataclass(slots=True, frozen=True)
class PollResult:
    """Outcome of one poll in watch mode: a report or the query error."""

    poll_id: str
    report: DecommissionReport | None
    error: AdminAPIError | None = None


def local_now() -> datetime:
    """Return the current time as an aware datetime in the local zone."""
    return datetime.now(UTC).astimezone()


async def poll_once(
    source: SnapshotSource,
    *,
    clock: Callable[[], datetime] = local_now,
) -> DecommissionReport:
    """Fetch snapshots once and build a report.

    ``now`` is read after the query returns, so elapsed times include the
    query latency like the counters do.

    Raises:
        AdminAPIError: If the status query fails
    """
    set_poll_id(new_poll_id())
    try:
        snapshots = await source.list_pools_status()
        return build_report(snapshots, now=clock())
    finally:
        clear_poll_id()


async def watch_decommission(
    source: SnapshotSource,
    *,
    interval: float = WATCH_INTERVAL_SECONDS,
    clock: Callable[[], datetime] = local_now,
    shutdown_event: asyncio.Event | None = None,
) -> AsyncGenerator[PollResult]:
    """Poll decommission status repeatedly and yield one result per poll.

    A failed query does not stop the loop; it is yielded as a PollResult
    carrying the error and the next poll is scheduled as usual.

    Args:
        source: Snapshot source (normally an AdminClient)
        interval: Seconds between the end of one poll and the next
        clock: Source of the ``now`` reference for each report
        shutdown_event: Stops the loop when set, also during the wait

    Yields:
        PollResult for each poll

    Examples:
        >>> async for result in watch_decommission(client):
        ...     print(render_report(result.report))
    """
    if interval <= 0:
        msg = "interval must be greater than zero"
        raise ValueError(msg)

    logger.info("Starting decommission watch", extra={"interval": interval})

    while shutdown_event is None or not shutdown_event.is_set():
        poll_id = new_poll_id()
        set_poll_id(poll_id)
        try:
            snapshots = await source.list_pools_status()
        except AdminAPIError as exc:
            logger.warning(
                "Pool status query failed, retrying at next interval",
                extra={"error": str(exc), "status": exc.status},
            )
            result = PollResult(poll_id=poll_id, report=None, error=exc)
        else:
            result = PollResult(poll_id=poll_id, report=build_report(snapshots, now=clock()))
        finally:
            clear_poll_id()

        yield result

        if shutdown_event is None:
            await asyncio.sleep(interval)
            continue

        try:
            async with asyncio.timeout(interval):
                _ = await shutdown_event.wait()
        except TimeoutError:
            continue

    logger.info("Decommission watch stopped")
