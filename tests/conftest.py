"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta

import pytest

from decom_status.types.models import PoolDecommissionSnapshot

# Fixed reference instant shared by calculator and renderer tests
NOW = datetime(2024, 6, 1, 12, 0, 0, tzinfo=UTC)

GIB = 1024**3
MIB = 1024**2

type SnapshotFactory = Callable[..., PoolDecommissionSnapshot]


@pytest.fixture
def now() -> datetime:
    """Provide the fixed reference instant."""
    return NOW


@pytest.fixture
def make_snapshot() -> SnapshotFactory:
    """Provide a factory for pool snapshots relative to NOW.

    Defaults describe a full 1 GiB pool (no free space at the start) that
    has freed 219 MiB over 90 seconds. Pass ``elapsed=None`` for a pool that has not
    started.
    """

    def factory(
        *,
        pool_id: int = 0,
        command_line: str = "https://node{1...4}/data{1...4}",
        elapsed: float | None = 90.0,
        total_size: int = GIB,
        start_size: int = 0,
        current_size: int = 219 * MIB,
        complete: bool = False,
        failed: bool = False,
        canceled: bool = False,
    ) -> PoolDecommissionSnapshot:
        start_time = None if elapsed is None else NOW - timedelta(seconds=elapsed)
        return PoolDecommissionSnapshot(
            pool_id=pool_id,
            command_line=command_line,
            start_time=start_time,
            total_size=total_size,
            start_size=start_size,
            current_size=current_size,
            complete=complete,
            failed=failed,
            canceled=canceled,
        )

    return factory
