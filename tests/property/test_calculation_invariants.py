"""Property-based tests for progress calculation invariants using Hypothesis.

These tests verify properties that hold for every combination of counters,
flags and timestamps, catching edge cases that example-based tests might miss.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from hypothesis import given
from hypothesis import strategies as st

from decom_status.core.calculation import MIN_ELAPSED_SECONDS, evaluate
from decom_status.core.report import build_report, render_report
from decom_status.types.models import InProgress, NotDraining, PoolDecommissionSnapshot, Starting

NOW = datetime(2024, 6, 1, 12, 0, 0, tzinfo=UTC)

sizes = st.integers(min_value=-(2**63), max_value=2**63)
elapsed_values = st.floats(min_value=-86400.0, max_value=10 * 365 * 86400.0, allow_nan=False)


def _snapshot(
    *,
    elapsed: float,
    total_size: int,
    start_size: int,
    current_size: int,
    complete: bool = False,
    failed: bool = False,
    canceled: bool = False,
) -> PoolDecommissionSnapshot:
    return PoolDecommissionSnapshot(
        pool_id=0,
        command_line="pool",
        start_time=NOW - timedelta(seconds=elapsed),
        total_size=total_size,
        start_size=start_size,
        current_size=current_size,
        complete=complete,
        failed=failed,
        canceled=canceled,
    )


@st.composite
def snapshots(draw: st.DrawFn) -> PoolDecommissionSnapshot:
    """Generate snapshots with arbitrary counters, flags and start times."""
    started = draw(st.booleans())
    elapsed = draw(elapsed_values)
    return PoolDecommissionSnapshot(
        pool_id=draw(st.integers(min_value=0, max_value=64)),
        command_line=draw(st.text(max_size=40)),
        start_time=NOW - timedelta(seconds=elapsed) if started else None,
        total_size=draw(sizes),
        start_size=draw(sizes),
        current_size=draw(sizes),
        complete=draw(st.booleans()),
        failed=draw(st.booleans()),
        canceled=draw(st.booleans()),
    )


@st.composite
def draining_counters(draw: st.DrawFn) -> tuple[int, int, int]:
    """Generate (total, start, current) with positive initially used and freed bytes."""
    total = draw(st.integers(min_value=2, max_value=2**60))
    start = draw(st.integers(min_value=0, max_value=total - 1))
    current = draw(st.integers(min_value=start + 1, max_value=total + 2**20))
    return total, start, current


class TestEvaluateInvariants:
    """Property-based tests for snapshot classification."""

    @given(snapshots())
    def test_evaluate_never_raises(self, snapshot: PoolDecommissionSnapshot) -> None:
        """Property: every snapshot yields exactly one view."""
        view = evaluate(snapshot, now=NOW)
        assert isinstance(view, NotDraining | Starting | InProgress)
        assert view.snapshot is snapshot

    @given(snapshots())
    def test_terminal_flags_exclude_pool(self, snapshot: PoolDecommissionSnapshot) -> None:
        """Property: any terminal flag or missing start means NotDraining."""
        view = evaluate(snapshot, now=NOW)
        if snapshot.complete or snapshot.failed or snapshot.canceled or snapshot.start_time is None:
            assert isinstance(view, NotDraining)
        else:
            assert not isinstance(view, NotDraining)

    @given(draining_counters(), st.floats(min_value=-3600.0, max_value=MIN_ELAPSED_SECONDS))
    def test_short_elapsed_is_starting(self, counters: tuple[int, int, int], elapsed: float) -> None:
        """Property: no projection within the first seconds of a decommission."""
        total, start, current = counters
        view = evaluate(_snapshot(elapsed=elapsed, total_size=total, start_size=start, current_size=current), now=NOW)
        assert isinstance(view, Starting)

    @given(
        st.integers(min_value=2, max_value=2**60),
        st.integers(min_value=0, max_value=2**60),
        st.integers(min_value=0, max_value=2**20),
        elapsed_values,
    )
    def test_no_freed_bytes_is_starting(self, total: int, start: int, regression: int, elapsed: float) -> None:
        """Property: counters that did not grow never produce metrics."""
        view = evaluate(
            _snapshot(elapsed=elapsed, total_size=total, start_size=start, current_size=start - regression),
            now=NOW,
        )
        assert isinstance(view, Starting)


class TestMetricsInvariants:
    """Property-based tests for derived metrics."""

    @given(draining_counters(), st.floats(min_value=MIN_ELAPSED_SECONDS + 1, max_value=10 * 365 * 86400.0))
    def test_metrics_bounds(self, counters: tuple[int, int, int], elapsed: float) -> None:
        """Property: positive progress and speed; ETA only strictly before completion."""
        total, start, current = counters
        view = evaluate(_snapshot(elapsed=elapsed, total_size=total, start_size=start, current_size=current), now=NOW)

        assert isinstance(view, InProgress)
        metrics = view.metrics
        assert metrics.progress_fraction > 0
        assert metrics.speed_bytes_per_sec > 0
        assert metrics.bytes_freed + metrics.used_now == metrics.initial_used

        if metrics.progress_fraction >= 1.0:
            assert metrics.eta is None
            assert metrics.remaining_seconds is None
        if metrics.eta is not None:
            assert metrics.remaining_seconds is not None
            assert metrics.remaining_seconds >= 0
            assert metrics.eta >= NOW
            assert metrics.eta == NOW + timedelta(seconds=metrics.remaining_seconds)

    @given(
        draining_counters(),
        st.integers(min_value=1, max_value=2**20),
        st.floats(min_value=MIN_ELAPSED_SECONDS + 1, max_value=365 * 86400.0),
    )
    def test_progress_monotonic_in_current_size(
        self,
        counters: tuple[int, int, int],
        growth: int,
        elapsed: float,
    ) -> None:
        """Property: more free space means at least as much progress."""
        total, start, current = counters
        before = evaluate(_snapshot(elapsed=elapsed, total_size=total, start_size=start, current_size=current), now=NOW)
        after = evaluate(
            _snapshot(elapsed=elapsed, total_size=total, start_size=start, current_size=current + growth),
            now=NOW,
        )

        assert isinstance(before, InProgress)
        assert isinstance(after, InProgress)
        assert after.metrics.progress_fraction >= before.metrics.progress_fraction

    @given(draining_counters(), st.floats(min_value=MIN_ELAPSED_SECONDS + 1, max_value=365 * 86400.0))
    def test_evaluate_is_pure(self, counters: tuple[int, int, int], elapsed: float) -> None:
        """Property: evaluation is a pure function of snapshot and now."""
        total, start, current = counters
        snapshot = _snapshot(elapsed=elapsed, total_size=total, start_size=start, current_size=current)

        assert evaluate(snapshot, now=NOW) == evaluate(snapshot, now=NOW)


class TestReportInvariants:
    """Property-based tests for the rendered report."""

    @given(st.lists(snapshots(), max_size=6))
    def test_render_never_raises(self, pools: list[PoolDecommissionSnapshot]) -> None:
        """Property: any snapshot list renders to a newline-terminated report."""
        report = build_report(pools, now=NOW)
        text = render_report(report)

        assert text.endswith("\n")
        assert len(report.views) + report.skipped == len(pools)
        if not report.views:
            assert text == "No pools are currently being decommissioned.\n"
        else:
            assert text.count("Pool #") >= len(report.views)
