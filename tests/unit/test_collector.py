"""Tests for the MetricCollector."""

from __future__ import annotations

import time

import pytest

from storeload.client.http_client import RequestMetric
from storeload.metrics.collector import MetricCollector


def _make_metric(
    name: str = "GET /products",
    latency_ms: float = 10.0,
    status_code: int = 200,
    error: str | None = None,
    check_failed: bool = False,
    content_length: int = 0,
) -> RequestMetric:
    """Create a RequestMetric with sensible defaults."""
    return RequestMetric(
        timestamp=time.monotonic(),
        name=name,
        method="GET",
        url="http://localhost/products",
        status_code=status_code,
        latency_ms=latency_ms,
        content_length=content_length,
        error=error,
        check_failed=check_failed,
    )


class TestMetricCollectorRecord:
    """Tests for the record method."""

    def test_record_appends_to_buffer(self) -> None:
        collector = MetricCollector()
        collector.record(_make_metric())
        assert collector.pending_count == 1

    def test_pending_count_starts_at_zero(self) -> None:
        assert MetricCollector().pending_count == 0


class TestMetricCollectorFlush:
    """Tests for the flush method."""

    def test_flush_drains_buffer(self) -> None:
        collector = MetricCollector()
        collector.record(_make_metric())
        collector.record(_make_metric())
        collector.flush(elapsed_seconds=1.0, active_users=1)
        assert collector.pending_count == 0

    def test_flush_returns_snapshot_with_correct_request_count(self) -> None:
        collector = MetricCollector()
        for _ in range(3):
            collector.record(_make_metric())
        snapshot = collector.flush(elapsed_seconds=1.0, active_users=2)
        assert snapshot.total_requests == 3
        assert snapshot.active_users == 2

    def test_flush_computes_latency_summary(self) -> None:
        collector = MetricCollector()
        for lat in [10.0, 20.0, 30.0, 40.0, 50.0]:
            collector.record(_make_metric(latency_ms=lat))
        snapshot = collector.flush(elapsed_seconds=1.0, active_users=1)
        assert snapshot.latency_min == 10.0
        assert snapshot.latency_max == 50.0
        assert snapshot.latency_avg == 30.0
        assert snapshot.latency_p50 == 30.0
        assert snapshot.latency_p90 > snapshot.latency_p50

    def test_flush_groups_by_endpoint(self) -> None:
        collector = MetricCollector()
        collector.record(_make_metric(name="GET /products"))
        collector.record(_make_metric(name="GET /products"))
        collector.record(_make_metric(name="GET /users/:id"))
        snapshot = collector.flush(elapsed_seconds=1.0, active_users=1)
        assert snapshot.endpoints["GET /products"].request_count == 2
        assert snapshot.endpoints["GET /users/:id"].request_count == 1

    def test_check_failures_count_as_errors(self) -> None:
        collector = MetricCollector()
        collector.record(_make_metric(status_code=200))
        collector.record(_make_metric(status_code=200, check_failed=True))
        collector.record(_make_metric(status_code=404, check_failed=True))
        snapshot = collector.flush(elapsed_seconds=1.0, active_users=1)
        assert snapshot.total_errors == 2
        assert snapshot.check_failures == 2
        assert snapshot.errors_by_status == {404: 1}
        assert snapshot.error_rate == pytest.approx(2 / 3)

    def test_flush_tracks_errors_by_type(self) -> None:
        collector = MetricCollector()
        collector.record(_make_metric(status_code=0, error="ClientConnectorError: refused"))
        collector.record(_make_metric(status_code=0, error="TimeoutError: timed out"))
        snapshot = collector.flush(elapsed_seconds=1.0, active_users=1)
        assert snapshot.errors_by_type == {"ClientConnectorError": 1, "TimeoutError": 1}
        assert snapshot.check_failures == 0

    def test_flush_sums_bytes_received(self) -> None:
        collector = MetricCollector()
        collector.record(_make_metric(content_length=100))
        collector.record(_make_metric(content_length=250))
        snapshot = collector.flush(elapsed_seconds=1.0, active_users=1)
        assert snapshot.bytes_received == 350

    def test_empty_flush_returns_zero_snapshot(self) -> None:
        collector = MetricCollector()
        snapshot = collector.flush(elapsed_seconds=1.0, active_users=0)
        assert snapshot.total_requests == 0
        assert snapshot.requests_per_second == 0.0
        assert snapshot.total_errors == 0

    def test_flush_endpoint_error_rate(self) -> None:
        collector = MetricCollector()
        collector.record(_make_metric(name="EP", status_code=200))
        collector.record(_make_metric(name="EP", status_code=500))
        ep = collector.flush(elapsed_seconds=1.0, active_users=1).endpoints["EP"]
        assert ep.error_count == 1
        assert ep.error_rate == pytest.approx(0.5)


class TestMetricCollectorCumulative:
    """Tests for get_cumulative_snapshot and totals."""

    def test_cumulative_includes_all_flushed_metrics(self) -> None:
        collector = MetricCollector()
        for _ in range(3):
            collector.record(_make_metric())
        collector.flush(elapsed_seconds=1.0, active_users=1)
        for _ in range(2):
            collector.record(_make_metric())
        collector.flush(elapsed_seconds=2.0, active_users=1)

        cumulative = collector.get_cumulative_snapshot(elapsed_seconds=2.0, active_users=0)
        assert cumulative.total_requests == 5

    def test_cumulative_does_not_drain_buffer(self) -> None:
        collector = MetricCollector()
        collector.record(_make_metric())
        collector.get_cumulative_snapshot(elapsed_seconds=1.0, active_users=1)
        assert collector.pending_count == 1

    def test_totals_cover_flushed_metrics(self) -> None:
        collector = MetricCollector()
        collector.record(_make_metric(latency_ms=5.0, content_length=10))
        collector.record(_make_metric(latency_ms=15.0, status_code=500, content_length=20))
        collector.flush(elapsed_seconds=1.0, active_users=1)

        totals = collector.totals()
        assert totals.total_requests == 2
        assert totals.failed_requests == 1
        assert totals.failure_rate == pytest.approx(0.5)
        assert totals.bytes_received == 30
        assert totals.latencies.tolist() == [5.0, 15.0]

    def test_empty_totals_failure_rate_is_zero(self) -> None:
        assert MetricCollector().totals().failure_rate == 0.0


class TestMetricCollectorReset:
    """Tests for the reset method."""

    def test_reset_clears_cumulative_state(self) -> None:
        collector = MetricCollector()
        collector.record(_make_metric())
        collector.flush(elapsed_seconds=1.0, active_users=1)
        collector.record(_make_metric())
        collector.reset()
        assert collector.pending_count == 0
        assert collector.totals().total_requests == 0
