"""In-memory request metric collection."""

from __future__ import annotations

import time
from collections import defaultdict, deque
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from storeload._internal.logging import get_logger
from storeload.metrics.models import EndpointMetrics, MetricSnapshot

if TYPE_CHECKING:
    from collections.abc import Sequence

    from storeload.client.http_client import RequestMetric

logger = get_logger("metrics.collector")

_SNAPSHOT_PERCENTILES = [50.0, 90.0, 95.0, 99.0]


@dataclass(frozen=True)
class RunTotals:
    """Raw cumulative values that threshold expressions are evaluated on.

    Attributes:
        latencies: Every recorded latency in milliseconds.
        total_requests: Number of requests made.
        failed_requests: Requests counted as failed.
        bytes_received: Sum of response body sizes.
    """

    latencies: np.ndarray
    total_requests: int
    failed_requests: int
    bytes_received: int

    @property
    def failure_rate(self) -> float:
        return self.failed_requests / self.total_requests if self.total_requests else 0.0


def _latency_summary(latencies: Sequence[float]) -> tuple[float, float, float, list[float]]:
    """Return ``(min, max, avg, [p50, p90, p95, p99])`` for *latencies*."""
    if not latencies:
        return (0.0, 0.0, 0.0, [0.0] * len(_SNAPSHOT_PERCENTILES))

    arr = np.array(latencies, dtype=np.float64)
    percentiles = np.percentile(arr, _SNAPSHOT_PERCENTILES)
    return (
        float(np.min(arr)),
        float(np.max(arr)),
        float(np.mean(arr)),
        [float(p) for p in percentiles],
    )


class MetricCollector:
    """Collects RequestMetric objects in a deque shared by all virtual users.

    ``record`` is passed to every ``HttpClient`` as its metric callback.
    ``flush`` drains the deque and summarises the interval; the drained
    metrics are kept for the cumulative summary and threshold evaluation.
    """

    def __init__(self) -> None:
        self._buffer: deque[RequestMetric] = deque()
        self._all_metrics: list[RequestMetric] = []
        self._last_flush_time: float = time.monotonic()

    @property
    def pending_count(self) -> int:
        """Return the number of unprocessed metrics in the buffer."""
        return len(self._buffer)

    def record(self, metric: RequestMetric) -> None:
        """Append a metric to the collection buffer.

        Args:
            metric: The request metric to record.
        """
        self._buffer.append(metric)

    def flush(self, elapsed_seconds: float, active_users: int) -> MetricSnapshot:
        """Drain the buffer and compute a snapshot for the interval.

        Args:
            elapsed_seconds: Seconds elapsed since the run started.
            active_users: Current number of active virtual users.

        Returns:
            A MetricSnapshot summarising the metrics drained by this call.
        """
        drained: list[RequestMetric] = []
        while self._buffer:
            drained.append(self._buffer.popleft())
        self._all_metrics.extend(drained)

        now = time.monotonic()
        interval = max(now - self._last_flush_time, 0.001)
        self._last_flush_time = now

        return self._build_snapshot(drained, elapsed_seconds, active_users, interval)

    def get_cumulative_snapshot(self, elapsed_seconds: float, active_users: int) -> MetricSnapshot:
        """Return a snapshot over every metric flushed since creation.

        Does not drain the buffer; call ``flush`` first to include pending
        metrics.
        """
        return self._build_snapshot(
            self._all_metrics,
            elapsed_seconds,
            active_users,
            max(elapsed_seconds, 0.001),
        )

    def totals(self) -> RunTotals:
        """Return the cumulative raw values for threshold evaluation."""
        return RunTotals(
            latencies=np.array([m.latency_ms for m in self._all_metrics], dtype=np.float64),
            total_requests=len(self._all_metrics),
            failed_requests=sum(1 for m in self._all_metrics if m.is_error),
            bytes_received=sum(m.content_length for m in self._all_metrics),
        )

    def reset(self) -> None:
        """Clear all internal state."""
        self._buffer.clear()
        self._all_metrics.clear()
        self._last_flush_time = time.monotonic()

    def _build_snapshot(
        self,
        metrics: list[RequestMetric],
        elapsed_seconds: float,
        active_users: int,
        interval: float,
    ) -> MetricSnapshot:
        if not metrics:
            return MetricSnapshot(
                timestamp=time.monotonic(),
                elapsed_seconds=elapsed_seconds,
                active_users=active_users,
            )

        by_endpoint: dict[str, list[RequestMetric]] = defaultdict(list)
        errors_by_status: dict[int, int] = defaultdict(int)
        errors_by_type: dict[str, int] = defaultdict(int)
        total_errors = 0
        check_failures = 0

        for metric in metrics:
            by_endpoint[metric.name].append(metric)
            if not metric.is_error:
                continue
            total_errors += 1
            if metric.check_failed:
                check_failures += 1
            if metric.status_code >= 400:
                errors_by_status[metric.status_code] += 1
            if metric.error is not None:
                # "ClientConnectorError: ..." -> "ClientConnectorError"
                errors_by_type[metric.error.split(":")[0].strip()] += 1

        lat_min, lat_max, lat_avg, (p50, p90, p95, p99) = _latency_summary(
            [m.latency_ms for m in metrics]
        )

        endpoints: dict[str, EndpointMetrics] = {}
        for name, ep_metrics in by_endpoint.items():
            ep_count = len(ep_metrics)
            ep_errors = sum(1 for m in ep_metrics if m.is_error)
            _min, ep_max, ep_avg, (ep_p50, _p90, ep_p95, ep_p99) = _latency_summary(
                [m.latency_ms for m in ep_metrics]
            )
            endpoints[name] = EndpointMetrics(
                name=name,
                request_count=ep_count,
                error_count=ep_errors,
                error_rate=ep_errors / ep_count,
                requests_per_second=ep_count / interval,
                latency_avg=ep_avg,
                latency_p50=ep_p50,
                latency_p95=ep_p95,
                latency_p99=ep_p99,
                latency_max=ep_max,
            )

        total_requests = len(metrics)
        return MetricSnapshot(
            timestamp=time.monotonic(),
            elapsed_seconds=elapsed_seconds,
            active_users=active_users,
            total_requests=total_requests,
            requests_per_second=total_requests / interval,
            latency_min=lat_min,
            latency_max=lat_max,
            latency_avg=lat_avg,
            latency_p50=p50,
            latency_p90=p90,
            latency_p95=p95,
            latency_p99=p99,
            total_errors=total_errors,
            check_failures=check_failures,
            error_rate=total_errors / total_requests,
            bytes_received=sum(m.content_length for m in metrics),
            errors_by_status=dict(errors_by_status),
            errors_by_type=dict(errors_by_type),
            endpoints=endpoints,
        )
