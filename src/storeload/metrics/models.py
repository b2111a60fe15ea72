"""Metric aggregation dataclasses."""

from __future__ import annotations

from dataclasses import dataclass, field

from storeload.client.http_client import RequestMetric

__all__ = [
    "EndpointMetrics",
    "MetricSnapshot",
    "RequestMetric",
    "ScenarioStats",
    "TestResult",
    "ThresholdResult",
]


@dataclass
class EndpointMetrics:
    """Aggregated metrics for one logical request name.

    Attributes:
        name: Logical endpoint name (e.g., "GET /products").
        request_count: Total number of requests to this endpoint.
        error_count: Requests that failed at transport level or validation.
        error_rate: Fraction of requests that failed (0.0 to 1.0).
        requests_per_second: Requests per second to this endpoint.
        latency_avg: Mean response time in milliseconds.
        latency_p50: Median response time in milliseconds.
        latency_p95: 95th percentile response time in milliseconds.
        latency_p99: 99th percentile response time in milliseconds.
        latency_max: Maximum response time in milliseconds.
    """

    name: str
    request_count: int = 0
    error_count: int = 0
    error_rate: float = 0.0
    requests_per_second: float = 0.0
    latency_avg: float = 0.0
    latency_p50: float = 0.0
    latency_p95: float = 0.0
    latency_p99: float = 0.0
    latency_max: float = 0.0


@dataclass
class MetricSnapshot:
    """Aggregated request metrics for one flush interval or a whole run.

    Attributes:
        timestamp: Monotonic timestamp of the snapshot.
        elapsed_seconds: Seconds since the test started.
        active_users: Number of active virtual users.
        total_requests: Requests in this interval.
        requests_per_second: Overall RPS in this interval.
        latency_min: Minimum latency (ms).
        latency_max: Maximum latency (ms).
        latency_avg: Mean latency (ms).
        latency_p50: Median latency (ms).
        latency_p90: 90th percentile latency (ms).
        latency_p95: 95th percentile latency (ms).
        latency_p99: 99th percentile latency (ms).
        total_errors: Failed requests in this interval.
        check_failures: Subset of errors where a response arrived but
            failed validation.
        error_rate: Fraction of requests that failed (0.0 to 1.0).
        bytes_received: Sum of response body sizes.
        errors_by_status: Error count keyed by HTTP status code.
        errors_by_type: Error count keyed by transport error type.
        endpoints: Per-endpoint metrics keyed by endpoint name.
    """

    timestamp: float
    elapsed_seconds: float
    active_users: int
    total_requests: int = 0
    requests_per_second: float = 0.0
    latency_min: float = 0.0
    latency_max: float = 0.0
    latency_avg: float = 0.0
    latency_p50: float = 0.0
    latency_p90: float = 0.0
    latency_p95: float = 0.0
    latency_p99: float = 0.0
    total_errors: int = 0
    check_failures: int = 0
    error_rate: float = 0.0
    bytes_received: int = 0
    errors_by_status: dict[int, int] = field(default_factory=dict)
    errors_by_type: dict[str, int] = field(default_factory=dict)
    endpoints: dict[str, EndpointMetrics] = field(default_factory=dict)


@dataclass
class ScenarioStats:
    """Iteration counters for one scenario.

    Attributes:
        name: Scenario name.
        iterations: Times the scenario was selected and run.
        failures: Iterations whose behavior raised.
        duration_avg: Mean behavior duration in milliseconds.
        duration_p95: 95th percentile behavior duration in milliseconds.
        duration_max: Longest behavior duration in milliseconds.
        errors_by_type: Failure count keyed by exception class name.
    """

    name: str
    iterations: int = 0
    failures: int = 0
    duration_avg: float = 0.0
    duration_p95: float = 0.0
    duration_max: float = 0.0
    errors_by_type: dict[str, int] = field(default_factory=dict)

    @property
    def failure_rate(self) -> float:
        return self.failures / self.iterations if self.iterations else 0.0


@dataclass(frozen=True)
class ThresholdResult:
    """Outcome of one threshold expression.

    Attributes:
        metric: Metric the expression applies to (e.g., "http_req_duration").
        expression: Original expression text (e.g., "p(95)<500").
        observed: Value computed from the run.
        passed: True if the observed value satisfies the expression.
    """

    metric: str
    expression: str
    observed: float
    passed: bool


@dataclass
class TestResult:
    """Complete result of a profile run.

    Attributes:
        profile_name: Name of the profile that was executed.
        start_time: Monotonic time when the run started.
        end_time: Monotonic time when the run completed.
        duration_seconds: Wall-clock duration of the run.
        pattern_description: Human-readable description of the stage plan.
        snapshots: One MetricSnapshot per scheduler tick.
        final_summary: Snapshot covering the whole run.
        scenarios: Iteration counters per scenario name.
        thresholds: Evaluated threshold expressions.
    """

    __test__ = False

    profile_name: str
    start_time: float
    end_time: float
    duration_seconds: float
    pattern_description: str
    snapshots: list[MetricSnapshot] = field(default_factory=list)
    final_summary: MetricSnapshot | None = None
    scenarios: dict[str, ScenarioStats] = field(default_factory=dict)
    thresholds: list[ThresholdResult] = field(default_factory=list)

    @property
    def total_iterations(self) -> int:
        return sum(s.iterations for s in self.scenarios.values())

    @property
    def thresholds_passed(self) -> bool:
        return all(t.passed for t in self.thresholds)
