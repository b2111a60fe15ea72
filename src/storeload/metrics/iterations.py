"""Per-scenario iteration counters and behavior-duration histograms."""

from __future__ import annotations

from collections import defaultdict

from storeload.metrics.histogram import HdrHistogramWrapper
from storeload.metrics.models import ScenarioStats


class IterationStats:
    """Counts selections, failures and durations per scenario.

    One instance is shared by every virtual user of a session. Drivers
    call ``record`` once per iteration, from the event loop thread only.
    """

    def __init__(self) -> None:
        self._iterations: dict[str, int] = defaultdict(int)
        self._failures: dict[str, int] = defaultdict(int)
        self._errors: dict[str, dict[str, int]] = defaultdict(lambda: defaultdict(int))
        self._durations: dict[str, HdrHistogramWrapper] = {}

    def record(
        self,
        scenario_name: str,
        duration_ms: float,
        error: BaseException | None = None,
    ) -> None:
        """Record one finished iteration.

        Args:
            scenario_name: Scenario that was selected.
            duration_ms: Time spent inside the behavior.
            error: Exception the behavior raised, if any.
        """
        self._iterations[scenario_name] += 1
        if error is not None:
            self._failures[scenario_name] += 1
            self._errors[scenario_name][type(error).__name__] += 1
        histogram = self._durations.get(scenario_name)
        if histogram is None:
            histogram = self._durations[scenario_name] = HdrHistogramWrapper()
        histogram.record_ms(duration_ms)

    @property
    def total_iterations(self) -> int:
        return sum(self._iterations.values())

    @property
    def total_failures(self) -> int:
        return sum(self._failures.values())

    def iterations(self, scenario_name: str) -> int:
        return self._iterations.get(scenario_name, 0)

    def failures(self, scenario_name: str) -> int:
        return self._failures.get(scenario_name, 0)

    def snapshot(self) -> dict[str, ScenarioStats]:
        """Return a ScenarioStats per scenario seen so far, by name."""
        stats: dict[str, ScenarioStats] = {}
        for name in sorted(self._iterations):
            histogram = self._durations[name]
            stats[name] = ScenarioStats(
                name=name,
                iterations=self._iterations[name],
                failures=self._failures.get(name, 0),
                duration_avg=histogram.mean(),
                duration_p95=histogram.percentile(95.0),
                duration_max=histogram.max(),
                errors_by_type=dict(self._errors.get(name, {})),
            )
        return stats
