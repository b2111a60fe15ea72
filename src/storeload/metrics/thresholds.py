"""Pass/fail threshold expressions evaluated against a finished run.

Expressions follow the ``aggregation operator value`` form, for example
``p(95)<500`` on ``http_req_duration`` or ``rate<0.1`` on
``http_req_failed``. Which aggregations are valid depends on the metric.
"""

from __future__ import annotations

import operator
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from storeload._internal.errors import ConfigError
from storeload.metrics.models import ThresholdResult

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping, Sequence

    from storeload.metrics.collector import RunTotals

_EXPRESSION = re.compile(
    r"^\s*(?P<agg>p\((?P<pct>\d+(?:\.\d+)?)\)|avg|min|max|med|rate|count)"
    r"\s*(?P<op><=|>=|==|<|>)\s*(?P<value>\d+(?:\.\d+)?)\s*$"
)

_OPERATORS: dict[str, Callable[[float, float], bool]] = {
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
    "==": operator.eq,
}

# Aggregations each metric accepts; "p" covers every p(N).
_METRIC_AGGREGATIONS: dict[str, frozenset[str]] = {
    "http_req_duration": frozenset({"p", "avg", "min", "max", "med"}),
    "http_req_failed": frozenset({"rate"}),
    "api_calls_total": frozenset({"count"}),
    "data_received": frozenset({"count"}),
}


@dataclass(frozen=True)
class Threshold:
    """One parsed threshold expression.

    Attributes:
        metric: Metric name the expression applies to.
        expression: Original expression text.
        aggregation: ``p``, ``avg``, ``min``, ``max``, ``med``, ``rate`` or
            ``count``.
        percentile: Percentile for ``p`` aggregations, else None.
        op: Comparison operator text.
        limit: Right-hand side of the comparison.
    """

    metric: str
    expression: str
    aggregation: str
    percentile: float | None
    op: str
    limit: float

    @classmethod
    def parse(cls, metric: str, expression: str) -> Threshold:
        """Parse *expression* for *metric*.

        Raises:
            ConfigError: If the metric is unknown, the expression does not
                parse, or the aggregation does not apply to the metric.
        """
        allowed = _METRIC_AGGREGATIONS.get(metric)
        if allowed is None:
            msg = f"Unknown threshold metric {metric!r}"
            raise ConfigError(msg)

        match = _EXPRESSION.match(expression)
        if match is None:
            msg = f"Invalid threshold expression {expression!r} for {metric}"
            raise ConfigError(msg)

        pct = match.group("pct")
        aggregation = "p" if pct is not None else match.group("agg")
        if aggregation not in allowed:
            msg = f"Aggregation {match.group('agg')!r} is not valid for {metric}"
            raise ConfigError(msg)

        percentile = float(pct) if pct is not None else None
        if percentile is not None and not 0 <= percentile <= 100:
            msg = f"Percentile must be within 0..100, got {percentile}"
            raise ConfigError(msg)

        return cls(
            metric=metric,
            expression=expression.strip(),
            aggregation=aggregation,
            percentile=percentile,
            op=match.group("op"),
            limit=float(match.group("value")),
        )

    def observe(self, totals: RunTotals) -> float:
        """Compute this threshold's aggregation over *totals*."""
        if self.metric == "http_req_failed":
            return totals.failure_rate
        if self.metric == "api_calls_total":
            return float(totals.total_requests)
        if self.metric == "data_received":
            return float(totals.bytes_received)

        latencies = totals.latencies
        if latencies.size == 0:
            return 0.0
        if self.aggregation == "p":
            return float(np.percentile(latencies, self.percentile))
        if self.aggregation == "med":
            return float(np.median(latencies))
        if self.aggregation == "avg":
            return float(np.mean(latencies))
        if self.aggregation == "min":
            return float(np.min(latencies))
        return float(np.max(latencies))

    def evaluate(self, totals: RunTotals) -> ThresholdResult:
        observed = self.observe(totals)
        return ThresholdResult(
            metric=self.metric,
            expression=self.expression,
            observed=observed,
            passed=_OPERATORS[self.op](observed, self.limit),
        )


def parse_thresholds(table: Mapping[str, Sequence[str]]) -> list[Threshold]:
    """Parse a ``{metric: [expression, ...]}`` table in order."""
    return [Threshold.parse(metric, expr) for metric, exprs in table.items() for expr in exprs]


def evaluate_thresholds(
    thresholds: Sequence[Threshold],
    totals: RunTotals,
) -> list[ThresholdResult]:
    """Evaluate every threshold against the run totals."""
    return [t.evaluate(totals) for t in thresholds]
