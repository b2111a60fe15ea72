"""Request metrics, iteration counters and threshold evaluation."""

from __future__ import annotations

from storeload.metrics.collector import MetricCollector, RunTotals
from storeload.metrics.histogram import HdrHistogramWrapper
from storeload.metrics.iterations import IterationStats
from storeload.metrics.models import (
    EndpointMetrics,
    MetricSnapshot,
    RequestMetric,
    ScenarioStats,
    TestResult,
    ThresholdResult,
)
from storeload.metrics.thresholds import Threshold, evaluate_thresholds, parse_thresholds

__all__ = [
    "EndpointMetrics",
    "HdrHistogramWrapper",
    "IterationStats",
    "MetricCollector",
    "MetricSnapshot",
    "RequestMetric",
    "RunTotals",
    "ScenarioStats",
    "TestResult",
    "Threshold",
    "ThresholdResult",
    "evaluate_thresholds",
    "parse_thresholds",
]
