"""HDR histogram wrapper working in milliseconds.

Values are stored as integer microseconds in ``hdrh``'s integer-only
histogram and converted back on read. Iteration durations feed it, so the
range reaches ten minutes rather than a single request's worth.
"""

from __future__ import annotations

from hdrh.histogram import HdrHistogram  # type: ignore[import-untyped]

# 1 microsecond to 10 minutes; long behaviors chain dozens of requests.
_LOWEST_TRACKABLE_US = 1
_HIGHEST_TRACKABLE_US = 600_000_000
_SIGNIFICANT_DIGITS = 3


class HdrHistogramWrapper:
    """Millisecond-facing wrapper around ``HdrHistogram``.

    Every accessor returns 0.0 on an empty histogram instead of raising,
    which keeps report code free of empty checks.

    Attributes:
        lowest_us: Lowest trackable value in microseconds.
        highest_us: Highest trackable value in microseconds.
    """

    def __init__(
        self,
        lowest_us: int = _LOWEST_TRACKABLE_US,
        highest_us: int = _HIGHEST_TRACKABLE_US,
        significant_digits: int = _SIGNIFICANT_DIGITS,
    ) -> None:
        """Initialize the histogram.

        Args:
            lowest_us: Lowest trackable value in microseconds.
            highest_us: Highest trackable value in microseconds.
            significant_digits: Number of significant value digits to keep.
        """
        self.lowest_us = lowest_us
        self.highest_us = highest_us
        self._histogram: HdrHistogram = HdrHistogram(  # type: ignore[no-any-unimported]
            lowest_us, highest_us, significant_digits
        )

    def record_ms(self, value_ms: float) -> bool:
        """Record a duration in milliseconds.

        Values outside ``[lowest_us, highest_us]`` are clamped to the
        nearest bound after conversion to microseconds.

        Args:
            value_ms: Duration in milliseconds.

        Returns:
            True if the histogram accepted the value.
        """
        value_us = max(self.lowest_us, min(int(value_ms * 1000), self.highest_us))
        return bool(self._histogram.record_value(value_us))

    def percentile(self, percentile: float) -> float:
        """Return the value at a given percentile.

        Args:
            percentile: Percentile to compute, 0.0 to 100.0.

        Returns:
            Value in milliseconds, or 0.0 if the histogram is empty.
        """
        if self._histogram.total_count == 0:
            return 0.0
        return float(self._histogram.get_value_at_percentile(percentile)) / 1000.0

    def min(self) -> float:
        """Return the smallest recorded value in milliseconds, 0.0 if empty."""
        if self._histogram.total_count == 0:
            return 0.0
        return float(self._histogram.get_min_value()) / 1000.0

    def max(self) -> float:
        """Return the largest recorded value in milliseconds, 0.0 if empty."""
        if self._histogram.total_count == 0:
            return 0.0
        return float(self._histogram.get_max_value()) / 1000.0

    def mean(self) -> float:
        """Return the mean of all recorded values.

        Returns:
            Mean in milliseconds, or 0.0 if the histogram is empty.
        """
        if self._histogram.total_count == 0:
            return 0.0
        return float(self._histogram.get_mean_value()) / 1000.0

    @property
    def count(self) -> int:
        """Number of values recorded since creation or the last reset."""
        return int(self._histogram.total_count)

    def reset(self) -> None:
        """Clear all recorded values."""
        self._histogram.reset()

    def add(self, other: HdrHistogramWrapper) -> None:
        """Merge another histogram into this one.

        Args:
            other: Histogram to merge from; left unchanged.
        """
        self._histogram.add(other._histogram)
