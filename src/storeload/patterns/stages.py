"""Stage-table pattern: linear ramps between consecutive stage targets."""

from __future__ import annotations

from typing import TYPE_CHECKING

from storeload._internal.errors import ConfigError
from storeload.core.duration import parse_duration_minutes
from storeload.patterns.base import LoadPattern, _validate_non_negative, _validate_positive

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

    from storeload.core.duration import Stage


class StagePattern(LoadPattern):
    """Play a stage table as a piecewise-linear concurrency curve.

    Each stage ramps linearly from the previous stage's target (or
    *start_users* for the first stage) to its own target over its
    duration. After the last stage the curve holds at the final target.

    Args:
        stages: Stage rows in order. Must not be empty.
        time_scale: Multiplier applied to every stage duration; ``0.01``
            turns a 9 minute table into a 5.4 second smoke run.
        start_users: Concurrency at time zero.

    Raises:
        ConfigError: If the table is empty, a duration does not parse or a
            target is negative.

    Example::

        pattern = StagePattern([Stage("1m", 10), Stage("1m", 10), Stage("30s", 0)])
        pattern.target_at(30.0)  # 5, half way up the first ramp
    """

    def __init__(
        self,
        stages: Sequence[Stage],
        *,
        time_scale: float = 1.0,
        start_users: int = 0,
    ) -> None:
        if not stages:
            msg = "StagePattern requires at least one stage"
            raise ConfigError(msg)
        _validate_positive(time_scale, "time_scale")
        _validate_non_negative(start_users, "start_users")

        self._segments: list[tuple[float, int]] = []
        for stage in stages:
            minutes = parse_duration_minutes(stage.duration)
            if minutes is None:
                msg = f"Invalid stage duration {stage.duration!r}"
                raise ConfigError(msg)
            _validate_non_negative(stage.target, "stage target")
            self._segments.append((minutes * 60.0 * time_scale, stage.target))

        self._stages = tuple(stages)
        self._time_scale = time_scale
        self._start_users = start_users

    @property
    def duration_seconds(self) -> float:
        """Total length of the scaled stage table in seconds."""
        return sum(seconds for seconds, _ in self._segments)

    @property
    def peak_users(self) -> int:
        """Highest target in the table, including *start_users*."""
        return max(self._start_users, *(target for _, target in self._segments))

    def target_at(self, elapsed_seconds: float) -> int:
        """Return the interpolated concurrency at *elapsed_seconds*."""
        previous = self._start_users
        offset = 0.0
        for seconds, target in self._segments:
            if elapsed_seconds < offset + seconds:
                fraction = (elapsed_seconds - offset) / seconds
                return max(round(previous + (target - previous) * fraction), 0)
            offset += seconds
            previous = target
        return previous

    def iter_concurrency(
        self,
        duration_seconds: float,
        tick_interval: float = 1.0,
    ) -> Iterator[tuple[float, int]]:
        """Yield the interpolated target at each tick up to *duration_seconds*."""
        _validate_positive(duration_seconds, "duration_seconds")
        _validate_positive(tick_interval, "tick_interval")
        tick = 0
        elapsed = 0.0
        while elapsed <= duration_seconds:
            yield (elapsed, self.target_at(elapsed))
            tick += 1
            elapsed = tick * tick_interval

    def describe(self) -> str:
        """Return the stage rows as ``duration->target``, with the scale if any."""
        rows = ", ".join(f"{s.duration}->{s.target}" for s in self._stages)
        if self._time_scale != 1.0:
            return f"Stages: {rows} (x{self._time_scale:g})"
        return f"Stages: {rows}"
