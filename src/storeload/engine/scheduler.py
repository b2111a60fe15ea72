"""Turns a LoadPattern's concurrency curve into scale commands."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator

    from storeload.patterns.base import LoadPattern


class ScaleDirection(Enum):
    """Direction of a concurrency change."""

    UP = auto()
    DOWN = auto()
    HOLD = auto()


@dataclass(frozen=True)
class ScaleCommand:
    """Adjust the number of active virtual users.

    Attributes:
        elapsed_seconds: Time offset from the start of the run.
        target_concurrency: Desired number of active virtual users.
        direction: Scaling up, down, or holding.
        delta: Absolute change from the previous tick (always >= 0).
    """

    elapsed_seconds: float
    target_concurrency: int
    direction: ScaleDirection
    delta: int


class Scheduler:
    """Emits one ScaleCommand per pattern tick.

    Targets above ``max_users`` are capped, which lets a smoke run play a
    full stage table with fewer virtual users.

    Args:
        pattern: Concurrency curve to follow.
        duration_seconds: Length of the schedule.
        tick_interval: Seconds between commands.
        max_users: Optional cap on every target.
    """

    def __init__(
        self,
        pattern: LoadPattern,
        duration_seconds: float,
        tick_interval: float = 1.0,
        max_users: int | None = None,
    ) -> None:
        self._pattern = pattern
        self._duration_seconds = duration_seconds
        self._tick_interval = tick_interval
        self._max_users = max_users

    def iter_commands(self) -> Iterator[ScaleCommand]:
        """Yield a ScaleCommand for each tick, tracking the previous level."""
        previous = 0
        for elapsed, raw_target in self._pattern.iter_concurrency(
            self._duration_seconds, self._tick_interval
        ):
            target = raw_target if self._max_users is None else min(raw_target, self._max_users)
            delta = target - previous
            if delta > 0:
                direction = ScaleDirection.UP
            elif delta < 0:
                direction = ScaleDirection.DOWN
            else:
                direction = ScaleDirection.HOLD

            yield ScaleCommand(
                elapsed_seconds=elapsed,
                target_concurrency=target,
                direction=direction,
                delta=abs(delta),
            )
            previous = target

    @property
    def total_ticks(self) -> int:
        """Return the expected number of ticks for this schedule."""
        return int(self._duration_seconds / self._tick_interval) + 1
