"""Abstract base class for concurrency patterns."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from storeload._internal.errors import ConfigError

if TYPE_CHECKING:
    from collections.abc import Iterator


class LoadPattern(ABC):
    """Abstract base for virtual-user concurrency curves.

    Subclasses implement :meth:`iter_concurrency` to yield
    ``(elapsed_seconds, target_concurrency)`` tuples at a fixed tick, which
    the scheduler turns into scale commands for the test session.
    """

    @abstractmethod
    def iter_concurrency(
        self,
        duration_seconds: float,
        tick_interval: float = 1.0,
    ) -> Iterator[tuple[float, int]]:
        """Yield ``(elapsed_seconds, target_concurrency)`` at each tick.

        Args:
            duration_seconds: Total duration to generate ticks for.
            tick_interval: Seconds between yielded ticks.

        Yields:
            Time offset from the start and the number of virtual users that
            should be active at that moment.
        """

    @property
    @abstractmethod
    def duration_seconds(self) -> float:
        """Natural length of the pattern in seconds."""

    @abstractmethod
    def describe(self) -> str:
        """Return a short summary for logs and report headers."""


def _validate_positive(value: float, name: str) -> None:
    """Raise :class:`ConfigError` if *value* is not strictly positive."""
    if value <= 0:
        msg = f"{name} must be positive, got {value}"
        raise ConfigError(msg)


def _validate_non_negative(value: float, name: str) -> None:
    """Raise :class:`ConfigError` if *value* is negative."""
    if value < 0:
        msg = f"{name} must be non-negative, got {value}"
        raise ConfigError(msg)
