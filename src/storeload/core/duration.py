"""Stage-duration parsing ("2m", "30s", "1h") and stage-table aggregates."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from storeload._internal.errors import ConfigError
from storeload._internal.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = get_logger("core.duration")

# Minutes per unit letter.
_UNIT_FACTORS: dict[str, float] = {
    "s": 1 / 60,
    "m": 1.0,
    "h": 60.0,
}

_NUMERIC_PREFIX = re.compile(r"^\s*(\d+(?:\.\d+)?)")


@dataclass(frozen=True)
class Stage:
    """One row of a stage table: reach *target* virtual users over *duration*.

    Attributes:
        duration: Duration string with a trailing unit letter, e.g. ``"2m"``.
        target: Virtual-user count to reach by the end of the stage.
    """

    duration: str
    target: int


def parse_duration_minutes(text: str) -> float | None:
    """Convert a duration string to minutes.

    The numeric prefix is scaled by the factor of the trailing unit letter
    (``s``, ``m`` or ``h``, case-insensitive).

    Args:
        text: Duration string such as ``"30s"`` or ``"1.5H"``.

    Returns:
        The duration in minutes, or None if the unit is unsupported or the
        prefix is not a number. A warning is logged in that case.
    """
    stripped = text.strip()
    unit = stripped[-1:].lower()
    factor = _UNIT_FACTORS.get(unit)
    if factor is None:
        logger.warning("Unsupported duration unit in %r; stage skipped", text)
        return None

    match = _NUMERIC_PREFIX.match(stripped[:-1])
    if match is None or match.end() != len(stripped[:-1]):
        logger.warning("Unparsable duration %r; stage skipped", text)
        return None

    return float(match.group(1)) * factor


def _durations(stages: Iterable[Stage | str]) -> list[float]:
    minutes: list[float] = []
    for stage in stages:
        text = stage.duration if isinstance(stage, Stage) else stage
        value = parse_duration_minutes(text)
        minutes.append(0.0 if value is None else value)
    return minutes


def total_minutes(stages: Iterable[Stage | str]) -> float:
    """Sum every stage's duration in minutes.

    Stages with an unsupported unit contribute 0.

    Args:
        stages: Stage rows or bare duration strings.

    Returns:
        Total duration in minutes.
    """
    return sum(_durations(stages))


def peak_minutes(stages: Iterable[Stage | str]) -> float:
    """Return the longest single stage duration in minutes.

    Args:
        stages: Stage rows or bare duration strings. Must not be empty.

    Returns:
        Maximum converted duration; unsupported units count as 0.

    Raises:
        ConfigError: If *stages* is empty.
    """
    minutes = _durations(stages)
    if not minutes:
        msg = "peak_minutes requires at least one stage"
        raise ConfigError(msg)
    return max(minutes)
