"""Weighted scenario selection over time-dependent effective weights."""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import TYPE_CHECKING

from storeload._internal.errors import ScenarioError

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from storeload.core.catalog import ScenarioDefinition


@dataclass(frozen=True)
class WeightedScenario:
    """A catalog entry plus an optional time-dependent weight delta.

    Attributes:
        definition: The static scenario.
        dynamic_weight: ``elapsed_minutes -> delta`` added to the base
            weight. Evaluated on every call, never cached.
    """

    definition: ScenarioDefinition
    dynamic_weight: Callable[[int], float] | None = None

    @property
    def name(self) -> str:
        return self.definition.name

    def raw_weight(self, elapsed_minutes: int) -> float:
        """Return ``base + delta`` without clamping (may be negative)."""
        delta = self.dynamic_weight(elapsed_minutes) if self.dynamic_weight is not None else 0
        return self.definition.base_weight + delta

    def effective_weight(self, elapsed_minutes: int) -> float:
        """Return the selection weight, clamped at 0."""
        return max(0.0, self.raw_weight(elapsed_minutes))


def effective_weights(
    scenarios: Sequence[WeightedScenario], elapsed_minutes: int
) -> dict[str, float]:
    """Return ``{name: effective_weight}`` in catalog order."""
    return {s.name: s.effective_weight(elapsed_minutes) for s in scenarios}


def select_scenario(
    scenarios: Sequence[WeightedScenario],
    elapsed_minutes: int,
    rng: random.Random | None = None,
) -> WeightedScenario:
    """Pick one scenario with probability proportional to effective weight.

    Walks the scenarios in catalog order accumulating weights and returns
    the first whose running total reaches a uniform draw over the total.
    When every effective weight is zero the first scenario is returned.

    Args:
        scenarios: Catalog in stable order.
        elapsed_minutes: Whole minutes since the run started.
        rng: Random source; the module-level generator when None.

    Returns:
        The selected scenario.

    Raises:
        ScenarioError: If *scenarios* is empty.
    """
    if not scenarios:
        msg = "Cannot select from an empty scenario list"
        raise ScenarioError(msg)

    weights = [s.effective_weight(elapsed_minutes) for s in scenarios]
    total = sum(weights)
    if total == 0:
        return scenarios[0]

    draw = (rng or random).uniform(0, total)  # noqa: S311
    cumulative = 0.0
    for scenario, weight in zip(scenarios, weights, strict=True):
        cumulative += weight
        if weight > 0 and cumulative >= draw:
            return scenario

    # Float rounding can leave the draw a hair above the final sum.
    return next(s for s, w in zip(scenarios, weights, strict=True) if w > 0)
