"""Phase-aware dynamic weighting.

During a surge window every baseline scenario (base weight > 0) is
suppressed to zero and the surge budget is split evenly across the
high-load scenarios (base weight == 0). Outside the window every scenario
keeps its base weight. The switch is a step at the window edges; there is
no interpolation.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING

from storeload._internal.errors import ConfigError

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from storeload.core.catalog import ScenarioConfig


class Regime(Enum):
    """Which scenario group is selectable at a given minute."""

    BASELINE = auto()
    SURGE = auto()


@dataclass(frozen=True)
class PhaseWeightConfig:
    """Surge window and weight budget for one profile.

    Attributes:
        phase_start_minute: First minute of the surge (inclusive).
        phase_end_minute: End of the surge (exclusive).
        scenario_configs: Base weight per scenario name; 0 marks high-load.
        total_high_load_weight: Budget shared by high-load scenarios
            during the surge.
        high_load_scenario_count: Number of scenarios with weight 0.
    """

    phase_start_minute: float
    phase_end_minute: float
    scenario_configs: Mapping[str, float]
    total_high_load_weight: float
    high_load_scenario_count: int

    @classmethod
    def from_weights(
        cls,
        phase_start_minute: float,
        phase_end_minute: float,
        scenario_configs: Mapping[str, float],
        *,
        weight_budget: float = 100.0,
    ) -> PhaseWeightConfig:
        """Derive the high-load count and budget from a weight table.

        The surge budget is ``weight_budget`` minus the summed baseline
        weights.

        Raises:
            ConfigError: If the window is empty or inverted.
        """
        if phase_end_minute <= phase_start_minute:
            msg = (
                f"phase_end_minute must be after phase_start_minute, "
                f"got {phase_start_minute}..{phase_end_minute}"
            )
            raise ConfigError(msg)
        baseline_total = sum(w for w in scenario_configs.values() if w > 0)
        return cls(
            phase_start_minute=phase_start_minute,
            phase_end_minute=phase_end_minute,
            scenario_configs=dict(scenario_configs),
            total_high_load_weight=weight_budget - baseline_total,
            high_load_scenario_count=sum(1 for w in scenario_configs.values() if w == 0),
        )

    @classmethod
    def from_scenarios(
        cls,
        phase_start_minute: float,
        phase_end_minute: float,
        scenarios: Mapping[str, ScenarioConfig] | Mapping[Enum, ScenarioConfig],
        *,
        weight_budget: float = 100.0,
    ) -> PhaseWeightConfig:
        """Build from a scenario table keyed by name or enum member."""
        return cls.from_weights(
            phase_start_minute,
            phase_end_minute,
            {k.value if isinstance(k, Enum) else k: c.weight for k, c in scenarios.items()},
            weight_budget=weight_budget,
        )

    def in_phase(self, elapsed_minutes: float) -> bool:
        return self.phase_start_minute <= elapsed_minutes < self.phase_end_minute


def current_regime(elapsed_minutes: float, config: PhaseWeightConfig) -> Regime:
    """Return SURGE inside ``[start, end)`` and BASELINE otherwise."""
    return Regime.SURGE if config.in_phase(elapsed_minutes) else Regime.BASELINE


def phase_weight_delta(
    elapsed_minutes: float,
    scenario_name: str,
    config: PhaseWeightConfig,
) -> float:
    """Return the weight delta for one scenario at one instant.

    Pure function: identical inputs always give identical output.

    Args:
        elapsed_minutes: Whole minutes since the run started.
        scenario_name: Scenario to compute the delta for.
        config: Surge window and budget.

    Returns:
        ``-base`` for a baseline scenario inside the window,
        ``floor(total / count)`` for a high-load scenario inside the
        window, 0 otherwise and for unknown scenarios.
    """
    base_weight = config.scenario_configs.get(scenario_name)
    if base_weight is None:
        return 0
    if not config.in_phase(elapsed_minutes):
        return 0
    if base_weight > 0:
        return -base_weight
    if config.high_load_scenario_count > 0:
        # Remainder is dropped, e.g. 70 over 3 scenarios hands out 69.
        return math.floor(config.total_high_load_weight / config.high_load_scenario_count)
    return 0


def phase_dynamic_weight(scenario_name: str, config: PhaseWeightConfig) -> Callable[[int], float]:
    """Bind ``phase_weight_delta`` to one scenario for ``WeightedScenario``."""

    def dynamic_weight(elapsed_minutes: int) -> float:
        return phase_weight_delta(elapsed_minutes, scenario_name, config)

    return dynamic_weight


def activate_after(minute: float, weight: float) -> Callable[[int], float]:
    """Return a dynamic weight that adds *weight* once past *minute*.

    Used for scenarios that only join the mix late in a long run, such as
    cache warm-up after ten minutes.
    """

    def dynamic_weight(elapsed_minutes: int) -> float:
        return weight if elapsed_minutes > minute else 0

    return dynamic_weight
