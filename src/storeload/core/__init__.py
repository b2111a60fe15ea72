"""Scenario weighting and selection core.

The selection engine is pure apart from the random draw: the catalog is
static, phase deltas are functions of elapsed minutes, and the selector
returns exactly one scenario per call.
"""

from __future__ import annotations

from storeload.core.catalog import Behavior, ScenarioConfig, ScenarioDefinition, build_catalog
from storeload.core.duration import Stage, parse_duration_minutes, peak_minutes, total_minutes
from storeload.core.phase import (
    PhaseWeightConfig,
    Regime,
    activate_after,
    current_regime,
    phase_dynamic_weight,
    phase_weight_delta,
)
from storeload.core.selector import WeightedScenario, effective_weights, select_scenario

__all__ = [
    "Behavior",
    "PhaseWeightConfig",
    "Regime",
    "ScenarioConfig",
    "ScenarioDefinition",
    "Stage",
    "WeightedScenario",
    "activate_after",
    "build_catalog",
    "current_regime",
    "effective_weights",
    "parse_duration_minutes",
    "peak_minutes",
    "phase_dynamic_weight",
    "phase_weight_delta",
    "select_scenario",
    "total_minutes",
]
