"""Tests for phase-aware dynamic weighting."""

from __future__ import annotations

import pytest

from storeload._internal.errors import ConfigError
from storeload.core.catalog import ScenarioConfig
from storeload.core.phase import (
    PhaseWeightConfig,
    Regime,
    activate_after,
    current_regime,
    phase_dynamic_weight,
    phase_weight_delta,
)


@pytest.fixture
def config() -> PhaseWeightConfig:
    return PhaseWeightConfig(
        phase_start_minute=1,
        phase_end_minute=5,
        scenario_configs={"baseline": 30, "surge": 0},
        total_high_load_weight=70,
        high_load_scenario_count=1,
    )


class TestPhaseWeightDelta:
    """Tests for phase_weight_delta."""

    def test_before_window_is_zero(self, config: PhaseWeightConfig) -> None:
        assert phase_weight_delta(0, "baseline", config) == 0
        assert phase_weight_delta(0, "surge", config) == 0

    def test_inside_window_suppresses_baseline(self, config: PhaseWeightConfig) -> None:
        assert phase_weight_delta(3, "baseline", config) == -30

    def test_inside_window_boosts_high_load(self, config: PhaseWeightConfig) -> None:
        assert phase_weight_delta(3, "surge", config) == 70

    def test_end_minute_is_exclusive(self, config: PhaseWeightConfig) -> None:
        assert phase_weight_delta(5, "baseline", config) == 0
        assert phase_weight_delta(5, "surge", config) == 0

    def test_start_minute_is_inclusive(self, config: PhaseWeightConfig) -> None:
        assert phase_weight_delta(1, "baseline", config) == -30
        assert phase_weight_delta(1, "surge", config) == 70

    def test_unknown_scenario_is_zero(self, config: PhaseWeightConfig) -> None:
        assert phase_weight_delta(3, "nonexistent", config) == 0

    def test_is_idempotent(self, config: PhaseWeightConfig) -> None:
        results = {phase_weight_delta(3, "surge", config) for _ in range(100)}
        assert results == {70}

    def test_floor_drops_remainder(self) -> None:
        config = PhaseWeightConfig(
            phase_start_minute=0,
            phase_end_minute=10,
            scenario_configs={"base": 30, "a": 0, "b": 0, "c": 0},
            total_high_load_weight=70,
            high_load_scenario_count=3,
        )
        deltas = [phase_weight_delta(2, name, config) for name in ("a", "b", "c")]
        assert deltas == [23, 23, 23]
        assert sum(deltas) == 69

    def test_zero_high_load_count_gives_zero(self) -> None:
        config = PhaseWeightConfig(
            phase_start_minute=0,
            phase_end_minute=10,
            scenario_configs={"base": 30, "orphan": 0},
            total_high_load_weight=70,
            high_load_scenario_count=0,
        )
        assert phase_weight_delta(2, "orphan", config) == 0

    def test_surge_total_matches_budget(self, config: PhaseWeightConfig) -> None:
        effective = {
            name: base + phase_weight_delta(3, name, config)
            for name, base in config.scenario_configs.items()
        }
        assert effective == {"baseline": 0, "surge": 70}


class TestPhaseWeightConfigFactories:
    """Tests for PhaseWeightConfig.from_weights and from_scenarios."""

    def test_from_weights_derives_budget_and_count(self) -> None:
        config = PhaseWeightConfig.from_weights(1, 5, {"a": 30, "b": 40, "c": 0, "d": 0})
        assert config.total_high_load_weight == 30
        assert config.high_load_scenario_count == 2

    def test_from_weights_custom_budget(self) -> None:
        config = PhaseWeightConfig.from_weights(
            1, 5, {"a": 30, "b": 70, "c": 0}, weight_budget=200.0
        )
        assert config.total_high_load_weight == 100
        assert phase_weight_delta(2, "c", config) == 100

    def test_from_weights_rejects_inverted_window(self) -> None:
        with pytest.raises(ConfigError, match="phase_end_minute"):
            PhaseWeightConfig.from_weights(5, 5, {"a": 1})

    def test_from_scenarios_reads_weights(self) -> None:
        config = PhaseWeightConfig.from_scenarios(
            0, 2, {"browse": ScenarioConfig(60), "flash": ScenarioConfig(0)}
        )
        assert config.scenario_configs == {"browse": 60, "flash": 0}
        assert config.total_high_load_weight == 40


class TestRegime:
    def test_current_regime(self, config: PhaseWeightConfig) -> None:
        assert current_regime(0, config) is Regime.BASELINE
        assert current_regime(1, config) is Regime.SURGE
        assert current_regime(4, config) is Regime.SURGE
        assert current_regime(5, config) is Regime.BASELINE


class TestDynamicWeightFactories:
    def test_phase_dynamic_weight_binds_scenario(self, config: PhaseWeightConfig) -> None:
        fn = phase_dynamic_weight("surge", config)
        assert fn(0) == 0
        assert fn(2) == 70

    def test_activate_after_is_strictly_greater(self) -> None:
        fn = activate_after(10, 10)
        assert fn(10) == 0
        assert fn(11) == 10
