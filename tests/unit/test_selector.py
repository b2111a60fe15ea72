"""Tests for weighted scenario selection."""

from __future__ import annotations

import random
from collections import Counter
from typing import TYPE_CHECKING

import pytest

from storeload._internal.errors import ScenarioError
from storeload.core.catalog import ScenarioDefinition
from storeload.core.selector import WeightedScenario, effective_weights, select_scenario

if TYPE_CHECKING:
    from collections.abc import Callable


async def _behavior(api: object, elapsed_minutes: int, iteration: int) -> None:
    return None


def _scenario(
    name: str, weight: float, dynamic: Callable[[int], float] | None = None
) -> WeightedScenario:
    definition = ScenarioDefinition(
        name=name,
        base_weight=weight,
        enabled=True,
        description="",
        behavior=_behavior,
    )
    return WeightedScenario(definition=definition, dynamic_weight=dynamic)


class TestWeightedScenario:
    """Tests for raw and effective weights."""

    def test_static_weight(self) -> None:
        scenario = _scenario("a", 30)
        assert scenario.raw_weight(0) == 30
        assert scenario.effective_weight(0) == 30

    def test_dynamic_delta_added(self) -> None:
        scenario = _scenario("a", 0, lambda minute: 10 if minute > 10 else 0)
        assert scenario.effective_weight(10) == 0
        assert scenario.effective_weight(11) == 10

    def test_negative_raw_weight_is_clamped(self) -> None:
        scenario = _scenario("a", 5, lambda minute: -10)
        assert scenario.raw_weight(0) == -5
        assert scenario.effective_weight(0) == 0

    def test_dynamic_weight_evaluated_every_call(self) -> None:
        calls: list[int] = []

        def dynamic(minute: int) -> float:
            calls.append(minute)
            return 0

        scenario = _scenario("a", 1, dynamic)
        scenario.effective_weight(1)
        scenario.effective_weight(1)
        assert calls == [1, 1]

    def test_effective_weights_in_catalog_order(self) -> None:
        scenarios = [_scenario("b", 2), _scenario("a", 1, lambda m: -5)]
        assert list(effective_weights(scenarios, 0).items()) == [("b", 2), ("a", 0)]


class TestSelectScenario:
    """Tests for select_scenario."""

    def test_empty_list_raises(self) -> None:
        with pytest.raises(ScenarioError, match="empty"):
            select_scenario([], 0)

    def test_all_zero_returns_first(self) -> None:
        scenarios = [_scenario("first", 0), _scenario("second", 0)]
        assert select_scenario(scenarios, 0, random.Random(1)).name == "first"

    def test_single_positive_always_selected(self) -> None:
        scenarios = [_scenario("zero", 0), _scenario("only", 5), _scenario("also_zero", 0)]
        rng = random.Random(7)
        picks = {select_scenario(scenarios, 0, rng).name for _ in range(1000)}
        assert picks == {"only"}

    def test_zero_weight_never_selected_on_zero_draw(self) -> None:
        class ZeroRandom(random.Random):
            def uniform(self, a: float, b: float) -> float:
                return 0.0

        scenarios = [_scenario("zero", 0), _scenario("positive", 1)]
        assert select_scenario(scenarios, 0, ZeroRandom()).name == "positive"

    def test_distribution_converges_to_weights(self) -> None:
        scenarios = [_scenario("A", 30), _scenario("B", 70)]
        rng = random.Random(42)
        counts = Counter(select_scenario(scenarios, 0, rng).name for _ in range(100_000))
        assert counts["A"] / 100_000 == pytest.approx(0.30, abs=0.01)
        assert counts["B"] / 100_000 == pytest.approx(0.70, abs=0.01)

    def test_clamped_scenario_is_never_selected(self) -> None:
        scenarios = [_scenario("suppressed", 50, lambda m: -80), _scenario("open", 10)]
        rng = random.Random(3)
        picks = {select_scenario(scenarios, 0, rng).name for _ in range(1000)}
        assert picks == {"open"}

    def test_selection_follows_elapsed_minutes(self) -> None:
        scenarios = [
            _scenario("baseline", 30, lambda m: -30 if 1 <= m < 5 else 0),
            _scenario("surge", 0, lambda m: 70 if 1 <= m < 5 else 0),
        ]
        rng = random.Random(11)
        before = {select_scenario(scenarios, 0, rng).name for _ in range(200)}
        during = {select_scenario(scenarios, 3, rng).name for _ in range(200)}
        after = {select_scenario(scenarios, 5, rng).name for _ in range(200)}
        assert before == {"baseline"}
        assert during == {"surge"}
        assert after == {"baseline"}

    def test_same_seed_same_sequence(self) -> None:
        scenarios = [_scenario("a", 1), _scenario("b", 1), _scenario("c", 1)]
        rng1, rng2 = random.Random(9), random.Random(9)
        seq1 = [select_scenario(scenarios, 0, rng1).name for _ in range(50)]
        seq2 = [select_scenario(scenarios, 0, rng2).name for _ in range(50)]
        assert seq1 == seq2
