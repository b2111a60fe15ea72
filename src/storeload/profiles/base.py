"""Profile definition shared by the load, stress, spike, volume and endurance profiles."""

from __future__ import annotations

import asyncio
import contextlib
import random
from contextvars import ContextVar
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import TYPE_CHECKING, TypeVar

from storeload._internal.errors import ScenarioError
from storeload.core.catalog import build_catalog, scenario_key
from storeload.core.duration import peak_minutes, total_minutes
from storeload.core.phase import Regime, current_regime, phase_dynamic_weight
from storeload.core.selector import WeightedScenario

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator, Mapping, Sequence

    from storeload._internal.types import ThinkTime
    from storeload.core.catalog import Behavior, ScenarioConfig
    from storeload.core.duration import Stage
    from storeload.core.phase import PhaseWeightConfig
    from storeload.engine.driver import TeardownData

T = TypeVar("T")

_pause_scale: ContextVar[float] = ContextVar("pause_scale", default=1.0)


@contextlib.contextmanager
def scaled_pauses(factor: float) -> Iterator[None]:
    """Multiply every in-behavior :func:`pause` by *factor* inside the block.

    Tasks created inside the block inherit the factor.
    """
    token = _pause_scale.set(factor)
    try:
        yield
    finally:
        _pause_scale.reset(token)


async def pause(seconds: float) -> None:
    """Sleep between calls of a behavior, honouring :func:`scaled_pauses`."""
    await asyncio.sleep(seconds * _pause_scale.get())


def pick(items: Sequence[T]) -> T:
    """Return a random element of *items*."""
    return random.choice(items)  # noqa: S311


def rand_int(low: int, high: int) -> int:
    """Return a random integer in ``[low, high]``."""
    return random.randint(low, high)  # noqa: S311


def unique_suffix() -> str:
    """Return a suffix that keeps generated emails and titles distinct."""
    return f"{int(datetime.now(UTC).timestamp() * 1000)}_{random.random():.6f}"  # noqa: S311


@dataclass(frozen=True)
class TestProfile:
    """Everything needed to run one load profile.

    Attributes:
        name: Registry key, e.g. ``"spike"``.
        title: Display name used in banners.
        description: One-line summary for ``storeload profiles``.
        stages: Stage table played by the session.
        thresholds: ``{metric: (expression, ...)}`` pass/fail criteria.
        scenarios: Scenario table keyed by the profile's scenario enum.
        behaviors: Behavior per scenario, keyed the same way.
        think_time: ``(min, max)`` seconds slept after each iteration.
        log_interval: Progress is logged every this many iterations.
        phase: Surge window for phase-aware weighting, if the profile has one.
        surge_think_time: Think time used inside the surge window.
        dynamic_weights: Extra per-scenario weight deltas for profiles
            without a surge window.
        notes: Extra banner lines.
        checklist: Lines appended to the teardown report.
    """

    __test__ = False

    name: str
    title: str
    description: str
    stages: tuple[Stage, ...]
    thresholds: Mapping[str, tuple[str, ...]]
    scenarios: Mapping[str | Enum, ScenarioConfig]
    behaviors: Mapping[str | Enum, Behavior]
    think_time: ThinkTime
    log_interval: int = 50
    phase: PhaseWeightConfig | None = None
    surge_think_time: ThinkTime | None = None
    dynamic_weights: Mapping[str | Enum, Callable[[int], float]] = field(default_factory=dict)
    notes: tuple[str, ...] = ()
    checklist: tuple[str, ...] = ()

    def build_scenarios(self) -> tuple[WeightedScenario, ...]:
        """Validate the scenario table and attach dynamic weights.

        Raises:
            ScenarioError: If the table and behaviors disagree, or a dynamic
                weight names a scenario that is not in the table.
        """
        catalog = build_catalog(self.scenarios, self.behaviors)
        known = {scenario_key(k) for k in self.scenarios}
        extra = {scenario_key(k): fn for k, fn in self.dynamic_weights.items()}
        unknown = sorted(set(extra) - known)
        if unknown:
            msg = f"Dynamic weights registered for unknown scenarios: {', '.join(unknown)}"
            raise ScenarioError(msg)

        weighted: list[WeightedScenario] = []
        for definition in catalog:
            if self.phase is not None:
                dynamic = phase_dynamic_weight(definition.name, self.phase)
            else:
                dynamic = extra.get(definition.name)
            weighted.append(WeightedScenario(definition=definition, dynamic_weight=dynamic))
        return tuple(weighted)

    def regime(self, elapsed_minutes: int) -> Regime:
        """Return the weighting regime in force at *elapsed_minutes*.

        Args:
            elapsed_minutes: Whole minutes since the run started.

        Returns:
            ``Regime.SURGE`` inside the surge window, otherwise
            ``Regime.BASELINE``. Profiles without a surge window are always
            in the baseline regime.
        """
        if self.phase is None:
            return Regime.BASELINE
        return current_regime(elapsed_minutes, self.phase)

    def think_time_for(self, elapsed_minutes: int) -> ThinkTime:
        """Return the think-time range for the regime at *elapsed_minutes*."""
        if self.surge_think_time is not None and self.regime(elapsed_minutes) is Regime.SURGE:
            return self.surge_think_time
        return self.think_time

    def setup_banner(self) -> list[str]:
        """Build the lines logged before the first virtual user starts.

        Returns:
            The title, the stage targets and durations, total and longest
            stage minutes, the surge window when there is one, and any
            extra notes.
        """
        lines = [
            f"Starting {self.title} for Fake Store API",
            "Test Configuration:",
            f"   - Virtual Users: {' -> '.join(str(s.target) for s in self.stages)}",
            f"   - Duration: {' -> '.join(s.duration for s in self.stages)}",
            f"   - Total: {total_minutes(self.stages):g} minutes, "
            f"longest stage {peak_minutes(self.stages):g} minutes",
        ]
        if self.phase is not None:
            lines.append(
                f"   - Surge window: minute {self.phase.phase_start_minute:g} "
                f"to {self.phase.phase_end_minute:g}"
            )
        lines.extend(f"   - {note}" for note in self.notes)
        return lines

    def teardown_report(
        self,
        data: TeardownData,
        *,
        ended_at: datetime,
        duration_minutes: int,
        iterations: int,
    ) -> list[str]:
        """Build the lines logged when the run ends.

        Args:
            data: Start information captured at setup.
            ended_at: Wall-clock end of the run.
            duration_minutes: Whole minutes the run lasted.
            iterations: Iterations completed.

        Returns:
            The summary lines, followed by the profile's checklist of
            metrics to review when it has one.
        """
        lines = [
            f"{self.title} completed",
            f"   - Started: {data.start_time.isoformat()}",
            f"   - Ended: {ended_at.isoformat()}",
            f"   - Total Duration: {duration_minutes} minutes",
            f"   - Total Iterations: {iterations}",
        ]
        if self.checklist:
            lines.append("Key metrics to check:")
            lines.extend(f"   - {item}" for item in self.checklist)
        return lines
