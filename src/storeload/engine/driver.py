"""Per-virtual-user iteration loop: clock, select, execute, think.

Each virtual user owns one ``IterationDriver``. The driver keeps its own
``RunContext`` (start time and iteration counter). The session hands every
driver the same start time so elapsed minutes follow the stage table.

State machine: IDLE -> RUNNING -> DRAINED
"""

from __future__ import annotations

import asyncio
import math
import random
import time
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum, auto
from typing import TYPE_CHECKING

from storeload._internal.errors import EngineError
from storeload._internal.logging import get_logger
from storeload.core.phase import Regime
from storeload.core.selector import select_scenario
from storeload.metrics.iterations import IterationStats

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence

    from storeload.api.store import FakeStoreAPI
    from storeload.core.selector import WeightedScenario
    from storeload.profiles.base import TestProfile

logger = get_logger("engine.driver")


class DriverState(Enum):
    """Lifecycle of an iteration driver."""

    IDLE = auto()
    RUNNING = auto()
    DRAINED = auto()


@dataclass
class RunContext:
    """Running clock for one virtual user.

    Attributes:
        start_time: ``clock()`` reading the elapsed time is measured from.
        iteration_count: Iterations started so far.
    """

    start_time: float
    iteration_count: int = 0

    def elapsed_minutes(self, now: float, time_scale: float = 1.0) -> int:
        """Return whole minutes since ``start_time``, stretched by *time_scale*."""
        return max(0, math.floor((now - self.start_time) / 60.0 / time_scale))


@dataclass(frozen=True)
class TeardownData:
    """Handed from ``setup()`` to ``teardown()``.

    Attributes:
        start_time: Wall-clock time the driver started.
        expected_iterations: Informational; the stage table decides the
            real count.
    """

    start_time: datetime
    expected_iterations: int = 0


class IterationDriver:
    """Runs one virtual user's iterations against the fake store API.

    Every iteration increments the counter, recomputes elapsed minutes,
    selects one scenario by effective weight, awaits its behavior, and
    sleeps a think time drawn from the profile's range for the current
    regime. A behavior that raises is recorded and logged; the loop keeps
    going. Cancellation always propagates.

    Args:
        profile: Profile supplying scenarios, think time and log interval.
        api: This user's API facade.
        scenarios: Pre-built weighted scenarios; built from *profile* when
            None.
        stats: Shared iteration counters; a private instance when None.
        clock: Monotonic clock in seconds.
        sleep: Async sleep used for think time.
        rng: Random source for selection and think time.
        start_time: ``clock()`` reading to measure elapsed minutes from;
            the time of ``setup()`` when None.
        time_scale: Stage-duration scale of the run. Elapsed minutes are
            divided by it and think time multiplied by it.
        user_id: Virtual user identifier for log lines.
        report_on_teardown: Log the teardown report at INFO. A session running
            many users turns this off and logs one combined report instead.

    Raises:
        ScenarioError: If the profile's scenario table is invalid.
    """

    def __init__(
        self,
        profile: TestProfile,
        api: FakeStoreAPI,
        *,
        scenarios: Sequence[WeightedScenario] | None = None,
        stats: IterationStats | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        rng: random.Random | None = None,
        start_time: float | None = None,
        time_scale: float = 1.0,
        user_id: int = 0,
        report_on_teardown: bool = True,
    ) -> None:
        self._profile = profile
        self._api = api
        self._scenarios = tuple(scenarios) if scenarios is not None else profile.build_scenarios()
        self._stats = stats if stats is not None else IterationStats()
        self._clock = clock
        self._sleep = sleep
        self._rng = rng or random.Random()  # noqa: S311
        self._start_time = start_time
        self._time_scale = time_scale
        self._user_id = user_id
        self._report_on_teardown = report_on_teardown

        self._state = DriverState.IDLE
        self._context: RunContext | None = None
        self._data: TeardownData | None = None

    @property
    def state(self) -> DriverState:
        """Return the current lifecycle state."""
        return self._state

    @property
    def context(self) -> RunContext | None:
        """Return the running clock, or None before :meth:`setup`."""
        return self._context

    @property
    def stats(self) -> IterationStats:
        return self._stats

    def elapsed_minutes(self) -> int:
        """Return whole elapsed minutes, 0 before :meth:`setup`."""
        if self._context is None:
            return 0
        return self._context.elapsed_minutes(self._clock(), self._time_scale)

    def setup(self) -> TeardownData:
        """Start the clock and reset the counter.

        Returns:
            Data to pass to :meth:`teardown`.
        """
        start = self._start_time if self._start_time is not None else self._clock()
        self._context = RunContext(start_time=start)
        self._state = DriverState.RUNNING
        self._data = TeardownData(start_time=datetime.now(UTC))
        return self._data

    async def run_iteration(self) -> str:
        """Run one iteration and return the selected scenario's name.

        Raises:
            EngineError: If called before :meth:`setup` or after
                :meth:`teardown`.
        """
        if self._state is not DriverState.RUNNING or self._context is None:
            msg = f"run_iteration() requires a RUNNING driver, state is {self._state.name}"
            raise EngineError(msg)

        self._context.iteration_count += 1
        iteration = self._context.iteration_count
        elapsed = self.elapsed_minutes()
        regime = self._profile.regime(elapsed)

        if iteration % self._profile.log_interval == 0:
            if self._profile.phase is not None:
                logger.info(
                    "%s progress: %d minutes, %d iterations completed (user %d). Phase: %s",
                    self._profile.title,
                    elapsed,
                    iteration,
                    self._user_id,
                    "SPIKE" if regime is Regime.SURGE else "BASELINE/RECOVERY",
                )
            else:
                logger.info(
                    "%s progress: %d minutes, %d iterations completed (user %d)",
                    self._profile.title,
                    elapsed,
                    iteration,
                    self._user_id,
                )

        scenario = select_scenario(self._scenarios, elapsed, self._rng)
        started = self._clock()
        error: Exception | None = None
        try:
            await scenario.definition.behavior(self._api, elapsed, iteration)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            error = exc
            logger.debug(
                "Scenario %s failed for user %d at iteration %d",
                scenario.name,
                self._user_id,
                iteration,
                exc_info=True,
            )
        self._stats.record(scenario.name, (self._clock() - started) * 1000, error)

        low, high = self._profile.think_time_for(elapsed)
        await self._sleep(self._rng.uniform(low, high) * self._time_scale)
        return scenario.name

    async def run(self, stop_event: asyncio.Event) -> TeardownData:
        """Iterate until *stop_event* is set, checking between iterations.

        Calls :meth:`setup` unless the driver is already RUNNING, and always drains
        on exit, including cancellation.

        Returns:
            The TeardownData the run started with.
        """
        if self._state is DriverState.RUNNING and self._data is not None:
            data = self._data
        else:
            data = self.setup()
        try:
            while not stop_event.is_set():
                await self.run_iteration()
        finally:
            self.teardown(data)
        return data

    def teardown(self, data: TeardownData) -> list[str]:
        """Drain the driver and log its summary.

        Args:
            data: The value returned by :meth:`setup`.

        Returns:
            The profile's teardown report lines for this user.
        """
        self._state = DriverState.DRAINED
        iterations = self._context.iteration_count if self._context is not None else 0
        duration = self.elapsed_minutes()
        lines = self._profile.teardown_report(
            data,
            ended_at=datetime.now(UTC),
            duration_minutes=duration,
            iterations=iterations,
        )
        if self._report_on_teardown:
            for line in lines:
                logger.info(line)
        else:
            logger.debug("User %d drained after %d iterations", self._user_id, iterations)
        return lines
