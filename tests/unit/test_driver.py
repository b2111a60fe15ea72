"""Tests for the per-user iteration driver."""

from __future__ import annotations

import asyncio
import logging
import random
from typing import TYPE_CHECKING, Any

import pytest

from storeload._internal.errors import EngineError
from storeload.core.phase import PhaseWeightConfig
from storeload.engine.driver import DriverState, IterationDriver, RunContext
from storeload.metrics.iterations import IterationStats

if TYPE_CHECKING:
    from collections.abc import Callable

    from storeload.profiles.base import TestProfile


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 0.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


class Recorder:
    """Behavior that records its arguments."""

    def __init__(self, error: BaseException | None = None) -> None:
        self.calls: list[tuple[int, int]] = []
        self._error = error

    async def __call__(self, api: Any, elapsed_minutes: int, iteration: int) -> None:
        self.calls.append((elapsed_minutes, iteration))
        if self._error is not None:
            raise self._error


def _driver(
    profile: TestProfile,
    clock: FakeClock | None = None,
    sleeps: list[float] | None = None,
    **kwargs: Any,
) -> IterationDriver:
    recorded = sleeps if sleeps is not None else []

    async def fake_sleep(seconds: float) -> None:
        recorded.append(seconds)

    return IterationDriver(
        profile,
        api=None,  # type: ignore[arg-type]
        clock=clock or FakeClock(),
        sleep=fake_sleep,
        rng=random.Random(1),
        **kwargs,
    )


class TestRunContext:
    def test_elapsed_minutes_floors(self) -> None:
        ctx = RunContext(start_time=0.0)
        assert ctx.elapsed_minutes(59.9) == 0
        assert ctx.elapsed_minutes(60.0) == 1
        assert ctx.elapsed_minutes(150.0) == 2

    def test_elapsed_minutes_never_negative(self) -> None:
        assert RunContext(start_time=100.0).elapsed_minutes(0.0) == 0

    def test_time_scale_stretches_minutes(self) -> None:
        assert RunContext(start_time=0.0).elapsed_minutes(1.5, time_scale=0.01) == 2


class TestDriverLifecycle:
    """State machine: IDLE -> RUNNING -> DRAINED."""

    async def test_run_iteration_before_setup_raises(
        self, profile_factory: Callable[..., TestProfile]
    ) -> None:
        driver = _driver(profile_factory({"browse": 1}))
        assert driver.state is DriverState.IDLE
        with pytest.raises(EngineError, match="RUNNING"):
            await driver.run_iteration()

    async def test_setup_starts_counter_at_zero(
        self, profile_factory: Callable[..., TestProfile]
    ) -> None:
        driver = _driver(profile_factory({"browse": 1}))
        driver.setup()
        assert driver.state is DriverState.RUNNING
        assert driver.context is not None
        assert driver.context.iteration_count == 0

    async def test_teardown_drains_and_reports(
        self, profile_factory: Callable[..., TestProfile]
    ) -> None:
        driver = _driver(profile_factory({"browse": 1}, title="Tiny Test"))
        data = driver.setup()
        for _ in range(3):
            await driver.run_iteration()
        lines = driver.teardown(data)
        assert driver.state is DriverState.DRAINED
        assert lines[0] == "Tiny Test completed"
        assert "   - Total Iterations: 3" in lines
        with pytest.raises(EngineError):
            await driver.run_iteration()

    async def test_run_stops_on_event(self, profile_factory: Callable[..., TestProfile]) -> None:
        stop = asyncio.Event()
        count = 0

        async def behavior(api: Any, elapsed_minutes: int, iteration: int) -> None:
            nonlocal count
            count += 1
            if count == 5:
                stop.set()

        driver = _driver(profile_factory({"browse": 1}, behaviors={"browse": behavior}))
        await driver.run(stop)
        assert count == 5
        assert driver.state is DriverState.DRAINED
        assert driver.stats.total_iterations == 5

    async def test_run_drains_on_cancel(self, profile_factory: Callable[..., TestProfile]) -> None:
        async def blocking(api: Any, elapsed_minutes: int, iteration: int) -> None:
            await asyncio.Event().wait()

        driver = _driver(profile_factory({"browse": 1}, behaviors={"browse": blocking}))
        task = asyncio.create_task(driver.run(asyncio.Event()))
        await asyncio.sleep(0)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        assert driver.state is DriverState.DRAINED


class TestRunIteration:
    """One select/execute/think cycle."""

    async def test_passes_elapsed_minutes_and_iteration(
        self, profile_factory: Callable[..., TestProfile]
    ) -> None:
        behavior = Recorder()
        clock = FakeClock()
        driver = _driver(profile_factory({"browse": 1}, behaviors={"browse": behavior}), clock)
        driver.setup()
        await driver.run_iteration()
        clock.now = 150.0
        await driver.run_iteration()
        assert behavior.calls == [(0, 1), (2, 2)]

    async def test_shared_start_time(self, profile_factory: Callable[..., TestProfile]) -> None:
        behavior = Recorder()
        driver = _driver(
            profile_factory({"browse": 1}, behaviors={"browse": behavior}),
            FakeClock(0.0),
            start_time=-180.0,
        )
        driver.setup()
        await driver.run_iteration()
        assert behavior.calls == [(3, 1)]

    async def test_returns_selected_name_and_records(
        self, profile_factory: Callable[..., TestProfile]
    ) -> None:
        stats = IterationStats()
        driver = _driver(profile_factory({"browse": 0, "search": 5}), stats=stats)
        driver.setup()
        assert await driver.run_iteration() == "search"
        assert stats.iterations("search") == 1
        assert stats.iterations("browse") == 0

    async def test_behavior_error_is_isolated(
        self,
        profile_factory: Callable[..., TestProfile],
        caplog: pytest.LogCaptureFixture,
        propagate_logs: None,
    ) -> None:
        behavior = Recorder(error=ValueError("boom"))
        driver = _driver(profile_factory({"checkout": 1}, behaviors={"checkout": behavior}))
        driver.setup()
        with caplog.at_level(logging.DEBUG, logger="storeload"):
            assert await driver.run_iteration() == "checkout"
            assert await driver.run_iteration() == "checkout"
        assert driver.stats.failures("checkout") == 2
        assert "Scenario checkout failed" in caplog.text

    async def test_cancellation_propagates(
        self, profile_factory: Callable[..., TestProfile]
    ) -> None:
        behavior = Recorder(error=asyncio.CancelledError())
        driver = _driver(profile_factory({"browse": 1}, behaviors={"browse": behavior}))
        driver.setup()
        with pytest.raises(asyncio.CancelledError):
            await driver.run_iteration()

    async def test_think_time_scaled(self, profile_factory: Callable[..., TestProfile]) -> None:
        sleeps: list[float] = []
        driver = _driver(
            profile_factory({"browse": 1}, think_time=(2.0, 2.0)),
            sleeps=sleeps,
            time_scale=0.5,
        )
        driver.setup()
        await driver.run_iteration()
        assert sleeps == [1.0]

    async def test_think_time_follows_regime(
        self, profile_factory: Callable[..., TestProfile]
    ) -> None:
        weights = {"calm": 100, "rush": 0}
        phase = PhaseWeightConfig.from_weights(1, 5, weights, weight_budget=200.0)
        profile = profile_factory(
            weights,
            think_time=(1.0, 1.0),
            phase=phase,
            surge_think_time=(0.2, 0.2),
        )
        clock = FakeClock()
        sleeps: list[float] = []
        driver = _driver(profile, clock, sleeps)
        driver.setup()

        assert await driver.run_iteration() == "calm"
        clock.now = 120.0
        assert await driver.run_iteration() == "rush"
        clock.now = 300.0
        assert await driver.run_iteration() == "calm"
        assert sleeps == [1.0, 0.2, 1.0]


class TestProgressLogging:
    async def test_logs_every_interval(
        self,
        profile_factory: Callable[..., TestProfile],
        caplog: pytest.LogCaptureFixture,
        propagate_logs: None,
    ) -> None:
        driver = _driver(profile_factory({"browse": 1}, log_interval=2, title="Tiny Test"))
        driver.setup()
        with caplog.at_level(logging.INFO, logger="storeload"):
            for _ in range(5):
                await driver.run_iteration()
        progress = [r for r in caplog.records if "progress" in r.getMessage()]
        assert len(progress) == 2
        assert "Tiny Test progress: 0 minutes, 4 iterations" in progress[-1].getMessage()

    async def test_logs_phase_label(
        self,
        profile_factory: Callable[..., TestProfile],
        caplog: pytest.LogCaptureFixture,
        propagate_logs: None,
    ) -> None:
        weights = {"calm": 100, "rush": 0}
        profile = profile_factory(
            weights,
            log_interval=1,
            phase=PhaseWeightConfig.from_weights(1, 5, weights, weight_budget=200.0),
        )
        clock = FakeClock()
        driver = _driver(profile, clock)
        driver.setup()
        with caplog.at_level(logging.INFO, logger="storeload"):
            await driver.run_iteration()
            clock.now = 60.0
            await driver.run_iteration()
        messages = [r.getMessage() for r in caplog.records if "progress" in r.getMessage()]
        assert messages[0].endswith("Phase: BASELINE/RECOVERY")
        assert messages[1].endswith("Phase: SPIKE")

    async def test_teardown_logs_report(
        self,
        profile_factory: Callable[..., TestProfile],
        caplog: pytest.LogCaptureFixture,
        propagate_logs: None,
    ) -> None:
        driver = _driver(profile_factory({"browse": 1}, title="Tiny Test"))
        data = driver.setup()
        await driver.run_iteration()
        with caplog.at_level(logging.INFO, logger="storeload"):
            lines = driver.teardown(data)
        info = [r.getMessage() for r in caplog.records if r.levelno == logging.INFO]
        assert info == lines
        assert "Tiny Test completed" in info

    async def test_teardown_report_can_be_silenced(
        self,
        profile_factory: Callable[..., TestProfile],
        caplog: pytest.LogCaptureFixture,
        propagate_logs: None,
    ) -> None:
        driver = _driver(profile_factory({"browse": 1}), report_on_teardown=False, user_id=4)
        data = driver.setup()
        with caplog.at_level(logging.DEBUG, logger="storeload"):
            driver.teardown(data)
        assert not [r for r in caplog.records if r.levelno >= logging.INFO]
        assert "User 4 drained after 0 iterations" in caplog.text
