"""Test session lifecycle: plays a stage table with virtual users."""

from __future__ import annotations

import asyncio
import contextlib
import random
import signal
import sys
import time
from datetime import UTC, datetime
from enum import Enum, auto
from typing import TYPE_CHECKING

from storeload._internal.config import StoreLoadConfig
from storeload._internal.errors import EngineError
from storeload._internal.logging import get_logger
from storeload.api.store import FakeStoreAPI
from storeload.client.http_client import HttpClient
from storeload.engine.driver import IterationDriver, TeardownData
from storeload.engine.scheduler import ScaleDirection, Scheduler
from storeload.metrics.collector import MetricCollector
from storeload.metrics.iterations import IterationStats
from storeload.metrics.models import MetricSnapshot, TestResult
from storeload.metrics.thresholds import evaluate_thresholds, parse_thresholds
from storeload.patterns.stages import StagePattern
from storeload.profiles.base import scaled_pauses

if TYPE_CHECKING:
    from collections.abc import Callable

    from storeload.profiles.base import TestProfile

logger = get_logger("engine.session")


class SessionState(Enum):
    """State machine for a test session."""

    CREATED = auto()
    STARTING = auto()
    RUNNING = auto()
    STOPPING = auto()
    COMPLETED = auto()
    FAILED = auto()


async def shutdown_all_users(
    user_tasks: list[tuple[int, asyncio.Task[None]]],
    stop_event: asyncio.Event,
    grace_seconds: float = 5.0,
) -> None:
    """Stop every virtual user.

    Sets the stop event, waits up to *grace_seconds* for users to finish
    their current iteration, then cancels the rest.

    Args:
        user_tasks: ``(user_id, task)`` pairs; cleared on return.
        stop_event: Event the drivers check between iterations.
        grace_seconds: Time allowed for a cooperative stop.
    """
    stop_event.set()

    if user_tasks:
        tasks = [t for _, t in user_tasks]
        _done, pending = await asyncio.wait(tasks, timeout=grace_seconds)

        for task in pending:
            task.cancel()

        if pending:
            await asyncio.wait(pending, timeout=2.0)

    user_tasks.clear()
    logger.debug("All virtual users shut down")


class TestSession:
    """Runs one profile in the current process.

    Plays the profile's stage table through the scheduler, spawning and
    cancelling virtual users to follow the target concurrency. Every user
    has its own ``HttpClient``, ``FakeStoreAPI`` and ``IterationDriver``;
    they share the metric collector and iteration counters only.

    State machine: CREATED -> STARTING -> RUNNING -> STOPPING -> COMPLETED
                                                  -> FAILED (on error)

    Attributes:
        profile: The profile being executed.
    """

    __test__ = False

    def __init__(
        self,
        profile: TestProfile,
        *,
        config: StoreLoadConfig | None = None,
        time_scale: float = 1.0,
        tick_interval: float = 1.0,
        max_users: int | None = None,
        seed: int | None = None,
        on_snapshot: Callable[[MetricSnapshot], None] | None = None,
    ) -> None:
        """Initialize a test session.

        Args:
            profile: Profile to run.
            config: Base URL, headers and connection settings.
            time_scale: Multiplier for stage durations, think times and
                in-behavior pauses; below 1 compresses the run.
            tick_interval: Seconds between concurrency adjustments.
            max_users: Optional cap on concurrent virtual users.
            seed: Seed for reproducible scenario selection.
            on_snapshot: Callback invoked with each interval snapshot.

        Raises:
            ScenarioError: If the profile's scenario table is invalid.
            ConfigError: If the stage table or a threshold does not parse.
        """
        self.profile = profile
        self._config = config or StoreLoadConfig()
        self._time_scale = time_scale
        self._tick_interval = tick_interval
        self._max_users = max_users
        self._on_snapshot = on_snapshot

        self._pattern = StagePattern(profile.stages, time_scale=time_scale)
        self._scenarios = profile.build_scenarios()
        self._thresholds = parse_thresholds(profile.thresholds)
        self._seed_source = random.Random(seed)  # noqa: S311

        self._state = SessionState.CREATED
        self._collector = MetricCollector()
        self._stats = IterationStats()
        self._user_tasks: list[tuple[int, asyncio.Task[None]]] = []
        self._next_user_id = 0
        self._stop_event = asyncio.Event()
        self._start_monotonic = 0.0

    @property
    def state(self) -> SessionState:
        """Return the current session state."""
        return self._state

    @property
    def active_user_count(self) -> int:
        """Return the number of active virtual users."""
        return len(self._user_tasks)

    @property
    def duration_seconds(self) -> float:
        """Return the scaled length of the stage table in seconds."""
        return self._pattern.duration_seconds

    async def run(self) -> TestResult:
        """Execute the full session lifecycle.

        Returns:
            TestResult with interval snapshots, the run summary, scenario
            counters and threshold outcomes.

        Raises:
            EngineError: If the session hits an unrecoverable error.
        """
        self._state = SessionState.STARTING
        for line in self.profile.setup_banner():
            logger.info(line)
        scheduler = Scheduler(
            self._pattern, self.duration_seconds, self._tick_interval, self._max_users
        )
        peak_users = self._pattern.peak_users
        if self._max_users is not None:
            peak_users = min(peak_users, self._max_users)
        logger.info(
            "Starting session: profile=%s, duration=%.1fs, ticks=%d, peak_users=%d, pattern=%s",
            self.profile.name,
            self.duration_seconds,
            scheduler.total_ticks,
            peak_users,
            self._pattern.describe(),
        )

        self._install_signal_handlers()

        teardown_data = TeardownData(start_time=datetime.now(UTC))
        start_time = time.monotonic()
        self._start_monotonic = start_time
        snapshots: list[MetricSnapshot] = []

        self._state = SessionState.RUNNING

        try:
            with scaled_pauses(self._time_scale):
                for command in scheduler.iter_commands():
                    if self._stop_event.is_set():
                        break

                    target_time = start_time + command.elapsed_seconds
                    now = time.monotonic()
                    if target_time > now:
                        await asyncio.sleep(target_time - now)

                    if self._stop_event.is_set():
                        break

                    if command.direction is not ScaleDirection.HOLD:
                        logger.debug(
                            "Scaling %s by %d to %d users",
                            command.direction.name.lower(),
                            command.delta,
                            command.target_concurrency,
                        )
                    await self._scale_users(command.target_concurrency)

                    elapsed = time.monotonic() - start_time
                    snapshot = self._collector.flush(
                        elapsed_seconds=elapsed,
                        active_users=self.active_user_count,
                    )
                    snapshots.append(snapshot)
                    if self._on_snapshot is not None:
                        self._on_snapshot(snapshot)

                    logger.debug(
                        "Tick %.1fs: users=%d, rps=%.1f, p95=%.1fms, errors=%d",
                        elapsed,
                        self.active_user_count,
                        snapshot.requests_per_second,
                        snapshot.latency_p95,
                        snapshot.total_errors,
                    )

        except Exception as exc:
            self._state = SessionState.FAILED
            logger.exception("Test session failed")
            msg = "Test session failed"
            raise EngineError(msg) from exc
        finally:
            if self._state != SessionState.FAILED:
                self._state = SessionState.STOPPING
            await shutdown_all_users(self._user_tasks, self._stop_event)
            self._remove_signal_handlers()

        end_time = time.monotonic()
        total_duration = end_time - start_time

        # Pick up metrics recorded while users drained.
        self._collector.flush(elapsed_seconds=total_duration, active_users=0)
        final_summary = self._collector.get_cumulative_snapshot(
            elapsed_seconds=total_duration,
            active_users=0,
        )
        threshold_results = evaluate_thresholds(self._thresholds, self._collector.totals())

        report = self.profile.teardown_report(
            teardown_data,
            ended_at=datetime.now(UTC),
            duration_minutes=int(total_duration // 60),
            iterations=self._stats.total_iterations,
        )
        for line in report:
            logger.info(line)

        self._state = SessionState.COMPLETED
        logger.info(
            "Session completed: duration=%.1fs, requests=%d, iterations=%d, "
            "p95=%.1fms, error_rate=%.2f%%",
            total_duration,
            final_summary.total_requests,
            self._stats.total_iterations,
            final_summary.latency_p95,
            final_summary.error_rate * 100,
        )
        for result in threshold_results:
            if not result.passed:
                logger.warning(
                    "Threshold failed: %s %s (observed %.3f)",
                    result.metric,
                    result.expression,
                    result.observed,
                )

        return TestResult(
            profile_name=self.profile.name,
            start_time=start_time,
            end_time=end_time,
            duration_seconds=total_duration,
            pattern_description=self._pattern.describe(),
            snapshots=snapshots,
            final_summary=final_summary,
            scenarios=self._stats.snapshot(),
            thresholds=threshold_results,
        )

    async def stop(self) -> None:
        """Request a graceful stop after the current tick."""
        if self._state == SessionState.RUNNING:
            logger.info("Graceful shutdown requested")
            self._state = SessionState.STOPPING
            self._stop_event.set()

    async def _run_virtual_user(self, user_id: int) -> None:
        """Run one virtual user until stopped or cancelled."""
        async with HttpClient(
            base_url=self._config.base_url,
            headers=self._config.default_headers,
            metric_callback=self._collector.record,
            user_id=user_id,
            timeout=self._config.request_timeout,
            pool_size=self._config.connection_pool_size,
        ) as client:
            driver = IterationDriver(
                self.profile,
                FakeStoreAPI(client),
                scenarios=self._scenarios,
                stats=self._stats,
                rng=random.Random(self._seed_source.random()),  # noqa: S311
                start_time=self._start_monotonic,
                time_scale=self._time_scale,
                user_id=user_id,
                report_on_teardown=False,
            )
            with contextlib.suppress(asyncio.CancelledError):
                await driver.run(self._stop_event)

    async def _scale_users(self, target: int) -> None:
        """Spawn or cancel virtual users to reach *target*."""
        current = self.active_user_count

        if target > current:
            for _ in range(target - current):
                user_id = self._next_user_id
                self._next_user_id += 1
                task = asyncio.create_task(
                    self._run_virtual_user(user_id),
                    name=f"virtual-user-{user_id}",
                )
                self._user_tasks.append((user_id, task))

        elif target < current:
            # Newest users go first.
            for _ in range(current - target):
                if self._user_tasks:
                    _uid, task = self._user_tasks.pop()
                    task.cancel()
                    with contextlib.suppress(asyncio.CancelledError, TimeoutError):
                        await asyncio.wait_for(asyncio.shield(task), timeout=2.0)

        self._user_tasks = [(uid, t) for uid, t in self._user_tasks if not t.done()]

    def _install_signal_handlers(self) -> None:
        """Route SIGINT and SIGTERM to a graceful stop."""
        loop = asyncio.get_running_loop()

        def _signal_handler() -> None:
            logger.info("Signal received, initiating graceful shutdown")
            self._state = SessionState.STOPPING
            self._stop_event.set()

        if sys.platform != "win32":
            loop.add_signal_handler(signal.SIGINT, _signal_handler)
            loop.add_signal_handler(signal.SIGTERM, _signal_handler)
        else:
            signal.signal(signal.SIGINT, lambda _s, _f: _signal_handler())
            signal.signal(signal.SIGTERM, lambda _s, _f: _signal_handler())

    def _remove_signal_handlers(self) -> None:
        """Restore default signal handling."""
        if sys.platform != "win32":
            loop = asyncio.get_running_loop()
            for sig in (signal.SIGINT, signal.SIGTERM):
                loop.remove_signal_handler(sig)
        else:
            signal.signal(signal.SIGINT, signal.default_int_handler)
            signal.signal(signal.SIGTERM, signal.SIG_DFL)
