# src/engine/runner.py
"""
Tick-synchronized test runner.

This module wires together:
- WorldAdapter (backend; one fresh World per test)
- AggregatedTimeline (per-test schedule)
- ActionExecutor (action dispatch + assertion evaluation)
- ActionTracer (per-action trace records)
- EventBus (optional run lifecycle events)

Public surface:
    class TestRunner:
        run_test(TestSpec) -> TestResult
        run_tests(Sequence[TestSpec]) -> TestSummary

Per-test state machine:

    Initializing -> Executing(tick) -> Executing(tick + 1) | Failed | Completed

Design constraints:
- Each test gets its own World and (lazily) its own Player; nothing is
  shared between tests, in sequential or parallel batches.
- The first failing assertion stops the test immediately; remaining
  actions in that tick and all later ticks are skipped.
- Backend failures (world creation, player setup, any action) raise
  RunnerError from run_test(); run_tests() records them as an errored
  result and moves on to the next spec.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from time import perf_counter
from typing import Any, Callable, List, Optional, Sequence

from monitoring.bus import EventBus
from monitoring.events import EventType, MonitoringEvent
from spec.backend import World, WorldAdapter
from spec.results import TestResult, TestSummary
from spec.test_spec import TestSpec

from .actions import ActionExecutor, ExecutionContext
from .timeline import AggregatedTimeline
from .tracing import ActionTracer


log = logging.getLogger(__name__)

BreakpointHook = Callable[[str, int, World], None]


# ---------------------------------------------------------------------------
# Domain errors
# ---------------------------------------------------------------------------


@dataclass
class RunnerError(RuntimeError):
    """
    Domain-level error for failures that stop a single test from running.

    Examples:
        - the backend could not create a world

    Assertion failures are NOT errors; they are recorded in TestResult.
    """

    code: str
    details: dict[str, Any]

    def __str__(self) -> str:
        return f"RunnerError(code={self.code!r}, details={self.details!r})"


# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------


@dataclass
class TestRunConfig:
    """
    Execution knobs for TestRunner.

    - debug_enabled: honor spec breakpoints (calls the breakpoint hook).
    - parallel: run a batch on a thread pool instead of sequentially.
    - max_parallel_worlds: pool size when parallel is on.
    """

    __test__ = False

    debug_enabled: bool = False
    parallel: bool = False
    max_parallel_worlds: int = 4


# ---------------------------------------------------------------------------
# Runner
# ---------------------------------------------------------------------------


class TestRunner:
    """
    Drive backend worlds through test timelines, one tick at a time.

    The runner is backend-agnostic: any WorldAdapter that satisfies the
    spec.backend contract can be passed in.
    """

    __test__ = False

    def __init__(
        self,
        adapter: WorldAdapter,
        config: Optional[TestRunConfig] = None,
        *,
        executor: Optional[ActionExecutor] = None,
        tracer: Optional[ActionTracer] = None,
        bus: Optional[EventBus] = None,
        on_breakpoint: Optional[BreakpointHook] = None,
    ) -> None:
        self._adapter = adapter
        self._config = config or TestRunConfig()
        self._executor = executor or ActionExecutor()
        self._tracer = tracer or ActionTracer()
        self._bus = bus
        self._on_breakpoint = on_breakpoint

    @property
    def config(self) -> TestRunConfig:
        return self._config

    @property
    def tracer(self) -> ActionTracer:
        return self._tracer

    # ------------------------------------------------------------------
    # Single test
    # ------------------------------------------------------------------

    def run_test(self, spec: TestSpec) -> TestResult:
        """
        Run one spec against a fresh world.

        Raises:
            RunnerError if the backend fails to create a world, apply the
            player setup or execute an action.
        """
        start = perf_counter()

        try:
            world = self._adapter.create_test_world()
        except Exception as exc:
            raise RunnerError(
                code="world_creation_failed",
                details={"test": spec.name, "exception": repr(exc)},
            ) from exc

        self._publish(EventType.TEST_STARTED, spec.name, {"tags": list(spec.tags)})

        timeline = AggregatedTimeline.from_spec(spec)
        result = TestResult(name=spec.name)
        ctx = ExecutionContext(world=world)

        setup = spec.player_setup
        if setup is not None:
            try:
                self._executor.apply_setup(setup, ctx)
            except Exception as exc:
                raise RunnerError(
                    code="setup_failed",
                    details={"test": spec.name, "exception": repr(exc)},
                ) from exc

        for tick in range(timeline.max_tick + 1):
            if self._config.debug_enabled and timeline.is_breakpoint(tick):
                self._hit_breakpoint(spec.name, tick, world)

            for _spec_index, entry, _value_index in timeline.actions_at(tick):
                action_start = perf_counter()
                try:
                    outcome = self._executor.execute(entry.action, ctx, tick)
                except Exception as exc:
                    self._tracer.record(
                        test_name=spec.name,
                        tick=tick,
                        action=entry.action,
                        outcome=None,
                        duration_s=perf_counter() - action_start,
                        error=repr(exc),
                    )
                    raise RunnerError(
                        code="action_failed",
                        details={
                            "test": spec.name,
                            "tick": tick,
                            "action": entry.action.kind,
                            "exception": repr(exc),
                        },
                    ) from exc
                self._tracer.record(
                    test_name=spec.name,
                    tick=tick,
                    action=entry.action,
                    outcome=outcome,
                    duration_s=perf_counter() - action_start,
                )

                if outcome is None:
                    continue

                result.add_assertion(outcome)
                if not outcome.success:
                    result.total_ticks = tick
                    result.duration_s = perf_counter() - start
                    log.info("Test %s failed at tick %d: %s", spec.name, tick, outcome.message)
                    self._publish(
                        EventType.ASSERTION_FAILED,
                        spec.name,
                        {
                            "tick": tick,
                            "position": list(outcome.position or ()),
                            "expected": outcome.expected,
                            "actual": outcome.actual,
                        },
                    )
                    self._finish(result)
                    return result

            world.do_tick()

        result.total_ticks = timeline.max_tick
        result.duration_s = perf_counter() - start
        self._finish(result)
        return result

    # ------------------------------------------------------------------
    # Batches
    # ------------------------------------------------------------------

    def run_tests(self, specs: Sequence[TestSpec]) -> TestSummary:
        """
        Run a batch and fold the results into a TestSummary.

        Results are always reported in input order, even when the batch
        runs in parallel.
        """
        info = self._adapter.server_info()
        log.info(
            "Running %d test(s) on %s (%s)%s",
            len(specs),
            info.name,
            info.minecraft_version,
            " in parallel" if self._config.parallel else "",
        )

        if self._config.parallel and len(specs) > 1:
            results = self._run_parallel(specs)
        else:
            results = [self._run_guarded(spec) for spec in specs]

        summary = TestSummary.from_results(results)
        self._publish(
            EventType.BATCH_FINISHED,
            None,
            {
                "total": summary.total_tests,
                "passed": summary.passed_tests,
                "failed": summary.failed_tests,
            },
        )
        return summary

    def _run_parallel(self, specs: Sequence[TestSpec]) -> List[TestResult]:
        workers = max(1, self._config.max_parallel_worlds)
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="ticktest") as pool:
            futures = {pool.submit(self._run_guarded, spec): index for index, spec in enumerate(specs)}
            indexed = [(futures[future], future.result()) for future in as_completed(futures)]
        indexed.sort(key=lambda pair: pair[0])
        return [result for _, result in indexed]

    def _run_guarded(self, spec: TestSpec) -> TestResult:
        start = perf_counter()
        try:
            return self.run_test(spec)
        except RunnerError as exc:
            log.error("Test %s could not run: %s", spec.name, exc)
            result = TestResult.errored(spec.name, exc.code, perf_counter() - start)
        except Exception:
            log.exception("Test %s aborted by an unexpected error", spec.name)
            result = TestResult.errored(spec.name, "unexpected_error", perf_counter() - start)
        self._finish(result)
        return result

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _hit_breakpoint(self, test_name: str, tick: int, world: World) -> None:
        log.info("Breakpoint in %s at tick %d", test_name, tick)
        self._publish(EventType.BREAKPOINT_HIT, test_name, {"tick": tick})
        if self._on_breakpoint is not None:
            self._on_breakpoint(test_name, tick, world)

    def _finish(self, result: TestResult) -> None:
        self._publish(
            EventType.TEST_FINISHED,
            result.name,
            {
                "success": result.success,
                "total_ticks": result.total_ticks,
                "duration_s": result.duration_s,
                "error": result.error,
            },
        )

    def _publish(self, event_type: EventType, test_name: Optional[str], payload: dict) -> None:
        if self._bus is None:
            return
        self._bus.publish(MonitoringEvent(event_type=event_type, test_name=test_name, payload=payload))
