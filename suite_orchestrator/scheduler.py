"""Scheduler driving retry coordination over every test case of a suite."""

import asyncio
import inspect
import logging
from collections.abc import Callable, Mapping, Sequence
from concurrent.futures import Executor, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Literal

from suite_orchestrator.aggregator import ResultAggregator
from suite_orchestrator.executor import TestExecutor, describe_error
from suite_orchestrator.models.config import SuiteConfiguration
from suite_orchestrator.models.definition import TestCase
from suite_orchestrator.models.result import TestResult
from suite_orchestrator.retry import RetryCoordinator, RetryPolicy

log = logging.getLogger(__name__)

ABORTED_REASON = "suite aborted after prior failure"
DEPENDENCY_REASON = "dependency not satisfied"
DISABLED_REASON = "test case disabled"
INTERRUPTED_REASON = "test execution was interrupted"

ResultCallback = Callable[[TestResult], None]
DependencyState = Literal["ready", "waiting", "unsatisfied"]


def skipped_result(test_case: TestCase, reason: str) -> TestResult:
    """Final result for a test case whose executor never ran."""
    return TestResult(
        test_id=test_case.id,
        name=test_case.name,
        status="skipped",
        duration=0.0,
        message=reason,
        category=test_case.category,
        priority=test_case.priority,
    )


def failed_result(test_case: TestCase, message: str) -> TestResult:
    """Final result for a test case whose execution broke outside the executor."""
    return TestResult(
        test_id=test_case.id,
        name=test_case.name,
        status="failed",
        duration=0.0,
        message=message,
        category=test_case.category,
        priority=test_case.priority,
    )


def thread_budget(test_cases: Sequence[TestCase], config: SuiteConfiguration) -> int:
    """Number of threads sync actions may hold at once during a run.

    An action abandoned at its timeout keeps its thread until it returns, so
    every sync phase of every possible attempt gets room for its own thread.
    Threads are only started on demand.
    """
    budget = 0
    for test_case in test_cases:
        sync_actions = sum(
            1
            for action in (test_case.setup, test_case.body, test_case.teardown)
            if action is not None and not inspect.iscoroutinefunction(action)
        )
        budget += sync_actions * (test_case.effective_retry_limit(config) + 1)
    return max(budget, config.concurrency_width)


@dataclass(frozen=True, kw_only=True)
class TestScheduler:
    """Dispatches test cases sequentially or over a bounded set of workers.

    Workers send ``(position, result)`` pairs over a queue to the dispatch
    loop, which is the only code that writes to the result aggregator.

    Without an explicit ``coordinator`` each run builds its own, backed by a
    thread pool for sync actions that is shut down when the run ends.
    """

    __test__ = False

    config: SuiteConfiguration
    coordinator: RetryCoordinator | None = None
    on_result: ResultCallback | None = field(default=None, repr=False)

    @classmethod
    def from_config(
        cls,
        config: SuiteConfiguration,
        on_result: ResultCallback | None = None,
    ) -> "TestScheduler":
        return cls(config=config, on_result=on_result)

    def _build_coordinator(self, thread_pool: Executor) -> RetryCoordinator:
        return RetryCoordinator(
            executor=TestExecutor(
                teardown_on_setup_failure=self.config.teardown_on_setup_failure,
                thread_pool=thread_pool,
            ),
            policy=RetryPolicy.from_config(self.config),
        )

    async def run(
        self,
        test_cases: Sequence[TestCase],
        aggregator: ResultAggregator,
    ) -> None:
        """Run ``test_cases`` and record one final result per case.

        Dispatch always picks the earliest pending case whose dependencies are
        resolved, so sequential mode runs in submission order unless a case
        depends on one submitted after it.

        Disabled cases are skipped as disabled before anything runs, so that
        reason takes precedence over an abort caused by a later failure.
        """
        width = self.config.concurrency_width
        positions = {tc.id: index for index, tc in enumerate(test_cases)}
        pending = list(range(len(test_cases)))
        running: dict[int, asyncio.Task[None]] = {}
        queue: asyncio.Queue[tuple[int, TestResult]] = asyncio.Queue()
        aborted = False

        thread_pool: ThreadPoolExecutor | None = None
        coordinator = self.coordinator
        if coordinator is None:
            thread_pool = ThreadPoolExecutor(
                max_workers=thread_budget(test_cases, self.config),
                thread_name_prefix="suite-action",
            )
            coordinator = self._build_coordinator(thread_pool)

        log.info(
            "Scheduling %d test(s) in %s mode (width=%d)",
            len(test_cases),
            self.config.mode,
            width,
        )

        try:
            while pending or running:
                for index in list(pending):
                    test_case = test_cases[index]

                    if not test_case.enabled:
                        reason: str | None = DISABLED_REASON
                    elif aborted:
                        reason = ABORTED_REASON
                    else:
                        state = self._dependency_state(
                            test_case, positions, aggregator
                        )
                        if state == "waiting" or len(running) >= width:
                            continue
                        reason = DEPENDENCY_REASON if state == "unsatisfied" else None

                    pending.remove(index)
                    if reason is not None:
                        log.info("Skipping %s: %s", test_case.name, reason)
                        self._record(aggregator, index, skipped_result(test_case, reason))
                        continue

                    log.info("Dispatching %s", test_case.name)
                    running[index] = asyncio.create_task(
                        self._work(coordinator, index, test_case, queue),
                        name=f"test:{test_case.id}",
                    )

                if not running:
                    # Only reachable when dependencies can never resolve.
                    for index in pending:
                        self._record(
                            aggregator,
                            index,
                            skipped_result(test_cases[index], DEPENDENCY_REASON),
                        )
                    pending.clear()
                    break

                index, result = await queue.get()
                running.pop(index)
                self._record(aggregator, index, result)

                if (
                    self.config.stop_on_first_failure
                    and not result.passed
                    and not aborted
                ):
                    aborted = True
                    log.warning(
                        "%s finished with status %s, no further tests will be "
                        "dispatched",
                        result.name,
                        result.status,
                    )
        finally:
            for task in running.values():
                task.cancel()
            if thread_pool is not None:
                # Abandoned sync actions may still hold threads.
                thread_pool.shutdown(wait=False, cancel_futures=True)

    def _dependency_state(
        self,
        test_case: TestCase,
        positions: Mapping[str, int],
        aggregator: ResultAggregator,
    ) -> DependencyState:
        state: DependencyState = "ready"
        for dependency in test_case.dependencies:
            result = aggregator.get(positions[dependency])
            if result is None:
                state = "waiting"
            elif not result.passed:
                return "unsatisfied"
        return state

    def _record(
        self,
        aggregator: ResultAggregator,
        index: int,
        result: TestResult,
    ) -> None:
        aggregator.record(index, result)
        log.info(
            "Test completed: %s status=%s attempts=%d duration=%.2fs",
            result.name,
            result.status,
            result.attempt_count,
            result.duration,
        )
        if self.on_result is not None:
            try:
                self.on_result(result)
            except Exception as exc:
                log.error("Result callback failed: %s", exc, exc_info=exc)

    async def _work(
        self,
        coordinator: RetryCoordinator,
        index: int,
        test_case: TestCase,
        queue: "asyncio.Queue[tuple[int, TestResult]]",
    ) -> None:
        result: TestResult | None = None
        try:
            result = await coordinator.run(
                test_case,
                test_case.effective_timeout(self.config),
                test_case.effective_retry_limit(self.config),
            )
        except Exception as exc:
            log.error("Test execution failed: %s", exc, exc_info=exc)
            result = failed_result(test_case, describe_error(exc))
        finally:
            # Every dispatched position reports exactly one result.
            if result is None:
                result = failed_result(test_case, INTERRUPTED_REASON)
            queue.put_nowait((index, result))
