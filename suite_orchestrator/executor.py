"""Run the lifecycle of a single test attempt.

Each phase (setup, body, teardown) is raced against the effective timeout.
When the timer wins, the phase's cancellation token is set and its task is
cancelled, but the executor does not wait for it to wind down: work running in
a worker thread may keep going in the background.
"""

import asyncio
import inspect
import logging
from concurrent.futures import Executor
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Literal

from suite_orchestrator.cancellation import (
    AttemptCancelledError,
    AttemptContext,
    CancellationToken,
)
from suite_orchestrator.models.definition import Action, TestCase
from suite_orchestrator.models.result import Attempt, AttemptStatus

log = logging.getLogger(__name__)

Phase = Literal["setup", "body", "teardown"]


class ActionTimeoutError(Exception):
    """Raised when a lifecycle action does not finish within its timeout."""

    def __init__(self, phase: Phase, timeout: float) -> None:
        super().__init__(f"{phase.capitalize()} timed out after {timeout:g}s")
        self.phase = phase
        self.timeout = timeout


def describe_error(exc: BaseException) -> str:
    """Human-readable message for a captured exception."""
    return str(exc) or type(exc).__name__


async def _invoke(
    action: Action,
    context: AttemptContext,
    thread_pool: Executor | None,
) -> None:
    if inspect.iscoroutinefunction(action):
        await action(context)
        return

    loop = asyncio.get_running_loop()
    result = await loop.run_in_executor(thread_pool, action, context)
    if inspect.isawaitable(result):
        await result


def _discard_abandoned(task: "asyncio.Task[None]") -> None:
    if task.cancelled():
        return
    if (exc := task.exception()) is not None:
        log.debug("Abandoned action finished with %s", describe_error(exc))


async def run_action(
    action: Action,
    context: AttemptContext,
    phase: Phase,
    thread_pool: Executor | None = None,
) -> None:
    """Run ``action`` until it finishes or ``context.timeout`` elapses.

    Plain callables run in ``thread_pool``, or in the loop's default executor
    when it is None.

    Raises:
        ActionTimeoutError: If the timer fires first.
        AttemptCancelledError: If the action's task was cancelled from within.
        BaseException: Whatever the action raised.

    """
    task = asyncio.ensure_future(_invoke(action, context, thread_pool))
    try:
        done, _ = await asyncio.wait({task}, timeout=context.timeout)
    except asyncio.CancelledError:
        context.token.cancel()
        task.cancel()
        task.add_done_callback(_discard_abandoned)
        raise

    if task not in done:
        context.token.cancel()
        task.cancel()
        task.add_done_callback(_discard_abandoned)
        raise ActionTimeoutError(phase, context.timeout)

    if task.cancelled():
        raise AttemptCancelledError(f"{phase.capitalize()} was cancelled")
    task.result()


@dataclass(frozen=True, kw_only=True)
class TestExecutor:
    """Runs setup, body and teardown of a test case and reports one Attempt.

    When setup fails the body never runs. Teardown still runs on a best-effort
    basis unless ``teardown_on_setup_failure`` is disabled.

    Anything an action raises is captured in the attempt, including
    ``BaseException`` subclasses such as pytest's outcome exceptions. Only
    cancellation of the attempt itself propagates.
    """

    __test__ = False

    teardown_on_setup_failure: bool = True
    thread_pool: Executor | None = field(default=None, repr=False, compare=False)

    async def execute(
        self,
        test_case: TestCase,
        timeout: float,
        attempt_number: int = 1,
    ) -> Attempt:
        """Execute one attempt of ``test_case`` with the given timeout."""
        loop = asyncio.get_running_loop()
        started_at = datetime.now(timezone.utc)
        start = loop.time()

        log.debug("Starting attempt %d of %s", attempt_number, test_case.name)

        status: AttemptStatus = "passed"
        error: BaseException | None = None
        message: str | None = None

        try:
            await self._run_phase(test_case, "setup", timeout, attempt_number)
        except ActionTimeoutError as exc:
            status, error, message = "setup_failed", exc, describe_error(exc)
        except asyncio.CancelledError:
            raise
        except BaseException as exc:
            status, error = "setup_failed", exc
            message = f"Setup failed: {describe_error(exc)}"

        if status == "passed":
            try:
                await self._run_phase(test_case, "body", timeout, attempt_number)
            except ActionTimeoutError as exc:
                status, error, message = "timed_out", exc, describe_error(exc)
                log.warning("%s: %s", test_case.name, message)
            except asyncio.CancelledError:
                raise
            except BaseException as exc:
                status, error, message = "failed", exc, describe_error(exc)

        if status != "setup_failed" or self.teardown_on_setup_failure:
            try:
                await self._run_phase(test_case, "teardown", timeout, attempt_number)
            except asyncio.CancelledError:
                raise
            except BaseException as exc:
                if status == "passed":
                    status, error = "failed", exc
                    message = f"Teardown failed: {describe_error(exc)}"
                else:
                    log.warning(
                        "Teardown of %s failed after %s: %s",
                        test_case.name,
                        status,
                        describe_error(exc),
                    )

        duration = loop.time() - start
        log.debug(
            "Attempt %d of %s finished: %s (%.2fs)",
            attempt_number,
            test_case.name,
            status,
            duration,
        )

        return Attempt(
            number=attempt_number,
            status=status,
            started_at=started_at,
            finished_at=datetime.now(timezone.utc),
            duration=duration,
            message=message,
            error_type=type(error).__name__ if error is not None else None,
            exception=error,
        )

    async def _run_phase(
        self,
        test_case: TestCase,
        phase: Phase,
        timeout: float,
        attempt_number: int,
    ) -> None:
        action: Action | None = getattr(test_case, phase)
        if action is None:
            return

        context = AttemptContext(
            test_id=test_case.id,
            attempt=attempt_number,
            timeout=timeout,
            phase=phase,
            token=CancellationToken(),
        )
        await run_action(action, context, phase, self.thread_pool)
