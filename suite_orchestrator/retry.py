"""Retry coordination around the test executor."""

import asyncio
import logging
from dataclasses import dataclass, field

from suite_orchestrator.executor import TestExecutor
from suite_orchestrator.models.config import SuiteConfiguration
from suite_orchestrator.models.definition import TestCase
from suite_orchestrator.models.result import Attempt, TestResult

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class RetryPolicy:
    """Delay schedule between attempts, with optional exponential backoff."""

    delay: float = 1.0
    backoff_factor: float = 1.0
    max_delay: float = 60.0

    @classmethod
    def from_config(cls, config: SuiteConfiguration) -> "RetryPolicy":
        return cls(
            delay=config.retry_delay,
            backoff_factor=config.retry_backoff,
            max_delay=config.max_retry_delay,
        )

    def get_delay(self, retry: int) -> float:
        """Calculate the delay before a retry (0 = first retry).

        Args:
            retry: Number of retries already made.

        Returns:
            Delay in seconds before the next attempt.

        """
        return min(self.delay * (self.backoff_factor**retry), self.max_delay)


@dataclass(frozen=True, kw_only=True)
class RetryCoordinator:
    """Re-runs a test case until it passes or its attempts are exhausted."""

    executor: TestExecutor = field(default_factory=TestExecutor)
    policy: RetryPolicy = field(default_factory=RetryPolicy)

    async def run(
        self,
        test_case: TestCase,
        timeout: float,
        retry_limit: int,
    ) -> TestResult:
        """Run up to ``retry_limit + 1`` attempts of ``test_case``.

        Every non-passing status (failed, timed out, setup failed) is retried.
        The final status is that of the last attempt made.
        """
        max_attempts = retry_limit + 1
        attempts: list[Attempt] = []

        for number in range(1, max_attempts + 1):
            attempt = await self.executor.execute(test_case, timeout, number)
            attempts.append(attempt)

            if attempt.passed:
                if number > 1:
                    log.info("%s passed on attempt %d", test_case.name, number)
                break

            if number < max_attempts:
                delay = self.policy.get_delay(number - 1)
                log.warning(
                    "%s attempt %d/%d %s: %s; retrying in %.2fs",
                    test_case.name,
                    number,
                    max_attempts,
                    attempt.status,
                    attempt.message,
                    delay,
                )
                await asyncio.sleep(delay)

        last = attempts[-1]
        return TestResult(
            test_id=test_case.id,
            name=test_case.name,
            status=last.status,
            duration=sum(a.duration for a in attempts),
            message=last.message,
            category=test_case.category,
            priority=test_case.priority,
            attempts=tuple(attempts),
        )
