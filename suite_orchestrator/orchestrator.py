"""Test orchestrator: validate, schedule and aggregate a suite run."""

import asyncio
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from suite_orchestrator.aggregator import ResultAggregator
from suite_orchestrator.models.config import SuiteConfiguration
from suite_orchestrator.models.definition import TestCase, TestSuite
from suite_orchestrator.models.result import SuiteResult, TestResult
from suite_orchestrator.scheduler import ResultCallback, TestScheduler, skipped_result
from suite_orchestrator.validation import validate_configuration, validate_test_cases

log = logging.getLogger(__name__)

SUITE_DISABLED_REASON = "test suite disabled"


@dataclass(frozen=True, kw_only=True)
class TestOrchestrator:
    """Runs suites end to end and returns their aggregated results.

    Only ``ConfigurationInvalidError`` escapes a run; every test-level failure
    is captured in the returned result.
    """

    __test__ = False

    on_result: ResultCallback | None = field(default=None, repr=False)

    async def run_suite(
        self,
        suite: TestSuite,
        config: SuiteConfiguration | Mapping[str, Any] | None = None,
    ) -> SuiteResult:
        """Run every test case of ``suite``.

        Args:
            suite: Suite to run
            config: Overrides ``suite.configuration`` when given

        Returns:
            Suite result with one test result per case, in submission order

        Raises:
            ConfigurationInvalidError: If the configuration or the suite's
                test ids and dependencies are invalid. Raised before any test
                action runs.

        """
        effective = validate_configuration(
            suite.configuration if config is None else config
        )
        validate_test_cases(suite.test_cases)

        loop = asyncio.get_running_loop()
        started_at = datetime.now(timezone.utc)
        start = loop.time()
        aggregator = ResultAggregator(len(suite.test_cases))

        log.info(
            "Running suite %s with %d test case(s)", suite.name, len(suite.test_cases)
        )

        if suite.enabled:
            scheduler = TestScheduler.from_config(effective, on_result=self.on_result)
            await scheduler.run(suite.test_cases, aggregator)
        else:
            log.info("Suite %s is disabled, skipping all test cases", suite.name)
            for index, test_case in enumerate(suite.test_cases):
                aggregator.record(index, skipped_result(test_case, SUITE_DISABLED_REASON))

        result = aggregator.build(
            suite_id=suite.id,
            suite_name=suite.name,
            wall_clock_time=loop.time() - start,
            started_at=started_at,
            finished_at=datetime.now(timezone.utc),
        )
        log.info(
            "Suite %s completed in %.2fs: %d passed, %d failed, %d skipped",
            suite.name,
            result.wall_clock_time,
            result.passed_count,
            result.failed_count,
            result.skipped_count,
        )
        return result

    async def run_single_test(
        self,
        test_case: TestCase,
        config: SuiteConfiguration | Mapping[str, Any] | None = None,
    ) -> TestResult:
        """Run ``test_case`` as a one-element suite and return its result."""
        suite = TestSuite(name=test_case.name, test_cases=[test_case])
        suite_result = await self.run_suite(suite, config)
        return suite_result.results[0]


async def run_suite(
    suite: TestSuite,
    config: SuiteConfiguration | Mapping[str, Any] | None = None,
    *,
    on_result: ResultCallback | None = None,
) -> SuiteResult:
    """Run ``suite`` with a default orchestrator."""
    return await TestOrchestrator(on_result=on_result).run_suite(suite, config)


async def run_single_test(
    test_case: TestCase,
    config: SuiteConfiguration | Mapping[str, Any] | None = None,
) -> TestResult:
    """Run a single test case with a default orchestrator."""
    return await TestOrchestrator().run_single_test(test_case, config)
