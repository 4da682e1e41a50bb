"""Models for test execution results."""

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

from suite_orchestrator.models.definition import TestCategory, TestPriority

AttemptStatus = Literal["passed", "failed", "timed_out", "setup_failed"]
TestStatus = Literal["passed", "failed", "timed_out", "setup_failed", "skipped"]

FAILURE_STATUSES: frozenset[TestStatus] = frozenset(
    {"failed", "timed_out", "setup_failed"}
)


@dataclass(frozen=True, kw_only=True)
class Attempt:
    """One execution of a test case lifecycle."""

    number: int
    status: AttemptStatus
    started_at: datetime
    finished_at: datetime
    duration: float
    message: str | None = None
    error_type: str | None = None
    exception: BaseException | None = field(default=None, repr=False, compare=False)

    @property
    def passed(self) -> bool:
        return self.status == "passed"


@dataclass(frozen=True, kw_only=True)
class TestResult:
    """Final outcome of a test case after all attempts.

    ``duration`` is the cumulative execution time of every attempt, excluding
    retry delays. Skipped results have no attempts and carry the skip reason
    in ``message``.
    """

    __test__ = False

    test_id: str
    name: str
    status: TestStatus
    duration: float
    message: str | None = None
    category: TestCategory = TestCategory.FUNCTIONAL
    priority: TestPriority = TestPriority.MEDIUM
    attempts: Sequence[Attempt] = ()

    @property
    def attempt_count(self) -> int:
        return len(self.attempts)

    @property
    def passed(self) -> bool:
        return self.status == "passed"

    @property
    def last_error(self) -> str | None:
        """Message of the last non-passing attempt, if any."""
        for attempt in reversed(self.attempts):
            if not attempt.passed:
                return attempt.message
        return None


@dataclass(frozen=True, kw_only=True)
class SuiteResult:
    """Aggregated results of a suite run, in submission order.

    Timed-out and setup-failed tests count towards ``failed_count``;
    ``timed_out_count`` and ``setup_failed_count`` break that bucket down.
    """

    suite_id: str
    suite_name: str
    results: Sequence[TestResult]
    wall_clock_time: float
    started_at: datetime | None = None
    finished_at: datetime | None = None

    @property
    def total_tests(self) -> int:
        return len(self.results)

    @property
    def passed_count(self) -> int:
        return sum(1 for r in self.results if r.status == "passed")

    @property
    def failed_count(self) -> int:
        return sum(1 for r in self.results if r.status in FAILURE_STATUSES)

    @property
    def timed_out_count(self) -> int:
        return sum(1 for r in self.results if r.status == "timed_out")

    @property
    def setup_failed_count(self) -> int:
        return sum(1 for r in self.results if r.status == "setup_failed")

    @property
    def skipped_count(self) -> int:
        return sum(1 for r in self.results if r.status == "skipped")

    @property
    def success_rate(self) -> float:
        """Percentage of passed tests, 0 for an empty suite."""
        if not self.results:
            return 0.0
        return self.passed_count / self.total_tests * 100

    @property
    def total_execution_time(self) -> float:
        return sum(r.duration for r in self.results)

    @property
    def average_execution_time(self) -> float:
        if not self.results:
            return 0.0
        return self.total_execution_time / self.total_tests

    @property
    def all_passed(self) -> bool:
        return self.passed_count == self.total_tests

    def results_with_status(self, status: TestStatus) -> Sequence[TestResult]:
        return [r for r in self.results if r.status == status]

    def results_in(self, category: TestCategory) -> Sequence[TestResult]:
        return [r for r in self.results if r.category == category]

    def slowest(self, count: int) -> Sequence[TestResult]:
        """The ``count`` results with the longest cumulative duration."""
        return sorted(self.results, key=lambda r: r.duration, reverse=True)[:count]
