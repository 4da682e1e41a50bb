"""Collects final test results into a suite result in submission order."""

from collections.abc import Sequence
from datetime import datetime

from suite_orchestrator.models.result import SuiteResult, TestResult


class ResultAggregator:
    """One slot per submitted test case, filled exactly once.

    The scheduler funnels every worker's result through a single consumer, so
    this class is only ever written from one coroutine at a time.
    """

    def __init__(self, size: int) -> None:
        self._slots: list[TestResult | None] = [None] * size

    def __len__(self) -> int:
        return len(self._slots)

    @property
    def recorded_count(self) -> int:
        return sum(1 for slot in self._slots if slot is not None)

    @property
    def is_complete(self) -> bool:
        return all(slot is not None for slot in self._slots)

    def has_result(self, index: int) -> bool:
        return self._slots[index] is not None

    def get(self, index: int) -> TestResult | None:
        return self._slots[index]

    def record(self, index: int, result: TestResult) -> None:
        """Store the final result for the test submitted at ``index``.

        Raises:
            ValueError: If a result was already recorded for ``index``.

        """
        if self._slots[index] is not None:
            raise ValueError(
                f"Result for test {result.test_id!r} at position {index} "
                "was already recorded"
            )
        self._slots[index] = result

    def results(self) -> Sequence[TestResult]:
        """Recorded results in submission order.

        Raises:
            RuntimeError: If any test has no final result yet.

        """
        missing = [i for i, slot in enumerate(self._slots) if slot is None]
        if missing:
            raise RuntimeError(f"No result recorded for positions {missing}")
        return tuple(slot for slot in self._slots if slot is not None)

    def build(
        self,
        *,
        suite_id: str,
        suite_name: str,
        wall_clock_time: float,
        started_at: datetime | None = None,
        finished_at: datetime | None = None,
    ) -> SuiteResult:
        return SuiteResult(
            suite_id=suite_id,
            suite_name=suite_name,
            results=self.results(),
            wall_clock_time=wall_clock_time,
            started_at=started_at,
            finished_at=finished_at,
        )
