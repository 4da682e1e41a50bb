"""Models for test case and test suite definitions."""

import uuid
from collections.abc import Awaitable, Callable, Mapping, Sequence
from enum import StrEnum
from types import MappingProxyType
from typing import Any

from pydantic import Field, field_serializer, field_validator

from suite_orchestrator.cancellation import AttemptContext
from suite_orchestrator.models.base import Model
from suite_orchestrator.models.config import SuiteConfiguration

Action = Callable[[AttemptContext], Awaitable[None] | None]


class TestCategory(StrEnum):
    """Closed set of categories a test case can belong to."""

    __test__ = False

    FUNCTIONAL = "functional"
    PERFORMANCE = "performance"
    SECURITY = "security"
    UI = "ui"
    INTEGRATION = "integration"
    UNIT = "unit"
    SMOKE = "smoke"
    REGRESSION = "regression"
    ACCESSIBILITY = "accessibility"
    VISUAL = "visual"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


class TestPriority(StrEnum):
    """Priority levels, from most to least important."""

    __test__ = False

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    LOWEST = "lowest"

    @property
    def rank(self) -> int:
        """Sort key where lower means more important."""
        return list(TestPriority).index(self)

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


def _new_id() -> str:
    return str(uuid.uuid4())


class TestCase(Model):
    """Single named unit of work with optional lifecycle actions.

    Actions receive an ``AttemptContext`` and may be coroutine functions or
    plain callables; plain callables are run in a worker thread.
    """

    __test__ = False

    id: str = Field(default_factory=_new_id, description="Unique test identifier")
    name: str = Field(..., min_length=1, description="Human-readable test name")
    description: str = Field(default="", description="What the test verifies")
    category: TestCategory = Field(default=TestCategory.FUNCTIONAL)
    priority: TestPriority = Field(default=TestPriority.MEDIUM)
    tags: frozenset[str] = Field(default_factory=frozenset)
    setup: Action | None = Field(default=None, repr=False)
    body: Action | None = Field(default=None, repr=False)
    teardown: Action | None = Field(default=None, repr=False)
    timeout: float | None = Field(
        default=None, gt=0, description="Overrides the suite default timeout"
    )
    dependencies: tuple[str, ...] = Field(
        default_factory=tuple,
        description="Ids of test cases that must pass before this one runs",
    )
    retry_limit: int | None = Field(
        default=None, ge=0, description="Overrides the suite default retry limit"
    )
    enabled: bool = Field(default=True)
    expected_execution_time: float = Field(default=30.0, ge=0)
    custom_data: Mapping[str, Any] = Field(
        default_factory=dict, validate_default=True
    )

    @field_validator("custom_data")
    @classmethod
    def _freeze_custom_data(cls, value: Mapping[str, Any]) -> Mapping[str, Any]:
        return MappingProxyType(dict(value))

    @field_serializer("custom_data")
    def _serialize_custom_data(self, value: Mapping[str, Any]) -> dict[str, Any]:
        return dict(value)

    def effective_timeout(self, config: SuiteConfiguration) -> float:
        """Timeout for one attempt of this test under the given configuration."""
        return self.timeout if self.timeout is not None else config.default_timeout

    def effective_retry_limit(self, config: SuiteConfiguration) -> int:
        """Retry limit for this test under the given configuration."""
        if self.retry_limit is not None:
            return self.retry_limit
        return config.default_retry_limit


class TestSuite(Model):
    """Ordered collection of test cases sharing a default configuration."""

    __test__ = False

    id: str = Field(default_factory=_new_id, description="Unique suite identifier")
    name: str = Field(..., min_length=1, description="Human-readable suite name")
    description: str = Field(default="")
    test_cases: tuple[TestCase, ...] = Field(default_factory=tuple)
    configuration: SuiteConfiguration = Field(default_factory=SuiteConfiguration)
    tags: frozenset[str] = Field(default_factory=frozenset)
    enabled: bool = Field(default=True)

    @property
    def total_expected_execution_time(self) -> float:
        return sum(tc.expected_execution_time for tc in self.test_cases)

    def enabled_test_cases(self) -> Sequence[TestCase]:
        return [tc for tc in self.test_cases if tc.enabled]

    def test_cases_in(self, category: TestCategory) -> Sequence[TestCase]:
        return [tc for tc in self.test_cases if tc.category == category]

    def test_cases_by_priority(self) -> Sequence[TestCase]:
        """Test cases ordered from critical to lowest, stable within a level."""
        return sorted(self.test_cases, key=lambda tc: tc.priority.rank)

    def with_test_case(self, test_case: TestCase) -> "TestSuite":
        """Return a copy of this suite with ``test_case`` appended."""
        return self.model_copy(
            update={"test_cases": (*self.test_cases, test_case)}
        )
