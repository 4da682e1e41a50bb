"""Tests for test case and test suite models."""

import pytest
from pydantic import ValidationError

from suite_orchestrator.models.config import SuiteConfiguration
from suite_orchestrator.models.definition import (
    TestCase,
    TestCategory,
    TestPriority,
    TestSuite,
)
from suite_orchestrator.testing.factories import TestCaseFactory


def test_defaults() -> None:
    """Applies defaults for optional fields."""
    test_case = TestCase(name="login")

    assert test_case.id
    assert test_case.category == TestCategory.FUNCTIONAL
    assert test_case.priority == TestPriority.MEDIUM
    assert test_case.tags == frozenset()
    assert test_case.body is None
    assert test_case.dependencies == ()
    assert test_case.enabled is True


def test_generates_unique_ids() -> None:
    """Each test case gets its own id when none is given."""
    assert TestCase(name="a").id != TestCase(name="b").id


def test_is_immutable() -> None:
    """Rejects attribute assignment after construction."""
    test_case = TestCase(name="login")

    with pytest.raises(ValidationError):
        test_case.name = "logout"  # type: ignore[misc]


def test_collections_are_copied_into_immutable_values() -> None:
    """Later changes to the caller's list or dict do not leak into the model."""
    dependencies = ["login"]
    custom_data = {"device": "pixel"}
    test_case = TestCase(
        name="checkout", dependencies=dependencies, custom_data=custom_data
    )

    dependencies.append("search")
    custom_data["device"] = "iphone"

    assert test_case.dependencies == ("login",)
    assert test_case.custom_data == {"device": "pixel"}
    with pytest.raises(TypeError):
        test_case.custom_data["device"] = "iphone"  # type: ignore[index]
    with pytest.raises(TypeError):
        TestCase(name="defaults").custom_data["key"] = "value"  # type: ignore[index]


def test_custom_data_dumps_as_dict() -> None:
    """Serializes custom data as a plain dict."""
    test_case = TestCase(name="checkout", custom_data={"retries": 2})

    assert test_case.model_dump()["custom_data"] == {"retries": 2}


def test_suite_test_cases_are_a_tuple() -> None:
    """Stores the suite's test cases as an immutable tuple."""
    test_case = TestCase(name="login")

    suite = TestSuite(name="smoke", test_cases=[test_case])

    assert suite.test_cases == (test_case,)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"name": ""},
        {"name": "t", "timeout": 0},
        {"name": "t", "timeout": -1.0},
        {"name": "t", "retry_limit": -1},
        {"name": "t", "body": "not callable"},
        {"name": "t", "unknown_field": True},
    ],
)
def test_rejects_invalid_fields(kwargs: dict[str, object]) -> None:
    """Raises ValidationError for invalid field values."""
    with pytest.raises(ValidationError):
        TestCase(**kwargs)  # type: ignore[arg-type]


def test_effective_timeout_prefers_override() -> None:
    """Uses the per-test timeout when set, else the suite default."""
    config = SuiteConfiguration(default_timeout=10.0)

    assert TestCase(name="t", timeout=2.5).effective_timeout(config) == 2.5
    assert TestCase(name="t").effective_timeout(config) == 10.0


def test_effective_retry_limit_prefers_override() -> None:
    """Uses the per-test retry limit when set, including zero."""
    config = SuiteConfiguration(default_retry_limit=3)

    assert TestCase(name="t", retry_limit=0).effective_retry_limit(config) == 0
    assert TestCase(name="t").effective_retry_limit(config) == 3


def test_priority_rank_orders_critical_first() -> None:
    """Ranks priorities from critical to lowest."""
    ranks = [p.rank for p in TestPriority]

    assert ranks == sorted(ranks)
    assert TestPriority.CRITICAL.rank < TestPriority.LOWEST.rank


def test_display_names() -> None:
    """Capitalizes enum values for display."""
    assert TestCategory.ACCESSIBILITY.display_name == "Accessibility"
    assert TestPriority.HIGH.display_name == "High"


class TestSuiteModel:
    """Tests for TestSuite helpers."""

    __test__ = True

    def test_enabled_test_cases(self) -> None:
        """Filters out disabled test cases."""
        enabled = TestCase(name="on")
        suite = TestSuite(
            name="suite",
            test_cases=[enabled, TestCase(name="off", enabled=False)],
        )

        assert suite.enabled_test_cases() == [enabled]

    def test_test_cases_in_category(self) -> None:
        """Selects test cases by category."""
        smoke = TestCase(name="smoke", category=TestCategory.SMOKE)
        suite = TestSuite(
            name="suite",
            test_cases=[smoke, TestCase(name="ui", category=TestCategory.UI)],
        )

        assert suite.test_cases_in(TestCategory.SMOKE) == [smoke]
        assert suite.test_cases_in(TestCategory.VISUAL) == []

    def test_test_cases_by_priority_is_stable(self) -> None:
        """Orders critical first and keeps submission order within a level."""
        low = TestCase(name="low", priority=TestPriority.LOW)
        first_high = TestCase(name="high-1", priority=TestPriority.HIGH)
        critical = TestCase(name="critical", priority=TestPriority.CRITICAL)
        second_high = TestCase(name="high-2", priority=TestPriority.HIGH)
        suite = TestSuite(
            name="suite", test_cases=[low, first_high, critical, second_high]
        )

        assert [tc.name for tc in suite.test_cases_by_priority()] == [
            "critical",
            "high-1",
            "high-2",
            "low",
        ]

    def test_with_test_case_returns_new_suite(self) -> None:
        """Appends to a copy and leaves the original untouched."""
        suite = TestSuite(name="suite")
        test_case = TestCaseFactory.build()

        extended = suite.with_test_case(test_case)

        assert list(extended.test_cases) == [test_case]
        assert list(suite.test_cases) == []
        assert extended.id == suite.id

    def test_total_expected_execution_time(self) -> None:
        """Sums expected execution times of all test cases."""
        suite = TestSuite(
            name="suite",
            test_cases=[
                TestCase(name="a", expected_execution_time=1.5),
                TestCase(name="b", expected_execution_time=2.5),
            ],
        )

        assert suite.total_expected_execution_time == 4.0

    def test_default_configuration(self) -> None:
        """Uses a default configuration when none is given."""
        assert TestSuite(name="suite").configuration == SuiteConfiguration()
