"""Tests for configuration and suite validation."""

import pytest

from suite_orchestrator.models.config import SuiteConfiguration
from suite_orchestrator.models.definition import TestCase
from suite_orchestrator.validation import (
    ConfigurationInvalidError,
    validate_configuration,
    validate_test_cases,
)


class TestValidateConfiguration:
    """Tests for validate_configuration."""

    __test__ = True

    def test_returns_valid_instance(self) -> None:
        """Returns an equal configuration for a valid instance."""
        config = SuiteConfiguration(mode="parallel", max_concurrency=2)

        assert validate_configuration(config) == config

    def test_accepts_mapping(self) -> None:
        """Builds a configuration from a mapping."""
        config = validate_configuration({"mode": "parallel", "max_concurrency": 3})

        assert config.concurrency_width == 3

    @pytest.mark.parametrize(
        "data",
        [
            {"max_concurrency": 0},
            {"default_timeout": 0},
            {"default_retry_limit": -1},
            {"mode": "random"},
            {"unknown": 1},
        ],
    )
    def test_rejects_invalid_mapping(self, data: dict[str, object]) -> None:
        """Raises ConfigurationInvalidError for invalid values."""
        with pytest.raises(ConfigurationInvalidError, match="Invalid suite"):
            validate_configuration(data)

    def test_rejects_unvalidated_instance(self) -> None:
        """Catches instances that bypassed validation."""
        config = SuiteConfiguration.model_construct(max_concurrency=0)

        with pytest.raises(ConfigurationInvalidError):
            validate_configuration(config)

    def test_is_value_error(self) -> None:
        """ConfigurationInvalidError is a ValueError."""
        assert issubclass(ConfigurationInvalidError, ValueError)


class TestValidateTestCases:
    """Tests for validate_test_cases."""

    __test__ = True

    def test_accepts_valid_dependencies(self) -> None:
        """Accepts forward and backward references to known tests."""
        validate_test_cases(
            [
                TestCase(id="a", name="a", dependencies=["c"]),
                TestCase(id="b", name="b", dependencies=["a"]),
                TestCase(id="c", name="c"),
            ]
        )

    def test_accepts_empty(self) -> None:
        """Accepts an empty list of test cases."""
        validate_test_cases([])

    def test_rejects_duplicate_ids(self) -> None:
        """Raises for duplicate test ids."""
        with pytest.raises(ConfigurationInvalidError, match="Duplicate test ids"):
            validate_test_cases(
                [TestCase(id="a", name="first"), TestCase(id="a", name="second")]
            )

    def test_rejects_unknown_dependency(self) -> None:
        """Raises for dependencies on tests outside the suite."""
        with pytest.raises(ConfigurationInvalidError, match="unknown tests"):
            validate_test_cases([TestCase(id="a", name="a", dependencies=["zzz"])])

    def test_rejects_self_dependency(self) -> None:
        """Raises for a test depending on itself."""
        with pytest.raises(ConfigurationInvalidError, match="depends on itself"):
            validate_test_cases([TestCase(id="a", name="a", dependencies=["a"])])

    def test_rejects_cycle(self) -> None:
        """Raises and names the cycle."""
        with pytest.raises(
            ConfigurationInvalidError, match="Dependency cycle detected: a -> b -> c -> a"
        ):
            validate_test_cases(
                [
                    TestCase(id="a", name="a", dependencies=["b"]),
                    TestCase(id="b", name="b", dependencies=["c"]),
                    TestCase(id="c", name="c", dependencies=["a"]),
                ]
            )
