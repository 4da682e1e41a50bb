"""Fail-fast validation of run configuration and suite structure."""

from collections import Counter
from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import ValidationError

from suite_orchestrator.models.config import SuiteConfiguration
from suite_orchestrator.models.definition import TestCase


class ConfigurationInvalidError(ValueError):
    """Raised before any test runs when configuration or suite is invalid."""


def validate_configuration(
    config: SuiteConfiguration | Mapping[str, Any],
) -> SuiteConfiguration:
    """Return a validated configuration.

    Instances are re-validated as well, so objects built with
    ``model_construct`` cannot bypass the field constraints.

    Raises:
        ConfigurationInvalidError: If any field violates its constraints.

    """
    data = (
        config.model_dump() if isinstance(config, SuiteConfiguration) else dict(config)
    )
    try:
        return SuiteConfiguration.model_validate(data)
    except ValidationError as e:
        raise ConfigurationInvalidError(f"Invalid suite configuration: {e}") from e


def validate_test_cases(test_cases: Sequence[TestCase]) -> None:
    """Check test ids and dependency references of a suite.

    Raises:
        ConfigurationInvalidError: On duplicate ids, unknown or self
            dependencies, or dependency cycles.

    """
    counts = Counter(tc.id for tc in test_cases)
    duplicates = sorted(test_id for test_id, count in counts.items() if count > 1)
    if duplicates:
        raise ConfigurationInvalidError(f"Duplicate test ids: {duplicates}")

    graph = {tc.id: tuple(tc.dependencies) for tc in test_cases}
    for test_id, dependencies in graph.items():
        if test_id in dependencies:
            raise ConfigurationInvalidError(f"Test {test_id!r} depends on itself")
        unknown = [d for d in dependencies if d not in graph]
        if unknown:
            raise ConfigurationInvalidError(
                f"Test {test_id!r} depends on unknown tests: {unknown}"
            )

    if cycle := _find_cycle(graph):
        raise ConfigurationInvalidError(
            f"Dependency cycle detected: {' -> '.join(cycle)}"
        )


def _find_cycle(graph: Mapping[str, Sequence[str]]) -> list[str] | None:
    visiting: list[str] = []
    done: set[str] = set()

    def visit(node: str) -> list[str] | None:
        if node in done:
            return None
        if node in visiting:
            return [*visiting[visiting.index(node) :], node]
        visiting.append(node)
        for dependency in graph[node]:
            if (cycle := visit(dependency)) is not None:
                return cycle
        visiting.pop()
        done.add(node)
        return None

    for node in graph:
        if (cycle := visit(node)) is not None:
            return cycle
    return None
