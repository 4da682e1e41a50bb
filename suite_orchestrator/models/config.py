"""Run configuration shared by all test cases of a suite."""

from typing import Literal

from pydantic import Field

from suite_orchestrator.models.base import Model


class SuiteConfiguration(Model):
    """How a suite is scheduled, timed and retried."""

    mode: Literal["sequential", "parallel"] = Field(
        default="sequential", description="Run tests one at a time or concurrently"
    )
    max_concurrency: int = Field(
        default=4, ge=1, description="Maximum tests running at once in parallel mode"
    )
    default_timeout: float = Field(
        default=30.0, gt=0, description="Per-attempt timeout in seconds"
    )
    default_retry_limit: int = Field(
        default=0, ge=0, description="Extra attempts allowed after the first"
    )
    retry_delay: float = Field(
        default=1.0, ge=0, description="Seconds to wait before the first retry"
    )
    retry_backoff: float = Field(
        default=1.0, ge=1, description="Multiplier applied to the delay per retry"
    )
    max_retry_delay: float = Field(
        default=60.0, ge=0, description="Upper bound for any single retry delay"
    )
    stop_on_first_failure: bool = Field(
        default=False, description="Stop dispatching new tests after a failure"
    )
    teardown_on_setup_failure: bool = Field(
        default=True, description="Run teardown even when setup raised"
    )

    @property
    def concurrency_width(self) -> int:
        """Number of tests allowed in flight at any time."""
        return 1 if self.mode == "sequential" else self.max_concurrency

    @classmethod
    def for_unit_testing(cls) -> "SuiteConfiguration":
        return cls(mode="parallel", max_concurrency=8, default_timeout=10.0)

    @classmethod
    def for_ui_testing(cls) -> "SuiteConfiguration":
        return cls(
            mode="parallel",
            max_concurrency=4,
            default_timeout=60.0,
            default_retry_limit=2,
        )

    @classmethod
    def for_integration_testing(cls) -> "SuiteConfiguration":
        return cls(
            mode="parallel",
            max_concurrency=2,
            default_timeout=120.0,
            default_retry_limit=1,
        )

    @classmethod
    def for_performance_testing(cls) -> "SuiteConfiguration":
        return cls(mode="sequential", max_concurrency=1, default_timeout=300.0)
