"""Log and serialize suite results for external reporters."""

import logging
from typing import Any

from suite_orchestrator.models.result import Attempt, SuiteResult, TestResult

STATUS_SYMBOLS = {
    "passed": "✓",
    "failed": "✗",
    "setup_failed": "!",
    "timed_out": "⏱",
    "skipped": "-",
}


def log_suite_summary(log: logging.Logger, suite_result: SuiteResult) -> None:
    """Log a formatted summary of a suite run."""
    log.info("=" * 80)
    log.info("Test Results Summary: %s", suite_result.suite_name)
    log.info("=" * 80)

    for result in suite_result.results:
        symbol = STATUS_SYMBOLS.get(result.status, "?")
        log.info(
            "%s %s: %s (%.2fs, %d attempt(s))",
            symbol,
            result.name,
            result.status,
            result.duration,
            result.attempt_count,
        )
        if result.message:
            log.info("  Message: %s", result.message)

    log.info("-" * 80)
    log.info(
        "Total: %d | Passed: %d | Failed: %d (timed out: %d, setup failed: %d) "
        "| Skipped: %d",
        suite_result.total_tests,
        suite_result.passed_count,
        suite_result.failed_count,
        suite_result.timed_out_count,
        suite_result.setup_failed_count,
        suite_result.skipped_count,
    )
    log.info(
        "Success rate: %.2f%% | Execution time: %.2fs | Wall clock: %.2fs",
        suite_result.success_rate,
        suite_result.total_execution_time,
        suite_result.wall_clock_time,
    )


def _format_attempt(attempt: Attempt) -> dict[str, Any]:
    return {
        "number": attempt.number,
        "status": attempt.status,
        "started_at": attempt.started_at.isoformat(),
        "finished_at": attempt.finished_at.isoformat(),
        "duration": attempt.duration,
        "message": attempt.message,
        "error_type": attempt.error_type,
    }


def _format_result(result: TestResult) -> dict[str, Any]:
    return {
        "id": result.test_id,
        "name": result.name,
        "category": result.category.value,
        "priority": result.priority.value,
        "status": result.status,
        "duration": result.duration,
        "attempts": result.attempt_count,
        "message": result.message,
        "history": [_format_attempt(a) for a in result.attempts],
    }


def format_output(suite_result: SuiteResult) -> dict[str, Any]:
    """Format a suite result as a JSON-serializable dict."""
    return {
        "suite": suite_result.suite_name,
        "total": suite_result.total_tests,
        "passed": suite_result.passed_count,
        "failed": suite_result.failed_count,
        "timeouts": suite_result.timed_out_count,
        "setup_failures": suite_result.setup_failed_count,
        "skipped": suite_result.skipped_count,
        "success_rate": round(suite_result.success_rate, 2),
        "total_execution_time": suite_result.total_execution_time,
        "wall_clock_time": suite_result.wall_clock_time,
        "results": [_format_result(r) for r in suite_result.results],
    }
