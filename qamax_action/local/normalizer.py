"""Fold local run results into the canonical execution result."""

import logging
from collections.abc import Sequence
from typing import Literal

from qamax_action.local.runner import RunOutcome
from qamax_action.models.execution import IndividualTestResult, TestExecutionResult
from qamax_action.service.client import QualityMaxClient, ServiceError

log = logging.getLogger(__name__)


def compute_verdict(passed: int, failed: int) -> Literal["passed", "failed"]:
    """A run passes only if at least one test passed and none failed."""
    return "passed" if passed > 0 and failed == 0 else "failed"


def normalize_results(
    *,
    execution_id: str,
    tests: Sequence[IndividualTestResult],
    expected_total: int,
    outcome: RunOutcome,
    browser: str,
    base_url: str | None,
    report_url: str,
) -> TestExecutionResult:
    """Build the canonical result for a local run.

    ``expected_total`` is the number of tests that were meant to run. When
    the report holds more specs than that, the total grows to match so that
    passed + failed + skipped always equals the total.
    """
    passed = sum(1 for test in tests if test.status == "passed")
    failed = sum(1 for test in tests if test.status == "failed")
    total = max(expected_total, passed + failed)
    skipped = max(total - passed - failed, 0)
    verdict = compute_verdict(passed, failed)

    return TestExecutionResult(
        execution_id=execution_id,
        status="completed" if verdict == "passed" else "failed",
        result=verdict,
        total_tests=total,
        passed_tests=passed,
        failed_tests=failed,
        skipped_tests=skipped,
        duration_seconds=outcome.duration,
        started_at=outcome.started_at,
        completed_at=outcome.completed_at,
        browser=browser,
        base_url=base_url,
        report_url=report_url,
        tests=list(tests),
    )


async def finalize_local_run(
    client: QualityMaxClient,
    *,
    execution_id: str,
    tests: Sequence[IndividualTestResult],
    expected_total: int,
    outcome: RunOutcome,
    browser: str,
    base_url: str | None,
    report_url: str,
) -> TestExecutionResult:
    """Normalize a local run and report its verdict to the service once."""
    result = normalize_results(
        execution_id=execution_id,
        tests=tests,
        expected_total=expected_total,
        outcome=outcome,
        browser=browser,
        base_url=base_url,
        report_url=report_url,
    )

    try:
        await client.report_results(
            execution_id,
            result.result,
            result.passed_tests,
            result.failed_tests,
            result.total_tests,
        )
    except ServiceError as exc:
        log.warning("Failed to report results for %s: %s", execution_id, exc)

    return result
