"""Tests for normalizing local results into the canonical schema."""

from datetime import datetime, timezone
from unittest.mock import Mock

import pytest

from qamax_action.local.normalizer import (
    compute_verdict,
    finalize_local_run,
    normalize_results,
)
from qamax_action.local.runner import RunOutcome
from qamax_action.models.execution import IndividualTestResult, TestExecutionResult
from qamax_action.service.client import ServerError
from qamax_action.testing.factories import IndividualTestResultFactory

OUTCOME = RunOutcome(
    exit_code=1,
    duration=12.5,
    started_at=datetime(2099, 1, 1, 12, 0, tzinfo=timezone.utc),
    completed_at=datetime(2099, 1, 1, 12, 1, tzinfo=timezone.utc),
)


def make_tests(passed: int, failed: int) -> list[IndividualTestResult]:
    """Create individual results with the given counts."""
    return [
        IndividualTestResultFactory.build(status="passed") for _ in range(passed)
    ] + [IndividualTestResultFactory.build(status="failed") for _ in range(failed)]


def normalize(
    tests: list[IndividualTestResult], expected_total: int
) -> TestExecutionResult:
    """Normalize with fixed metadata."""
    return normalize_results(
        execution_id="exec-1",
        tests=tests,
        expected_total=expected_total,
        outcome=OUTCOME,
        browser="firefox",
        base_url="https://staging.example.com",
        report_url="https://app.qamax.test/results/exec-1",
    )


@pytest.mark.parametrize(
    ("passed", "failed", "expected"),
    [
        (1, 0, "passed"),
        (5, 0, "passed"),
        (0, 0, "failed"),
        (0, 1, "failed"),
        (3, 1, "failed"),
    ],
)
def test_compute_verdict(passed: int, failed: int, expected: str) -> None:
    """Passes only with at least one pass and no failures."""
    assert compute_verdict(passed, failed) == expected


def test_two_passed_one_failed() -> None:
    """Counts a mixed report correctly."""
    result = normalize(make_tests(passed=2, failed=1), expected_total=3)

    assert result.total_tests == 3
    assert result.passed_tests == 2
    assert result.failed_tests == 1
    assert result.skipped_tests == 0
    assert result.result == "failed"
    assert result.status == "failed"


def test_all_passed_is_completed() -> None:
    """A passing run has status completed and carries run metadata."""
    result = normalize(make_tests(passed=2, failed=0), expected_total=2)

    assert result.result == "passed"
    assert result.status == "completed"
    assert result.execution_id == "exec-1"
    assert result.browser == "firefox"
    assert result.duration_seconds == 12.5
    assert result.started_at == OUTCOME.started_at
    assert result.completed_at == OUTCOME.completed_at
    assert result.report_url == "https://app.qamax.test/results/exec-1"


def test_missing_results_count_as_skipped() -> None:
    """Tests without a result are skipped."""
    result = normalize(make_tests(passed=1, failed=0), expected_total=3)

    assert result.skipped_tests == 2
    assert result.result == "passed"


def test_total_grows_when_report_has_more_specs() -> None:
    """Keeps the counts consistent and skipped non-negative."""
    result = normalize(make_tests(passed=3, failed=1), expected_total=2)

    assert result.total_tests == 4
    assert result.skipped_tests == 0


def test_empty_run_fails() -> None:
    """A run without any tests is a failure."""
    result = normalize([], expected_total=0)

    assert result.total_tests == 0
    assert result.result == "failed"
    assert result.status == "failed"


@pytest.mark.parametrize(
    ("passed", "failed", "expected_total"),
    [(0, 0, 0), (0, 0, 4), (2, 0, 2), (1, 3, 2), (0, 5, 5), (4, 0, 9)],
)
def test_counts_always_add_up(passed: int, failed: int, expected_total: int) -> None:
    """passed + failed + skipped equals total and skipped is never negative."""
    result = normalize(make_tests(passed, failed), expected_total)

    assert (
        result.passed_tests + result.failed_tests + result.skipped_tests
        == result.total_tests
    )
    assert result.skipped_tests >= 0
    expected_verdict = "passed" if passed > 0 and failed == 0 else "failed"
    assert result.result == expected_verdict


class TestFinalizeLocalRun:
    """Tests for finalize_local_run."""

    async def test_reports_results_once(self, client_mock: Mock) -> None:
        """Reports verdict and counts back to the service exactly once."""
        result = await finalize_local_run(
            client_mock,
            execution_id="exec-1",
            tests=make_tests(passed=2, failed=1),
            expected_total=3,
            outcome=OUTCOME,
            browser="chromium",
            base_url=None,
            report_url="https://app.qamax.test/results/exec-1",
        )

        client_mock.report_results.assert_awaited_once_with("exec-1", "failed", 2, 1, 3)
        assert result.failed_tests == 1

    async def test_reports_passing_runs_too(self, client_mock: Mock) -> None:
        """Reports regardless of verdict."""
        await finalize_local_run(
            client_mock,
            execution_id="exec-2",
            tests=make_tests(passed=1, failed=0),
            expected_total=1,
            outcome=OUTCOME,
            browser="chromium",
            base_url=None,
            report_url="",
        )

        client_mock.report_results.assert_awaited_once_with("exec-2", "passed", 1, 0, 1)

    async def test_report_failure_does_not_fail_run(
        self, client_mock: Mock, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Logs a warning when the service rejects the report."""
        client_mock.report_results.side_effect = ServerError("boom", 502)

        result = await finalize_local_run(
            client_mock,
            execution_id="exec-3",
            tests=make_tests(passed=1, failed=0),
            expected_total=1,
            outcome=OUTCOME,
            browser="chromium",
            base_url=None,
            report_url="",
        )

        assert result.result == "passed"
        assert "Failed to report results for exec-3" in caplog.text
