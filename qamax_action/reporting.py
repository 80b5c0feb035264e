"""Reporting of execution results: outputs, job summary, PR comment, log."""

import logging

from qamax_action.ci.host import CIHost
from qamax_action.models.execution import TestExecutionResult
from qamax_action.models.seed import SeedTestsResponse

STATUS_SYMBOLS = {
    "passed": "✅",
    "failed": "❌",
    "skipped": "⏭️",
    "error": "❗",
}

MAX_ERROR_LENGTH = 100


def format_duration(seconds: float) -> str:
    """Format seconds as ``<m>m <s>s``."""
    minutes, rest = divmod(int(seconds), 60)
    return f"{minutes}m {rest}s"


def set_run_outputs(host: CIHost, result: TestExecutionResult) -> None:
    """Set the step outputs of a run."""
    host.set_output("execution-id", result.execution_id)
    host.set_output("status", result.result)
    host.set_output("total-tests", str(result.total_tests))
    host.set_output("passed-tests", str(result.passed_tests))
    host.set_output("failed-tests", str(result.failed_tests))
    host.set_output("duration-seconds", str(result.duration_seconds))
    host.set_output("report-url", result.report_url)
    host.set_output("summary-markdown", result.summary_markdown or "")


def set_seed_outputs(host: CIHost, response: SeedTestsResponse) -> None:
    """Set the step outputs of a seed run."""
    host.set_output("tests-created", str(response.tests_created))
    host.set_output("tests-skipped", str(response.skipped))
    host.set_output("seed-message", response.message)


def render_comment_markdown(result: TestExecutionResult) -> str:
    """Render the PR comment used when the service provides no markdown."""
    passed = result.result == "passed"
    status = f"{'✅' if passed else '❌'} {'Passed' if passed else 'Failed'}"

    lines = [
        "## 🧪 QualityMax Test Results",
        "",
        "| Status | Tests | Duration |",
        "|--------|-------|----------|",
        f"| {status} | {result.passed_tests}/{result.total_tests} "
        f"| {format_duration(result.duration_seconds)} |",
        "",
        "### Summary",
        f"- **Browser:** {result.browser}",
        f"- **Base URL:** {result.base_url or 'Default'}",
    ]

    if result.failed_tests > 0:
        lines += [
            "",
            "### ❌ Failed Tests",
            "",
            "| Test | Error |",
            "|------|-------|",
        ]
        for test in result.tests:
            if test.status == "failed":
                error = (test.error_message or "Unknown error")[:MAX_ERROR_LENGTH]
                error = error.replace("\n", " ").replace("|", "\\|")
                lines.append(f"| {test.test_name} | {error} |")

    lines += ["", f"[View Full Report]({result.report_url})"]
    return "\n".join(lines)


def render_job_summary(result: TestExecutionResult) -> str:
    """Render the job summary table."""
    symbol = STATUS_SYMBOLS.get(result.result, "?")
    rows = [
        ("Status", result.result.upper()),
        ("Total Tests", str(result.total_tests)),
        ("Passed", f"✅ {result.passed_tests}"),
        ("Failed", f"❌ {result.failed_tests}"),
        ("Skipped", f"⏭️ {result.skipped_tests}"),
        ("Duration", f"{round(result.duration_seconds)}s"),
        ("Browser", result.browser),
    ]
    lines = [
        f"## {symbol} QualityMax Test Results",
        "",
        "| Metric | Value |",
        "|--------|-------|",
        *(f"| {name} | {value} |" for name, value in rows),
        "",
        f"[View Full Report]({result.report_url})",
    ]
    return "\n".join(lines)


def log_results_summary(log: logging.Logger, result: TestExecutionResult) -> None:
    """Log a formatted summary of an execution and its tests."""
    log.info("=" * 80)
    log.info("  Tests: %d/%d passed", result.passed_tests, result.total_tests)
    log.info("  Duration: %ds", round(result.duration_seconds))
    log.info("  Report: %s", result.report_url)
    log.info("=" * 80)

    for test in result.tests:
        symbol = STATUS_SYMBOLS.get(test.status, "?")
        log.info(
            "%s %s: %s (%.2fs)",
            symbol,
            test.test_name,
            test.status,
            test.duration_seconds,
        )
        if test.error_message:
            log.info("  Message: %s", test.error_message)


def log_seed_summary(log: logging.Logger, response: SeedTestsResponse) -> None:
    """Log the outcome of a seed run."""
    log.info("=" * 80)
    log.info("  Seeded: %d test(s)", response.tests_created)
    log.info("  Skipped: %d existing", response.skipped)
    log.info("  Message: %s", response.message)
    log.info("=" * 80)
    for test in response.tests:
        log.info("  + %s", test.name)
