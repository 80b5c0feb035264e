"""Run Playwright locally and turn its report into per-test results."""

import logging
import time
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path, PurePosixPath
from typing import Literal

from pydantic import ValidationError

from qamax_action.local.process import run_command
from qamax_action.local.sandbox import CONFIG_FILENAME
from qamax_action.models.execution import EmbeddedScript, IndividualTestResult
from qamax_action.models.report import RawRunReport

log = logging.getLogger(__name__)

FALLBACK_ERROR_MESSAGE = "Test execution failed"


@dataclass(frozen=True, kw_only=True)
class RunOutcome:
    """Exit code and timing of a Playwright run."""

    exit_code: int
    duration: float
    started_at: datetime
    completed_at: datetime


@dataclass(frozen=True, kw_only=True)
class ReportLoad:
    """Result of reading the JSON report.

    ``missing`` and ``unparsable`` both leave ``report`` unset; a ``parsed``
    report can still hold no specs.
    """

    state: Literal["missing", "unparsable", "parsed"]
    report: RawRunReport | None = None


async def run_playwright(cwd: Path, *args: str) -> RunOutcome:
    """Run ``npx playwright test`` and time it.

    A nonzero exit code is returned, not raised. If the process cannot be
    started at all, the run counts as exit code 1.
    """
    log.info("Running Playwright tests...")
    started_at = datetime.now(timezone.utc)
    start = time.monotonic()
    try:
        result = await run_command(
            "npx", "playwright", "test", *args, cwd=cwd, capture=False
        )
        exit_code = result.exit_code
    except OSError as exc:
        log.warning("Playwright execution error: %s", exc)
        exit_code = 1
    duration = time.monotonic() - start

    log.info("Playwright exited with code %d after %.1fs", exit_code, duration)
    return RunOutcome(
        exit_code=exit_code,
        duration=duration,
        started_at=started_at,
        completed_at=datetime.now(timezone.utc),
    )


async def run_sandbox_suite(root: Path) -> RunOutcome:
    """Run the suite of a provisioned sandbox against its generated config."""
    return await run_playwright(root, f"--config={CONFIG_FILENAME}")


def load_run_report(report_path: Path) -> ReportLoad:
    """Read and validate the Playwright JSON report."""
    if not report_path.exists():
        log.warning("Playwright report not found at %s", report_path)
        return ReportLoad(state="missing")

    try:
        report = RawRunReport.model_validate_json(report_path.read_bytes())
    except (OSError, ValidationError) as exc:
        log.warning("Failed to parse Playwright results: %s", exc)
        return ReportLoad(state="unparsable")

    return ReportLoad(state="parsed", report=report)


def classify_report(
    report: RawRunReport, scripts: Mapping[str, EmbeddedScript]
) -> Sequence[IndividualTestResult]:
    """Derive one result per reported spec.

    Specs are matched to scripts by the basename of their top-level suite
    file. Pass/fail comes from the spec's own ``ok`` flag; duration and
    error message come from the first attempt.
    """
    results: list[IndividualTestResult] = []
    for suite in report.suites:
        filename = PurePosixPath(suite.file.replace("\\", "/")).name
        script = scripts.get(filename)
        for spec in suite.iter_specs():
            attempt = spec.first_attempt
            error = attempt.error if attempt else None
            results.append(
                IndividualTestResult(
                    test_id=script.id if script else 0,
                    test_name=script.name if script else spec.title or filename,
                    status="passed" if spec.ok else "failed",
                    duration_seconds=(attempt.duration if attempt else 0.0) / 1000,
                    error_message=error.message if error else None,
                )
            )
    return results


def classify_by_exit_code(
    tests: Sequence[tuple[int, str]], exit_code: int, duration: float
) -> Sequence[IndividualTestResult]:
    """Mark every test passed (exit code 0) or failed, sharing the duration.

    Args:
        tests: ``(test_id, test_name)`` pairs
        exit_code: Exit code of the Playwright run
        duration: Wall-clock duration of the whole run in seconds

    """
    if not tests:
        return []
    share = duration / len(tests)
    passed = exit_code == 0
    return [
        IndividualTestResult(
            test_id=test_id,
            test_name=test_name,
            status="passed" if passed else "failed",
            duration_seconds=share,
            error_message=None if passed else FALLBACK_ERROR_MESSAGE,
        )
        for test_id, test_name in tests
    ]


def collect_results(
    load: ReportLoad,
    scripts: Mapping[str, EmbeddedScript],
    outcome: RunOutcome,
) -> Sequence[IndividualTestResult]:
    """Classify from the report, falling back to the exit code.

    The fallback applies whenever the report yields no results: when it is
    missing, unparsable, or parsed but empty.
    """
    results: Sequence[IndividualTestResult] = []
    if load.report is not None:
        results = classify_report(load.report, scripts)
        if not results:
            log.warning("Playwright report contains no tests")

    if results:
        return results

    log.info(
        "Inferring results from exit code %d (report %s)",
        outcome.exit_code,
        load.state,
    )
    return classify_by_exit_code(
        [(script.id, script.name) for script in scripts.values()],
        outcome.exit_code,
        outcome.duration,
    )
