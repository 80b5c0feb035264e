"""Local execution paths: embedded scripts and repository test files."""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from qamax_action.config import ActionInputs, ServiceConfig
from qamax_action.local.normalizer import finalize_local_run
from qamax_action.local.runner import (
    classify_by_exit_code,
    collect_results,
    load_run_report,
    run_playwright,
    run_sandbox_suite,
)
from qamax_action.local.sandbox import provision_sandbox
from qamax_action.models.execution import TestExecutionResult, TriggerResponse
from qamax_action.service.client import QualityMaxClient

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class LocalExecutor:
    """Runs tests inside the CI runner when the service asks for it."""

    client: QualityMaxClient
    inputs: ActionInputs
    config: ServiceConfig
    workdir: Path = field(default_factory=Path.cwd)
    tmp_dir: Path | None = None

    async def run_scripts(self, trigger: TriggerResponse) -> TestExecutionResult:
        """Run the embedded scripts of a trigger response in a sandbox."""
        scripts = list(trigger.scripts or [])
        log.info("Running %d test(s) locally in the CI runner...", len(scripts))

        async with provision_sandbox(
            scripts,
            browser=self.inputs.browser,
            headless=self.inputs.headless,
            tmp_dir=self.tmp_dir,
        ) as sandbox:
            outcome = await run_sandbox_suite(sandbox.root)
            load = load_run_report(sandbox.report_path)
            tests = collect_results(load, sandbox.scripts, outcome)

        return await finalize_local_run(
            self.client,
            execution_id=trigger.execution_id,
            tests=tests,
            expected_total=len(scripts),
            outcome=outcome,
            browser=self.inputs.browser,
            base_url=self.inputs.base_url,
            report_url=self.config.report_url(trigger.execution_id),
        )

    async def run_repository_tests(
        self, trigger: TriggerResponse
    ) -> TestExecutionResult:
        """Run test files that live in the checked-out repository.

        Each file is classified by the exit code of the whole run. An empty
        file list runs the whole suite, counted as a single test.
        """
        test_files = list(trigger.test_files or [])
        names = test_files or [trigger.test_command or "npx playwright test"]
        log.info(
            "Running repository tests locally: %s",
            trigger.test_command or " ".join(names),
        )

        outcome = await run_playwright(self.workdir, *test_files)
        tests = classify_by_exit_code(
            [(0, name) for name in names],
            outcome.exit_code,
            outcome.duration,
        )

        return await finalize_local_run(
            self.client,
            execution_id=trigger.execution_id,
            tests=tests,
            expected_total=len(names),
            outcome=outcome,
            browser=self.inputs.browser,
            base_url=self.inputs.base_url,
            report_url=self.config.report_url(trigger.execution_id),
        )
