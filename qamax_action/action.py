"""Action orchestration: resolve the project, run or seed tests, report."""

import logging
from dataclasses import dataclass

from qamax_action.ci.host import CIHost
from qamax_action.config import ActionInputs, ServiceConfig
from qamax_action.local.executor import LocalExecutor
from qamax_action.models.context import GitHubContext
from qamax_action.models.execution import TestExecutionResult, TriggerRequest
from qamax_action.models.seed import SeedTestsRequest
from qamax_action.poller import ExecutionGuard, cancel_on_abort, wait_for_completion
from qamax_action.reporting import (
    log_results_summary,
    log_seed_summary,
    render_comment_markdown,
    render_job_summary,
    set_run_outputs,
    set_seed_outputs,
)
from qamax_action.service.client import QualityMaxClient

log = logging.getLogger(__name__)


class InvalidApiKeyError(Exception):
    """Raised when the service rejects the API key."""


class ProjectNotFoundError(Exception):
    """Raised when no project can be resolved for the run."""


def is_execution_failed(result: TestExecutionResult) -> bool:
    """Whether a result should count as a failed run."""
    return (
        result.result == "failed"
        or result.status in {"failed", "cancelled", "timeout"}
        or (result.passed_tests == 0 and result.total_tests > 0)
    )


@dataclass(frozen=True, kw_only=True)
class ActionRunner:
    """Runs one invocation of the action against an injected CI host."""

    client: QualityMaxClient
    host: CIHost
    inputs: ActionInputs
    config: ServiceConfig
    executor: LocalExecutor

    async def run(self) -> TestExecutionResult | None:
        """Run the action and report the outcome through the host.

        Failures never propagate: they cancel the remote execution, if one
        was started, and mark the step failed.

        Returns:
            The execution result in run mode, None otherwise

        """
        try:
            async with cancel_on_abort(self.client) as guard:
                return await self._run(guard)
        except Exception as exc:
            log.debug("Action failed", exc_info=exc)
            self.host.set_failed(str(exc) or "An unexpected error occurred")
            return None

    async def _run(self, guard: ExecutionGuard) -> TestExecutionResult | None:
        log.info("🚀 QualityMax Test Runner")
        log.info(
            "Project: %s",
            self.inputs.project_id or self.inputs.project_name or "(auto-detect)",
        )
        log.info("Test Suite: %s", self.inputs.test_suite)
        log.info("Browser: %s", self.inputs.browser)

        log.info("Validating API key...")
        if not await self.client.validate_api_key():
            raise InvalidApiKeyError(
                "Invalid API key. Get your API key from app.qamax.co/settings/api"
            )
        log.info("API key validated ✓")

        context = self.host.context()
        project_id = await self.resolve_project_id(context)

        if self.inputs.mode == "seed":
            await self.seed(project_id)
            return None

        result = await self.execute(project_id, context, guard)
        await self.report(result)
        return result

    async def resolve_project_id(self, context: GitHubContext) -> str:
        """Resolve the project by explicit ID, by name, or by repository.

        Raises:
            ProjectNotFoundError: If no project matches

        """
        if self.inputs.project_id:
            log.info("Using provided project ID: %s", self.inputs.project_id)
            return self.inputs.project_id

        if self.inputs.project_name:
            return await self._resolve_by_name(self.inputs.project_name, context)

        log.info("Auto-detecting project from repository: %s...", context.repository)
        detected = await self.client.resolve_project(context.repository)
        if not detected:
            raise ProjectNotFoundError(
                "Could not auto-detect project. Provide project-id or project-name "
                "input, or link your repository in QualityMax project settings."
            )
        log.info("Auto-detected project: %s", detected)
        return detected

    async def _resolve_by_name(self, name: str, context: GitHubContext) -> str:
        log.info('Resolving project by name: "%s"...', name)
        projects = await self.client.get_projects()
        for project in projects:
            if project.name.lower() == name.lower():
                log.info('Resolved project "%s" → %s', name, project.id)
                return project.id

        log.info(
            'No exact name match for "%s". Trying to resolve by repository: %s...',
            name,
            context.repository,
        )
        fallback = await self.client.resolve_project(context.repository)
        if fallback:
            log.info("Resolved project via linked repository → %s", fallback)
            return fallback

        available = ", ".join(project.name for project in projects) or "none"
        raise ProjectNotFoundError(
            f'Project "{name}" not found. Available projects: {available}. '
            "Tip: use the exact project name from QualityMax, or link the "
            "repository to your project."
        )

    async def seed(self, project_id: str) -> None:
        """Generate test cases for the project and set the seed outputs."""
        log.info("Running in seed mode, generating test cases...")
        response = await self.client.seed_tests(
            SeedTestsRequest(
                project_id=project_id,
                base_url=self.inputs.base_url,
                descriptions=self.inputs.seed_descriptions,
                auto_discover=self.inputs.auto_discover,
                max_tests=self.inputs.max_seed_tests,
            )
        )

        set_seed_outputs(self.host, response)
        log_seed_summary(log, response)

        if response.tests_created == 0 and response.skipped == 0:
            self.host.set_failed(response.message or "No tests were seeded")
        else:
            log.info("Seed complete. Tests are ready for execution.")

    async def execute(
        self, project_id: str, context: GitHubContext, guard: ExecutionGuard
    ) -> TestExecutionResult:
        """Trigger an execution and wait for its result, wherever it runs."""
        trigger = await self.client.trigger_tests(
            TriggerRequest(
                project_id=project_id,
                test_suite=self.inputs.test_suite,
                test_ids=self.inputs.test_ids,
                base_url=self.inputs.base_url,
                browser=self.inputs.browser,
                headless=self.inputs.headless,
                timeout_minutes=self.inputs.timeout_minutes,
                github_context=context,
            )
        )
        guard.execution_id = trigger.execution_id

        log.info("Execution started: %s", trigger.execution_id)
        if trigger.estimated_duration_seconds:
            log.info(
                "Estimated duration: %d minutes",
                round(trigger.estimated_duration_seconds / 60),
            )

        if trigger.run_locally and trigger.scripts:
            return await self.executor.run_scripts(trigger)
        if trigger.run_locally and trigger.test_files is not None:
            return await self.executor.run_repository_tests(trigger)

        return await wait_for_completion(
            self.client,
            trigger.execution_id,
            timeout=self.inputs.timeout_minutes * 60,
            poll_interval=self.config.poll_interval,
        )

    async def report(self, result: TestExecutionResult) -> None:
        """Publish a result to the CI host and decide the step outcome."""
        set_run_outputs(self.host, result)
        self.host.write_summary(render_job_summary(result))

        if self.inputs.post_pr_comment:
            body = result.summary_markdown or render_comment_markdown(result)
            try:
                await self.host.post_pr_comment(body)
            except Exception as exc:
                log.warning("Failed to post PR comment: %s", exc)

        log_results_summary(log, result)

        failed = is_execution_failed(result)
        if failed and self.inputs.fail_on_test_failure:
            self.host.set_failed(
                f"{result.failed_tests} of {result.total_tests} test(s) failed. "
                f"View report: {result.report_url}"
            )
        elif not failed and result.passed_tests > 0:
            log.info("✅ All tests passed!")
