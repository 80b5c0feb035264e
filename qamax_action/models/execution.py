"""Models for the test execution API of the QualityMax service."""

from collections.abc import Mapping, Sequence
from datetime import datetime
from typing import Literal

from pydantic import Field

from qamax_action.models.base import Identifier, Model
from qamax_action.models.context import GitHubContext

TestRunStatus = Literal[
    "queued", "running", "completed", "failed", "cancelled", "timeout"
]
Verdict = Literal["passed", "failed", "skipped", "error"]

TERMINAL_STATUSES: frozenset[TestRunStatus] = frozenset(
    {"completed", "failed", "cancelled", "timeout"}
)


class Project(Model):
    """Project visible to the API key."""

    id: Identifier
    name: str


class EmbeddedScript(Model):
    """Executable test script delivered inline in a trigger response."""

    id: int = Field(..., description="Script ID, unique per trigger")
    name: str = Field(..., description="Human-readable test name")
    code: str = Field(..., description="Playwright test source")


class TriggerRequest(Model):
    """Request to start a test execution."""

    project_id: str
    test_suite: str | None = None
    test_ids: Sequence[int] | None = None
    base_url: str | None = None
    browser: str | None = None
    headless: bool | None = None
    timeout_minutes: int | None = None
    github_context: GitHubContext
    variables: Mapping[str, str] | None = None


class TriggerResponse(Model):
    """Response to a trigger request.

    ``run_locally`` is the service's run-location decision. When set, the
    action executes either ``scripts`` or the repository ``test_files``
    itself; otherwise the service runs the tests and the action polls.
    """

    success: bool = True
    execution_id: Identifier
    status: TestRunStatus = "queued"
    message: str = ""
    estimated_duration_seconds: float | None = None
    status_url: str = ""
    cancel_url: str = ""
    run_locally: bool = False
    scripts: Sequence[EmbeddedScript] | None = None
    test_files: Sequence[str] | None = None
    test_command: str | None = None


class ExecutionStatus(Model):
    """Progress snapshot of a remote execution."""

    execution_id: Identifier
    status: TestRunStatus
    progress: float | None = None
    total_tests: int | None = None
    completed_tests: int | None = None
    passed_tests: int | None = None
    failed_tests: int | None = None
    started_at: datetime | None = None
    estimated_completion: datetime | None = None
    current_test: str | None = None

    @property
    def is_terminal(self) -> bool:
        """Whether the execution reached a final state."""
        return self.status in TERMINAL_STATUSES


class IndividualTestResult(Model):
    """Outcome of one test within an execution."""

    __test__ = False

    test_id: int
    test_name: str
    status: Verdict
    duration_seconds: float
    error_message: str | None = None
    screenshot_url: str | None = None
    video_url: str | None = None
    retry_count: int | None = None


class TestExecutionResult(Model):
    """Canonical result of an execution, whether it ran remotely or locally."""

    __test__ = False

    execution_id: Identifier
    status: TestRunStatus
    result: Verdict
    total_tests: int = 0
    passed_tests: int = 0
    failed_tests: int = 0
    skipped_tests: int = 0
    duration_seconds: float = 0.0
    started_at: datetime | None = None
    completed_at: datetime | None = None
    browser: str = "chromium"
    base_url: str | None = None
    report_url: str = ""
    tests: Sequence[IndividualTestResult] = Field(default_factory=list)
    github_context: GitHubContext | None = None
    summary_markdown: str | None = None
