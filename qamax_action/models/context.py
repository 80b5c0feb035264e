"""Repository context captured from the CI host."""

from pydantic import Field

from qamax_action.models.base import Model


class GitHubContext(Model):
    """Repository and workflow run context, captured once per invocation."""

    repository: str = Field(..., description="Repository in owner/repo format")
    sha: str = Field(..., description="Commit SHA that triggered the workflow")
    ref: str = Field(..., description="Git ref that triggered the workflow")
    run_id: str = Field(..., description="Workflow run ID")
    run_number: int | None = None
    pr_number: int | None = None
    actor: str | None = None
    event_name: str | None = None
