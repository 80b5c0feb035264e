"""GitHub Actions host module."""

from qamax_action.ci.github_actions.config import GitHubActionsConfig
from qamax_action.ci.github_actions.formatter import WorkflowCommandFormatter
from qamax_action.ci.github_actions.host import GitHubActionsHost

__all__ = ["GitHubActionsConfig", "GitHubActionsHost", "WorkflowCommandFormatter"]
