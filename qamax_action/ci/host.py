"""Abstract base for the CI host the action reports into."""

from abc import ABC, abstractmethod

from qamax_action.models.context import GitHubContext


class CIHost(ABC):
    """Inputs, outputs and run context provided by the CI platform."""

    @abstractmethod
    def context(self) -> GitHubContext:
        """Return the repository and workflow run context."""

    @abstractmethod
    def set_output(self, name: str, value: str) -> None:
        """Set a step output."""

    @abstractmethod
    def write_summary(self, markdown: str) -> None:
        """Append markdown to the job summary."""

    @abstractmethod
    async def post_pr_comment(self, body: str) -> bool:
        """Comment on the pull request of the run.

        Returns:
            True if a comment was posted, False if it was skipped

        """

    @abstractmethod
    def set_failed(self, message: str) -> None:
        """Mark the step as failed with a message."""

    @property
    @abstractmethod
    def failed(self) -> bool:
        """Whether ``set_failed`` was called."""
