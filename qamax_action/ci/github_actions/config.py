"""Configuration for the GitHub Actions host, read from the runner env."""

from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel, SecretStr


class GitHubActionsConfig(BaseModel):
    """Runner environment of a GitHub Actions job."""

    repository: str
    sha: str = ""
    ref: str = ""
    run_id: str = ""
    run_number: int | None = None
    actor: str | None = None
    event_name: str | None = None
    event_path: Path | None = None
    output_path: Path | None = None
    summary_path: Path | None = None
    token: SecretStr | None = None
    api_base_url: str = "https://api.github.com"

    @classmethod
    def from_environ(cls, environ: Mapping[str, str]) -> "GitHubActionsConfig":
        """Build configuration from ``GITHUB_*`` environment variables."""

        def optional(key: str) -> str | None:
            return environ.get(key) or None

        run_number = optional("GITHUB_RUN_NUMBER")
        token = optional("GITHUB_TOKEN")
        return cls(
            repository=environ.get("GITHUB_REPOSITORY", ""),
            sha=environ.get("GITHUB_SHA", ""),
            ref=environ.get("GITHUB_REF", ""),
            run_id=environ.get("GITHUB_RUN_ID", ""),
            run_number=int(run_number) if run_number else None,
            actor=optional("GITHUB_ACTOR"),
            event_name=optional("GITHUB_EVENT_NAME"),
            event_path=optional("GITHUB_EVENT_PATH"),
            output_path=optional("GITHUB_OUTPUT"),
            summary_path=optional("GITHUB_STEP_SUMMARY"),
            token=SecretStr(token) if token else None,
            api_base_url=environ.get("GITHUB_API_URL") or "https://api.github.com",
        )

    @property
    def owner(self) -> str:
        return self.repository.partition("/")[0]

    @property
    def repo(self) -> str:
        return self.repository.partition("/")[2]
