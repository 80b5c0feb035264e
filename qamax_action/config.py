"""Configuration for the action and the QualityMax service connection."""

from collections.abc import Sequence
from typing import Literal

from pydantic import BaseModel, Field, SecretStr

DEFAULT_API_BASE_URL = "https://app.qamax.co"
DEFAULT_REPORT_BASE_URL = "https://app.qamax.co"


class ServiceConfig(BaseModel):
    """Connection settings for the QualityMax API."""

    api_key: SecretStr
    api_base_url: str = DEFAULT_API_BASE_URL
    report_base_url: str = DEFAULT_REPORT_BASE_URL
    poll_interval: float = Field(default=10, gt=0)
    request_timeout: float = Field(default=60, gt=0)

    def report_url(self, execution_id: str) -> str:
        """Return the web report URL for an execution."""
        return f"{self.report_base_url.rstrip('/')}/results/{execution_id}"


class ActionInputs(BaseModel):
    """Inputs of the action, parsed from the workflow step."""

    project_id: str = ""
    project_name: str = ""
    test_suite: str = "all"
    test_ids: Sequence[int] | None = None
    base_url: str | None = None
    browser: str = "chromium"
    headless: bool = True
    timeout_minutes: int = Field(default=30, gt=0)
    fail_on_test_failure: bool = True
    post_pr_comment: bool = True
    mode: Literal["run", "seed"] = "run"
    auto_discover: bool = True
    max_seed_tests: int = Field(default=3, gt=0)
    seed_descriptions: Sequence[str] | None = None


def parse_bool(value: str) -> bool:
    """Parse a boolean input; only the literal ``false`` disables it."""
    return value.strip().lower() != "false"


def parse_test_ids(test_ids: str) -> Sequence[int] | None:
    """Parse comma-separated test IDs."""
    if not test_ids.strip():
        return None
    return tuple(int(s.strip()) for s in test_ids.split(",") if s.strip())


def parse_seed_descriptions(descriptions: str) -> Sequence[str] | None:
    """Parse newline-separated seed descriptions, dropping blank lines."""
    parsed = tuple(d.strip() for d in descriptions.splitlines() if d.strip())
    return parsed or None


def session_base_url(url: str) -> str:
    """Return ``url`` with the trailing slash aiohttp needs to join paths."""
    return url.rstrip("/") + "/"
