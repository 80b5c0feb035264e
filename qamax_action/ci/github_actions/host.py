"""GitHub Actions host implementation."""

import json
import logging
import uuid
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from functools import cached_property
from pathlib import Path
from typing import Any

import aiohttp

from qamax_action.ci.github_actions.config import GitHubActionsConfig
from qamax_action.ci.github_actions.formatter import escape_data
from qamax_action.ci.host import CIHost
from qamax_action.config import session_base_url
from qamax_action.models.context import GitHubContext

log = logging.getLogger(__name__)


def _append(path: Path, text: str) -> None:
    with path.open("a", encoding="utf-8") as handle:
        handle.write(text)


@dataclass(kw_only=True)
class GitHubActionsHost(CIHost):
    """Reports into a GitHub Actions job through its environment files."""

    config: GitHubActionsConfig
    session: aiohttp.ClientSession = field(repr=False)
    _failed: bool = field(default=False, init=False)

    @classmethod
    @asynccontextmanager
    async def from_config(
        cls, config: GitHubActionsConfig
    ) -> AsyncGenerator["GitHubActionsHost", None]:
        """Create host with managed session lifecycle."""
        headers = {"Accept": "application/vnd.github+json"}
        if config.token is not None:
            headers["Authorization"] = f"Bearer {config.token.get_secret_value()}"
        async with aiohttp.ClientSession(
            base_url=session_base_url(config.api_base_url),
            headers=headers,
        ) as session:
            yield cls(config=config, session=session)

    @cached_property
    def event(self) -> dict[str, Any]:
        """Webhook payload of the triggering event, empty if unavailable."""
        if self.config.event_path is None:
            return {}
        try:
            payload = json.loads(self.config.event_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            log.warning("Failed to read event payload: %s", exc)
            return {}
        return payload if isinstance(payload, dict) else {}

    @property
    def pr_number(self) -> int | None:
        pull_request = self.event.get("pull_request")
        if isinstance(pull_request, dict) and "number" in pull_request:
            return int(pull_request["number"])
        return None

    def context(self) -> GitHubContext:
        return GitHubContext(
            repository=self.config.repository,
            sha=self.config.sha,
            ref=self.config.ref,
            run_id=self.config.run_id,
            run_number=self.config.run_number,
            pr_number=self.pr_number,
            actor=self.config.actor,
            event_name=self.config.event_name,
        )

    def set_output(self, name: str, value: str) -> None:
        """Append an output to ``$GITHUB_OUTPUT``.

        Values are always written in the heredoc form so that multi-line
        markdown survives.
        """
        if self.config.output_path is None:
            log.debug("GITHUB_OUTPUT not set, skipping output %s", name)
            return
        delimiter = f"ghadelimiter_{uuid.uuid4()}"
        _append(
            self.config.output_path, f"{name}<<{delimiter}\n{value}\n{delimiter}\n"
        )

    def write_summary(self, markdown: str) -> None:
        if self.config.summary_path is None:
            log.debug("GITHUB_STEP_SUMMARY not set, skipping job summary")
            return
        _append(self.config.summary_path, f"{markdown}\n")

    async def post_pr_comment(self, body: str) -> bool:
        pr_number = self.pr_number
        if pr_number is None:
            log.debug("Not a PR, skipping comment")
            return False

        if self.config.token is None:
            log.warning(
                "GITHUB_TOKEN not available, cannot post PR comment. "
                "Add `env: GITHUB_TOKEN: ${{ secrets.GITHUB_TOKEN }}` "
                "to your workflow."
            )
            return False

        url = (
            f"repos/{self.config.owner}/{self.config.repo}"
            f"/issues/{pr_number}/comments"
        )
        async with self.session.post(url, json={"body": body}) as response:
            if response.status != 201:
                text = await response.text()
                raise RuntimeError(
                    f"Failed to post PR comment: {response.status} {text}"
                )

        log.info("Posted test results to PR #%d", pr_number)
        return True

    def set_failed(self, message: str) -> None:
        self._failed = True
        print(f"::error::{escape_data(message)}", flush=True)

    @property
    def failed(self) -> bool:
        return self._failed
