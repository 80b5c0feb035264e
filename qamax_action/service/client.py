"""Client for the QualityMax test orchestration API."""

import asyncio
import logging
from collections.abc import AsyncGenerator, Mapping, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any

import aiohttp
from pydantic import TypeAdapter

from qamax_action.config import ServiceConfig, session_base_url
from qamax_action.models.execution import (
    ExecutionStatus,
    Project,
    TestExecutionResult,
    TriggerRequest,
    TriggerResponse,
    Verdict,
)
from qamax_action.models.seed import SeedTestsRequest, SeedTestsResponse

log = logging.getLogger(__name__)

API_PREFIX = "api/github-action"

_projects_adapter = TypeAdapter(list[Project])


class ServiceError(Exception):
    """Raised when a call to the QualityMax API fails."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class UnauthorizedError(ServiceError):
    """Raised when the API key is missing, invalid or lacks access."""


class NotFoundError(ServiceError):
    """Raised when the requested resource does not exist."""


class ServerError(ServiceError):
    """Raised when the service answers with a 5xx status."""


class TransientNetworkError(ServiceError):
    """Raised when the service cannot be reached."""


class InvalidResponseError(ServiceError):
    """Raised when a response cannot be read or decoded."""


def _error_for_status(status: int, message: str) -> ServiceError:
    if status in (401, 403):
        return UnauthorizedError(message, status)
    if status == 404:
        return NotFoundError(message, status)
    if status >= 500:
        return ServerError(message, status)
    return ServiceError(message, status)


@dataclass(frozen=True, kw_only=True)
class QualityMaxClient:
    """Typed access to the QualityMax API."""

    config: ServiceConfig
    session: aiohttp.ClientSession = field(repr=False)

    @classmethod
    @asynccontextmanager
    async def from_config(
        cls, config: ServiceConfig
    ) -> AsyncGenerator["QualityMaxClient", None]:
        """Create client with managed session lifecycle."""
        headers = {
            "Authorization": f"Bearer {config.api_key.get_secret_value()}",
            "Accept": "application/json",
            "User-Agent": "qamax-action",
        }
        async with aiohttp.ClientSession(
            base_url=session_base_url(config.api_base_url),
            headers=headers,
            timeout=aiohttp.ClientTimeout(total=config.request_timeout),
        ) as session:
            yield cls(config=config, session=session)

    async def _request(
        self,
        method: str,
        path: str,
        *,
        payload: Mapping[str, Any] | None = None,
        params: Mapping[str, str] | None = None,
        decode: bool = True,
    ) -> Any:
        """Send a request and return the decoded JSON body.

        Returns None for empty bodies, and always when ``decode`` is off.
        """
        url = f"{API_PREFIX}{path}"
        try:
            async with self.session.request(
                method, url, json=payload, params=params
            ) as response:
                if response.status >= 400:
                    text = await response.text()
                    raise _error_for_status(
                        response.status,
                        f"{method} {url} failed: {response.status} {text}",
                    )
                if not decode or response.status == 204:
                    return None
                return await response.json(content_type=None)
        except (aiohttp.ClientConnectionError, asyncio.TimeoutError) as exc:
            raise TransientNetworkError(f"{method} {url} failed: {exc}") from exc
        except (aiohttp.ClientError, ValueError) as exc:
            raise InvalidResponseError(
                f"{method} {url} returned an invalid response: {exc}"
            ) from exc

    async def validate_api_key(self) -> bool:
        """Check the API key; returns False when the service rejects it."""
        try:
            await self._request("GET", "/validate")
        except UnauthorizedError:
            return False
        return True

    async def get_projects(self) -> Sequence[Project]:
        """List all projects accessible with the API key."""
        data = await self._request("GET", "/projects")
        if isinstance(data, Mapping):
            data = data.get("projects", [])
        return _projects_adapter.validate_python(data or [])

    async def resolve_project(self, repository: str) -> str | None:
        """Resolve the project linked to a repository (owner/repo).

        Returns None when no project is linked to the repository.
        """
        try:
            data = await self._request(
                "GET", "/resolve-project", params={"repository": repository}
            )
        except NotFoundError:
            return None
        if not isinstance(data, Mapping):
            return None
        project_id = data.get("project_id")
        return str(project_id) if project_id else None

    async def trigger_tests(self, request: TriggerRequest) -> TriggerResponse:
        """Start a test execution."""
        log.info(
            "Triggering tests: project_id=%s, test_suite=%s, browser=%s",
            request.project_id,
            request.test_suite,
            request.browser,
        )
        data = await self._request(
            "POST",
            "/trigger",
            payload=request.model_dump(mode="json", exclude_none=True),
        )
        return TriggerResponse.model_validate(data)

    async def get_status(self, execution_id: str) -> ExecutionStatus:
        """Get the current status of an execution."""
        data = await self._request("GET", f"/executions/{execution_id}/status")
        return ExecutionStatus.model_validate(data)

    async def get_results(self, execution_id: str) -> TestExecutionResult:
        """Get the full results of an execution."""
        data = await self._request("GET", f"/executions/{execution_id}/results")
        return TestExecutionResult.model_validate(data)

    async def cancel_execution(self, execution_id: str) -> None:
        """Cancel an execution; safe to call on finished executions."""
        await self._request(
            "POST", f"/executions/{execution_id}/cancel", decode=False
        )

    async def report_results(
        self,
        execution_id: str,
        result: Verdict,
        passed: int,
        failed: int,
        total: int,
    ) -> None:
        """Report the outcome of a locally executed run."""
        await self._request(
            "POST",
            f"/executions/{execution_id}/report",
            payload={
                "result": result,
                "passed_tests": passed,
                "failed_tests": failed,
                "total_tests": total,
            },
            decode=False,
        )

    async def seed_tests(self, request: SeedTestsRequest) -> SeedTestsResponse:
        """Generate test cases for a project."""
        data = await self._request(
            "POST",
            "/seed",
            payload=request.model_dump(mode="json", exclude_none=True),
        )
        return SeedTestsResponse.model_validate(data)
