"""Fixtures for unit tests."""

from unittest.mock import Mock

import pytest
from pydantic import SecretStr

from qamax_action.config import ActionInputs, ServiceConfig
from qamax_action.models.context import GitHubContext
from qamax_action.service.client import QualityMaxClient
from qamax_action.testing.host import RecordingHost


@pytest.fixture
def client_mock() -> Mock:
    """Create mock service client."""
    return Mock(spec=QualityMaxClient)


@pytest.fixture
def service_config() -> ServiceConfig:
    """Create service configuration with a fast poll interval."""
    return ServiceConfig(
        api_key=SecretStr("test-key"),
        api_base_url="http://qamax.test",
        report_base_url="https://app.qamax.test",
        poll_interval=0.01,
    )


@pytest.fixture
def inputs() -> ActionInputs:
    """Create default action inputs."""
    return ActionInputs()


@pytest.fixture
def github_context() -> GitHubContext:
    """Create GitHub context for a pull request run."""
    return GitHubContext(
        repository="test-org/test-repo",
        sha="abc123",
        ref="refs/pull/7/merge",
        run_id="1001",
        run_number=12,
        pr_number=7,
        actor="octocat",
        event_name="pull_request",
    )


@pytest.fixture
def host(github_context: GitHubContext) -> RecordingHost:
    """Create in-memory CI host."""
    return RecordingHost(github_context=github_context)
