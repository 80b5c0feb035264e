"""Fixtures for module tests using WireMock testcontainers."""

import os
import subprocess
import sys
from collections.abc import Callable, Generator
from pathlib import Path

import pytest
from testcontainers.core import testcontainers_config
from wiremock.client import Mappings
from wiremock.constants import Config
from wiremock.testing.testcontainer import WireMockContainer

@pytest.fixture(scope="session", autouse=True)
def _disable_ryuk() -> None:
    """Disable the extra cleanup instance, we use contexts to clean containers."""
    testcontainers_config.ryuk_disabled = True


@pytest.fixture(scope="session")
def wiremock_server() -> Generator[WireMockContainer, None, None]:
    """Start WireMock container using wiremock's testcontainer support."""
    with WireMockContainer(secure=False) as wm:
        Config.base_url = wm.get_url("__admin")
        yield wm
        print(wm.get_logs())


@pytest.fixture
def wiremock_url(wiremock_server: WireMockContainer) -> Generator[str, None, None]:
    """URL of a WireMock server without stubs from earlier tests."""
    Mappings.delete_all_mappings()
    yield wiremock_server.get_base_url()


@pytest.fixture
def runner_files(tmp_path: Path) -> dict[str, Path]:
    """Create the files GitHub Actions provides to a job step."""
    event = tmp_path / "event.json"
    event.write_text('{"ref": "refs/heads/main"}')
    return {
        "event": event,
        "output": tmp_path / "output",
        "summary": tmp_path / "summary.md",
    }


@pytest.fixture
def run_action(
    wiremock_url: str, runner_files: dict[str, Path]
) -> Callable[..., subprocess.CompletedProcess[str]]:
    """Return a function running the action CLI as a GitHub Actions step."""

    def _run(*args: str) -> subprocess.CompletedProcess[str]:
        env = {
            "PATH": os.environ.get("PATH", ""),
            "QAMAX_API_KEY": "qm-module-key",
            "GITHUB_ACTIONS": "true",
            "GITHUB_REPOSITORY": "test-org/test-repo",
            "GITHUB_SHA": "abc123",
            "GITHUB_REF": "refs/heads/main",
            "GITHUB_RUN_ID": "1001",
            "GITHUB_EVENT_NAME": "push",
            "GITHUB_EVENT_PATH": str(runner_files["event"]),
            "GITHUB_OUTPUT": str(runner_files["output"]),
            "GITHUB_STEP_SUMMARY": str(runner_files["summary"]),
        }
        return subprocess.run(
            [
                sys.executable,
                "-m",
                "qamax_action.cli",
                "--api-base-url",
                wiremock_url,
                *args,
            ],
            env=env,
            capture_output=True,
            text=True,
            timeout=60,
        )

    return _run
