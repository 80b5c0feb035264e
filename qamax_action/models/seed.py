"""Models for the test seeding API."""

from collections.abc import Sequence

from pydantic import Field

from qamax_action.models.base import Model


class SeedTestsRequest(Model):
    """Request to generate test cases for a project."""

    project_id: str
    base_url: str | None = None
    descriptions: Sequence[str] | None = None
    auto_discover: bool = True
    max_tests: int = 3


class SeedTestResult(Model):
    """A test case created by seeding."""

    test_case_id: int
    script_id: int
    name: str
    tags: Sequence[str] = Field(default_factory=list)


class SeedTestsResponse(Model):
    """Outcome of a seeding request."""

    success: bool = True
    tests_created: int = 0
    tests: Sequence[SeedTestResult] = Field(default_factory=list)
    message: str = ""
    skipped: int = 0
