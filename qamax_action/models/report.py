"""Models for the Playwright JSON reporter output.

The reporter format belongs to Playwright and changes between releases, so
every field is optional and unknown keys are ignored.
"""

from collections.abc import Iterator, Sequence

from pydantic import Field

from qamax_action.models.base import Model


class ReportError(Model):
    """Error attached to a test attempt."""

    message: str | None = None


class ReportAttempt(Model):
    """A single attempt (retry) of a test."""

    duration: float = 0.0
    status: str | None = None
    error: ReportError | None = None


class ReportTest(Model):
    """A test of a spec, run for one project."""

    __test__ = False

    results: Sequence[ReportAttempt] = Field(default_factory=list)


class ReportSpec(Model):
    """A spec as reported by Playwright."""

    title: str = ""
    ok: bool = False
    tests: Sequence[ReportTest] = Field(default_factory=list)

    @property
    def first_attempt(self) -> ReportAttempt | None:
        """First attempt of the first test, if any."""
        if self.tests and self.tests[0].results:
            return self.tests[0].results[0]
        return None


class ReportSuite(Model):
    """A suite: a file at the top level, a describe block below it."""

    title: str = ""
    file: str = ""
    specs: Sequence[ReportSpec] = Field(default_factory=list)
    suites: Sequence["ReportSuite"] = Field(default_factory=list)

    def iter_specs(self) -> Iterator[ReportSpec]:
        """Yield the specs of this suite and of all nested suites."""
        yield from self.specs
        for suite in self.suites:
            yield from suite.iter_specs()


class RawRunReport(Model):
    """Top-level Playwright JSON report."""

    suites: Sequence[ReportSuite] = Field(default_factory=list)
