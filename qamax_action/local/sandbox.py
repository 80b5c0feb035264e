"""Disposable Playwright project for running embedded scripts."""

import json
import logging
import shutil
import tempfile
from collections.abc import AsyncGenerator, Mapping, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path

from qamax_action.local.process import run_command
from qamax_action.local.sanitizer import strip_type_annotations
from qamax_action.models.execution import EmbeddedScript

log = logging.getLogger(__name__)

CONFIG_FILENAME = "playwright.config.js"
REPORT_FILENAME = "results.json"
TESTS_DIRNAME = "tests"

BROWSER_TYPES = {"chromium": "chromium", "firefox": "firefox"}

CONFIG_TEMPLATE = """\
const {{ defineConfig }} = require('@playwright/test');
module.exports = defineConfig({{
  testDir: './{tests_dir}',
  timeout: 60000,
  retries: 0,
  reporter: [['json', {{ outputFile: '{report}' }}], ['list']],
  use: {{
    headless: {headless},
    viewport: {{ width: 1280, height: 720 }},
    screenshot: 'only-on-failure',
  }},
  projects: [{{ name: {project}, use: {{ browserName: '{browser_type}' }} }}],
}});
"""

PACKAGE_MANIFEST = {
    "private": True,
    "dependencies": {"@playwright/test": "latest"},
}


class SandboxProvisioningError(Exception):
    """Raised when the Playwright toolchain cannot be installed."""


def script_filename(script: EmbeddedScript) -> str:
    """Return the spec filename for a script; unique per script ID."""
    return f"test-{script.id}.spec.js"


def render_config(browser: str, headless: bool) -> str:
    """Render the Playwright configuration for a single-browser run.

    Browsers other than chromium and firefox run on webkit.
    """
    return CONFIG_TEMPLATE.format(
        tests_dir=TESTS_DIRNAME,
        report=REPORT_FILENAME,
        headless="true" if headless else "false",
        project=json.dumps(browser),
        browser_type=BROWSER_TYPES.get(browser, "webkit"),
    )


@dataclass(frozen=True, kw_only=True)
class Sandbox:
    """A provisioned Playwright project in a temporary directory."""

    root: Path
    scripts: Mapping[str, EmbeddedScript]

    @property
    def tests_dir(self) -> Path:
        return self.root / TESTS_DIRNAME

    @property
    def config_path(self) -> Path:
        return self.root / CONFIG_FILENAME

    @property
    def report_path(self) -> Path:
        return self.root / REPORT_FILENAME


def write_project(
    root: Path, scripts: Sequence[EmbeddedScript], browser: str, headless: bool
) -> Sandbox:
    """Write config, package manifest and sanitized specs into ``root``."""
    tests_dir = root / TESTS_DIRNAME
    tests_dir.mkdir(parents=True, exist_ok=True)

    (root / CONFIG_FILENAME).write_text(
        render_config(browser, headless), encoding="utf-8"
    )
    (root / "package.json").write_text(
        json.dumps(PACKAGE_MANIFEST, indent=2), encoding="utf-8"
    )

    script_map: dict[str, EmbeddedScript] = {}
    for script in scripts:
        filename = script_filename(script)
        (tests_dir / filename).write_text(
            strip_type_annotations(script.code), encoding="utf-8"
        )
        script_map[filename] = script
        log.info("  Wrote %s: %s", filename, script.name)

    return Sandbox(root=root, scripts=script_map)


async def install_toolchain(root: Path, browser: str) -> None:
    """Install @playwright/test and the browser binaries.

    Raises:
        SandboxProvisioningError: If either install command fails

    """
    log.info("Installing Playwright...")
    steps = (
        ("npm", "install", "--no-audit", "--no-fund"),
        ("npx", "playwright", "install", "--with-deps", browser),
    )
    for args in steps:
        try:
            result = await run_command(*args, cwd=root)
        except OSError as exc:
            raise SandboxProvisioningError(
                f"Failed to run '{' '.join(args)}': {exc}"
            ) from exc
        if result.exit_code != 0:
            raise SandboxProvisioningError(
                f"'{' '.join(args)}' exited with code {result.exit_code}: "
                f"{result.output.strip()[-2000:]}"
            )


def remove_sandbox(root: Path) -> None:
    """Remove the sandbox directory, logging instead of raising on failure."""
    try:
        shutil.rmtree(root)
    except OSError as exc:
        log.debug("Failed to remove sandbox %s: %s", root, exc)


@asynccontextmanager
async def provision_sandbox(
    scripts: Sequence[EmbeddedScript],
    *,
    browser: str = "chromium",
    headless: bool = True,
    tmp_dir: Path | None = None,
) -> AsyncGenerator[Sandbox, None]:
    """Provision a Playwright project for ``scripts``; removed on exit.

    Args:
        scripts: Embedded scripts, one spec file each
        browser: Browser to install and run
        headless: Whether the browser runs headless
        tmp_dir: Parent directory for the sandbox (system temp by default)

    Raises:
        SandboxProvisioningError: If the toolchain cannot be installed

    """
    root = Path(tempfile.mkdtemp(prefix="qamax-", dir=tmp_dir))
    try:
        sandbox = write_project(root, scripts, browser, headless)
        await install_toolchain(root, browser)
        yield sandbox
    finally:
        remove_sandbox(root)
