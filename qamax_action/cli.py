"""CLI entry point for the QualityMax test action."""

import argparse
import asyncio
import logging
import os
import sys
from collections.abc import Mapping
from pathlib import Path

from pydantic import SecretStr

from qamax_action.action import ActionRunner
from qamax_action.ci.github_actions import (
    GitHubActionsConfig,
    GitHubActionsHost,
    WorkflowCommandFormatter,
)
from qamax_action.config import (
    DEFAULT_API_BASE_URL,
    ActionInputs,
    ServiceConfig,
    parse_bool,
    parse_seed_descriptions,
    parse_test_ids,
)
from qamax_action.local.executor import LocalExecutor
from qamax_action.service.client import QualityMaxClient

API_KEY_ENV = "QAMAX_API_KEY"


def inputs_from_args(args: argparse.Namespace) -> ActionInputs:
    """Build typed action inputs from parsed CLI arguments."""
    return ActionInputs(
        project_id=args.project_id.strip(),
        project_name=args.project_name.strip(),
        test_suite=args.test_suite or "all",
        test_ids=parse_test_ids(args.test_ids),
        base_url=args.base_url or None,
        browser=args.browser or "chromium",
        headless=parse_bool(args.headless),
        timeout_minutes=int(args.timeout_minutes or 30),
        fail_on_test_failure=parse_bool(args.fail_on_test_failure),
        post_pr_comment=parse_bool(args.post_pr_comment),
        mode=args.mode or "run",
        auto_discover=parse_bool(args.auto_discover),
        max_seed_tests=int(args.max_seed_tests or 3),
        seed_descriptions=parse_seed_descriptions(args.seed_descriptions),
    )


async def run(
    inputs: ActionInputs,
    service_config: ServiceConfig,
    environ: Mapping[str, str],
    workdir: Path,
) -> int:
    """Run the action and return exit code."""
    log = logging.getLogger("qamax_action")
    host_config = GitHubActionsConfig.from_environ(environ)

    async with (
        QualityMaxClient.from_config(service_config) as client,
        GitHubActionsHost.from_config(host_config) as host,
    ):
        runner = ActionRunner(
            client=client,
            host=host,
            inputs=inputs,
            config=service_config,
            executor=LocalExecutor(
                client=client,
                inputs=inputs,
                config=service_config,
                workdir=workdir,
            ),
        )
        result = await runner.run()

    if result is not None:
        print(result.model_dump_json(indent=2))

    if host.failed:
        log.info("Action failed")
        return 1
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser; every input is a string as in action.yml."""
    parser = argparse.ArgumentParser(
        description="Run QualityMax E2E tests from a CI pipeline"
    )
    parser.add_argument(
        "--api-key",
        default=os.environ.get(API_KEY_ENV, ""),
        help=f"QualityMax API key (defaults to ${API_KEY_ENV})",
    )
    parser.add_argument("--api-base-url", default=DEFAULT_API_BASE_URL)
    parser.add_argument("--project-id", default="")
    parser.add_argument("--project-name", default="")
    parser.add_argument("--test-suite", default="all")
    parser.add_argument("--test-ids", default="", help="Comma-separated test IDs")
    parser.add_argument("--base-url", default="")
    parser.add_argument("--browser", default="chromium")
    parser.add_argument("--headless", default="true")
    parser.add_argument("--timeout-minutes", default="30")
    parser.add_argument("--fail-on-test-failure", default="true")
    parser.add_argument("--post-pr-comment", default="true")
    parser.add_argument("--mode", default="run", choices=["run", "seed"])
    parser.add_argument("--auto-discover", default="true")
    parser.add_argument("--max-seed-tests", default="3")
    parser.add_argument(
        "--seed-descriptions", default="", help="Newline-separated descriptions"
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser


def configure_logging(debug: bool, in_actions: bool) -> None:
    """Log to stderr, as workflow commands when running in GitHub Actions."""
    handler = logging.StreamHandler(sys.stderr)
    if in_actions:
        handler.setFormatter(WorkflowCommandFormatter("%(message)s"))
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        handlers=[handler],
    )
    logging.getLogger("asyncio").setLevel(logging.WARNING)


def main() -> None:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args()

    configure_logging(
        debug=args.debug or os.environ.get("RUNNER_DEBUG") == "1",
        in_actions=os.environ.get("GITHUB_ACTIONS") == "true",
    )

    if not args.api_key:
        parser.error(f"--api-key or ${API_KEY_ENV} is required")

    try:
        inputs = inputs_from_args(args)
    except ValueError as exc:
        parser.error(f"Invalid input: {exc}")

    service_config = ServiceConfig(
        api_key=SecretStr(args.api_key),
        api_base_url=args.api_base_url or DEFAULT_API_BASE_URL,
    )

    exit_code = asyncio.run(
        run(
            inputs=inputs,
            service_config=service_config,
            environ=os.environ,
            workdir=Path.cwd(),
        )
    )
    sys.exit(exit_code)


if __name__ == "__main__":  # pragma: no cover
    main()
