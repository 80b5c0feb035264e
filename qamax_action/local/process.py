"""Async subprocess helper for toolchain commands."""

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class CommandResult:
    """Exit code and captured output of a finished command."""

    exit_code: int
    output: str = ""


async def run_command(*args: str, cwd: Path, capture: bool = True) -> CommandResult:
    """Run a command to completion.

    With ``capture`` the combined stdout/stderr is returned; otherwise the
    child inherits the action's stdout so its progress shows in the job log.
    """
    log.debug("Running %s in %s", " ".join(args), cwd)
    pipe = asyncio.subprocess.PIPE if capture else None
    process = await asyncio.create_subprocess_exec(
        *args,
        cwd=cwd,
        stdout=pipe,
        stderr=asyncio.subprocess.STDOUT if capture else None,
    )
    stdout, _ = await process.communicate()
    return CommandResult(
        exit_code=process.returncode or 0,
        output=stdout.decode(errors="replace") if stdout else "",
    )
