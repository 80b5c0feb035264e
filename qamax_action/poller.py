"""Waiting for remote executions and cancelling them when the action aborts."""

import asyncio
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from dataclasses import dataclass

from qamax_action.models.execution import TestExecutionResult
from qamax_action.service.client import QualityMaxClient, ServiceError

log = logging.getLogger(__name__)


class PollingTimeoutError(TimeoutError):
    """Raised when an execution does not finish within the allowed time.

    Distinct from an execution the service itself reports as ``timeout``,
    which is returned as a regular result.
    """


async def wait_for_completion(
    client: QualityMaxClient,
    execution_id: str,
    timeout: float,
    poll_interval: float = 10,
) -> TestExecutionResult:
    """Poll an execution until it reaches a terminal status.

    Args:
        client: Service client
        execution_id: Execution to wait for
        timeout: Maximum wait time in seconds
        poll_interval: Seconds between status checks

    Returns:
        Full results, fetched once the execution is terminal

    Raises:
        PollingTimeoutError: If no terminal status is seen before the deadline

    """
    deadline = asyncio.get_event_loop().time() + timeout

    while True:
        status = await client.get_status(execution_id)
        if status.is_terminal:
            log.info(
                "Execution %s finished with status=%s", execution_id, status.status
            )
            return await client.get_results(execution_id)

        if status.total_tests:
            log.info(
                "Execution %s %s: %d/%d test(s) done%s",
                execution_id,
                status.status,
                status.completed_tests or 0,
                status.total_tests,
                f", running {status.current_test}" if status.current_test else "",
            )
        else:
            log.info("Execution %s still in status=%s", execution_id, status.status)

        if asyncio.get_event_loop().time() >= deadline:
            raise PollingTimeoutError(
                f"Execution {execution_id} did not complete within {timeout} seconds"
            )

        await asyncio.sleep(poll_interval)


@dataclass(kw_only=True)
class ExecutionGuard:
    """Tracks the execution to cancel if the enclosing block fails."""

    execution_id: str | None = None


@asynccontextmanager
async def cancel_on_abort(
    client: QualityMaxClient,
) -> AsyncGenerator[ExecutionGuard, None]:
    """Cancel the tracked execution, once, if an exception escapes the block.

    Cancellation is best-effort: its own failures are logged and ignored and
    the original exception is re-raised.
    """
    guard = ExecutionGuard()
    try:
        yield guard
    except Exception:
        if guard.execution_id is not None:
            log.info("Cancelling execution %s", guard.execution_id)
            try:
                await client.cancel_execution(guard.execution_id)
            except ServiceError as exc:
                log.debug("Failed to cancel execution %s: %s", guard.execution_id, exc)
        raise
