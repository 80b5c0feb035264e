"""Tests for the completion poller and cancel-on-abort guard."""

from unittest.mock import Mock

import pytest

from qamax_action.models.execution import ExecutionStatus
from qamax_action.poller import (
    PollingTimeoutError,
    cancel_on_abort,
    wait_for_completion,
)
from qamax_action.service.client import TransientNetworkError
from qamax_action.testing.factories import (
    ExecutionStatusFactory,
    TestExecutionResultFactory,
)


def statuses(*values: str) -> list[ExecutionStatus]:
    """Create a status sequence for one execution."""
    return [
        ExecutionStatusFactory.build(execution_id="exec-1", status=value)
        for value in values
    ]


class TestWaitForCompletion:
    """Tests for wait_for_completion."""

    async def test_returns_results_after_terminal_status(
        self, client_mock: Mock
    ) -> None:
        """Polls until completed, then fetches results exactly once."""
        expected = TestExecutionResultFactory.build(execution_id="exec-1")
        client_mock.get_status.side_effect = statuses(
            "queued", "running", "running", "completed"
        )
        client_mock.get_results.return_value = expected

        result = await wait_for_completion(
            client_mock, "exec-1", timeout=5, poll_interval=0.01
        )

        assert result == expected
        assert client_mock.get_status.await_count == 4
        client_mock.get_results.assert_awaited_once_with("exec-1")

    @pytest.mark.parametrize("terminal", ["failed", "cancelled", "timeout"])
    async def test_other_terminal_statuses_return_results(
        self, client_mock: Mock, terminal: str
    ) -> None:
        """A service-reported timeout is a result, not a polling error."""
        expected = TestExecutionResultFactory.build(
            execution_id="exec-1", status=terminal, result="failed"
        )
        client_mock.get_status.side_effect = statuses(terminal)
        client_mock.get_results.return_value = expected

        result = await wait_for_completion(
            client_mock, "exec-1", timeout=5, poll_interval=0.01
        )

        assert result.status == terminal

    async def test_raises_polling_timeout(self, client_mock: Mock) -> None:
        """Raises PollingTimeoutError when no terminal status is seen in time."""
        client_mock.get_status.return_value = statuses("running")[0]

        with pytest.raises(PollingTimeoutError, match="did not complete within"):
            await wait_for_completion(
                client_mock, "exec-1", timeout=0.05, poll_interval=0.02
            )

        client_mock.get_results.assert_not_called()

    async def test_polling_timeout_is_a_timeout_error(self) -> None:
        """Callers can catch the builtin TimeoutError."""
        assert issubclass(PollingTimeoutError, TimeoutError)

    async def test_status_errors_propagate(self, client_mock: Mock) -> None:
        """Does not swallow service errors while polling."""
        client_mock.get_status.side_effect = TransientNetworkError("down")

        with pytest.raises(TransientNetworkError):
            await wait_for_completion(
                client_mock, "exec-1", timeout=5, poll_interval=0.01
            )


class TestCancelOnAbort:
    """Tests for cancel_on_abort."""

    async def test_cancels_tracked_execution_on_error(self, client_mock: Mock) -> None:
        """Cancels once and re-raises the original error."""
        with pytest.raises(RuntimeError, match="boom"):
            async with cancel_on_abort(client_mock) as guard:
                guard.execution_id = "exec-1"
                raise RuntimeError("boom")

        client_mock.cancel_execution.assert_awaited_once_with("exec-1")

    async def test_does_not_cancel_without_execution(self, client_mock: Mock) -> None:
        """Nothing to cancel before an execution was triggered."""
        with pytest.raises(RuntimeError):
            async with cancel_on_abort(client_mock):
                raise RuntimeError("boom")

        client_mock.cancel_execution.assert_not_called()

    async def test_does_not_cancel_on_success(self, client_mock: Mock) -> None:
        """Leaves finished executions alone."""
        async with cancel_on_abort(client_mock) as guard:
            guard.execution_id = "exec-1"

        client_mock.cancel_execution.assert_not_called()

    async def test_ignores_cancel_failure(self, client_mock: Mock) -> None:
        """The original error surfaces even if cancelling fails."""
        client_mock.cancel_execution.side_effect = TransientNetworkError("down")

        with pytest.raises(RuntimeError, match="boom"):
            async with cancel_on_abort(client_mock) as guard:
                guard.execution_id = "exec-1"
                raise RuntimeError("boom")

        client_mock.cancel_execution.assert_awaited_once()
