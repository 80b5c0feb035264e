"""Log formatting as GitHub Actions workflow commands."""

import logging

COMMANDS = {
    logging.DEBUG: "debug",
    logging.WARNING: "warning",
    logging.ERROR: "error",
    logging.CRITICAL: "error",
}


def escape_data(value: str) -> str:
    """Escape a workflow command message."""
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


class WorkflowCommandFormatter(logging.Formatter):
    """Render debug, warning and error records as workflow commands.

    Other levels are formatted normally so they read as plain job log lines.
    """

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        command = COMMANDS.get(record.levelno)
        if command is None:
            return message
        return f"::{command}::{escape_data(message)}"
