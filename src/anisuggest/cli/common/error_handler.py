"""
Turning exceptions into CLI output and exit codes.

Commands catch everything at their top level and hand it to
:func:`handle_cli_error`. The error is logged once, then shown either as
``Error: ...`` on stderr or as a failed JSON envelope on stdout.
"""

from __future__ import annotations

import logging
from typing import Any

import typer

from anisuggest.cli.json_formatter import format_json_output
from anisuggest.shared.constants import CLIDefaults
from anisuggest.shared.errors import (
    AniSuggestError,
    ApplicationError,
    CliError,
    InfrastructureError,
    create_cli_error,
)
from anisuggest.shared.logging import log_operation_error

logger = logging.getLogger(__name__)

# First match wins; CliError is handled before this table.
_CATEGORIES: tuple[tuple[type[BaseException], str, str], ...] = (
    (ApplicationError, "application", "Application error"),
    (InfrastructureError, "infrastructure", "Infrastructure error"),
    (OSError, "file_system", "File system error"),
)


def _describe(error: BaseException) -> str:
    return error.message if isinstance(error, AniSuggestError) else str(error)


def to_cli_error(error: BaseException, command: str) -> tuple[CliError, str]:
    """Wrap ``error`` as a CliError and name its category."""
    if isinstance(error, CliError):
        return error, "cli"

    if isinstance(error, KeyboardInterrupt):
        interrupted = create_cli_error(
            "Command interrupted by user",
            command=command,
            original_error=error,
            exit_code=CLIDefaults.EXIT_INTERRUPTED,
        )
        return interrupted, "interrupted"

    for error_type, category, prefix in _CATEGORIES:
        if isinstance(error, error_type):
            message = f"{prefix}: {_describe(error)}"
            return create_cli_error(message, command=command, original_error=error), category

    return create_cli_error(f"Unexpected error: {error}", command=command, original_error=error), "unexpected"


def handle_cli_error(
    error: BaseException,
    command: str,
    *,
    json_output: bool = False,
) -> int:
    """Log and print ``error`` for ``command``.

    Args:
        error: Whatever the command raised
        command: Command name as typed, e.g. ``"cache stats"``
        json_output: Print the JSON envelope instead of plain text

    Returns:
        The exit code the command should end with
    """
    cli_error, category = to_cli_error(error, command)
    context: dict[str, Any] = {
        "command": command,
        "error_type": type(error).__name__,
        "error_category": category,
    }
    if isinstance(error, AniSuggestError):
        context["error_code"] = error.code.value

    if category == "interrupted":
        logger.warning("%s: %s", command, cli_error.message)
    else:
        log_operation_error(logger, cli_error, f"cli:{command}", context)

    if json_output:
        data = {
            "error_code": cli_error.code.value,
            "error_type": context["error_type"],
            "exit_code": cli_error.exit_code,
            "context": context,
        }
        output = format_json_output(success=False, command=command, data=data, errors=[cli_error.message])
        typer.echo(output.decode("utf-8"))
    else:
        typer.echo(f"Error: {cli_error.message}", err=True)

    return cli_error.exit_code


__all__ = [
    "handle_cli_error",
    "to_cli_error",
]
