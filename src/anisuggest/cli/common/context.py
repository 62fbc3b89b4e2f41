"""
Per-invocation CLI state.

The root callback parses the global options once and stores them here;
command handlers read them back with :func:`get_cli_context` instead of
threading ``--json`` and the log level through every signature.
"""

from __future__ import annotations

import contextvars
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class LogLevel(str, Enum):
    """Console log levels accepted by ``--log-level``."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class CliContext(BaseModel):
    """Global options of one ``anisuggest`` run."""

    model_config = ConfigDict(frozen=True)

    verbose: int = Field(default=0, ge=0, description="Number of -v flags given")
    log_level: LogLevel = Field(default=LogLevel.WARNING, description="Console log level")
    json_output: bool = Field(default=False, description="Print the JSON envelope")

    def is_verbose(self) -> bool:
        return self.verbose > 0

    def get_effective_log_level(self) -> str:
        """Console level to configure; any ``-v`` means DEBUG."""
        return (LogLevel.DEBUG if self.is_verbose() else self.log_level).value

    def is_json_output_enabled(self) -> bool:
        return self.json_output


_current: contextvars.ContextVar[CliContext | None] = contextvars.ContextVar(
    "anisuggest_cli_context",
    default=None,
)


def get_cli_context() -> CliContext:
    """
    Return the options of the running invocation.

    Handlers called outside the Typer app (tests, ``python -m``) get the
    defaults.
    """
    return _current.get() or CliContext()


def set_cli_context(context: CliContext) -> None:
    _current.set(context)


def clear_cli_context() -> None:
    _current.set(None)
