"""Exceptions raised by AniSuggest.

Every error carries an :class:`ErrorCode`, a human readable message and an
:class:`ErrorContext` whose values are always log-safe primitives. The
suggestion pipeline catches network and cache errors and shows nothing;
only the CLI commands turn them into an exit code.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Union

PrimitiveContextValue = Union[str, int, float, bool]


class ErrorCode(str, Enum):
    """Stable identifiers for every failure AniSuggest reports."""

    # Remote search endpoint
    NETWORK_ERROR = "NETWORK_ERROR"
    API_REQUEST_FAILED = "API_REQUEST_FAILED"
    API_TIMEOUT = "API_TIMEOUT"
    API_SERVER_ERROR = "API_SERVER_ERROR"
    API_INVALID_RESPONSE = "API_INVALID_RESPONSE"

    # Suggestion cache and its key-value store
    CACHE_ERROR = "CACHE_ERROR"
    CACHE_READ_FAILED = "CACHE_READ_FAILED"
    CACHE_WRITE_FAILED = "CACHE_WRITE_FAILED"
    CACHE_CORRUPTED = "CACHE_CORRUPTED"
    CACHE_SERIALIZATION_ERROR = "CACHE_SERIALIZATION_ERROR"

    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Settings
    CONFIG_ERROR = "CONFIG_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    CONFIG_MISSING = "CONFIG_MISSING"

    # Command line
    CLI_UNEXPECTED_ERROR = "CLI_UNEXPECTED_ERROR"
    CLI_INVALID_ARGUMENTS = "CLI_INVALID_ARGUMENTS"


def _to_primitive(key: str, value: Any) -> PrimitiveContextValue:
    if isinstance(value, (str, int, float, bool)):
        return value
    if value is None:
        return ""
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, Enum):
        return value.value
    msg = f"Context value {key!r} of type {type(value).__name__} is not a primitive"
    raise TypeError(msg)


@dataclass(frozen=True)
class ErrorContext:
    """Where an error happened.

    ``additional_data`` accepts str, int, float and bool values as they
    are; ``Path`` and ``Enum`` values are converted and ``None`` becomes an
    empty string. Anything else raises ``TypeError`` at construction.
    """

    operation: str | None = None
    additional_data: dict[str, PrimitiveContextValue] | None = None

    def __post_init__(self) -> None:
        data = self.additional_data
        if data is None:
            return
        if not isinstance(data, dict):
            msg = f"additional_data must be a dict, not {type(data).__name__}"
            raise TypeError(msg)
        object.__setattr__(
            self,
            "additional_data",
            {key: _to_primitive(key, value) for key, value in data.items()},
        )

    def safe_dict(self) -> dict[str, Any]:
        """Plain dict for log records; ``additional_data`` is always present."""
        result: dict[str, Any] = {}
        if self.operation is not None:
            result["operation"] = self.operation
        result["additional_data"] = dict(self.additional_data or {})
        return result


class AniSuggestError(Exception):
    """Root of the AniSuggest exception tree.

    Args:
        code: What went wrong
        message: Text shown to the user
        context: Operation and log-safe details
        original_error: Lower level exception this one wraps
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        context: ErrorContext | None = None,
        original_error: Exception | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.context = context if context is not None else ErrorContext()
        self.original_error = original_error
        super().__init__(str(self))

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code.value,
            "message": self.message,
            "context": self.context.safe_dict(),
            "original_error": None if self.original_error is None else str(self.original_error),
        }


class DomainError(AniSuggestError):
    """Bad input to the pure text and ranking code, e.g. a malformed category registry."""


class InfrastructureError(AniSuggestError):
    """The network or the local store failed."""


class NetworkError(InfrastructureError):
    """The search endpoint timed out, refused, answered non-2xx or sent garbage."""


class CacheError(InfrastructureError):
    """Reading, writing or encoding a cache entry failed."""


class ApplicationError(AniSuggestError):
    """Settings and other problems of the application itself."""


class CliError(ApplicationError):
    """An error ready to be reported by a command, with its exit code."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        context: ErrorContext | None = None,
        original_error: Exception | None = None,
        command: str | None = None,
        exit_code: int = 1,
    ):
        super().__init__(code, message, context, original_error)
        self.command = command
        self.exit_code = exit_code


def _single(key: str, value: str | None) -> dict[str, PrimitiveContextValue] | None:
    return {key: value} if value else None


def create_network_error(
    message: str,
    url: str | None = None,
    code: ErrorCode = ErrorCode.NETWORK_ERROR,
    original_error: Exception | None = None,
) -> NetworkError:
    """NetworkError for a search request, with the URL in the context."""
    context = ErrorContext(operation="search_request", additional_data=_single("url", url))
    return NetworkError(code, message, context, original_error)


def create_config_error(
    message: str,
    config_key: str | None = None,
    operation: str | None = None,
    original_error: Exception | None = None,
    code: ErrorCode = ErrorCode.CONFIG_ERROR,
) -> ApplicationError:
    """ApplicationError for a settings problem, naming the offending key or file."""
    context = ErrorContext(operation=operation, additional_data=_single("config_key", config_key))
    return ApplicationError(code, message, context, original_error)


def create_cli_error(
    message: str,
    command: str | None = None,
    operation: str | None = None,
    original_error: BaseException | None = None,
    exit_code: int = 1,
) -> CliError:
    """CliError for a failed command."""
    context = ErrorContext(operation=operation, additional_data=_single("command", command))
    return CliError(
        ErrorCode.CLI_UNEXPECTED_ERROR,
        message,
        context,
        original_error,  # type: ignore[arg-type]
        command=command,
        exit_code=exit_code,
    )


__all__ = [
    "AniSuggestError",
    "ApplicationError",
    "CacheError",
    "CliError",
    "DomainError",
    "ErrorCode",
    "ErrorContext",
    "InfrastructureError",
    "NetworkError",
    "PrimitiveContextValue",
    "create_cli_error",
    "create_config_error",
    "create_network_error",
]
