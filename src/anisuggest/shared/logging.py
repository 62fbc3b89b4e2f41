"""
Logger setup and structured log helpers.

All records are emitted under the ``anisuggest`` logger tree. The helpers
attach ``operation``, ``context`` and timing data through ``extra`` so the
JSON formatter can write them as separate fields.
"""

from __future__ import annotations

import json
import logging
import logging.handlers
from datetime import datetime, timezone
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

from anisuggest.shared.constants import LoggingDefaults
from anisuggest.shared.errors import AniSuggestError, ErrorContext

_EXTRA_FIELDS = ("error_code", "context", "operation", "duration_ms", "result_info")

_CONSOLE_THEME = Theme(
    {
        "logging.level.debug": "cyan",
        "logging.level.info": "green",
        "logging.level.warning": "yellow",
        "logging.level.error": "red bold",
        "logging.level.critical": "red bold reverse",
        "log.time": "dim cyan",
        "log.message": "white",
        "log.path": "dim blue",
    }
)


class StructuredFormatter(logging.Formatter):
    """One JSON object per line, including the structured ``extra`` fields present on the record."""

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        entry: dict[str, Any] = {
            "timestamp": created.isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update({name: getattr(record, name) for name in _EXTRA_FIELDS if hasattr(record, name)})
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


def _console_handler(use_rich: bool) -> logging.Handler:
    if not use_rich:
        plain = logging.StreamHandler()
        plain.setFormatter(StructuredFormatter())
        return plain
    return RichHandler(
        console=Console(theme=_CONSOLE_THEME, stderr=True),
        show_path=False,
        markup=False,
        rich_tracebacks=True,
        log_time_format="[%H:%M:%S]",
    )


def _file_handler(path: str, max_bytes: int, backup_count: int) -> logging.Handler:
    rotating = logging.handlers.RotatingFileHandler(
        path,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    rotating.setFormatter(StructuredFormatter())
    return rotating


def setup_structured_logger(
    name: str = "anisuggest",
    level: str = LoggingDefaults.LEVEL,
    log_file: str | None = None,
    *,
    use_rich_console: bool = True,
    console_output: bool = True,
    file_level: str | None = None,
    max_bytes: int = LoggingDefaults.MAX_BYTES,
    backup_count: int = LoggingDefaults.BACKUP_COUNT,
) -> logging.Logger:
    """
    (Re)configure the ``name`` logger.

    Handlers from an earlier call are dropped. The console gets ``level``;
    the rotating JSON log file, when ``log_file`` is given, gets
    ``file_level`` (``level`` when omitted). Records do not propagate to
    the root logger.

    Args:
        name: Logger to configure
        level: Console level name, case-insensitive
        log_file: Path of the rotating log file
        use_rich_console: Rich console output instead of JSON lines
        console_output: Whether to log to the console at all
        file_level: Level name for the log file
        max_bytes: File size that triggers a rotation
        backup_count: Rotated files to keep
    """
    logger = logging.getLogger(name)
    logger.handlers.clear()
    logger.propagate = False

    console_level = logging.getLevelName(level.upper())
    effective = console_level

    if console_output:
        console = _console_handler(use_rich_console)
        console.setLevel(console_level)
        logger.addHandler(console)

    if log_file:
        file_log_level = logging.getLevelName((file_level or level).upper())
        log_handler = _file_handler(log_file, max_bytes, backup_count)
        log_handler.setLevel(file_log_level)
        logger.addHandler(log_handler)
        effective = min(console_level, file_log_level)

    logger.setLevel(effective)
    return logger


def _as_dict(context: dict[str, Any] | ErrorContext | None) -> dict[str, Any]:
    if isinstance(context, ErrorContext):
        return context.safe_dict()
    return dict(context or {})


def log_operation_error(
    logger: logging.Logger,
    error: AniSuggestError,
    operation: str | None = None,
    additional_context: dict[str, Any] | ErrorContext | None = None,
    *,
    level: int = logging.ERROR,
) -> None:
    """
    Log ``error`` with its code and merged context.

    ``operation`` defaults to the one in the error context. Tracebacks are
    attached only at ERROR and above, and only for wrapped errors.
    """
    merged = error.context.safe_dict()
    merged.update(_as_dict(additional_context))
    logger.log(
        level,
        error.message,
        extra={
            "error_code": error.code.name,
            "context": merged,
            "operation": operation or error.context.operation,
        },
        exc_info=level >= logging.ERROR and error.original_error is not None,
    )


def log_operation_success(
    logger: logging.Logger,
    operation: str,
    duration_ms: float,
    result_info: dict[str, Any] | None = None,
    context: dict[str, Any] | ErrorContext | None = None,
) -> None:
    """Debug record for a finished operation and how long it took."""
    logger.debug(
        "%s finished in %.1f ms",
        operation,
        duration_ms,
        extra={
            "operation": operation,
            "duration_ms": duration_ms,
            "result_info": dict(result_info or {}),
            "context": _as_dict(context),
        },
    )


def log_operation_start(
    logger: logging.Logger,
    operation: str,
    context: dict[str, Any] | None = None,
) -> None:
    logger.debug("%s started", operation, extra={"operation": operation, "context": dict(context or {})})


def log_api_call(
    logger: logging.Logger,
    endpoint: str,
    method: str = "GET",
    status_code: int | None = None,
    duration_ms: float | None = None,
    context: dict[str, Any] | None = None,
) -> None:
    """
    Record one HTTP request to the search endpoint.

    Statuses of 400 and above are logged as warnings, everything else at
    debug level.
    """
    details: dict[str, Any] = {"endpoint": endpoint, "method": method}
    if status_code:
        details["status_code"] = status_code
    if duration_ms:
        details["duration_ms"] = duration_ms
    details.update(context or {})

    failed = bool(status_code) and status_code >= 400  # type: ignore[operator]
    outcome = f" -> {status_code}" if status_code else ""
    logger.log(
        logging.WARNING if failed else logging.DEBUG,
        "%s %s%s",
        method,
        endpoint,
        outcome,
        extra={"operation": "api_call", "context": details},
    )


__all__ = [
    "StructuredFormatter",
    "log_api_call",
    "log_operation_error",
    "log_operation_start",
    "log_operation_success",
    "setup_structured_logger",
]
