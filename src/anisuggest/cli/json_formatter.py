"""
The ``--json`` envelope shared by every command.

Each command prints exactly one object with the keys ``success``,
``timestamp``, ``command``, ``data``, ``errors`` and ``warnings``, sorted
and indented by two spaces.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import orjson
from pydantic import BaseModel

_DUMP_OPTIONS = orjson.OPT_SORT_KEYS | orjson.OPT_INDENT_2


def _envelope(
    success: bool,
    timestamp: str,
    command: str,
    data: Any,
    errors: list[str],
    warnings: list[str],
) -> dict[str, Any]:
    return {
        "success": success and not errors,
        "timestamp": timestamp,
        "command": command,
        "data": data,
        "errors": errors,
        "warnings": warnings,
    }


def format_json_output(
    success: bool,
    command: str,
    data: Any | None = None,
    errors: list[str] | None = None,
    warnings: list[str] | None = None,
) -> bytes:
    """
    Encode a command result.

    Any error message forces ``success`` to false. When ``data`` holds
    something orjson cannot encode, a failed envelope describing the
    encoding error is returned instead.

    Example:
        >>> orjson.loads(format_json_output(True, "cache clear", {"freed_bytes": 0}))["data"]
        {'freed_bytes': 0}
    """
    timestamp = datetime.now(timezone.utc).isoformat()
    payload = _envelope(
        success,
        timestamp,
        command,
        safe_json_serialize(data),
        list(errors or []),
        list(warnings or []),
    )
    try:
        return orjson.dumps(payload, option=_DUMP_OPTIONS)
    except TypeError as e:
        fallback = _envelope(False, timestamp, command, None, [f"JSON serialization failed: {e!s}"], [])
        return orjson.dumps(fallback, option=_DUMP_OPTIONS)


def safe_json_serialize(obj: Any) -> Any:
    """Replace pydantic models, also inside lists, tuples and dicts, with their JSON form."""
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json", by_alias=True)
    if isinstance(obj, dict):
        return {str(key): safe_json_serialize(value) for key, value in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [safe_json_serialize(item) for item in obj]
    return obj


__all__ = [
    "format_json_output",
    "safe_json_serialize",
]
