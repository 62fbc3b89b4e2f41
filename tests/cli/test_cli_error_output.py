"""Tests for the CLI context, error handling and JSON envelope."""

from __future__ import annotations

import orjson
import pytest
from pydantic import ValidationError

from anisuggest.cli.common.context import (
    CliContext,
    LogLevel,
    get_cli_context,
    set_cli_context,
)
from anisuggest.cli.common.error_handler import handle_cli_error
from anisuggest.cli.json_formatter import format_json_output, safe_json_serialize
from anisuggest.core.models import BestMatch
from anisuggest.shared.errors import (
    ApplicationError,
    CacheError,
    CliError,
    ErrorCode,
)


class TestCliContext:
    """Test CliContext and the context variable."""

    def test_default_context(self) -> None:
        context = get_cli_context()

        assert context.log_level == LogLevel.WARNING
        assert context.get_effective_log_level() == "WARNING"
        assert not context.is_json_output_enabled()

    def test_verbose_forces_debug(self) -> None:
        context = CliContext(verbose=2, log_level=LogLevel.ERROR)
        assert context.get_effective_log_level() == "DEBUG"

    def test_set_context(self) -> None:
        set_cli_context(CliContext(json_output=True))
        assert get_cli_context().is_json_output_enabled()

    def test_negative_verbosity_rejected(self) -> None:
        with pytest.raises(ValidationError):
            CliContext(verbose=-1)


class TestHandleCliError:
    """Test handle_cli_error()."""

    def test_application_error(self, capsys: pytest.CaptureFixture[str]) -> None:
        error = ApplicationError(ErrorCode.CONFIGURATION_ERROR, "bad config")

        assert handle_cli_error(error, "suggest") == 1
        assert "Error: Application error: bad config" in capsys.readouterr().err

    def test_infrastructure_error(self, capsys: pytest.CaptureFixture[str]) -> None:
        error = CacheError(ErrorCode.CACHE_ERROR, "database locked")

        assert handle_cli_error(error, "cache stats") == 1
        assert "Infrastructure error: database locked" in capsys.readouterr().err

    def test_cli_error_keeps_exit_code(self, capsys: pytest.CaptureFixture[str]) -> None:
        error = CliError(ErrorCode.CLI_INVALID_ARGUMENTS, "no query", exit_code=2)

        assert handle_cli_error(error, "suggest") == 2
        assert "Error: no query" in capsys.readouterr().err

    def test_keyboard_interrupt(self) -> None:
        assert handle_cli_error(KeyboardInterrupt(), "interactive") == 130

    def test_json_output(self, capsys: pytest.CaptureFixture[str]) -> None:
        exit_code = handle_cli_error(RuntimeError("boom"), "suggest", json_output=True)

        payload = orjson.loads(capsys.readouterr().out)
        assert exit_code == 1
        assert payload["success"] is False
        assert payload["errors"] == ["Unexpected error: boom"]
        assert payload["data"]["error_type"] == "RuntimeError"
        assert payload["data"]["context"]["error_category"] == "unexpected"


class TestJsonFormatter:
    """Test the JSON envelope."""

    def test_envelope(self) -> None:
        payload = orjson.loads(format_json_output(True, "suggest", {"count": 2}))

        assert payload["success"] is True
        assert payload["command"] == "suggest"
        assert payload["data"] == {"count": 2}
        assert payload["errors"] == []
        assert payload["warnings"] == []
        assert "timestamp" in payload

    def test_errors_mark_failure(self) -> None:
        payload = orjson.loads(format_json_output(True, "suggest", errors=["nope"]))
        assert payload["success"] is False

    def test_models_are_serialized(self) -> None:
        data = safe_json_serialize({"best": [BestMatch(title="Onizuka")]})
        assert data == {"best": [{"title": "Onizuka", "text": "", "note": "", "image": ""}]}

    def test_unserializable_data(self) -> None:
        payload = orjson.loads(format_json_output(True, "suggest", {"x": object()}))

        assert payload["success"] is False
        assert payload["errors"][0].startswith("JSON serialization failed")
