"""Tests for the error hierarchy."""

from __future__ import annotations

from enum import Enum
from pathlib import Path

import pytest

from anisuggest.shared.errors import (
    AniSuggestError,
    ApplicationError,
    CacheError,
    CliError,
    DomainError,
    ErrorCode,
    ErrorContext,
    InfrastructureError,
    NetworkError,
    create_cli_error,
    create_config_error,
    create_network_error,
)


class Color(Enum):
    RED = "red"


class TestErrorContext:
    """Test ErrorContext."""

    def test_primitives_are_coerced(self) -> None:
        context = ErrorContext(
            operation="load",
            additional_data={"path": Path("/tmp/x"), "color": Color.RED, "none": None, "n": 3},
        )

        assert context.additional_data == {"path": "/tmp/x", "color": "red", "none": "", "n": 3}

    def test_non_primitive_rejected(self) -> None:
        with pytest.raises(TypeError):
            ErrorContext(additional_data={"items": [1, 2]})

    def test_safe_dict(self) -> None:
        assert ErrorContext().safe_dict() == {"additional_data": {}}
        assert ErrorContext(operation="x").safe_dict() == {"operation": "x", "additional_data": {}}


class TestErrors:
    """Test AniSuggestError and its subclasses."""

    def test_str_and_to_dict(self) -> None:
        original = ValueError("inner")
        error = DomainError(
            ErrorCode.VALIDATION_ERROR,
            "bad registry",
            ErrorContext(operation="parse"),
            original_error=original,
        )

        assert str(error) == "VALIDATION_ERROR: bad registry"
        assert error.to_dict() == {
            "code": "VALIDATION_ERROR",
            "message": "bad registry",
            "context": {"operation": "parse", "additional_data": {}},
            "original_error": "inner",
        }

    @pytest.mark.parametrize(
        ("cls", "base"),
        [
            (NetworkError, InfrastructureError),
            (CacheError, InfrastructureError),
            (CliError, ApplicationError),
            (DomainError, AniSuggestError),
        ],
    )
    def test_hierarchy(self, cls: type, base: type) -> None:
        assert issubclass(cls, base)

    def test_create_network_error(self) -> None:
        error = create_network_error("timed out", url="https://anidb.net/x", code=ErrorCode.API_TIMEOUT)

        assert isinstance(error, NetworkError)
        assert error.code == ErrorCode.API_TIMEOUT
        assert error.context.additional_data == {"url": "https://anidb.net/x"}

    def test_create_config_error(self) -> None:
        error = create_config_error("missing", config_key="cache.backend")

        assert error.code == ErrorCode.CONFIG_ERROR
        assert error.context.additional_data == {"config_key": "cache.backend"}

    def test_create_cli_error(self) -> None:
        error = create_cli_error("oops", command="suggest", exit_code=3)

        assert error.command == "suggest"
        assert error.exit_code == 3
        assert error.code == ErrorCode.CLI_UNEXPECTED_ERROR
