"""Tests for the Typer application."""

from __future__ import annotations

import logging
from pathlib import Path
from unittest.mock import AsyncMock

import orjson
import pytest
from typer.testing import CliRunner

from anisuggest.cli.typer_app import app
from anisuggest.config import set_config
from anisuggest.config.models import CacheSettings, LoggingSettings, Settings, SuggestSettings
from anisuggest.core.models import SearchRecord
from anisuggest.services.anidb_client import AniDBSearchClient
from anisuggest.shared.errors import ApplicationError, ErrorCode, NetworkError

runner = CliRunner()


@pytest.fixture
def search(mocker, onizuka_records: list[SearchRecord]) -> AsyncMock:
    """Replace the remote search with a canned response."""
    search = AsyncMock(return_value=onizuka_records)
    mocker.patch.object(AniDBSearchClient, "search", search)
    return search


@pytest.fixture
def sqlite_settings(tmp_path: Path) -> Settings:
    return Settings(
        cache=CacheSettings(backend="sqlite", db_path=str(tmp_path / "cache.db")),
        suggest=SuggestSettings(request_delay=0),
    )


class TestGlobalOptions:
    """Test the main callback options."""

    def test_version(self) -> None:
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert "AniSuggest v0.1.0" in result.output

    def test_verbose_enables_debug_logging(self, settings: Settings) -> None:
        set_config(settings)

        result = runner.invoke(app, ["-v", "cache", "stats"])

        assert result.exit_code == 0
        assert logging.getLogger("anisuggest").level == logging.DEBUG

    def test_log_file_from_settings(self, tmp_path: Path) -> None:
        log_file = tmp_path / "anisuggest.log"
        set_config(
            Settings(
                cache=CacheSettings(backend="memory"),
                logging=LoggingSettings(file=str(log_file), level="DEBUG"),
            )
        )

        result = runner.invoke(app, ["cache", "stats"])

        assert result.exit_code == 0
        assert log_file.exists()


class TestSuggestCommand:
    """Test the suggest command."""

    def test_prints_suggestions(self, settings: Settings, search: AsyncMock) -> None:
        set_config(settings)

        result = runner.invoke(app, ["suggest", "onizuka"])

        assert result.exit_code == 0
        search.assert_awaited_once_with("anime", "onizuka")
        assert "Onizuka Eikichi" in result.output
        assert "Found in categories: Character (2)" in result.output
        assert "Best match" in result.output

    def test_json_output(self, settings: Settings, search: AsyncMock) -> None:
        set_config(settings)

        result = runner.invoke(app, ["suggest", "onizuka/c", "--json"])

        assert result.exit_code == 0
        search.assert_awaited_once_with("character", "onizuka")
        payload = orjson.loads(result.stdout)
        assert payload["success"] is True
        assert payload["command"] == "suggest"
        data = payload["data"]
        assert data["query"] == "onizuka/c"
        assert data["result"]["best"]["title"] == "Onizuka"
        assert data["result"]["siteLink"] == data["description"]
        assert [s["content"] for s in data["result"]["suggestions"]] == [
            "https://anidb.net/ch1234",
            "https://anidb.net/ch5678",
        ]

    def test_global_json_flag(self, settings: Settings, search: AsyncMock) -> None:
        set_config(settings)

        result = runner.invoke(app, ["--json", "suggest", "onizuka"])

        assert result.exit_code == 0
        assert orjson.loads(result.stdout)["data"]["result"] is not None

    def test_network_failure_prints_no_suggestions(self, settings: Settings, mocker) -> None:
        set_config(settings)
        mocker.patch.object(
            AniDBSearchClient,
            "search",
            AsyncMock(side_effect=NetworkError(ErrorCode.API_TIMEOUT, "timed out")),
        )

        result = runner.invoke(app, ["suggest", "onizuka"])

        assert result.exit_code == 0
        assert "No suggestions found" in result.output

    def test_configuration_error(self, settings: Settings, mocker) -> None:
        set_config(settings)
        mocker.patch(
            "anisuggest.cli.suggest_handler.get_config",
            side_effect=ApplicationError(ErrorCode.CONFIGURATION_ERROR, "bad config"),
        )

        result = runner.invoke(app, ["suggest", "onizuka"])

        assert result.exit_code == 1
        assert "Error: Application error: bad config" in result.output

    def test_configuration_error_as_json(self, settings: Settings, mocker) -> None:
        set_config(settings)
        mocker.patch(
            "anisuggest.cli.suggest_handler.get_config",
            side_effect=ApplicationError(ErrorCode.CONFIGURATION_ERROR, "bad config"),
        )

        result = runner.invoke(app, ["suggest", "onizuka", "--json"])

        assert result.exit_code == 1
        assert '"success": false' in result.output
        assert "CLI_UNEXPECTED_ERROR" in result.output


class TestCacheCommands:
    """Test the cache sub-commands."""

    def test_stats_after_suggest(self, sqlite_settings: Settings, search: AsyncMock) -> None:
        set_config(sqlite_settings)
        assert runner.invoke(app, ["suggest", "onizuka"]).exit_code == 0

        result = runner.invoke(app, ["--json", "cache", "stats"])

        assert result.exit_code == 0
        data = orjson.loads(result.stdout)["data"]
        assert data["backend"] == "sqlite"
        assert data["results"] == 1
        assert data["aliases"] == 0
        assert data["size_bytes"] > 0

    def test_stats_table(self, settings: Settings) -> None:
        set_config(settings)

        result = runner.invoke(app, ["cache", "stats"])

        assert result.exit_code == 0
        assert "Cache Statistics" in result.output
        assert "memory" in result.output

    def test_clear(self, sqlite_settings: Settings, search: AsyncMock) -> None:
        set_config(sqlite_settings)
        runner.invoke(app, ["suggest", "onizuka"])

        result = runner.invoke(app, ["--json", "cache", "clear"])

        assert result.exit_code == 0
        assert orjson.loads(result.stdout)["data"]["freed_bytes"] > 0

        stats = orjson.loads(runner.invoke(app, ["--json", "cache", "stats"]).stdout)
        assert stats["data"]["results"] == 0

    def test_cached_result_is_reused(self, sqlite_settings: Settings, search: AsyncMock) -> None:
        set_config(sqlite_settings)

        runner.invoke(app, ["suggest", "onizuka"])
        result = runner.invoke(app, ["suggest", "Onizuka"])

        assert result.exit_code == 0
        assert "Onizuka Eikichi" in result.output
        search.assert_awaited_once()
