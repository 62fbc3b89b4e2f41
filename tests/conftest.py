"""
Pytest configuration and shared fixtures for AniSuggest tests.

This module provides common fixtures and configuration that can be used
across all test modules in the project.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Generator
from unittest.mock import AsyncMock

import pytest

from anisuggest.cli.common.context import clear_cli_context
from anisuggest.config import set_config
from anisuggest.config.models import CacheSettings, Settings, SuggestSettings
from anisuggest.core.models import SearchRecord
from anisuggest.services.cache_store import CacheStore
from anisuggest.services.kv_store import MemoryKeyValueStore

# Keep host configuration out of the tests
for _name in list(os.environ):
    if _name.startswith("ANISUGGEST_"):
        del os.environ[_name]


class FakeClock:
    """Settable epoch-seconds clock."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def reset_global_state() -> Generator[None, None, None]:
    """Forget the global settings, CLI context and logger setup after each test."""
    yield
    set_config(None)
    clear_cli_context()

    package_logger = logging.getLogger("anisuggest")
    package_logger.handlers.clear()
    package_logger.setLevel(logging.NOTSET)
    package_logger.propagate = True


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def memory_store() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture
def cache_store(memory_store: MemoryKeyValueStore, clock: FakeClock) -> CacheStore:
    """Cache store on an in-memory backend with a fake clock."""
    return CacheStore(memory_store, clock=clock)


@pytest.fixture
def settings() -> Settings:
    """Settings with an in-memory cache and no debounce delay."""
    return Settings(
        cache=CacheSettings(backend="memory"),
        suggest=SuggestSettings(request_delay=0),
    )


@pytest.fixture
def make_record() -> Callable[..., SearchRecord]:
    """Factory for search records."""

    def _make(
        name: str,
        desc: str = "Anime, Score: 8.00",
        link: str = "",
        picurl: str = "",
    ) -> SearchRecord:
        return SearchRecord(name=name, desc=desc, link=link, picurl=picurl)

    return _make


@pytest.fixture
def onizuka_records(make_record: Callable[..., SearchRecord]) -> list[SearchRecord]:
    """Search response for "onizuka" in the anime category."""
    return [
        make_record(
            "Onizuka",
            "Character, Score: 9.1",
            link="ch1234",
            picurl="https://cdn.anidb.net/images/thumbs/50x65/1234.jpg-thumb.jpg",
        ),
        make_record("Onizuka Eikichi", "Character, Score: 8.0", link="ch5678"),
    ]


@pytest.fixture
def search_client(onizuka_records: list[SearchRecord]) -> AsyncMock:
    """Search client double returning the onizuka response."""
    client = AsyncMock()
    client.search = AsyncMock(return_value=onizuka_records)
    client.close = AsyncMock()
    return client
