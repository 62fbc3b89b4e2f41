"""Tests for the AniDB search client."""

from __future__ import annotations

import asyncio
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import orjson
import pytest

from anisuggest.config.models import SiteSettings
from anisuggest.services.anidb_client import AniDBSearchClient
from anisuggest.shared.errors import ErrorCode, NetworkError


def mock_session(
    status: int = 200,
    body: bytes = b"[]",
    error: Exception | None = None,
) -> MagicMock:
    """Session double whose get() yields one canned response."""
    response = MagicMock()
    response.status = status
    response.read = AsyncMock(return_value=body)

    request = MagicMock()
    request.__aenter__ = AsyncMock(return_value=response)
    request.__aexit__ = AsyncMock(return_value=False)

    session = MagicMock()
    session.closed = False
    session.close = AsyncMock()
    if error is not None:
        session.get = MagicMock(side_effect=error)
    else:
        session.get = MagicMock(return_value=request)
    return session


def payload(*records: Any) -> bytes:
    return orjson.dumps(list(records))


class TestBuildUrl:
    """Test AniDBSearchClient.build_url()."""

    def test_substitutes_category_and_encodes_text(self) -> None:
        client = AniDBSearchClient()
        assert client.build_url("character", "tom & jerry") == (
            "https://anidb.net/perl-bin/animedb.pl?show=json&action=search"
            "&type=character&query=tom%20%26%20jerry"
        )

    def test_custom_template(self) -> None:
        client = AniDBSearchClient(SiteSettings(api_url="http://localhost/%t/?q="))
        assert client.build_url("anime", "bebop") == "http://localhost/anime/?q=bebop"


class TestSearch:
    """Test AniDBSearchClient.search()."""

    @pytest.mark.asyncio
    async def test_returns_records_in_order(self) -> None:
        session = mock_session(
            body=payload(
                {"name": "Cowboy Bebop", "desc": "Anime, Score: 8.8", "link": "a23"},
                {"name": "Bebop", "desc": "Character, 7.0", "extra": True},
            )
        )
        client = AniDBSearchClient(session=session)

        records = await client.search("anime", "bebop")

        assert [record.name for record in records] == ["Cowboy Bebop", "Bebop"]
        assert records[0].link == "a23"
        assert client.request_count == 1

    @pytest.mark.asyncio
    async def test_sends_cache_control_header(self) -> None:
        session = mock_session()
        client = AniDBSearchClient(session=session)

        await client.search("anime", "bebop")

        url = session.get.call_args.args[0]
        assert url.endswith("type=anime&query=bebop")
        assert session.get.call_args.kwargs["headers"] == {"X-LControl": "x-no-cache"}

    @pytest.mark.asyncio
    async def test_non_object_records_are_dropped(self) -> None:
        session = mock_session(body=payload({"name": "Bebop"}, "junk", 42, {"name": None}))
        client = AniDBSearchClient(session=session)

        records = await client.search("anime", "bebop")

        assert [record.name for record in records] == ["Bebop", ""]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("status", "code"),
        [(500, ErrorCode.API_SERVER_ERROR), (404, ErrorCode.API_REQUEST_FAILED)],
    )
    async def test_error_status(self, status: int, code: ErrorCode) -> None:
        client = AniDBSearchClient(session=mock_session(status=status))

        with pytest.raises(NetworkError) as exc_info:
            await client.search("anime", "bebop")

        assert exc_info.value.code == code
        assert "query=bebop" in exc_info.value.context.additional_data["url"]
        assert client.request_count == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [b"<html>", b'{"error": "banned"}'])
    async def test_invalid_payload(self, body: bytes) -> None:
        client = AniDBSearchClient(session=mock_session(body=body))

        with pytest.raises(NetworkError) as exc_info:
            await client.search("anime", "bebop")

        assert exc_info.value.code == ErrorCode.API_INVALID_RESPONSE

    @pytest.mark.asyncio
    async def test_timeout(self) -> None:
        client = AniDBSearchClient(session=mock_session(error=asyncio.TimeoutError()))

        with pytest.raises(NetworkError) as exc_info:
            await client.search("anime", "bebop")

        assert exc_info.value.code == ErrorCode.API_TIMEOUT

    @pytest.mark.asyncio
    async def test_connection_error(self) -> None:
        error = aiohttp.ClientConnectionError("connection refused")
        client = AniDBSearchClient(session=mock_session(error=error))

        with pytest.raises(NetworkError) as exc_info:
            await client.search("anime", "bebop")

        assert exc_info.value.code == ErrorCode.NETWORK_ERROR
        assert exc_info.value.original_error is error


class TestSessionLifecycle:
    """Test session ownership."""

    @pytest.mark.asyncio
    async def test_external_session_is_not_closed(self) -> None:
        session = mock_session()
        async with AniDBSearchClient(session=session) as client:
            await client.search("anime", "bebop")

        session.close.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_owned_session_is_created_and_closed(self, mocker) -> None:
        session = mock_session()
        factory = mocker.patch(
            "anisuggest.services.anidb_client.aiohttp.ClientSession",
            return_value=session,
        )
        client = AniDBSearchClient()

        await client.search("anime", "bebop")
        await client.close()

        factory.assert_called_once()
        assert factory.call_args.kwargs["headers"] == {"X-LControl": "x-no-cache"}
        session.close.assert_awaited_once()
