"""Async AniDB search client.

This module provides an asynchronous client for the AniDB JSON search
endpoint using aiohttp. The endpoint returns a loosely structured list of
records; malformed records are dropped and never fail the whole response.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any

import aiohttp
import orjson
from aiolimiter import AsyncLimiter
from pydantic import ValidationError

from anisuggest.config.models.api_settings import SiteSettings
from anisuggest.core.models import SearchRecord
from anisuggest.core.normalization import encode_component
from anisuggest.shared.constants import SiteDefaults
from anisuggest.shared.errors import ErrorCode, create_network_error
from anisuggest.shared.logging import log_api_call, log_operation_start, log_operation_success

logger = logging.getLogger(__name__)


class AniDBSearchClient:
    """Asynchronous AniDB search client using aiohttp.

    The client creates its own ``aiohttp.ClientSession`` on first use unless
    one is passed in; a session passed in is never closed by the client.

    Args:
        settings: Endpoint configuration
        session: Optional externally managed session

    Example:
        >>> async with AniDBSearchClient(SiteSettings()) as client:
        ...     records = await client.search("anime", "cowboy bebop")
    """

    def __init__(
        self,
        settings: SiteSettings | None = None,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self.settings = settings or SiteSettings()
        self._session = session
        self._owns_session = session is None
        self._rate_limiter = AsyncLimiter(
            self.settings.rate_limit_requests,
            self.settings.rate_limit_window,
        )
        self._request_count = 0

    async def __aenter__(self) -> AniDBSearchClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers=self.settings.request_headers,
                timeout=aiohttp.ClientTimeout(total=self.settings.timeout),
            )
            self._owns_session = True
            logger.debug("aiohttp.ClientSession created")
        return self._session

    async def close(self) -> None:
        """Close the session if the client created it."""
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
        self._session = None

    def build_url(self, category: str, text: str) -> str:
        """Build the search request URL for a category and query text."""
        return (
            self.settings.api_url.replace(SiteDefaults.CATEGORY_PLACEHOLDER, category)
            + encode_component(text)
        )

    async def search(self, category: str, text: str) -> list[SearchRecord]:
        """Search the endpoint for ``text`` within ``category``.

        Args:
            category: Category name substituted into the URL template
            text: Normalized query text

        Returns:
            Records in response order

        Raises:
            NetworkError: On timeouts, connection errors, non-success
                statuses and payloads that are not a list of records
        """
        url = self.build_url(category, text)
        log_operation_start(logger, "anidb_search", {"category": category, "text": text})
        start = time.perf_counter()

        async with self._rate_limiter:
            try:
                async with self._get_session().get(
                    url,
                    headers=self.settings.request_headers,
                    timeout=aiohttp.ClientTimeout(total=self.settings.timeout),
                ) as response:
                    status = response.status
                    duration_ms = (time.perf_counter() - start) * 1000
                    log_api_call(logger, url, "GET", status, duration_ms)
                    if status >= 400:
                        code = (
                            ErrorCode.API_SERVER_ERROR
                            if status >= 500
                            else ErrorCode.API_REQUEST_FAILED
                        )
                        raise create_network_error(
                            f"Search request failed with status {status}",
                            url=url,
                            code=code,
                        )
                    body = await response.read()
            except asyncio.TimeoutError as e:
                raise create_network_error(
                    f"Search request timed out after {self.settings.timeout}s",
                    url=url,
                    code=ErrorCode.API_TIMEOUT,
                    original_error=e,
                ) from e
            except aiohttp.ClientError as e:
                raise create_network_error(
                    f"Search request failed: {e}",
                    url=url,
                    original_error=e,
                ) from e

        self._request_count += 1
        records = self._parse_records(url, body)

        log_operation_success(
            logger=logger,
            operation="anidb_search",
            duration_ms=(time.perf_counter() - start) * 1000,
            result_info={"records": len(records)},
            context={"category": category, "text": text},
        )
        return records

    def _parse_records(self, url: str, body: bytes) -> list[SearchRecord]:
        try:
            payload: Any = orjson.loads(body)
        except orjson.JSONDecodeError as e:
            raise create_network_error(
                "Search response is not valid JSON",
                url=url,
                code=ErrorCode.API_INVALID_RESPONSE,
                original_error=e,
            ) from e

        if not isinstance(payload, list):
            raise create_network_error(
                f"Search response is a {type(payload).__name__}, expected a list",
                url=url,
                code=ErrorCode.API_INVALID_RESPONSE,
            )

        records: list[SearchRecord] = []
        for index, item in enumerate(payload):
            if not isinstance(item, dict):
                logger.debug("Dropping non-object record #%d", index)
                continue
            try:
                records.append(SearchRecord.model_validate(item))
            except ValidationError as e:
                logger.debug("Dropping malformed record #%d: %s", index, e)
        return records

    @property
    def request_count(self) -> int:
        """Number of successful requests made by this client."""
        return self._request_count


__all__ = [
    "AniDBSearchClient",
]
