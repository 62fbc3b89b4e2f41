"""Suggestion coordinator.

Orchestrates the engine on every input event:

    normalize -> read cache -> (miss, expired or forced) debounced fetch
    -> rank -> write cache with prefix aliases -> emit suggestions

Every input-change event starts a new session with a monotonically
increasing token. Results are only emitted while their token is still the
latest one, so a late answer for an older query is dropped.
"""

from __future__ import annotations

import logging
import re
import time
from collections.abc import Callable
from dataclasses import dataclass

from anisuggest.config.models.api_settings import SiteSettings
from anisuggest.config.models.settings import Settings
from anisuggest.core.escaping import escape
from anisuggest.core.models import BestMatch, CookedData, Suggestion
from anisuggest.core.normalization import (
    CategoryRegistry,
    PartialInputHistory,
    Query,
    TextNormalizer,
    encode_component,
)
from anisuggest.core.ranking import RankingEngine
from anisuggest.services.alarms import AlarmScheduler
from anisuggest.services.anidb_client import AniDBSearchClient
from anisuggest.services.cache_store import CacheStore
from anisuggest.services.kv_store import KeyValueStore, create_store
from anisuggest.services.protocols import (
    BestMatchPresenter,
    Navigator,
    SearchClient,
    SuggestCallback,
)
from anisuggest.services.request_scheduler import RequestScheduler
from anisuggest.shared.constants import Markup
from anisuggest.shared.errors import CacheError
from anisuggest.shared.logging import log_operation_error

logger = logging.getLogger(__name__)

_URL_INPUT = re.compile(r"^https?:", re.IGNORECASE)


@dataclass(frozen=True)
class SuggestSession:
    """The query being served and the token that identifies it."""

    token: int
    query: Query


class SuggestCoordinator:
    """Drives the suggestion engine for one input surface.

    Args:
        client: Remote search endpoint
        cache: Suggestion cache
        normalizer: Query parser
        ranking: Ranking engine
        scheduler: Debounced request scheduler
        site: Site URLs used for links and descriptions
        presenter: Optional renderer for the best match
        navigator: Optional opener for submitted URLs
        clock: Returns the current time in epoch seconds
    """

    def __init__(
        self,
        client: SearchClient,
        cache: CacheStore,
        *,
        normalizer: TextNormalizer | None = None,
        ranking: RankingEngine | None = None,
        scheduler: RequestScheduler | None = None,
        site: SiteSettings | None = None,
        presenter: BestMatchPresenter | None = None,
        navigator: Navigator | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.client = client
        self.cache = cache
        self.site = site or SiteSettings()
        self.normalizer = normalizer or TextNormalizer(key_prefix=cache.key_prefix)
        self.ranking = ranking or RankingEngine(self.site.site_url)
        self.scheduler = scheduler or RequestScheduler()
        self.presenter = presenter
        self.navigator = navigator
        self.clock = clock

        self.alarms = AlarmScheduler(self.on_alarm, clock=clock)
        self.history = PartialInputHistory()
        self.session: SuggestSession | None = None
        self.last_result: CookedData | None = None
        self.default_description = self.open_site_description()
        self._token = 0

    async def __aenter__(self) -> SuggestCoordinator:
        await self.open()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    # Lifecycle ------------------------------------------------------------

    async def open(self) -> None:
        """Drop expired results and re-arm expiry alarms for live ones."""
        try:
            await self.cache.purge_expired()
            expiries = await self.cache.live_expiries()
        except CacheError as e:
            log_operation_error(logger, e, "coordinator_open", level=logging.WARNING)
            return

        for key, when in expiries.items():
            self.alarms.create(key, when)
        logger.debug("Re-armed %d cache expiry alarm(s)", len(expiries))

    async def close(self) -> None:
        self.scheduler.abort()
        self.alarms.clear_all()
        close_client = getattr(self.client, "close", None)
        if close_client is not None:
            await close_client()
        await self.cache.store.close()

    # Descriptions ---------------------------------------------------------

    def open_site_description(self) -> str:
        return f"Open {Markup.URL_OPEN}{self.site.site_url}{Markup.URL_CLOSE}"

    def site_search_description(self, query: Query) -> str:
        return (
            f"{Markup.DIM_OPEN}Search for {Markup.MATCH_OPEN}{escape(query.text)}"
            f"{Markup.MATCH_CLOSE} on site.{Markup.DIM_CLOSE}"
        )

    def site_search_url(self, query: Query) -> str:
        return self.site.search_url + encode_component(query.text)

    # Input events ---------------------------------------------------------

    async def on_input_changed(
        self,
        text: str,
        suggest: SuggestCallback | None = None,
    ) -> list[Suggestion] | None:
        """Handle an edit of the input text.

        Args:
            text: Raw input
            suggest: Called with the suggestions unless the session went stale

        Returns:
            The suggestions, or None when there is nothing to show for this
            session (empty query, failed fetch or superseded session)
        """
        self._token += 1
        token = self._token
        query = self.normalizer.parse(text)
        self.session = SuggestSession(token=token, query=query)
        self.last_result = None
        self.history.record(query.text)

        if query.is_empty:
            self.scheduler.abort()
            self.default_description = self.open_site_description()
            return None

        site_link = self.site_search_description(query)
        self.default_description = site_link

        data = await self._search(query, token, site_link)
        if data is None or token != self._token:
            return None

        self._display(data)
        suggestions = list(data.suggestions)
        if suggest is not None:
            suggest(suggestions)
        return suggestions

    def on_input_entered(self, text: str) -> str:
        """Resolve the URL to open for submitted text.

        URLs are opened as typed, other non-blank text opens the site search
        and blank text opens the site root.
        """
        if _URL_INPUT.match(text):
            url = text
        elif text.strip():
            url = self.site_search_url(self.normalizer.parse(text))
        else:
            url = self.site.site_url

        if self.navigator is not None:
            self.navigator.open_url(url)
        return url

    def on_input_cancelled(self) -> None:
        """Abort any pending or in-flight request."""
        if self.scheduler.abort():
            logger.debug("Input cancelled, pending request aborted")

    async def on_alarm(self, name: str) -> None:
        """Evict the cache entry an expiry alarm was armed for."""
        try:
            await self.cache.remove([name])
        except CacheError as e:
            log_operation_error(logger, e, "cache_expire", {"key": name}, level=logging.WARNING)
            return
        logger.debug("Expired cache entry %r", name)

    # Internals ------------------------------------------------------------

    async def _search(self, query: Query, token: int, site_link: str) -> CookedData | None:
        self.scheduler.abort()
        data = await self.cache.get(query.cache_key)
        if token != self._token:
            return None

        if not query.force_refresh and data is not None and not data.is_expired(self.clock()):
            logger.debug("Cache hit for %r", query.cache_key)
            return data

        fetched = await self.scheduler.run(lambda: self._fetch(query, site_link))
        if fetched is None or token != self._token:
            return None
        return await self._store(query, fetched)

    async def _fetch(self, query: Query, site_link: str) -> CookedData:
        records = await self.client.search(query.category, query.text)
        return self.ranking.cook(query.category, query.text, records, site_link)

    async def _store(self, query: Query, data: CookedData) -> CookedData:
        alias_keys = [
            self.normalizer.cache_key(prefix, query.category_key)
            for prefix in self.history.take_prefixes()
        ]
        try:
            stored = await self.cache.write_result(query.cache_key, data, alias_keys)
        except CacheError as e:
            log_operation_error(
                logger, e, "cache_write", {"key": query.cache_key}, level=logging.WARNING
            )
            return data

        if stored.expires is not None:
            self.alarms.create(query.cache_key, stored.expires)
        return stored

    def _display(self, data: CookedData) -> None:
        self.last_result = data
        self.default_description = data.site_link
        best: BestMatch | None = data.best
        if best is None or not best.image or self.presenter is None:
            return
        try:
            self.presenter.show_best(best)
        except Exception:  # noqa: BLE001
            logger.warning("Best match presenter failed for %r", best.title, exc_info=True)


def create_coordinator(
    settings: Settings,
    *,
    store: KeyValueStore | None = None,
    client: SearchClient | None = None,
    presenter: BestMatchPresenter | None = None,
    navigator: Navigator | None = None,
) -> SuggestCoordinator:
    """Build a coordinator and its collaborators from settings."""
    cache = CacheStore(
        store or create_store(settings.cache),
        max_age=settings.cache.max_age,
        quota_bytes=settings.cache.quota_bytes,
        key_prefix=settings.cache.key_prefix,
    )
    normalizer = TextNormalizer(
        CategoryRegistry(settings.suggest.categories),
        key_prefix=settings.cache.key_prefix,
        force_marker=settings.suggest.force_marker,
    )
    return SuggestCoordinator(
        client or AniDBSearchClient(settings.api.site),
        cache,
        normalizer=normalizer,
        ranking=RankingEngine(settings.api.site.site_url),
        scheduler=RequestScheduler(settings.suggest.request_delay),
        site=settings.api.site,
        presenter=presenter,
        navigator=navigator,
    )


__all__ = [
    "SuggestCoordinator",
    "SuggestSession",
    "create_coordinator",
]
