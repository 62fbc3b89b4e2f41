"""Services module for AniSuggest.

This module contains the stateful parts of the suggestion engine: key-value
backends, the suggestion cache, expiry alarms, the request scheduler, the
AniDB search client and the coordinator tying them together.
"""

from .alarms import AlarmScheduler
from .anidb_client import AniDBSearchClient
from .cache_store import CacheStats, CacheStore
from .coordinator import SuggestCoordinator, SuggestSession, create_coordinator
from .kv_store import KeyValueStore, MemoryKeyValueStore, SQLiteKeyValueStore, create_store
from .protocols import BestMatchPresenter, Navigator, SearchClient, SuggestCallback
from .request_scheduler import RequestScheduler, RequestState

__all__ = [
    "AlarmScheduler",
    "AniDBSearchClient",
    "BestMatchPresenter",
    "CacheStats",
    "CacheStore",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "Navigator",
    "RequestScheduler",
    "RequestState",
    "SQLiteKeyValueStore",
    "SearchClient",
    "SuggestCallback",
    "SuggestCoordinator",
    "SuggestSession",
    "create_coordinator",
    "create_store",
]
