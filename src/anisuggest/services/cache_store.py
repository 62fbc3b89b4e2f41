"""Suggestion cache with TTL expiry, prefix aliases and quota eviction.

A stored value is either a result record (cooked data with an ``expires``
timestamp) or an alias: a bare string naming the canonical key, without the
key prefix, that the aliased prefix resolves to. Aliases are always written
in the same batch as their target, so they are exactly one hop deep.

After every write the store checks the backend's size; once it exceeds
half the quota the oldest half of all entries (by ``expires``, aliases
sorted last) is removed.
"""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from anisuggest.core.models import CacheValue, CookedData
from anisuggest.services.kv_store import KeyValueStore
from anisuggest.shared.constants import CacheDefaults
from anisuggest.shared.errors import CacheError, ErrorCode, ErrorContext
from anisuggest.shared.logging import log_operation_error, log_operation_success

logger = logging.getLogger(__name__)


@dataclass
class CacheStats:
    """Summary of the cache contents."""

    results: int
    aliases: int
    expired: int
    size_bytes: int
    quota_bytes: int


def _serialize(value: CacheValue) -> Any:
    if isinstance(value, CookedData):
        return value.model_dump(mode="json", by_alias=True)
    return value


def _expiry_rank(value: Any) -> float:
    # Aliases carry no expiry of their own and outlive every result
    if isinstance(value, dict):
        expires = value.get("expires")
        if isinstance(expires, (int, float)):
            return float(expires)
        return -math.inf
    return math.inf


class CacheStore:
    """Cache of cooked search results on top of a key-value backend.

    Args:
        store: Key-value backend
        max_age: Lifetime of a written result in seconds
        quota_bytes: Byte quota of the backend
        key_prefix: Namespace prefix of every key
        clock: Returns the current time in epoch seconds
    """

    def __init__(
        self,
        store: KeyValueStore,
        *,
        max_age: float = CacheDefaults.MAX_AGE,
        quota_bytes: int = CacheDefaults.QUOTA_BYTES,
        key_prefix: str = CacheDefaults.KEY_PREFIX,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.store = store
        self.max_age = max_age
        self.quota_bytes = quota_bytes
        self.key_prefix = key_prefix
        self.clock = clock

    async def get(self, key: str) -> CookedData | None:
        """Read a result record, following an alias at most once.

        Missing keys, dangling aliases and values of an unexpected shape all
        read as a miss.
        """
        try:
            value = (await self.store.get([key])).get(key)
            if isinstance(value, str):
                target = self.key_prefix + value
                value = (await self.store.get([target])).get(target)
                if isinstance(value, str):
                    logger.debug("Alias %r points at another alias, treating as miss", key)
                    return None
        except CacheError as e:
            log_operation_error(logger, e, "cache_get", {"key": key}, level=logging.WARNING)
            return None

        if value is None:
            return None
        try:
            return CookedData.model_validate(value)
        except ValidationError as e:
            corrupted = CacheError(
                ErrorCode.CACHE_CORRUPTED,
                f"Ignoring malformed cache value for {key!r}",
                ErrorContext(operation="cache_get", additional_data={"key": key}),
                original_error=e,
            )
            log_operation_error(logger, corrupted, level=logging.WARNING)
            return None

    async def put(self, entries: Mapping[str, CacheValue]) -> None:
        """Write entries in one batch, then enforce the quota.

        Raises:
            CacheError: If the backend write fails
        """
        await self.store.set({key: _serialize(value) for key, value in entries.items()})
        await self._enforce_quota()

    async def write_result(
        self,
        key: str,
        data: CookedData,
        alias_keys: Iterable[str] = (),
    ) -> CookedData:
        """Stamp ``data`` with its expiry and store it with its aliases.

        Args:
            key: Canonical key
            data: Cooked result
            alias_keys: Keys of shorter prefixes that should resolve to ``key``

        Returns:
            The stored record, with ``expires`` set
        """
        stamped = data.model_copy(update={"expires": self.clock() + self.max_age})
        target = key[len(self.key_prefix) :] if key.startswith(self.key_prefix) else key

        entries: dict[str, CacheValue] = {key: stamped}
        for alias_key in alias_keys:
            if alias_key != key:
                entries[alias_key] = target

        await self.put(entries)
        logger.debug("Cached %r with %d alias(es)", key, len(entries) - 1)
        return stamped

    async def remove(self, keys: Iterable[str]) -> None:
        await self.store.remove(keys)

    async def remove_all(self) -> None:
        await self.store.clear()

    async def size_in_bytes(self) -> int:
        return await self.store.bytes_in_use()

    async def _enforce_quota(self) -> None:
        size = await self.store.bytes_in_use()
        if size <= self.quota_bytes / CacheDefaults.CLEANUP_DIVISOR:
            return

        start = time.perf_counter()
        data = await self.store.get(None)
        keys = sorted(data, key=lambda k: _expiry_rank(data[k]))
        victims = keys[: len(keys) // 2]
        await self.store.remove(victims)

        log_operation_success(
            logger=logger,
            operation="cache_cleanup",
            duration_ms=(time.perf_counter() - start) * 1000,
            result_info={"removed": len(victims), "size_before": size},
        )

    async def live_expiries(self) -> dict[str, float]:
        """Map every canonical key to its expiry time."""
        data = await self.store.get(None)
        return {
            key: float(value["expires"])
            for key, value in data.items()
            if isinstance(value, dict) and isinstance(value.get("expires"), (int, float))
        }

    async def purge_expired(self, now: float | None = None) -> int:
        """Remove result records whose expiry has passed and aliases left without a target.

        Returns:
            Number of removed entries
        """
        now = self.clock() if now is None else now
        data = await self.store.get(None)
        expired = {key for key, value in data.items() if _expiry_rank(value) <= now}
        dangling = {
            key
            for key, value in data.items()
            if isinstance(value, str)
            and (self.key_prefix + value not in data or self.key_prefix + value in expired)
        }
        expired |= dangling
        if expired:
            await self.store.remove(expired)
            logger.info("Purged %d expired cache entries", len(expired))
        return len(expired)

    async def stats(self) -> CacheStats:
        """Count results, aliases and expired results."""
        data = await self.store.get(None)
        size = await self.store.bytes_in_use()
        now = self.clock()
        aliases = sum(1 for value in data.values() if isinstance(value, str))
        expired = sum(1 for value in data.values() if _expiry_rank(value) <= now)
        return CacheStats(
            results=len(data) - aliases,
            aliases=aliases,
            expired=expired,
            size_bytes=size,
            quota_bytes=self.quota_bytes,
        )


__all__ = [
    "CacheStats",
    "CacheStore",
]
