"""Cache configuration model.

This module contains the cache configuration model for managing
the suggestion cache: backend selection, entry lifetime and byte quota.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field

from anisuggest.shared.constants import CacheDefaults


def _default_db_path() -> str:
    return str(Path.home() / CacheDefaults.HOME_DIR / CacheDefaults.DB_FILENAME)


class CacheSettings(BaseModel):
    """Suggestion cache configuration."""

    backend: str = Field(
        default=CacheDefaults.DEFAULT_BACKEND,
        pattern=f"^({CacheDefaults.BACKEND_MEMORY}|{CacheDefaults.BACKEND_SQLITE})$",
        description="Key-value backend (memory, sqlite)",
    )
    db_path: str = Field(
        default_factory=_default_db_path,
        description="SQLite database file for the sqlite backend",
    )
    key_prefix: str = Field(
        default=CacheDefaults.KEY_PREFIX,
        description="Namespace prefix of every cache key",
    )
    max_age: int = Field(
        default=CacheDefaults.MAX_AGE,
        gt=0,
        description="Lifetime of a fetched result in seconds",
    )
    quota_bytes: int = Field(
        default=CacheDefaults.QUOTA_BYTES,
        gt=0,
        description="Byte quota of the backing store",
    )


__all__ = [
    "CacheSettings",
]
