"""
Cache Configuration Constants

Defaults for the suggestion cache: key namespace, entry lifetime and the
byte quota of the backing key-value store.
"""

# Base time units for TTL calculations
BASE_SECOND = 1
BASE_MINUTE = 60 * BASE_SECOND
BASE_HOUR = 60 * BASE_MINUTE
BASE_DAY = 24 * BASE_HOUR


class CacheDefaults:
    """Suggestion cache defaults."""

    KEY_PREFIX = "input:"
    MAX_AGE = 7 * BASE_DAY  # 7 days
    QUOTA_BYTES = 5242880  # 5 MB

    # Backends
    BACKEND_MEMORY = "memory"
    BACKEND_SQLITE = "sqlite"
    DEFAULT_BACKEND = BACKEND_SQLITE
    DB_FILENAME = "suggest_cache.db"
    HOME_DIR = ".anisuggest"

    # Quota cleanup starts once usage exceeds quota / CLEANUP_DIVISOR
    CLEANUP_DIVISOR = 2
