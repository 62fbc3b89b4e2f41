"""
Remote Site Constants

URLs and request options for the AniDB search endpoint, plus the default
category registry (one-letter selector -> category name).
"""

from __future__ import annotations


class SiteDefaults:
    """AniDB endpoint defaults."""

    SITE_URL = "https://anidb.net/"
    API_URL = SITE_URL + "perl-bin/animedb.pl?show=json&action=search&type=%t&query="
    SEARCH_URL = SITE_URL + "perl-bin/animedb.pl?show=search&do.search=search&adb.search="
    CATEGORY_PLACEHOLDER = "%t"
    TIMEOUT = 10.0  # seconds

    # Politeness limit for the search endpoint
    RATE_LIMIT_REQUESTS = 5
    RATE_LIMIT_WINDOW = 1.0  # seconds


class HTTPHeaders:
    """HTTP header names and values used by the search client."""

    CACHE_CONTROL_NAME = "X-LControl"
    CACHE_CONTROL_NO_CACHE = "x-no-cache"


class CategoryDefaults:
    """Default category registry.

    The empty selector maps to the default category.
    """

    DEFAULT = "anime"
    ALL = "all"
    REGISTRY: dict[str, str] = {
        "a": ALL,
        "c": "character",
        "k": "club",
        "l": "collection",
        "r": "creator",
        "g": "group",
        "s": "song",
        "t": "tag",
        "u": "user",
        "": DEFAULT,
    }
