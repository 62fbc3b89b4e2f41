"""Configuration models package.

Domain models are split by concern; ``Settings`` composes them.
"""

from __future__ import annotations

from .api_settings import APISettings, SiteSettings
from .app_settings import AppSettings, LoggingSettings
from .cache_settings import CacheSettings
from .settings import Settings
from .suggest_settings import SuggestSettings

__all__ = [
    "APISettings",
    "AppSettings",
    "CacheSettings",
    "LoggingSettings",
    "Settings",
    "SiteSettings",
    "SuggestSettings",
]
