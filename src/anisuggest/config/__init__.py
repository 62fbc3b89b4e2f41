"""AniSuggest Configuration Module

This module provides unified access to configuration models and settings
management for the AniSuggest application.
"""

from __future__ import annotations

from .loader import get_config, load_settings, reload_config, set_config
from .models import (
    APISettings,
    AppSettings,
    CacheSettings,
    LoggingSettings,
    Settings,
    SiteSettings,
    SuggestSettings,
)

__all__ = [
    "APISettings",
    "AppSettings",
    "CacheSettings",
    "LoggingSettings",
    "Settings",
    "SiteSettings",
    "SuggestSettings",
    "get_config",
    "load_settings",
    "reload_config",
    "set_config",
]
