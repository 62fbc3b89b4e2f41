"""
AniSuggest Constants Module

This module provides centralized constants for the AniSuggest application.
Magic values and configuration defaults are defined here so that the
configuration models and the services agree on a single source of truth.
"""

from .cache import BASE_DAY, BASE_SECOND, CacheDefaults
from .cli import CLICommands, CLIDefaults, CLIHelp
from .logging import LoggingDefaults
from .site import CategoryDefaults, HTTPHeaders, SiteDefaults
from .suggest import Markup, SuggestDefaults

__all__ = [
    "BASE_DAY",
    "BASE_SECOND",
    "CLICommands",
    "CLIDefaults",
    "CLIHelp",
    "CacheDefaults",
    "CategoryDefaults",
    "HTTPHeaders",
    "LoggingDefaults",
    "Markup",
    "SiteDefaults",
    "SuggestDefaults",
]
