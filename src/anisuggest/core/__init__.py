"""
Core components for AniSuggest.

This module contains the suggestion engine's pure building blocks: query
normalization, the escape codec, ranking and the data models.
"""

from .escaping import escape, reescape, unescape
from .models import BestMatch, CacheValue, CookedData, SearchRecord, Suggestion
from .normalization import (
    CategoryRegistry,
    PartialInputHistory,
    Query,
    TextNormalizer,
    sanitize_text,
)
from .ranking import RankedRecord, RankingEngine

__all__ = [
    "BestMatch",
    "CacheValue",
    "CategoryRegistry",
    "CookedData",
    "PartialInputHistory",
    "Query",
    "RankedRecord",
    "RankingEngine",
    "SearchRecord",
    "Suggestion",
    "TextNormalizer",
    "escape",
    "reescape",
    "sanitize_text",
    "unescape",
]
