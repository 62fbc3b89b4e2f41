"""
AniSuggest - typo-tolerant AniDB search suggestions

Incremental search suggestions for AniDB with a prefix-chaining local
cache, debounced requests and a ranking that favours matches at word starts.
"""

__version__ = "0.1.0"
__author__ = "AniSuggest Team"

from .core import CookedData, RankingEngine, Suggestion, TextNormalizer
from .services import SuggestCoordinator, create_coordinator

__all__ = [
    "CookedData",
    "RankingEngine",
    "Suggestion",
    "SuggestCoordinator",
    "TextNormalizer",
    "create_coordinator",
]
