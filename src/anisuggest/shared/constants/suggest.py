"""
Suggestion Engine Constants

Timing defaults for the request scheduler, ranking weights and the markup
vocabulary understood by the input surfaces.
"""


class SuggestDefaults:
    """Suggestion engine defaults."""

    REQUEST_DELAY = 0.2  # seconds of input quiet time before a fetch
    FORCE_MARKER = "!"
    CATEGORY_SEPARATOR = "/"

    # Ranking weights
    CATEGORY_BONUS = 50
    START_BONUS = 10
    WORD_START_BONUS = 4
    INNER_MATCH_BONUS = 1


class Markup:
    """Suggestion description markup."""

    MATCH_OPEN = "<match>"
    MATCH_CLOSE = "</match>"
    DIM_OPEN = "<dim>"
    DIM_CLOSE = "</dim>"
    URL_OPEN = "<url>"
    URL_CLOSE = "</url>"
    SPACE_ENTITY = "&#x20;"

    # Sentinels bracketing query matches inside a name before formatting
    MARK_START = "\r"
    MARK_END = "\n"
