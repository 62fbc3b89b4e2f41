"""
CLI Constants
"""


class CLIDefaults:
    """CLI defaults and exit codes."""

    VERSION = "0.1.0"
    EXIT_SUCCESS = 0
    EXIT_INTERRUPTED = 130


class CLICommands:
    """CLI command names."""

    SUGGEST = "suggest"
    INTERACTIVE = "interactive"
    CACHE = "cache"
    CACHE_STATS = "stats"
    CACHE_CLEAR = "clear"


class CLIHelp:
    """CLI help text."""

    APP_NAME = "anisuggest"
    APP_DESCRIPTION = "AniSuggest - typo-tolerant AniDB search suggestions"
    APP_STYLE = "rich"
    VERSION_TEXT = "AniSuggest v{version}"
    SUGGEST_HELP = "Fetch ranked suggestions for a query (append /c, /t, ... to pick a category, ! to refresh)"
    INTERACTIVE_HELP = "Type a query and get live suggestions as you type"
    CACHE_HELP = "Inspect or clear the suggestion cache"
