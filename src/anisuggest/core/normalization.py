"""Query normalization for the suggestion engine.

Raw input is split into the query text, an optional ``/<letter>`` category
selector and an optional trailing force marker, then sanitized into the
canonical form used for cache keys and remote requests.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from urllib.parse import quote

from anisuggest.shared.constants import CacheDefaults, CategoryDefaults, SuggestDefaults
from anisuggest.shared.errors import DomainError, ErrorCode, ErrorContext

logger = logging.getLogger(__name__)

# ASCII punctuation plus whitespace: !-/ :-? [-` {-~
_BOUNDARY_CLASS = r"[!-/:-?\[-`{-~\s]"
_LEADING_JUNK = re.compile(rf"^{_BOUNDARY_CLASS}+")
_TRAILING_JUNK = re.compile(rf"{_BOUNDARY_CLASS}+\Z")
_SPACE_RUNS = re.compile(r"\s{2,}")

# Left unencoded in URL components, on top of letters, digits and -_.~
_URL_SAFE = "!*'()"


def encode_component(text: str) -> str:
    """Percent-encode ``text`` for use as a single URL component."""
    return quote(text, safe=_URL_SAFE)


def sanitize_text(text: str) -> str:
    """Trim boundary punctuation/whitespace and collapse interior space runs.

    Idempotent, and interior non-punctuation characters are never altered.

    Example:
        >>> sanitize_text("  ..cowboy   bebop?! ")
        'cowboy bebop'
    """
    text = _LEADING_JUNK.sub("", text)
    text = _SPACE_RUNS.sub(" ", text)
    return _TRAILING_JUNK.sub("", text)


class CategoryRegistry:
    """Closed mapping of one-letter selectors to category names.

    The empty selector maps to the default category. Letters are matched
    case-insensitively.
    """

    def __init__(self, categories: dict[str, str] | None = None) -> None:
        categories = dict(CategoryDefaults.REGISTRY if categories is None else categories)
        if "" not in categories:
            raise DomainError(
                code=ErrorCode.VALIDATION_ERROR,
                message="Category registry needs a default ('' selector) entry",
                context=ErrorContext(
                    operation="category_registry_init",
                    additional_data={"letters": "".join(sorted(categories))},
                ),
            )
        self._categories = {letter.lower(): name for letter, name in categories.items()}

    @property
    def default(self) -> str:
        """Name of the category used when no selector is given."""
        return self._categories[""]

    @property
    def letters(self) -> str:
        """All registered selector letters (the empty selector excluded)."""
        return "".join(letter for letter in self._categories if letter)

    def resolve(self, letter: str) -> str:
        """Return the category for a selector letter, or the default one."""
        return self._categories.get(letter.lower(), self.default)

    def items(self) -> list[tuple[str, str]]:
        return list(self._categories.items())

    def __contains__(self, letter: object) -> bool:
        return isinstance(letter, str) and letter.lower() in self._categories


@dataclass(frozen=True)
class Query:
    """A parsed query, rebuilt on every keystroke.

    Attributes:
        raw_text: Input as typed, trimmed
        force_refresh: True when the input ends with the force marker
        category_key: ``""`` or ``/<letter>`` (lowercased)
        category: Resolved category name
        text: Sanitized query text, case preserved
        cache_key: prefix + lowercased text + category key
    """

    raw_text: str
    force_refresh: bool
    category_key: str
    category: str
    text: str
    cache_key: str

    @property
    def is_empty(self) -> bool:
        return not self.text

    @property
    def url_text(self) -> str:
        """Query text encoded for use in a URL."""
        return encode_component(self.text)


class TextNormalizer:
    """Turns raw input into a :class:`Query`.

    Args:
        registry: Category registry; only its letters are recognized as
            selectors, anything else stays part of the text
        key_prefix: Namespace prefix of cache keys
        force_marker: Trailing character requesting a cache bypass
    """

    def __init__(
        self,
        registry: CategoryRegistry | None = None,
        key_prefix: str = CacheDefaults.KEY_PREFIX,
        force_marker: str = SuggestDefaults.FORCE_MARKER,
    ) -> None:
        self.registry = registry or CategoryRegistry()
        self.key_prefix = key_prefix
        self.force_marker = force_marker
        self._splitter = self._build_splitter()

    def _build_splitter(self) -> re.Pattern[str]:
        letters = self.registry.letters
        separator = re.escape(SuggestDefaults.CATEGORY_SEPARATOR)
        category = f"({separator}[{re.escape(letters)}])?" if letters else "()"
        return re.compile(
            rf"^(.*?){category}(?:{re.escape(self.force_marker)})?\Z",
            re.IGNORECASE | re.DOTALL,
        )

    def parse(self, raw_text: str) -> Query:
        """Parse raw input into a query.

        Example:
            >>> query = TextNormalizer().parse("Bebop/C!")
            >>> query.category, query.force_refresh, query.cache_key
            ('character', True, 'input:bebop/c')
        """
        raw_text = raw_text.strip()
        match = self._splitter.match(raw_text)
        # The pattern matches any string, the guard only satisfies type checkers
        body, category_key = (match.group(1), match.group(2) or "") if match else (raw_text, "")
        category_key = category_key.lower()

        text = sanitize_text(body)
        query = Query(
            raw_text=raw_text,
            force_refresh=raw_text.endswith(self.force_marker),
            category_key=category_key,
            category=self.registry.resolve(category_key[1:]),
            text=text,
            cache_key=self.cache_key(text, category_key),
        )
        logger.debug("Parsed query %r -> %r (%s)", raw_text, query.text, query.category)
        return query

    def cache_key(self, text: str, category_key: str = "") -> str:
        """Build the cache key for already-sanitized text."""
        return f"{self.key_prefix}{text.lower()}{category_key.lower()}"


class PartialInputHistory:
    """Stack of lowercase prefixes of the query being typed.

    Each entry is a prefix of the next one. Once the full query is fetched,
    the remembered shorter prefixes become aliases of its cache entry.
    """

    def __init__(self) -> None:
        self._entries: list[str] = []

    def record(self, text: str) -> None:
        """Push the current text, first dropping entries it does not extend."""
        lowered = text.lower()
        while self._entries:
            last = self._entries[-1]
            if not last or not lowered.startswith(last) or lowered == last:
                self._entries.pop()
            else:
                break
        self._entries.append(lowered)

    def take_prefixes(self) -> list[str]:
        """Drop the current text from the top and return the remaining prefixes."""
        if self._entries:
            self._entries.pop()
        return list(self._entries)

    def clear(self) -> None:
        self._entries.clear()

    @property
    def entries(self) -> list[str]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


__all__ = [
    "CategoryRegistry",
    "PartialInputHistory",
    "Query",
    "TextNormalizer",
    "encode_component",
    "sanitize_text",
]
