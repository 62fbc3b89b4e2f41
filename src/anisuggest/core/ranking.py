"""Ranking and formatting of remote search results.

The engine scores every record of one search response against the query,
orders them and formats each into a suggestion with highlighted matches.

Scoring, per record:

- ``CATEGORY_BONUS`` when the record's category matches the selected one
  (or the selected category is ``all``)
- ``START_BONUS`` per query-word match at the very start of the name
- ``WORD_START_BONUS`` per match preceded by a space
- ``INNER_MATCH_BONUS`` per match preceded by a non-space character

Each match count is taken with a pattern that also matches the end of the
string, and the constant end match is subtracted again. The result is the
same ranking order the site's users have always seen.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass
from urllib.parse import urljoin

from anisuggest.core.escaping import reescape
from anisuggest.core.models import BestMatch, CookedData, SearchRecord, Suggestion
from anisuggest.shared.constants import CategoryDefaults, Markup, SiteDefaults, SuggestDefaults

logger = logging.getLogger(__name__)

# "<category phrase>, [Score: ]<number>..." with nothing comma-separated after it
_DESC_PATTERN = re.compile(r"^(.+?), (?:Score: )?([\d.]+)[^,]*\Z", re.DOTALL)

_THUMBNAIL_PATTERN = re.compile(r"^[\s\S]*?https?(:.+?)thumbs/\d+x\d+/(.+?)-thumb[\s\S]+\Z")

_AT_START = re.compile(rf"^{Markup.MARK_START}|\Z")
_AFTER_SPACE = re.compile(rf" {Markup.MARK_START}|\Z")
_AFTER_NON_SPACE = re.compile(rf"\S{Markup.MARK_START}|\Z")

_LINE_BREAKS = re.compile(r"[\r\n]+")


@dataclass
class RankedRecord:
    """A search record with its parsed metadata and weight."""

    record: SearchRecord
    name: str
    type: str
    score: str
    marked: str
    weight: int


def parse_description(desc: str) -> tuple[str, str]:
    """Extract ``(category phrase, score)`` from a record description.

    Never raises: unparsable descriptions give empty strings.

    Example:
        >>> parse_description("Character, Score: 9.1")
        ('Character', '9.1')
        >>> parse_description("no score here")
        ('', '')
    """
    match = _DESC_PATTERN.match(desc or "")
    if not match:
        return "", ""
    return match.group(1), match.group(2)


def words_pattern(text: str) -> re.Pattern[str] | None:
    """Build a case-insensitive alternation of the words in ``text``.

    Returns None when the text contains no word characters.
    """
    alternation = re.sub(r"\W+", "|", text).strip("|")
    if not alternation:
        return None
    return re.compile(alternation, re.IGNORECASE)


def mark_matches(name: str, pattern: re.Pattern[str] | None) -> str:
    """Bracket every match of ``pattern`` in ``name`` with sentinel markers."""
    if pattern is None:
        return name
    return pattern.sub(lambda m: f"{Markup.MARK_START}{m.group(0)}{Markup.MARK_END}", name)


def _count(pattern: re.Pattern[str], marked: str) -> int:
    return len(pattern.findall(marked)) - 1


def match_weight(marked: str) -> int:
    """Weight contributed by the match positions of a marked name."""
    return (
        SuggestDefaults.START_BONUS * _count(_AT_START, marked)
        + SuggestDefaults.WORD_START_BONUS * _count(_AFTER_SPACE, marked)
        + SuggestDefaults.INNER_MATCH_BONUS * _count(_AFTER_NON_SPACE, marked)
    )


def full_image_url(picurl: str) -> str:
    """Rewrite a thumbnail URL to its full-resolution counterpart.

    Example:
        >>> full_image_url("https://cdn.anidb.net/images/thumbs/50x65/1.jpg-thumb.jpg")
        'https://cdn.anidb.net/images/1.jpg'
    """
    if not picurl:
        return ""
    return _THUMBNAIL_PATTERN.sub(r"https\1\2", picurl)


def _order(items: list[RankedRecord]) -> list[RankedRecord]:
    return sorted(items, key=lambda item: (-item.weight, item.name))


def _dim(text: str) -> str:
    text = text.strip()
    return f"{Markup.DIM_OPEN}{text}{Markup.DIM_CLOSE}" if text else ""


class RankingEngine:
    """Scores, orders and formats the records of one search response.

    Args:
        site_url: Root used to resolve relative record links
    """

    def __init__(self, site_url: str = SiteDefaults.SITE_URL) -> None:
        self.site_url = site_url

    def rank(
        self,
        category: str,
        text: str,
        records: Iterable[SearchRecord],
    ) -> list[RankedRecord]:
        """Score the records and return them best first.

        Ties are broken by ascending, case-sensitive name.
        """
        return _order(self._score_all(category, text, records))

    def _score_all(
        self,
        category: str,
        text: str,
        records: Iterable[SearchRecord],
    ) -> list[RankedRecord]:
        pattern = words_pattern(text)
        return [self._score(category, pattern, record) for record in records]

    def _score(
        self,
        category: str,
        pattern: re.Pattern[str] | None,
        record: SearchRecord,
    ) -> RankedRecord:
        record_type, score = parse_description(record.desc)
        in_category = category == CategoryDefaults.ALL or record_type.lower().startswith(category)

        name = _LINE_BREAKS.sub(" ", record.name).strip()
        marked = mark_matches(name, pattern)
        weight = SuggestDefaults.CATEGORY_BONUS * int(in_category) + match_weight(marked)

        return RankedRecord(
            record=record,
            name=name,
            type=record_type,
            score=score,
            marked=marked,
            weight=weight,
        )

    def format_suggestion(self, item: RankedRecord) -> Suggestion:
        """Format a ranked record as a suggestion."""
        link = item.record.link
        content = link if link.startswith("http") else urljoin(self.site_url, link)

        name = (
            reescape(item.marked)
            .replace(Markup.MARK_START, Markup.MATCH_OPEN)
            .replace(Markup.MARK_END, Markup.MATCH_CLOSE)
        )
        description = (
            _dim(item.score)
            + Markup.SPACE_ENTITY
            + f"{Markup.URL_OPEN}{name}{Markup.URL_CLOSE}"
            + _dim(f", {item.type}" if item.type else "")
        )
        return Suggestion(content=content, description=description)

    def cook(
        self,
        category: str,
        text: str,
        records: Iterable[SearchRecord],
        site_link: str = "",
    ) -> CookedData:
        """Rank and format a search response.

        Args:
            category: Selected category name
            text: Normalized query text
            records: Raw records in response order
            site_link: "Search on site" line the category summary is appended to

        Returns:
            Cooked data without an expiry; the cache sets it on write
        """
        scored = self._score_all(category, text, records)

        category_hits: dict[str, int] = {}
        for item in scored:
            category_hits[item.type] = category_hits.get(item.type, 0) + 1

        summary = f"{site_link} Found in categories: " + ", ".join(
            f"{name} ({count})" for name, count in category_hits.items()
        )

        ranked = _order(scored)

        best = None
        if ranked:
            top = ranked[0]
            best = BestMatch(
                title=top.name,
                text=top.type,
                note=top.score,
                image=full_image_url(top.record.picurl),
            )

        logger.debug(
            "Ranked %d records for %r in %s, best=%r",
            len(ranked),
            text,
            category,
            best.title if best else None,
        )

        return CookedData(
            suggestions=[self.format_suggestion(item) for item in ranked],
            site_link=summary,
            best=best,
        )


__all__ = [
    "RankedRecord",
    "RankingEngine",
    "full_image_url",
    "mark_matches",
    "match_weight",
    "parse_description",
    "words_pattern",
]
