"""Suggestion engine data models.

This module defines Pydantic models for the remote search response and for
the cooked data stored in the suggestion cache.

``SearchRecord`` sits at the external API boundary: the endpoint returns
loosely structured text, so every field is coerced to a string and unknown
fields are ignored instead of failing validation.
"""

from __future__ import annotations

from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SearchRecord(BaseModel):
    """Single raw result from the remote search endpoint.

    Attributes:
        name: Display name
        desc: Free text, usually ``"<category>, [Score: ]<number>..."``
        link: Detail link, absolute or relative to the site root
        picurl: Thumbnail image URL (possibly wrapped in markup)

    Example:
        >>> record = SearchRecord(name="Onizuka", desc="Character, Score: 9.1")
        >>> record.link
        ''
    """

    model_config = ConfigDict(extra="ignore")

    name: str = Field("", description="Display name")
    desc: str = Field("", description="Category phrase and score")
    link: str = Field("", description="Detail link")
    picurl: str = Field("", description="Thumbnail URL")

    @field_validator("name", "desc", "link", "picurl", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        if value is None or isinstance(value, (dict, list)):
            return ""
        if isinstance(value, str):
            return value
        return str(value)


class Suggestion(BaseModel):
    """One suggestion shown by the input surface."""

    content: str = Field(..., description="URL opened when the suggestion is picked")
    description: str = Field(..., description="Description markup")


class BestMatch(BaseModel):
    """Top-ranked record, kept for supplementary presentation.

    Attributes:
        title: Record name
        text: Parsed category phrase
        note: Parsed score
        image: Full-resolution image URL
    """

    title: str
    text: str = ""
    note: str = ""
    image: str = ""


class CookedData(BaseModel):
    """Ranked and formatted result of one remote search.

    This is the *result record* stored in the cache; ``expires`` is set
    (epoch seconds) when the record is written.
    """

    model_config = ConfigDict(populate_by_name=True)

    suggestions: list[Suggestion] = Field(default_factory=list)
    site_link: str = Field("", alias="siteLink")
    best: BestMatch | None = None
    expires: float | None = None

    def is_expired(self, now: float) -> bool:
        return self.expires is None or self.expires <= now


# A stored cache value: a result record, or an alias naming another key
CacheValue = Union[CookedData, str]


__all__ = [
    "BestMatch",
    "CacheValue",
    "CookedData",
    "SearchRecord",
    "Suggestion",
]
