"""Suggestion engine configuration model."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from anisuggest.shared.constants import CategoryDefaults, SuggestDefaults


class SuggestSettings(BaseModel):
    """Suggestion engine configuration.

    ``categories`` is the category registry: a closed mapping of
    one-letter selectors to category names. The empty selector names the
    default category and must always be present.
    """

    request_delay: float = Field(
        default=SuggestDefaults.REQUEST_DELAY,
        ge=0,
        description="Seconds the input must settle before a fetch is issued",
    )
    force_marker: str = Field(
        default=SuggestDefaults.FORCE_MARKER,
        min_length=1,
        max_length=1,
        description="Trailing character that bypasses the cache",
    )
    categories: dict[str, str] = Field(
        default_factory=lambda: dict(CategoryDefaults.REGISTRY),
        description="Category selector letter -> category name",
    )

    @field_validator("categories")
    @classmethod
    def _validate_registry(cls, value: dict[str, str]) -> dict[str, str]:
        if "" not in value:
            msg = "categories must map the empty selector to a default category"
            raise ValueError(msg)
        for letter in value:
            if len(letter) > 1 or (letter and not letter.isalpha()):
                msg = f"category selector must be a single letter, got {letter!r}"
                raise ValueError(msg)
        return {letter.lower(): name for letter, name in value.items()}


__all__ = [
    "SuggestSettings",
]
