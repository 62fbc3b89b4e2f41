"""Remote site configuration models.

This module contains configuration models for the AniDB search endpoint.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from anisuggest.shared.constants import HTTPHeaders, SiteDefaults


class SiteSettings(BaseModel):
    """AniDB endpoint configuration.

    ``api_url`` contains a ``%t`` placeholder replaced with the category
    name; the url-encoded query text is appended to it.
    """

    site_url: str = Field(default=SiteDefaults.SITE_URL, description="Site root URL")
    api_url: str = Field(
        default=SiteDefaults.API_URL,
        description="JSON search endpoint template (%t = category)",
    )
    search_url: str = Field(
        default=SiteDefaults.SEARCH_URL,
        description="Human-facing site search URL prefix",
    )
    request_headers: dict[str, str] = Field(
        default_factory=lambda: {
            HTTPHeaders.CACHE_CONTROL_NAME: HTTPHeaders.CACHE_CONTROL_NO_CACHE,
        },
        description="Headers sent with every search request",
    )
    timeout: float = Field(
        default=SiteDefaults.TIMEOUT,
        gt=0,
        description="Request timeout in seconds",
    )
    rate_limit_requests: int = Field(
        default=SiteDefaults.RATE_LIMIT_REQUESTS,
        gt=0,
        description="Maximum search requests per rate limit window",
    )
    rate_limit_window: float = Field(
        default=SiteDefaults.RATE_LIMIT_WINDOW,
        gt=0,
        description="Rate limit window in seconds",
    )

    @field_validator("site_url")
    @classmethod
    def _ensure_trailing_slash(cls, value: str) -> str:
        return value if value.endswith("/") else value + "/"

    @field_validator("api_url")
    @classmethod
    def _require_category_placeholder(cls, value: str) -> str:
        if SiteDefaults.CATEGORY_PLACEHOLDER not in value:
            msg = f"api_url must contain the {SiteDefaults.CATEGORY_PLACEHOLDER!r} placeholder"
            raise ValueError(msg)
        return value


class APISettings(BaseModel):
    """API configuration container."""

    site: SiteSettings = Field(
        default_factory=SiteSettings,
        description="AniDB endpoint configuration",
    )


__all__ = [
    "APISettings",
    "SiteSettings",
]
