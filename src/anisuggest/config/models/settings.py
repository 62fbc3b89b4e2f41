"""Top-level settings model grouping every configuration section."""

from __future__ import annotations

import logging
from pathlib import Path

import toml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from anisuggest.config.models.api_settings import APISettings
from anisuggest.config.models.app_settings import AppSettings, LoggingSettings
from anisuggest.config.models.cache_settings import CacheSettings
from anisuggest.config.models.suggest_settings import SuggestSettings

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """All AniSuggest settings.

    Environment variables override the defaults, with ``__`` between the
    section and the field, e.g. ``ANISUGGEST_CACHE__BACKEND=memory``.
    """

    model_config = SettingsConfigDict(
        env_prefix="ANISUGGEST_",
        env_nested_delimiter="__",
        env_ignore_empty=True,
        extra="ignore",
    )

    app: AppSettings = Field(default_factory=AppSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    api: APISettings = Field(default_factory=APISettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    suggest: SuggestSettings = Field(default_factory=SuggestSettings)

    @classmethod
    def from_toml_file(cls, file_path: str | Path) -> Settings:
        """Read a TOML file; sections and fields it omits come from the environment."""
        path = Path(file_path)
        if not path.is_file():
            msg = f"Configuration file not found: {path}"
            raise FileNotFoundError(msg)

        sections = toml.loads(path.read_text(encoding="utf-8"))
        logger.debug("Read %d configuration sections from %s", len(sections), path)
        return cls(**sections)

    def to_toml_file(self, file_path: str | Path) -> None:
        """Write the settings as TOML, creating parent directories."""
        path = Path(file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            toml.dumps(self.model_dump(exclude_none=True, by_alias=True)),
            encoding="utf-8",
        )
