"""Locating, loading and caching the AniSuggest settings.

Lookup order: an explicit TOML path, then ``config/config.toml``,
``config.toml`` and ``~/.anisuggest/config.toml``, then the environment
alone. A ``.env`` file in the working directory is read first and never
overrides variables that are already set.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path

from dotenv import load_dotenv
from pydantic import ValidationError

from anisuggest.config.models.settings import Settings
from anisuggest.shared.constants import CacheDefaults
from anisuggest.shared.errors import ErrorCode, create_config_error

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATHS: tuple[Path, ...] = (
    Path("config/config.toml"),
    Path("config.toml"),
    Path.home() / CacheDefaults.HOME_DIR / "config.toml",
)


class SettingsLoader:
    """Holds the process-wide Settings, loading them on first use."""

    _instance: Settings | None = None
    _lock: threading.RLock = threading.RLock()

    def get_config(self) -> Settings:
        settings = self._instance
        if settings is not None:
            return settings
        with self._lock:
            if self._instance is None:
                self._instance = load_settings()
            return self._instance

    def reload_config(self) -> Settings:
        with self._lock:
            self._instance = load_settings()
            return self._instance

    def set_config(self, settings: Settings | None) -> None:
        with self._lock:
            self._instance = settings


def _find_config_file(config_path: str | Path | None) -> Path | None:
    if config_path:
        return Path(config_path)
    return next((path for path in DEFAULT_CONFIG_PATHS if path.exists()), None)


def load_settings(config_path: str | Path | None = None) -> Settings:
    """Build a Settings instance.

    Args:
        config_path: TOML file to read; searched for when omitted.

    Raises:
        ApplicationError: ``CONFIG_MISSING`` when an explicit file does not
            exist, ``CONFIGURATION_ERROR`` when a value fails validation or
            the TOML cannot be parsed.
    """
    env_file = Path(".env")
    if env_file.exists():
        load_dotenv(env_file, override=False)
        logger.debug("Loaded environment from %s", env_file)

    source = _find_config_file(config_path)
    try:
        if source is None:
            return Settings()
        logger.debug("Loading settings from %s", source)
        return Settings.from_toml_file(source)
    except FileNotFoundError as e:
        raise create_config_error(
            str(e),
            config_key=str(source),
            operation="load_settings",
            original_error=e,
            code=ErrorCode.CONFIG_MISSING,
        ) from e
    except (ValidationError, ValueError) as e:
        raise create_config_error(
            f"Invalid configuration: {e}",
            config_key=str(source) if source else "<env>",
            operation="load_settings",
            original_error=e,
            code=ErrorCode.CONFIGURATION_ERROR,
        ) from e


_loader = SettingsLoader()


def get_config() -> Settings:
    """Return the global settings, loading them on the first call."""
    return _loader.get_config()


def reload_config() -> Settings:
    """Discard the global settings and load them again."""
    return _loader.reload_config()


def set_config(settings: Settings | None) -> None:
    """Install ``settings`` as the global instance; ``None`` forces a reload on next use."""
    _loader.set_config(settings)


__all__ = [
    "SettingsLoader",
    "get_config",
    "load_settings",
    "reload_config",
    "set_config",
]
