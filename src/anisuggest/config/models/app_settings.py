"""Application and logging configuration models.

This module contains configuration models for application-level
settings and logging configuration.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from anisuggest.shared.constants import CLIDefaults, CLIHelp, LoggingDefaults


class AppSettings(BaseModel):
    """Application configuration."""

    name: str = Field(default=CLIHelp.APP_NAME, description="Application name")
    version: str = Field(default=CLIDefaults.VERSION, description="Application version")
    debug: bool = Field(default=False, description="Enable debug mode")


class LoggingSettings(BaseModel):
    """Logging configuration.

    The console level comes from the command line; ``level`` applies to
    the rotating log file, which is only written when ``file`` is set.
    """

    level: str = Field(default=LoggingDefaults.LEVEL, description="Log file level")
    file: str | None = Field(default=None, description="Optional log file path")
    max_bytes: int = Field(
        default=LoggingDefaults.MAX_BYTES,
        description="Maximum log file size in bytes",
    )
    backup_count: int = Field(
        default=LoggingDefaults.BACKUP_COUNT,
        description="Number of backup log files to keep",
    )
    console_output: bool = Field(default=True, description="Enable console logging")
    use_rich: bool = Field(default=True, description="Render console logs with rich")


__all__ = [
    "AppSettings",
    "LoggingSettings",
]
