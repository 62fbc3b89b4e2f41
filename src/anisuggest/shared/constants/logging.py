"""
Logging Constants
"""


class LoggingDefaults:
    """Logging configuration defaults."""

    LEVEL = "INFO"
    MAX_BYTES = 10 * 1024 * 1024  # 10MB
    BACKUP_COUNT = 5
