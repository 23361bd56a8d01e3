"""Logging from config and env.

Levels (inclusive):
- ERROR: failed environment updates only
- WARNING: transient lookup failures and ERROR
- INFO: startup line, environment name transitions, WARNING, and ERROR
- DEBUG: every poll and all levels above

Configure via config.yaml (logging.level, logging.format, logging.datefmt)
or env (LOGGING_LEVEL, LOGGING_FORMAT, LOGGING_DATEFMT).
"""

import logging

from prstatus.config import LoggingConfig

# Supported levels only (DEBUG, INFO, WARNING, ERROR)
LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}

DEFAULT_FORMAT = "%(asctime)s %(message)s"
DEFAULT_DATEFMT = "%H:%M:%S"


def _resolve_level(level: str) -> int:
    """Map level name to logging constant.

    Falls back to INFO if unknown.
    """
    return LEVELS.get(level.upper().strip(), logging.INFO)


class PrStatusLogging:
    """Configures root logger from LoggingConfig (YAML + env LOGGING_*)."""

    def __init__(self, config: LoggingConfig) -> None:
        """Store logging config (level, format and date format)."""
        self._level = _resolve_level(config.level)
        self._format = config.format or DEFAULT_FORMAT
        self._datefmt = config.datefmt or DEFAULT_DATEFMT

    def setup(self) -> None:
        """Apply level and format to the root logger (stderr handler)."""
        logging.basicConfig(
            level=self._level,
            format=self._format,
            datefmt=self._datefmt,
            force=True,
        )

    def get_logger(self, name: str) -> logging.Logger:
        """Return a logger with the given name (uses root config)."""
        return logging.getLogger(name)
