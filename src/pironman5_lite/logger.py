"""Centralised logging utilities for Pironman5 Lite."""

from __future__ import annotations

import logging
from typing import Optional

from .config import AppSettings, DebugLevel, get_settings

LOGGER_NAME = "pironman5_lite"
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

DEBUG_LEVELS = {
    DebugLevel.DEBUG: logging.DEBUG,
    DebugLevel.INFO: logging.INFO,
    DebugLevel.WARNING: logging.WARNING,
    DebugLevel.ERROR: logging.ERROR,
}


class _LevelToggleFilter(logging.Filter):
    """Filter log records based on AppSettings level toggles and the addon debug level."""

    def __init__(self, settings: AppSettings) -> None:
        super().__init__()
        self._settings = settings
        self._minimum = logging.DEBUG

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: D401
        if record.levelno < self._minimum:
            return False
        if record.levelno >= logging.ERROR:
            return self._settings.log_error_enabled
        if record.levelno >= logging.WARNING:
            return self._settings.log_warning_enabled
        if record.levelno >= logging.INFO:
            return self._settings.log_info_enabled
        return self._settings.log_debug_enabled

    def update(self, settings: AppSettings) -> None:
        self._settings = settings

    def set_minimum(self, level: int) -> None:
        self._minimum = level


_configured = False
_filter: Optional[_LevelToggleFilter] = None


def configure_logging(settings: Optional[AppSettings] = None, *, force: bool = False) -> None:
    """Configure the shared Pironman5 Lite logger."""

    global _configured, _filter
    settings = settings or get_settings()
    logger = logging.getLogger(LOGGER_NAME)

    if _configured and not force:
        if _filter:
            _filter.update(settings)
        return

    logger.setLevel(logging.DEBUG)
    logger.handlers.clear()

    handler = logging.StreamHandler()
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT))

    _filter = _LevelToggleFilter(settings)
    handler.addFilter(_filter)

    logger.addHandler(handler)
    logger.propagate = False
    logging.captureWarnings(True)

    _configured = True


def apply_debug_level(level: DebugLevel) -> None:
    """Suppress console records below the addon's configured debug level."""

    configure_logging()
    if _filter is not None:
        _filter.set_minimum(DEBUG_LEVELS[DebugLevel(level)])


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a logger scoped under the Pironman5 Lite namespace."""

    configure_logging()
    if not name or name == LOGGER_NAME:
        return logging.getLogger(LOGGER_NAME)
    if name.startswith(f"{LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{LOGGER_NAME}.{name}")
