"""Single validated home for the user configuration."""

from __future__ import annotations

import threading
from typing import Any, Callable, List, Mapping, Optional

from ..config import AddonConfig, ConfigValidationError, DebugLevel, default_config, validate_config
from ..logger import get_logger
from .logbuffer import LogBuffer

logger = get_logger(__name__)

ConfigListener = Callable[[AddonConfig, AddonConfig], None]


class ConfigurationStore:
    """Holds the current :class:`AddonConfig` and serialises every change.

    Updates merge a partial camelCase mapping onto the current value, validate
    the merged whole and commit only when it is valid. Listeners receive
    ``(previous, current)`` after each commit.
    """

    def __init__(self, log_buffer: LogBuffer, initial: Optional[AddonConfig] = None) -> None:
        self._log = log_buffer
        self._config = initial if initial is not None else default_config()
        self._lock = threading.RLock()
        self._listeners: List[ConfigListener] = []

    def subscribe(self, listener: ConfigListener) -> None:
        with self._lock:
            self._listeners.append(listener)

    def get(self) -> AddonConfig:
        """Return the current configuration. The model is immutable, so callers cannot alter the store."""

        with self._lock:
            return self._config

    def update(self, changes: Mapping[str, Any]) -> AddonConfig:
        """Merge ``changes`` and commit, or raise ``ConfigValidationError`` leaving the store unchanged."""

        if not isinstance(changes, Mapping):
            raise ConfigValidationError([{"field": "__root__", "message": "Configuration update must be an object"}])
        with self._lock:
            previous = self._config
            merged = {**previous.model_dump(by_alias=True), **changes}
            try:
                updated = validate_config(merged)
            except ConfigValidationError as exc:
                logger.warning("Rejected configuration update %s: %s", dict(changes), exc.errors)
                raise
            self._config = updated
            self._notify(previous, updated)
            self._log.append(DebugLevel.INFO, "Configuration updated", "config")
            return updated

    def reset(self) -> AddonConfig:
        """Replace the configuration with the documented defaults."""

        with self._lock:
            previous = self._config
            self._config = default_config()
            self._notify(previous, self._config)
            self._log.append(DebugLevel.INFO, "Configuration reset to defaults", "config")
            return self._config

    def _notify(self, previous: AddonConfig, current: AddonConfig) -> None:
        for listener in self._listeners:
            try:
                listener(previous, current)
            except Exception as exc:
                logger.exception("Configuration listener %r failed", listener)
                self._log.append(DebugLevel.ERROR, f"Failed to apply configuration change: {exc}", "config")
