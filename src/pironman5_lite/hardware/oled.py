"""State tracking for the I2C OLED status display."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..config import OLED_FIELDS, AddonConfig, DebugLevel
from ..logger import get_logger

if TYPE_CHECKING:
    from ..runtime.logbuffer import LogBuffer

logger = get_logger(__name__)


class OledDisplay:
    """Log-only stand-in for the OLED driver."""

    def __init__(self, accessible: bool, log_buffer: LogBuffer) -> None:
        self.accessible = accessible
        self._log = log_buffer

    def on_config_change(self, previous: AddonConfig, current: AddonConfig) -> None:
        if any(getattr(previous, name) != getattr(current, name) for name in OLED_FIELDS):
            logger.debug("OLED settings changed; re-applying display state")
            self.apply(current)

    def apply(self, config: AddonConfig) -> None:
        if not config.oled_enabled:
            self._log.append(DebugLevel.INFO, "OLED display disabled", "oled")
            return
        if not self.accessible:
            self._log.append(DebugLevel.WARNING, "Cannot update OLED: I2C device not accessible", "oled")
            return
        sleep = f"after {config.oled_sleep_timeout}s" if config.oled_sleep_enabled else "never"
        self._log.append(
            DebugLevel.INFO,
            f"OLED display updated: rotation={config.oled_rotation}, sleep={sleep}",
            "oled",
        )
