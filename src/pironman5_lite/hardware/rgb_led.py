"""Helpers for the RGB LED strip driven over SPI."""

from __future__ import annotations

from typing import TYPE_CHECKING, Tuple

from ..config import RGB_FIELDS, AddonConfig, DebugLevel
from ..logger import get_logger

if TYPE_CHECKING:
    from ..runtime.logbuffer import LogBuffer

logger = get_logger(__name__)


def scaled_color(color: str, brightness: int) -> Tuple[int, int, int]:
    """Convert ``#RRGGBB`` into channel values dimmed to ``brightness`` percent."""

    raw = color.lstrip("#")
    red, green, blue = (int(raw[index : index + 2], 16) for index in (0, 2, 4))
    factor = max(0, min(100, brightness)) / 100.0
    return round(red * factor), round(green * factor), round(blue * factor)


class RGBLedStrip:
    """Records the state the LED strip should show.

    Frames are logged rather than written to the SPI device, so a real driver
    can replace :meth:`apply` without touching the configuration contract.
    """

    def __init__(self, accessible: bool, log_buffer: LogBuffer) -> None:
        self.accessible = accessible
        self._log = log_buffer

    def on_config_change(self, previous: AddonConfig, current: AddonConfig) -> None:
        if any(getattr(previous, name) != getattr(current, name) for name in RGB_FIELDS):
            self.apply(current)

    def apply(self, config: AddonConfig) -> None:
        if not config.rgb_enabled:
            self._log.append(DebugLevel.INFO, "RGB LEDs disabled", "rgb")
            return
        if not self.accessible:
            self._log.append(DebugLevel.WARNING, "Cannot update RGB: SPI device not accessible", "rgb")
            return
        red, green, blue = scaled_color(config.rgb_color, config.rgb_brightness)
        logger.debug(
            "RGB frame (leds=%d R=%d G=%d B=%d speed=%d)",
            config.rgb_led_count,
            red,
            green,
            blue,
            config.rgb_speed,
        )
        self._log.append(
            DebugLevel.INFO,
            f"RGB LEDs updated: color={config.rgb_color}, brightness={config.rgb_brightness}%, "
            f"style={config.rgb_style.value}",
            "rgb",
        )


__all__ = ["RGBLedStrip", "scaled_color"]
