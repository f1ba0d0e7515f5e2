"""Hardware access for the Pironman5 Lite addon."""

from ..logger import get_logger
from .base import HardwareAccessibility, HardwareClass
from .fan import FAN_MODE_THRESHOLDS, FanController, FanState, compute_fan_speed, fan_led_state, fan_state
from .oled import OledDisplay
from .probe import HardwareProbe
from .rgb_led import RGBLedStrip
from .sensors import NetworkRateTracker, SystemSampler, UsageReading

get_logger(__name__).debug("Hardware package loaded")

__all__ = [
    "HardwareAccessibility",
    "HardwareClass",
    "HardwareProbe",
    "SystemSampler",
    "UsageReading",
    "NetworkRateTracker",
    "FAN_MODE_THRESHOLDS",
    "FanController",
    "FanState",
    "compute_fan_speed",
    "fan_state",
    "fan_led_state",
    "RGBLedStrip",
    "OledDisplay",
]
