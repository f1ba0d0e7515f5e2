"""Fan speed policy and the (log-only) fan controller."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Dict, Optional

from ..config import AddonConfig, DebugLevel, FanLedMode, FanMode
from ..logger import get_logger

if TYPE_CHECKING:
    from ..runtime.logbuffer import LogBuffer

logger = get_logger(__name__)

FAN_MODE_THRESHOLDS: Dict[FanMode, float] = {
    FanMode.PERFORMANCE: 50.0,
    FanMode.COOL: 60.0,
    FanMode.BALANCED: 67.5,
    FanMode.QUIET: 70.0,
}

# (degrees above the mode threshold, speed percent), highest step first.
FAN_SPEED_STEPS = ((15.0, 100), (10.0, 70), (5.0, 50), (0.0, 30))


class FanState(str, Enum):
    ON = "on"
    OFF = "off"
    UNAVAILABLE = "unavailable"


def compute_fan_speed(cpu_temp: Optional[float], mode: FanMode, fan_accessible: bool) -> Optional[int]:
    """Map the CPU temperature onto a stepped fan speed for ``mode``.

    Returns ``None`` when the fan is not accessible. ``always_on`` runs at 100%
    regardless of temperature; the other modes need a temperature reading.
    """

    if not fan_accessible:
        return None
    mode = FanMode(mode)
    if mode is FanMode.ALWAYS_ON:
        return 100
    if cpu_temp is None:
        return None
    threshold = FAN_MODE_THRESHOLDS[mode]
    for offset, speed in FAN_SPEED_STEPS:
        if cpu_temp >= threshold + offset:
            return speed
    return 0


def fan_state(speed: Optional[int], fan_accessible: bool) -> FanState:
    if not fan_accessible:
        return FanState.UNAVAILABLE
    return FanState.ON if speed else FanState.OFF


def fan_led_state(led_mode: FanLedMode, state: FanState) -> FanState:
    """The fan LED is pinned on/off or mirrors the fan in ``follow`` mode."""

    led_mode = FanLedMode(led_mode)
    if led_mode is FanLedMode.ON:
        return FanState.ON
    if led_mode is FanLedMode.OFF:
        return FanState.OFF
    return state


class FanController:
    """Applies fan mode changes. Hardware writes are recorded, not transmitted."""

    def __init__(self, accessible: bool, log_buffer: LogBuffer) -> None:
        self.accessible = accessible
        self._log = log_buffer

    def on_config_change(self, previous: AddonConfig, current: AddonConfig) -> None:
        if previous.fan_mode != current.fan_mode:
            self.set_mode(current.fan_mode)

    def set_mode(self, mode: FanMode) -> None:
        mode = FanMode(mode)
        if not self.accessible:
            self._log.append(DebugLevel.WARNING, "Cannot set fan mode: hardware not accessible", "fan")
            return
        if mode is FanMode.ALWAYS_ON:
            self._log.append(DebugLevel.INFO, f"Fan mode set to {mode.value} (always on)", "fan")
            return
        threshold = FAN_MODE_THRESHOLDS[mode]
        self._log.append(DebugLevel.INFO, f"Fan mode set to {mode.value} (trigger: {threshold:g}C)", "fan")
        logger.debug("Fan trigger threshold now %.1f°C", threshold)
