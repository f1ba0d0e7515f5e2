"""One-shot detection of the sensors and actuators exposed by the OS."""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Dict, Optional, Tuple

from ..config import AppSettings, DebugLevel
from ..logger import get_logger
from .base import HardwareAccessibility, HardwareClass

if TYPE_CHECKING:
    from ..runtime.logbuffer import LogBuffer

logger = get_logger(__name__)

# (accessible, description) for a single hardware class.
ProbeOutcome = Tuple[bool, str]


class HardwareProbe:
    """Check for the presence of each OS resource without reading a value.

    Every outcome is written to the log buffer: INFO when the resource exists,
    WARNING when it does not or when the check itself fails. A failing check
    only affects its own class.
    """

    def __init__(self, settings: AppSettings, log_buffer: LogBuffer) -> None:
        self._settings = settings
        self._log = log_buffer

    def probe_all(self, fan_gpio_pin: int) -> HardwareAccessibility:
        checks: Dict[HardwareClass, Tuple[str, Callable[[], ProbeOutcome]]] = {
            HardwareClass.CPU_TEMP: ("temperature", self._check_cpu_temperature),
            HardwareClass.GPU_TEMP: ("temperature", self._check_gpu_temperature),
            HardwareClass.CPU_FREQ: ("cpu", self._check_cpu_frequency),
            HardwareClass.NETWORK: ("network", self._check_network),
            HardwareClass.FAN: ("fan", lambda: self._check_fan(fan_gpio_pin)),
            HardwareClass.RGB: ("rgb", self._check_rgb),
            HardwareClass.OLED: ("oled", self._check_oled),
        }
        flags: Dict[str, bool] = {}
        for hardware, (source, check) in checks.items():
            try:
                accessible, description = check()
            except Exception as exc:
                accessible, description = False, f"{hardware.value} access check failed: {exc}"
            level = DebugLevel.INFO if accessible else DebugLevel.WARNING
            self._log.append(level, description, source)
            flags[hardware.value] = accessible
        accessibility = HardwareAccessibility(**flags)
        logger.info("Hardware probe completed: %s", accessibility.to_dict())
        return accessibility

    def _check_cpu_temperature(self) -> ProbeOutcome:
        path = self._settings.thermal_zone_path
        if path.exists():
            return True, f"CPU temperature sensor accessible at {path}"
        return False, f"CPU temperature sensor not found at {path} - reporting unavailable"

    def _check_gpu_temperature(self) -> ProbeOutcome:
        command = self._settings.vcgencmd
        resolved = shutil.which(command)
        if resolved:
            return True, f"GPU temperature available via {resolved}"
        return False, f"{command} not found - GPU temperature unavailable"

    def _check_cpu_frequency(self) -> ProbeOutcome:
        path = self._settings.cpu_freq_path
        if path.exists():
            return True, f"CPU frequency accessible at {path}"
        return False, f"CPU frequency not found at {path} - reporting unavailable"

    def _check_network(self) -> ProbeOutcome:
        interface = find_network_interface(self._settings.net_class_path, self._settings.network_interfaces)
        if interface is not None:
            return True, f"Network counters accessible for {interface}"
        interfaces = ", ".join(self._settings.network_interfaces)
        return False, f"No network counters found for {interfaces} - throughput unavailable"

    def _check_fan(self, fan_gpio_pin: int) -> ProbeOutcome:
        cooling_path = self._settings.cooling_device_path
        gpio_path = self._settings.gpio_class_path / f"gpio{fan_gpio_pin}"
        if cooling_path.exists():
            return True, f"Fan control accessible via {cooling_path}"
        if gpio_path.exists():
            return True, f"Fan GPIO {fan_gpio_pin} accessible"
        return False, f"Fan hardware not detected (GPIO {fan_gpio_pin}) - fan speed unavailable"

    def _check_rgb(self) -> ProbeOutcome:
        path = self._settings.spi_device_path
        if path.exists():
            return True, f"RGB LED SPI device accessible at {path}"
        return False, f"RGB LED SPI device not found at {path} - LED updates will be logged only"

    def _check_oled(self) -> ProbeOutcome:
        path = self._settings.i2c_device_path
        if path.exists():
            return True, f"OLED I2C device accessible at {path}"
        return False, f"OLED I2C device not found at {path} - display disabled"


def find_network_interface(net_class_path: Path, interfaces) -> Optional[str]:
    """Return the first preferred interface exposing byte counters."""

    for interface in interfaces:
        statistics = net_class_path / interface / "statistics"
        if (statistics / "rx_bytes").exists() and (statistics / "tx_bytes").exists():
            return interface
    return None
