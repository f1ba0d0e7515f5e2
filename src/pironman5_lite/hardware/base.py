"""Shared types describing which hardware the addon can reach."""

from __future__ import annotations

from dataclasses import dataclass, fields
from enum import Enum
from typing import Dict


class HardwareClass(str, Enum):
    """Sensor and actuator classes probed at start-up."""

    CPU_TEMP = "cpu_temp"
    GPU_TEMP = "gpu_temp"
    CPU_FREQ = "cpu_freq"
    NETWORK = "network"
    FAN = "fan"
    RGB = "rgb"
    OLED = "oled"


@dataclass(frozen=True, slots=True)
class HardwareAccessibility:
    """One flag per hardware class, fixed for the lifetime of the process."""

    cpu_temp: bool = False
    gpu_temp: bool = False
    cpu_freq: bool = False
    network: bool = False
    fan: bool = False
    rgb: bool = False
    oled: bool = False

    def is_accessible(self, hardware: HardwareClass) -> bool:
        return bool(getattr(self, HardwareClass(hardware).value))

    def to_dict(self) -> Dict[str, bool]:
        """Return a JSON-serialisable representation with camelCase keys."""

        payload = {}
        for item in fields(self):
            head, *rest = item.name.split("_")
            payload[head + "".join(part.title() for part in rest)] = getattr(self, item.name)
        return payload
