"""Compose live samples and the fan policy into one status snapshot."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from ..hardware.fan import FanState, compute_fan_speed, fan_led_state, fan_state
from ..hardware.sensors import SystemSampler
from ..logger import get_logger
from .store import ConfigurationStore

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class StatusSnapshot:
    """Freshly sampled state of the board. Unavailable metrics are ``None``."""

    cpu_temperature: Optional[float]
    gpu_temperature: Optional[float]
    cpu_percent: Optional[int]
    cpu_frequency: Optional[float]
    memory_total: Optional[int]
    memory_used: Optional[int]
    memory_percent: Optional[int]
    disk_total: Optional[int]
    disk_used: Optional[int]
    disk_percent: Optional[int]
    network_upload: Optional[int]
    network_download: Optional[int]
    fan_speed: Optional[int]
    fan_state: FanState
    fan_led_state: FanState
    uptime: int
    timestamp: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cpuTemperature": self.cpu_temperature,
            "gpuTemperature": self.gpu_temperature,
            "cpuPercent": self.cpu_percent,
            "cpuFrequency": self.cpu_frequency,
            "memoryTotal": self.memory_total,
            "memoryUsed": self.memory_used,
            "memoryPercent": self.memory_percent,
            "diskTotal": self.disk_total,
            "diskUsed": self.disk_used,
            "diskPercent": self.disk_percent,
            "networkUpload": self.network_upload,
            "networkDownload": self.network_download,
            "fanSpeed": self.fan_speed,
            "fanState": self.fan_state.value,
            "fanLedState": self.fan_led_state.value,
            "uptime": self.uptime,
            "timestamp": self.timestamp,
        }


class StatusAggregator:
    """Re-samples every reader on each call; nothing is cached."""

    def __init__(
        self,
        sampler: SystemSampler,
        store: ConfigurationStore,
        monotonic: Callable[[], float] = time.monotonic,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._sampler = sampler
        self._store = store
        self._monotonic = monotonic
        self._clock = clock
        self._started = monotonic()

    def get_status(self) -> StatusSnapshot:
        config = self._store.get()
        fan_accessible = self._sampler.accessibility.fan

        cpu_temperature = self._sampler.read_cpu_temperature()
        memory = self._sampler.read_memory()
        disk = self._sampler.read_disk()
        upload, download = self._sampler.read_network()
        speed = compute_fan_speed(cpu_temperature, config.fan_mode, fan_accessible)
        state = fan_state(speed, fan_accessible)

        snapshot = StatusSnapshot(
            cpu_temperature=cpu_temperature,
            gpu_temperature=self._sampler.read_gpu_temperature(),
            cpu_percent=self._sampler.read_cpu_percent(),
            cpu_frequency=self._sampler.read_cpu_frequency(),
            memory_total=memory.total if memory else None,
            memory_used=memory.used if memory else None,
            memory_percent=memory.percent if memory else None,
            disk_total=disk.total if disk else None,
            disk_used=disk.used if disk else None,
            disk_percent=disk.percent if disk else None,
            network_upload=upload,
            network_download=download,
            fan_speed=speed,
            fan_state=state,
            fan_led_state=fan_led_state(config.fan_led_mode, state),
            uptime=int(self._monotonic() - self._started),
            timestamp=int(self._clock() * 1000),
        )
        logger.debug("Status snapshot: cpu=%s°C fan=%s%%", cpu_temperature, speed)
        return snapshot
