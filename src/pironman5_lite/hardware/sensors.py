"""Live readers for Raspberry Pi telemetry.

Each reader returns ``None`` (or an all-``None`` group) when its source is not
accessible or the read fails, never a placeholder value.
"""

from __future__ import annotations

import re
import shutil
import subprocess
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Optional, Tuple

from ..config import AppSettings
from ..logger import get_logger
from .base import HardwareAccessibility
from .probe import find_network_interface

logger = get_logger(__name__)

_VCGENCMD_TEMP = re.compile(r"temp=(\d+\.?\d*)")


@dataclass(frozen=True, slots=True)
class UsageReading:
    """Total/used bytes with the derived percentage, always read together."""

    total: int
    used: int
    percent: int


@dataclass(slots=True)
class NetworkCounterState:
    rx_bytes: int
    tx_bytes: int
    timestamp: float


class NetworkRateTracker:
    """Turn cumulative byte counters into bytes-per-second rates.

    Reading the previous observation, computing the rate and storing the new
    observation form one critical section. The first observation and counter
    resets both yield 0.
    """

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._state: Optional[NetworkCounterState] = None
        self._lock = threading.Lock()
        self._clock = clock

    def update(self, rx_bytes: int, tx_bytes: int, now: float) -> Tuple[int, int]:
        """Record new counters and return ``(upload, download)`` in bytes/s."""

        with self._lock:
            return self._advance(rx_bytes, tx_bytes, now)

    def sample(self, read_counters: Callable[[], Tuple[int, int]]) -> Tuple[int, int]:
        """Read ``(rx, tx)`` and the clock while holding the lock, then fold them in.

        Errors raised by ``read_counters`` propagate and leave the state untouched.
        """

        with self._lock:
            rx_bytes, tx_bytes = read_counters()
            return self._advance(rx_bytes, tx_bytes, self._clock())

    def _advance(self, rx_bytes: int, tx_bytes: int, now: float) -> Tuple[int, int]:
        previous = self._state
        self._state = NetworkCounterState(rx_bytes=rx_bytes, tx_bytes=tx_bytes, timestamp=now)
        if previous is None:
            return 0, 0
        elapsed = now - previous.timestamp
        if elapsed <= 0:
            return 0, 0
        upload = round((tx_bytes - previous.tx_bytes) / elapsed)
        download = round((rx_bytes - previous.rx_bytes) / elapsed)
        return max(0, upload), max(0, download)


def _read_text(path: Path) -> str:
    return path.read_text(encoding="utf-8").strip()


def read_cpu_ticks(proc_stat_path: Path) -> Optional[Tuple[int, int]]:
    """Return ``(idle, total)`` ticks aggregated across all CPUs from ``/proc/stat``."""

    try:
        with open(proc_stat_path, "r", encoding="utf-8") as handle:
            for line in handle:
                if line.startswith("cpu "):
                    # user nice system idle iowait irq softirq steal; guest time is already in user/nice
                    values = [int(value) for value in line.split()[1:9]]
                    if len(values) < 4:
                        return None
                    return values[3], sum(values)
    except (OSError, ValueError) as exc:
        logger.debug("Unable to read CPU ticks from %s: %s", proc_stat_path, exc)
    return None


def read_meminfo(meminfo_path: Path) -> Dict[str, int]:
    """Parse ``/proc/meminfo`` into byte counts."""

    meminfo: Dict[str, int] = {}
    with open(meminfo_path, "r", encoding="utf-8") as handle:
        for line in handle:
            key, _, rest = line.partition(":")
            tokens = rest.split()
            if not tokens:
                continue
            try:
                meminfo[key.strip()] = int(tokens[0]) * 1024  # values are in kB
            except ValueError:
                continue
    return meminfo


class SystemSampler:
    """Stateless readers for every metric class, gated by probe results."""

    def __init__(
        self,
        settings: AppSettings,
        accessibility: HardwareAccessibility,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._settings = settings
        self._accessibility = accessibility
        self._clock = clock
        self._network = NetworkRateTracker(clock)

    @property
    def accessibility(self) -> HardwareAccessibility:
        return self._accessibility

    def read_cpu_temperature(self) -> Optional[float]:
        """CPU temperature in °C from the thermal zone (millidegrees)."""

        if not self._accessibility.cpu_temp:
            return None
        try:
            return float(_read_text(self._settings.thermal_zone_path)) / 1000.0
        except (OSError, ValueError) as exc:
            logger.debug("CPU temperature read failed: %s", exc)
            return None

    def read_gpu_temperature(self) -> Optional[float]:
        """GPU temperature in °C parsed from ``vcgencmd measure_temp``."""

        if not self._accessibility.gpu_temp:
            return None
        try:
            result = subprocess.run(
                [self._settings.vcgencmd, "measure_temp"],
                capture_output=True,
                text=True,
                timeout=self._settings.gpu_command_timeout_seconds,
                check=True,
            )
        except (OSError, subprocess.SubprocessError) as exc:
            logger.debug("GPU temperature command failed: %s", exc)
            return None
        match = _VCGENCMD_TEMP.search(result.stdout)
        if not match:
            logger.debug("Unexpected vcgencmd output: %r", result.stdout)
            return None
        return float(match.group(1))

    def read_cpu_percent(self) -> Optional[int]:
        """CPU load as ``1 - idle/total`` over all CPUs, in whole percent."""

        ticks = read_cpu_ticks(self._settings.proc_stat_path)
        if ticks is None:
            return None
        idle, total = ticks
        if total <= 0:
            return None
        return round((1 - idle / total) * 100)

    def read_cpu_frequency(self) -> Optional[float]:
        """Current CPU frequency in MHz."""

        if not self._accessibility.cpu_freq:
            return None
        try:
            return int(_read_text(self._settings.cpu_freq_path)) / 1000.0
        except (OSError, ValueError) as exc:
            logger.debug("CPU frequency read failed: %s", exc)
            return None

    def read_memory(self) -> Optional[UsageReading]:
        try:
            meminfo = read_meminfo(self._settings.meminfo_path)
        except OSError as exc:
            logger.debug("Memory read failed: %s", exc)
            return None
        total = meminfo.get("MemTotal")
        available = meminfo.get("MemAvailable", meminfo.get("MemFree"))
        if not total or available is None:
            return None
        used = total - available
        return UsageReading(total=total, used=used, percent=round(used / total * 100))

    def read_disk(self) -> Optional[UsageReading]:
        try:
            usage = shutil.disk_usage(self._settings.disk_path)
        except OSError as exc:
            logger.debug("Disk usage read failed for %s: %s", self._settings.disk_path, exc)
            return None
        available = usage.used + usage.free
        if usage.total <= 0 or available <= 0:
            return None
        # Same as df Use%: reserved blocks are excluded and the ratio is rounded up.
        percent = -(-usage.used * 100 // available)
        return UsageReading(total=usage.total, used=usage.used, percent=percent)

    def read_network(self) -> Tuple[Optional[int], Optional[int]]:
        """Return ``(upload, download)`` bytes/s for the first preferred interface."""

        if not self._accessibility.network:
            return None, None
        interface = find_network_interface(self._settings.net_class_path, self._settings.network_interfaces)
        if interface is None:
            return None, None
        statistics = self._settings.net_class_path / interface / "statistics"

        def read_counters() -> Tuple[int, int]:
            return int(_read_text(statistics / "rx_bytes")), int(_read_text(statistics / "tx_bytes"))

        try:
            return self._network.sample(read_counters)
        except (OSError, ValueError) as exc:
            logger.debug("Network counter read failed for %s: %s", interface, exc)
            return None, None
