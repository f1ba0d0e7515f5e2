import shutil
from pathlib import Path

import pytest

pytest.importorskip("pydantic_settings")

from pironman5_lite.config import AppSettings


def _write(path: Path, content: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


@pytest.fixture()
def board(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> AppSettings:
    """Settings pointing at a fake Raspberry Pi sysfs/proc tree with every resource present."""

    # vcgencmd is resolved but never executed; GPU reads are faked per test.
    vcgencmd = str(tmp_path / "bin" / "vcgencmd")
    real_which = shutil.which
    monkeypatch.setattr(shutil, "which", lambda cmd, *args, **kwargs: cmd if cmd == vcgencmd else real_which(cmd, *args, **kwargs))
    _write(tmp_path / "net" / "eth0" / "statistics" / "rx_bytes", "1000\n")
    _write(tmp_path / "net" / "eth0" / "statistics" / "tx_bytes", "500\n")
    return AppSettings(
        thermal_zone_path=_write(tmp_path / "thermal_zone0" / "temp", "55000\n"),
        cpu_freq_path=_write(tmp_path / "cpufreq" / "scaling_cur_freq", "1500000\n"),
        proc_stat_path=_write(tmp_path / "proc" / "stat", "cpu  100 0 100 800 0 0 0 0 0 0\ncpu0 100 0 100 800 0 0 0 0 0 0\n"),
        meminfo_path=_write(
            tmp_path / "proc" / "meminfo",
            "MemTotal:        1000 kB\nMemFree:          200 kB\nMemAvailable:     400 kB\n",
        ),
        net_class_path=tmp_path / "net",
        cooling_device_path=_write(tmp_path / "cooling_device0" / "cur_state", "0\n"),
        gpio_class_path=tmp_path / "gpio",
        spi_device_path=_write(tmp_path / "dev" / "spidev0.0", ""),
        i2c_device_path=_write(tmp_path / "dev" / "i2c-1", ""),
        vcgencmd=vcgencmd,
        disk_path=tmp_path,
    )


@pytest.fixture()
def bare_board(tmp_path: Path) -> AppSettings:
    """Settings where no optional hardware resource exists."""

    missing = tmp_path / "missing"
    return AppSettings(
        thermal_zone_path=missing / "temp",
        cpu_freq_path=missing / "scaling_cur_freq",
        proc_stat_path=missing / "stat",
        meminfo_path=missing / "meminfo",
        net_class_path=missing / "net",
        cooling_device_path=missing / "cur_state",
        gpio_class_path=missing / "gpio",
        spi_device_path=missing / "spidev0.0",
        i2c_device_path=missing / "i2c-1",
        vcgencmd=str(missing / "vcgencmd"),
        disk_path=missing,
    )
