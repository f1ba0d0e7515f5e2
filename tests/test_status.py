import pytest

pytest.importorskip("pydantic_settings")

from pironman5_lite.config import AppSettings
from pironman5_lite.hardware import FanState, HardwareAccessibility, SystemSampler
from pironman5_lite.runtime import ConfigurationStore, LogBuffer, StatusAggregator

ALL_ACCESSIBLE = HardwareAccessibility(
    cpu_temp=True, gpu_temp=False, cpu_freq=True, network=True, fan=True, rgb=True, oled=True
)


class FakeClock:
    def __init__(self, now: float) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def make_aggregator(settings: AppSettings, accessibility: HardwareAccessibility):
    store = ConfigurationStore(LogBuffer())
    monotonic = FakeClock(1000.0)
    wall = FakeClock(1_700_000_000.0)
    sampler = SystemSampler(settings, accessibility, clock=wall)
    return StatusAggregator(sampler, store, monotonic=monotonic, clock=wall), store, monotonic, wall


def test_snapshot_composes_every_reader(board: AppSettings) -> None:
    aggregator, _store, monotonic, _wall = make_aggregator(board, ALL_ACCESSIBLE)
    monotonic.now += 42.7

    snapshot = aggregator.get_status()

    assert snapshot.cpu_temperature == pytest.approx(55.0)
    assert snapshot.gpu_temperature is None
    assert snapshot.cpu_percent == 20
    assert snapshot.cpu_frequency == pytest.approx(1500.0)
    assert (snapshot.memory_total, snapshot.memory_used, snapshot.memory_percent) == (1024000, 614400, 60)
    assert snapshot.disk_total is not None and snapshot.disk_percent is not None
    assert (snapshot.network_upload, snapshot.network_download) == (0, 0)
    # 55°C is below the balanced trigger of 67.5°C.
    assert snapshot.fan_speed == 0
    assert snapshot.fan_state is FanState.OFF
    assert snapshot.fan_led_state is FanState.OFF
    assert snapshot.uptime == 42
    assert snapshot.timestamp == 1_700_000_000_000


def test_fan_follows_current_mode(board: AppSettings) -> None:
    aggregator, store, _monotonic, _wall = make_aggregator(board, ALL_ACCESSIBLE)

    store.update({"fanMode": "performance"})
    snapshot = aggregator.get_status()
    assert snapshot.fan_speed == 50
    assert snapshot.fan_state is FanState.ON

    store.update({"fanMode": "always_on", "fanLedMode": "off"})
    snapshot = aggregator.get_status()
    assert snapshot.fan_speed == 100
    assert snapshot.fan_led_state is FanState.OFF


def test_every_call_resamples(board: AppSettings) -> None:
    aggregator, _store, _monotonic, wall = make_aggregator(board, ALL_ACCESSIBLE)
    aggregator.get_status()

    board.thermal_zone_path.write_text("90000\n")
    statistics = board.net_class_path / "eth0" / "statistics"
    (statistics / "rx_bytes").write_text("11000\n")
    wall.now += 10.0
    snapshot = aggregator.get_status()

    assert snapshot.cpu_temperature == pytest.approx(90.0)
    assert snapshot.fan_speed == 100
    assert snapshot.network_download == 1000
    assert snapshot.network_upload == 0


def test_unavailable_hardware_is_null(bare_board: AppSettings) -> None:
    aggregator, _store, _monotonic, _wall = make_aggregator(bare_board, HardwareAccessibility())
    payload = aggregator.get_status().to_dict()

    for key in (
        "cpuTemperature",
        "gpuTemperature",
        "cpuPercent",
        "cpuFrequency",
        "memoryTotal",
        "memoryUsed",
        "memoryPercent",
        "diskTotal",
        "diskUsed",
        "diskPercent",
        "networkUpload",
        "networkDownload",
        "fanSpeed",
    ):
        assert payload[key] is None, key
    assert payload["fanState"] == "unavailable"
    assert payload["fanLedState"] == "unavailable"
    assert payload["uptime"] == 0


def test_usage_groups_are_all_or_nothing(board: AppSettings) -> None:
    aggregator, _store, _monotonic, _wall = make_aggregator(board, ALL_ACCESSIBLE)
    board.meminfo_path.unlink()
    payload = aggregator.get_status().to_dict()

    memory = [payload["memoryTotal"], payload["memoryUsed"], payload["memoryPercent"]]
    disk = [payload["diskTotal"], payload["diskUsed"], payload["diskPercent"]]
    assert memory == [None, None, None]
    assert all(isinstance(value, int) for value in disk)
