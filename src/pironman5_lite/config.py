"""Application configuration for Pironman5 Lite."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from threading import RLock
from typing import Any, Dict, List, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 34001
DEFAULT_LOG_LEVEL = "info"
DEFAULT_LOG_ERROR_ENABLED = True
DEFAULT_LOG_WARNING_ENABLED = True
DEFAULT_LOG_INFO_ENABLED = True
DEFAULT_LOG_DEBUG_ENABLED = False
DEFAULT_ALLOWED_ORIGINS = ("*",)
DEFAULT_THERMAL_ZONE_PATH = "/sys/class/thermal/thermal_zone0/temp"
DEFAULT_CPU_FREQ_PATH = "/sys/devices/system/cpu/cpu0/cpufreq/scaling_cur_freq"
DEFAULT_PROC_STAT_PATH = "/proc/stat"
DEFAULT_MEMINFO_PATH = "/proc/meminfo"
DEFAULT_NET_CLASS_PATH = "/sys/class/net"
DEFAULT_NETWORK_INTERFACES = ("eth0", "end0", "wlan0")
DEFAULT_COOLING_DEVICE_PATH = "/sys/class/thermal/cooling_device0/cur_state"
DEFAULT_GPIO_CLASS_PATH = "/sys/class/gpio"
DEFAULT_SPI_DEVICE_PATH = "/dev/spidev0.0"
DEFAULT_I2C_DEVICE_PATH = "/dev/i2c-1"
DEFAULT_VCGENCMD = "vcgencmd"
DEFAULT_GPU_COMMAND_TIMEOUT_SECONDS = 1.0
DEFAULT_DISK_PATH = "/"
LOG_BUFFER_CAPACITY = 500

RGB_COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"


class FanMode(str, Enum):
    """Named fan policies, each selecting a trigger temperature."""

    ALWAYS_ON = "always_on"
    PERFORMANCE = "performance"
    COOL = "cool"
    BALANCED = "balanced"
    QUIET = "quiet"


class FanLedMode(str, Enum):
    ON = "on"
    OFF = "off"
    FOLLOW = "follow"


class RGBStyle(str, Enum):
    SOLID = "solid"
    BREATHING = "breathing"
    FLOW = "flow"
    RAINBOW = "rainbow"
    HUE_CYCLE = "hue_cycle"


class TemperatureUnit(str, Enum):
    """Display unit for temperature values."""

    CELSIUS = "C"
    FAHRENHEIT = "F"


class DebugLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


class AppSettings(BaseSettings):
    """Process settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="PIRONMAN5_",
        env_file=".env",
        extra="ignore",
    )

    host: str = Field(default=DEFAULT_HOST, description="Interface for the API server.")
    port: int = Field(default=DEFAULT_PORT, description="Port for the API server.")
    reload: bool = Field(default=False, description="Enable auto-reload. Use only during development.")
    log_level: str = Field(default=DEFAULT_LOG_LEVEL, description="Uvicorn log level.")
    log_error_enabled: bool = Field(
        default=DEFAULT_LOG_ERROR_ENABLED,
        description="Emit error-level log records.",
    )
    log_warning_enabled: bool = Field(
        default=DEFAULT_LOG_WARNING_ENABLED,
        description="Emit warning-level log records.",
    )
    log_info_enabled: bool = Field(
        default=DEFAULT_LOG_INFO_ENABLED,
        description="Emit information-level log records.",
    )
    log_debug_enabled: bool = Field(
        default=DEFAULT_LOG_DEBUG_ENABLED,
        description="Emit debug-level log records.",
    )
    allowed_origins: list[str] = Field(
        default_factory=lambda: list(DEFAULT_ALLOWED_ORIGINS),
        description="CORS origins allowed to access the API.",
    )
    thermal_zone_path: Path = Field(
        default=Path(DEFAULT_THERMAL_ZONE_PATH),
        description="Sysfs file holding the CPU temperature in millidegrees Celsius.",
    )
    cpu_freq_path: Path = Field(
        default=Path(DEFAULT_CPU_FREQ_PATH),
        description="Sysfs file holding the current CPU frequency in kHz.",
    )
    proc_stat_path: Path = Field(default=Path(DEFAULT_PROC_STAT_PATH), description="Kernel CPU tick counters.")
    meminfo_path: Path = Field(default=Path(DEFAULT_MEMINFO_PATH), description="Kernel memory statistics.")
    net_class_path: Path = Field(
        default=Path(DEFAULT_NET_CLASS_PATH),
        description="Directory containing one entry per network interface.",
    )
    network_interfaces: list[str] = Field(
        default_factory=lambda: list(DEFAULT_NETWORK_INTERFACES),
        description="Interfaces tried in order for throughput counters.",
    )
    cooling_device_path: Path = Field(
        default=Path(DEFAULT_COOLING_DEVICE_PATH),
        description="Thermal cooling device state file exposed by the fan overlay.",
    )
    gpio_class_path: Path = Field(
        default=Path(DEFAULT_GPIO_CLASS_PATH),
        description="Sysfs GPIO directory used to detect an exported fan pin.",
    )
    spi_device_path: Path = Field(default=Path(DEFAULT_SPI_DEVICE_PATH), description="SPI node driving the RGB LEDs.")
    i2c_device_path: Path = Field(default=Path(DEFAULT_I2C_DEVICE_PATH), description="I2C bus hosting the OLED.")
    vcgencmd: str = Field(default=DEFAULT_VCGENCMD, description="Command used to read the GPU temperature.")
    gpu_command_timeout_seconds: float = Field(
        default=DEFAULT_GPU_COMMAND_TIMEOUT_SECONDS,
        gt=0.0,
        description="Upper bound for the GPU temperature command before it is treated as unavailable.",
    )
    disk_path: Path = Field(default=Path(DEFAULT_DISK_PATH), description="Filesystem reported as disk usage.")


class AddonConfig(BaseModel):
    """User-settable options, serialised with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, extra="forbid", frozen=True)

    polling_interval: int = Field(default=5, ge=1, le=60, strict=True)
    web_ui_enabled: bool = Field(default=True, strict=True)
    web_ui_port: int = Field(default=34001, ge=1024, le=65535, strict=True)
    fan_mode: FanMode = FanMode.BALANCED
    fan_gpio_pin: int = Field(default=6, ge=0, le=27, strict=True)
    fan_led_pin: int = Field(default=5, ge=0, le=27, strict=True)
    fan_led_mode: FanLedMode = FanLedMode.FOLLOW
    rgb_enabled: bool = Field(default=True, strict=True)
    rgb_color: str = Field(default="#0a1aff", pattern=RGB_COLOR_PATTERN, strict=True)
    rgb_brightness: int = Field(default=50, ge=0, le=100, strict=True)
    rgb_style: RGBStyle = RGBStyle.BREATHING
    rgb_speed: int = Field(default=50, ge=0, le=100, strict=True)
    rgb_led_count: int = Field(default=4, ge=1, le=100, strict=True)
    oled_enabled: bool = Field(default=True, strict=True)
    oled_rotation: Literal[0, 180] = 0
    oled_sleep_enabled: bool = Field(default=False, strict=True)
    oled_sleep_timeout: int = Field(default=10, ge=1, le=300, strict=True)
    temperature_unit: TemperatureUnit = TemperatureUnit.CELSIUS
    debug_level: DebugLevel = DebugLevel.INFO

    @field_validator("oled_rotation", mode="before")
    @classmethod
    def _require_int_rotation(cls, value: Any) -> Any:
        # bool is an int subclass, so False would otherwise match the literal 0.
        if type(value) is not int:
            raise ValueError("oledRotation must be 0 or 180")
        return value

    def to_dict(self) -> Dict[str, Any]:
        """Return the JSON representation used on the wire."""

        return self.model_dump(mode="json", by_alias=True)


RGB_FIELDS = ("rgb_enabled", "rgb_color", "rgb_brightness", "rgb_style", "rgb_speed", "rgb_led_count")
OLED_FIELDS = ("oled_enabled", "oled_rotation", "oled_sleep_enabled", "oled_sleep_timeout")


class ConfigValidationError(ValueError):
    """Raised when a configuration update would violate a field constraint."""

    def __init__(self, errors: List[Dict[str, str]]):
        self.errors = errors
        fields = ", ".join(error["field"] for error in errors) or "configuration"
        super().__init__(f"Invalid configuration: {fields}")

    @classmethod
    def from_validation_error(cls, exc: ValidationError) -> "ConfigValidationError":
        errors = [
            {
                "field": ".".join(str(part) for part in error["loc"]) or "__root__",
                "message": error["msg"],
            }
            for error in exc.errors()
        ]
        return cls(errors)


def default_config() -> AddonConfig:
    """Return a fresh configuration populated with the documented defaults."""

    return AddonConfig()


def validate_config(values: Dict[str, Any]) -> AddonConfig:
    """Validate a complete camelCase mapping, raising ``ConfigValidationError``."""

    try:
        return AddonConfig.model_validate(values)
    except ValidationError as exc:
        raise ConfigValidationError.from_validation_error(exc) from exc


_SETTINGS_LOCK = RLock()
_SETTINGS: AppSettings | None = None


def get_settings() -> AppSettings:
    """Return the current process settings, loading them if necessary."""

    global _SETTINGS
    with _SETTINGS_LOCK:
        if _SETTINGS is None:
            _SETTINGS = AppSettings()
        return _SETTINGS


def reload_settings() -> AppSettings:
    """Reload settings from the environment, replacing the current cache."""

    global _SETTINGS
    with _SETTINGS_LOCK:
        _SETTINGS = AppSettings()
        return _SETTINGS


