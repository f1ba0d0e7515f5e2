"""Application factory for the Pironman5 Lite API."""

from __future__ import annotations

from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..config import AddonConfig, AppSettings, DebugLevel, get_settings
from ..hardware import FanController, HardwareProbe, OledDisplay, RGBLedStrip, SystemSampler
from ..logger import apply_debug_level, configure_logging, get_logger
from ..runtime import ConfigurationStore, LogBuffer, StatusAggregator
from . import routes


def _sync_debug_level(previous: AddonConfig, current: AddonConfig) -> None:
    if previous.debug_level != current.debug_level:
        apply_debug_level(current.debug_level)


def create_application(settings: Optional[AppSettings] = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Hardware probing completes before the application is returned, so the
    first request already sees the final accessibility flags.
    """

    settings = settings or get_settings()
    configure_logging(settings)
    logger = get_logger(__name__)
    logger.info(
        "Initialising Pironman5 Lite FastAPI application (host=%s port=%s reload=%s)",
        settings.host,
        settings.port,
        settings.reload,
    )
    app = FastAPI(
        title="Pironman5 Lite API",
        version=__version__,
        summary="Raspberry Pi telemetry, fan policy and addon configuration.",
    )

    if settings.allowed_origins:
        logger.debug("Configuring CORS with allowed origins: %s", settings.allowed_origins)
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.allowed_origins,
            allow_methods=["*"],
            allow_headers=["*"],
            allow_credentials=True,
        )

    log_buffer = LogBuffer()
    store = ConfigurationStore(log_buffer)
    config = store.get()
    apply_debug_level(config.debug_level)
    log_buffer.append(DebugLevel.INFO, "Pironman5 Lite addon initialized", "system")
    log_buffer.append(DebugLevel.INFO, f"Polling interval: {config.polling_interval}s", "config")
    log_buffer.append(DebugLevel.INFO, f"WebUI enabled: {str(config.web_ui_enabled).lower()}", "config")
    log_buffer.append(DebugLevel.INFO, f"Fan mode: {config.fan_mode.value}", "config")

    accessibility = HardwareProbe(settings, log_buffer).probe_all(config.fan_gpio_pin)

    for actuator in (
        FanController(accessibility.fan, log_buffer),
        RGBLedStrip(accessibility.rgb, log_buffer),
        OledDisplay(accessibility.oled, log_buffer),
    ):
        store.subscribe(actuator.on_config_change)
    store.subscribe(_sync_debug_level)

    sampler = SystemSampler(settings, accessibility)
    app.state.settings = settings
    app.state.log_buffer = log_buffer
    app.state.store = store
    app.state.accessibility = accessibility
    app.state.aggregator = StatusAggregator(sampler, store)

    app.include_router(routes.router)
    logger.debug("API routes registered")
    return app
