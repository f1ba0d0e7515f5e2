"""API routes for the Pironman5 Lite server."""

from __future__ import annotations

import asyncio
import json
import time
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, Request, status

from .. import __version__
from ..config import ConfigValidationError, DebugLevel, FanMode
from ..hardware import HardwareAccessibility
from ..logger import get_logger
from ..runtime import ConfigurationStore, LogBuffer, StatusAggregator

router = APIRouter()
logger = get_logger(__name__)

# Request keys accepted by /api/rgb/control and the configuration fields they map to.
RGB_CONTROL_FIELDS = {
    "enabled": "rgbEnabled",
    "color": "rgbColor",
    "brightness": "rgbBrightness",
    "style": "rgbStyle",
    "speed": "rgbSpeed",
}


def _state(request: Request, name: str):
    value = getattr(request.app.state, name, None)
    if value is None:
        logger.error("%s not initialised on application state", name)
        raise RuntimeError(f"{name} not initialised.")
    return value


def get_store(request: Request) -> ConfigurationStore:
    """Retrieve the shared configuration store from the application state."""

    return _state(request, "store")


def get_log_buffer(request: Request) -> LogBuffer:
    return _state(request, "log_buffer")


def get_aggregator(request: Request) -> StatusAggregator:
    return _state(request, "aggregator")


def get_accessibility(request: Request) -> HardwareAccessibility:
    return _state(request, "accessibility")


async def _json_object(request: Request) -> Dict[str, Any]:
    """Parse the request body, rejecting anything that is not a JSON object."""

    try:
        payload = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Request body must be valid JSON.") from exc
    if not isinstance(payload, dict):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Request body must be a JSON object.")
    return payload


def _invalid_configuration(exc: ConfigValidationError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={"error": "Invalid configuration", "details": exc.errors},
    )


@router.get("/api/status")
async def read_status(aggregator: StatusAggregator = Depends(get_aggregator)) -> Dict[str, Any]:
    """Return a freshly sampled status snapshot."""

    snapshot = await asyncio.to_thread(aggregator.get_status)
    return snapshot.to_dict()


@router.get("/api/hardware")
async def read_hardware(accessibility: HardwareAccessibility = Depends(get_accessibility)) -> Dict[str, bool]:
    """Return which sensors and actuators were detected at start-up."""

    return accessibility.to_dict()


@router.get("/api/config")
async def read_configuration(store: ConfigurationStore = Depends(get_store)) -> Dict[str, Any]:
    """Return the current addon configuration."""

    logger.debug("Providing configuration snapshot")
    return store.get().to_dict()


@router.patch("/api/config")
async def update_configuration(
    request: Request,
    store: ConfigurationStore = Depends(get_store),
) -> Dict[str, Any]:
    """Merge a partial configuration into the current one."""

    changes = await _json_object(request)
    logger.info("Applying configuration update for fields: %s", sorted(changes))
    try:
        config = store.update(changes)
    except ConfigValidationError as exc:
        raise _invalid_configuration(exc) from exc
    return config.to_dict()


@router.post("/api/config/reset")
async def reset_configuration(store: ConfigurationStore = Depends(get_store)) -> Dict[str, Any]:
    """Restore the documented defaults."""

    logger.info("Resetting configuration to defaults")
    return store.reset().to_dict()


@router.get("/api/logs")
async def read_logs(log_buffer: LogBuffer = Depends(get_log_buffer)) -> List[Dict[str, Any]]:
    """Return buffered log entries, newest first."""

    return [entry.to_dict() for entry in log_buffer.read_all()]


@router.post("/api/logs")
async def append_log(request: Request, log_buffer: LogBuffer = Depends(get_log_buffer)) -> Dict[str, bool]:
    """Record a log entry submitted by the dashboard."""

    payload = await _json_object(request)
    level, message, source = (payload.get(key) for key in ("level", "message", "source"))
    if not level or not message or not source:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing required fields")
    if not all(isinstance(value, str) for value in (level, message, source)):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Fields must be strings")
    try:
        level = DebugLevel(level)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid log level") from exc
    log_buffer.append(level, message, source)
    return {"success": True}


@router.post("/api/fan/control")
async def control_fan(
    request: Request,
    store: ConfigurationStore = Depends(get_store),
    log_buffer: LogBuffer = Depends(get_log_buffer),
) -> Dict[str, Any]:
    """Switch the fan mode."""

    payload = await _json_object(request)
    mode = payload.get("mode")
    if not mode:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing fan mode")
    try:
        mode = FanMode(mode)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid fan mode") from exc
    store.update({"fanMode": mode.value})
    log_buffer.append(DebugLevel.INFO, f"Fan mode changed to {mode.value}", "fan")
    return {"success": True, "mode": mode.value}


@router.post("/api/rgb/control")
async def control_rgb(
    request: Request,
    store: ConfigurationStore = Depends(get_store),
    log_buffer: LogBuffer = Depends(get_log_buffer),
) -> Dict[str, bool]:
    """Update the RGB LED settings."""

    payload = await _json_object(request)
    changes = {field: payload[key] for key, field in RGB_CONTROL_FIELDS.items() if key in payload}
    try:
        store.update(changes)
    except ConfigValidationError as exc:
        raise _invalid_configuration(exc) from exc
    log_buffer.append(DebugLevel.INFO, "RGB settings updated", "rgb")
    return {"success": True}


@router.get("/api/health")
async def health() -> Dict[str, Any]:
    """Liveness probe."""

    return {"status": "healthy", "timestamp": int(time.time() * 1000), "version": __version__}
