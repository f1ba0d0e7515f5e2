"""Command-line utilities for Pironman5 Lite."""

from __future__ import annotations

from typing import Optional

import typer
import uvicorn

from ..config import get_settings
from ..logger import configure_logging, get_logger

app = typer.Typer(add_completion=False, help="Pironman5 Lite addon tooling.")

_BOOL_TRUE_VALUES = {"1", "true", "yes", "on"}
_BOOL_FALSE_VALUES = {"0", "false", "no", "off"}


def _parse_optional_bool(value: Optional[str]) -> Optional[bool]:
    """Convert a CLI-provided string into an optional boolean."""

    if value is None:
        return None
    normalized = value.strip().lower()
    if normalized in _BOOL_TRUE_VALUES:
        return True
    if normalized in _BOOL_FALSE_VALUES:
        return False
    raise typer.BadParameter("Expected a boolean value (true/false).")


@app.callback()
def _root_callback() -> None:
    """Pironman5 Lite CLI command group."""


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, help="Interface to bind the server to."),
    port: Optional[int] = typer.Option(None, help="Port to bind the server to."),
    reload: Optional[str] = typer.Option(
        None,
        help="Enable auto-reload (development only). Provide true/false to override configured value.",
    ),
    log_level: Optional[str] = typer.Option(None, help="Logging level passed to Uvicorn."),
) -> None:
    """Start the addon API server."""

    reload_override = _parse_optional_bool(reload)
    settings = get_settings()
    configure_logging(settings)
    logger = get_logger(__name__)
    bound_host = host or settings.host
    bound_port = port or settings.port
    reload_enabled = reload_override if reload_override is not None else settings.reload
    logger.info(
        "Starting Pironman5 Lite server (host=%s port=%s reload=%s)",
        bound_host,
        bound_port,
        reload_enabled,
    )
    logger.debug(
        "Logging toggles - error=%s warning=%s info=%s debug=%s",
        settings.log_error_enabled,
        settings.log_warning_enabled,
        settings.log_info_enabled,
        settings.log_debug_enabled,
    )
    uvicorn.run(
        "pironman5_lite.server.app:create_application",
        factory=True,
        host=bound_host,
        port=bound_port,
        reload=reload_enabled,
        log_level=log_level or settings.log_level,
    )


def main() -> None:
    """Entrypoint for the ``pironman5-lite`` console script."""

    logger = get_logger(__name__)
    logger.debug("Invoked Pironman5 Lite CLI entrypoint")
    app()
