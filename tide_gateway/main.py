"""
Tide-Data Gateway - Main entry point.

Usage:
    python -m tide_gateway.main

Or directly with uvicorn:
    uvicorn tide_gateway.app:app --port 8080

Configuration is entirely via TIDE_GATEWAY_* environment variables.
See config.py for all available settings.
"""

from __future__ import annotations

import logging

import json_log_formatter
import uvicorn

from .app import create_app
from .config import Settings

logger = logging.getLogger(__name__)

TEXT_LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

# httpx logs every request at INFO, which duplicates "Proxying to:"
QUIET_LOGGERS = ("httpx", "httpcore")


def _formatter_for(log_format: str) -> logging.Formatter:
    if log_format == "json":
        return json_log_formatter.JSONFormatter()
    return logging.Formatter(TEXT_LOG_FORMAT)


def setup_logging(settings: Settings) -> None:
    """Route all gateway logs to one stderr handler.

    Unknown level names fall back to INFO.
    """
    handler = logging.StreamHandler()
    handler.setFormatter(_formatter_for(settings.log_format))

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def main() -> None:
    """Run the gateway under uvicorn."""
    settings = Settings()
    setup_logging(settings)

    logger.info(f"Starting Tide-Data Gateway on {settings.host}:{settings.port}")
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
