"""
Resource Proxy - Main entry point.

Starts the HTTP API in front of the peer document store.

Usage:
    python -m resource_proxy.main

Configuration is entirely via PROXY_ environment variables.
See config.py for all available settings.
"""

from __future__ import annotations

import logging

import json_log_formatter
import uvicorn

from .api import create_app
from .config import Settings

logger = logging.getLogger(__name__)


def setup_logging(settings: Settings) -> None:
    """Configure logging based on configuration.

    Args:
        settings: Proxy configuration
    """
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    if settings.log_format == "json":
        formatter = json_log_formatter.JSONFormatter()
    else:
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = [handler]

    # Reduce noise from libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def main() -> None:
    """Main entry point."""
    settings = Settings()
    setup_logging(settings)

    app = create_app(settings)
    logger.info(
        f"Resource Proxy listening on {settings.host}:{settings.port}, "
        f"resources in {settings.resources_directory}, peer at {settings.peer_base_url}"
    )
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
