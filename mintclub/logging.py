"""structlog configuration for the CLI and the API server."""

from __future__ import annotations

import logging

import structlog


def configure_logging(verbose: bool = False) -> None:
    """Install console logging; DEBUG when verbose, else INFO."""
    log_level = logging.DEBUG if verbose else logging.INFO
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
    )


__all__ = ["configure_logging"]
