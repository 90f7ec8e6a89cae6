"""
Structured Logging

DESIGN DECISION: Every module logs through structlog with event-style
messages ("login_failed", "malformed_amount") plus key/value context.
This keeps logs machine-searchable without a separate audit store.

configure_logging() is called once by each entry point (HTTP service,
dashboard). Library code only calls structlog.get_logger() and never
configures anything itself.
"""

import logging
import sys

import structlog


def configure_logging(level: str = "INFO", json_output: bool = True) -> None:
    """
    Configure structlog and the stdlib root logger.

    Args:
        level: Minimum level name (DEBUG, INFO, ...)
        json_output: Render JSON lines if True, coloured console output otherwise
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level,
        force=True,
    )

    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def mask_token(token: str) -> str:
    """Shorten a secret token so it can appear in logs."""
    if not token:
        return ""
    if len(token) <= 8:
        return "***"
    return f"{token[:6]}..."
