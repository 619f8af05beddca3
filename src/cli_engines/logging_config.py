"""Structured logging setup for the engine adapters.

Engines log through ``structlog.get_logger(__name__)``. Calling
configure_logging() once at process start routes those events through the
standard library logging machinery with a fixed processor chain.
"""

import logging
import sys
from typing import Optional

import structlog

from cli_engines.config import EngineSettings


def configure_logging(
    level: int = logging.INFO,
    json_output: bool = False,
) -> None:
    """Configure structlog on top of stdlib logging.

    Args:
        level: Minimum stdlib log level to emit.
        json_output: Render events as JSON lines instead of the
            human-readable console format.
    """
    logging.basicConfig(
        level=level,
        format="%(message)s",
        stream=sys.stderr,
    )
    logging.getLogger().setLevel(level)

    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=False)
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
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def configure_from_settings(settings: Optional[EngineSettings] = None) -> None:
    """Configure logging from the log_level and json_logs settings."""
    settings = settings or EngineSettings()
    configure_logging(
        level=settings.log_level_number,
        json_output=settings.json_logs,
    )
