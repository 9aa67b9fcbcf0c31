"""
Logging configuration for the CarbonLab API.

Structured key/value logging through structlog, rendered as JSON in
production and as readable console lines during development.
"""

import logging
import os
import sys

import structlog
from structlog.typing import FilteringBoundLogger


def setup_logging(level: str = "INFO", format_type: str = "console") -> None:
    """
    Configure structlog on top of the standard library logging module.

    Args:
        level: Logging level name, overridden by ``LOG_LEVEL``.
        format_type: ``"json"`` or ``"console"``, overridden by ``LOG_FORMAT``.
    """
    log_level_str = os.getenv("LOG_LEVEL", level).upper()
    log_format = os.getenv("LOG_FORMAT", format_type)
    log_level = getattr(logging, log_level_str, logging.INFO)

    logging.basicConfig(
        format="%(message)s",
        level=log_level,
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.WriteLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> FilteringBoundLogger:
    """
    Get a structured logger instance.

    Example:
        ```python
        logger = get_logger(__name__)
        logger.info("lot_created", lot_number="L-100", experiments=3)
        ```
    """
    return structlog.get_logger(name)
