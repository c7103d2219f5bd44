"""
Structured logging setup (structlog).

Usage:
    from invoice_processor.core.logging import get_logger, setup_logging

    setup_logging("DEBUG")          # once, at process start
    logger = get_logger(__name__)
    logger.info("Invoice loaded", invoice_id="INV-1")
"""

from __future__ import annotations

import logging
import sys

import structlog


def setup_logging(level: str = "INFO", json_output: bool = False) -> None:
    """
    Configure structlog and the stdlib root logger.

    Console rendering is used for local runs; JSON rendering for
    anything that ships logs to an aggregator.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
        force=True,
    )

    processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]
    if json_output:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        # ConsoleRenderer formats exc_info itself
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> structlog.typing.FilteringBoundLogger:
    """Return a structlog logger for the named module."""
    # The returned proxy is lazy, so module-level loggers pick up
    # whatever setup_logging() configures later.
    if name:
        return structlog.get_logger(name)
    return structlog.get_logger()
