"""
Structured logging configuration using structlog wrapping stdlib.

Renders JSON lines when TASKTRACKER_LOG_FORMAT=json, otherwise the
structlog console renderer. Output goes to stderr so CLI JSON on stdout
stays clean.
Level comes from TASKTRACKER_LOG_LEVEL.

Usage:
    from tasktracker.logging_config import get_logger, setup_logging
    setup_logging()
    logger = get_logger(__name__)
    logger.info("task_created", task_id="abc123")
"""

from __future__ import annotations

import logging
import os
import sys
from typing import TextIO

import structlog

LOG_LEVEL_ENV = "TASKTRACKER_LOG_LEVEL"
LOG_FORMAT_ENV = "TASKTRACKER_LOG_FORMAT"


def setup_logging(
    level: str | None = None,
    json_output: bool | None = None,
    stream: TextIO | None = None,
) -> None:
    """Route stdlib and structlog records through one formatter."""
    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV, "INFO")

    if json_output is None:
        json_output = os.environ.get(LOG_FORMAT_ENV, "").lower() == "json"

    numeric_level = getattr(logging, level.upper(), logging.INFO)

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    renderer: structlog.types.Processor
    if json_output:
        shared_processors.append(structlog.processors.format_exc_info)
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(numeric_level)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


__all__ = ["LOG_FORMAT_ENV", "LOG_LEVEL_ENV", "get_logger", "setup_logging"]
