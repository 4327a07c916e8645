# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
GeoConflate — Structured Logging
JSON-formatted logs via structlog. Every log entry carries the app label
and an optional run_id bound for the duration of one conflation run.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor

from geoconflate.config import get_settings


def _add_app_info(
    logger: Any, method: str, event_dict: EventDict
) -> EventDict:
    """Inject application name into every log entry."""
    event_dict["app"] = "geoconflate"
    return event_dict


def configure_logging(log_level: str | None = None) -> None:
    """
    Configure structlog for JSON output by default and
    human-readable console output at DEBUG level.
    Called once by the host application or the CLI runner.
    """
    level_name = (log_level or get_settings().log_level).upper()
    level = getattr(logging, level_name, logging.INFO)

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        _add_app_info,
    ]

    if level_name == "DEBUG":
        processors: list[Processor] = shared_processors + [
            structlog.dev.ConsoleRenderer(colors=True)
        ]
    else:
        processors = shared_processors + [
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
        cache_logger_on_first_use=True,
    )

    # Configure stdlib logging level (for shapely/third-party passthrough)
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=level,
    )


def get_logger(name: str = "geoconflate") -> structlog.BoundLogger:
    """
    Return a structlog bound logger.

    Usage:
        log = get_logger(__name__)
        log.info("matching_complete", n_targets=42)

    To bind a run_id for one conflation run:
        structlog.contextvars.bind_contextvars(run_id=run_id)
        log.info("conflation_start")
        structlog.contextvars.unbind_contextvars("run_id")
    """
    return structlog.get_logger(name)
