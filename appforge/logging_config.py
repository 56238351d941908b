"""Structured logging configuration.

Outputs either JSON (production) or console format (development) using
structlog on top of the standard library logging module.

Usage:
    from appforge.logging_config import bind_project, get_logger, setup_logging

    setup_logging()
    logger = get_logger(__name__)

    with bind_project("p1"):
        logger.info("build_started", stage="plan")
"""

from collections.abc import Iterator
from contextlib import contextmanager
import logging
import sys
from typing import Any, Literal

import structlog
from structlog.types import Processor

from .config import get_settings


def setup_logging(
    service_name: str | None = None,
    log_format: Literal["json", "console"] | None = None,
    log_level: str | None = None,
) -> None:
    """Configure structlog.

    Args:
        service_name: Bound to every event. Falls back to settings.
        log_format: "json" for production, "console" for dev. Falls back to settings.
        log_level: Logging level name. Falls back to settings.
    """
    settings = get_settings()
    service_name = service_name or settings.service_name
    log_format = log_format or settings.log_format
    log_level = (log_level or settings.log_level).upper()

    numeric_level = getattr(logging, log_level, logging.INFO)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=numeric_level,
        force=True,
    )
    # httpx logs every request at INFO; keep it out of pipeline output
    logging.getLogger("httpx").setLevel(max(numeric_level, logging.WARNING))

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.CallsiteParameterAdder(
            {
                structlog.processors.CallsiteParameter.FUNC_NAME,
                structlog.processors.CallsiteParameter.LINENO,
            }
        ),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if log_format == "json":
        processors.append(structlog.processors.JSONRenderer(sort_keys=False))
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=sys.stdout.isatty(),
                exception_formatter=structlog.dev.plain_traceback,
            )
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    structlog.contextvars.bind_contextvars(service=service_name)

    structlog.get_logger().info(
        "logging_initialized",
        service=service_name,
        log_format=log_format,
        log_level=log_level,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger instance."""
    return structlog.get_logger(name)


@contextmanager
def bind_project(project_id: str, **extra: Any) -> Iterator[None]:
    """Bind project_id (and any extra keys) to every event logged inside the block."""
    with structlog.contextvars.bound_contextvars(project_id=project_id, **extra):
        yield
