"""Structured logging for the query engine and its HTTP surface."""
import logging
import sys
from typing import Any

import structlog

from resource_query.config.settings import get_settings


def _renderer(debug: bool):
    if debug:
        return structlog.dev.ConsoleRenderer()
    return structlog.processors.JSONRenderer()


def configure_logging(debug: bool | None = None) -> None:
    """
    Configure structlog once at startup.

    JSON lines by default; a human-readable console renderer and DEBUG level
    when ``debug`` is on. Request-scoped values bound through
    ``add_log_context`` are merged into every entry.
    """
    if debug is None:
        debug = get_settings().debug
    level = logging.DEBUG if debug else logging.INFO

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            _renderer(debug),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def add_log_context(**kwargs: Any) -> None:
    """
    Bind request-scoped values to every entry logged while handling a request.

    RequestIDMiddleware binds ``request_id`` and ``path``, so the
    search_rejected and search_query_failed events of a list call can be
    matched to the error envelope the client received.
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_log_context() -> None:
    """Drop the request context so it cannot leak into the next request on this task."""
    structlog.contextvars.clear_contextvars()
