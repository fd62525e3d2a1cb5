"""Structured logging with structlog.

HTTP requests carry a ``request_id`` and worker jobs a ``job_id``; both are
held in context variables and stamped onto every event emitted while they
are set.
"""

import logging
from collections.abc import Iterator, MutableMapping
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

import structlog

from app.core.config import get_settings

request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)
job_id_ctx: ContextVar[str | None] = ContextVar("job_id", default=None)


def add_correlation_ids(
    _logger: structlog.types.WrappedLogger,
    _method_name: str,
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    """Add request_id / job_id from context to log events."""
    request_id = request_id_ctx.get()
    if request_id:
        event_dict["request_id"] = request_id
    job_id = job_id_ctx.get()
    if job_id:
        event_dict["job_id"] = job_id
    return event_dict


@contextmanager
def job_log_context(job_id: str) -> Iterator[None]:
    """Tag every log event emitted inside the block with ``job_id``."""
    token = job_id_ctx.set(job_id)
    try:
        yield
    finally:
        job_id_ctx.reset(token)


def configure_logging() -> None:
    """Configure structlog for the API process and the worker."""
    settings = get_settings()

    shared_processors: list[structlog.types.Processor] = [
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        add_correlation_ids,
    ]

    if settings.log_format == "json":
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, settings.log_level)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.typing.FilteringBoundLogger:
    """Get a configured logger instance.

    Args:
        name: Logger name (typically __name__ of the calling module).

    Returns:
        Configured structlog logger.
    """
    logger: structlog.typing.FilteringBoundLogger = structlog.get_logger(name)
    return logger
