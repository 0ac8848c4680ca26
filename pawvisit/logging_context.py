"""Request ID logging context for tracing calls across modules.

Provides a request_id-aware logger that attaches a correlation ID to every
log record, making it easy to follow one API call from the route through
the lifecycle controller down to the stores.

Usage:
    from pawvisit.logging_context import get_request_logger, set_request_id

    set_request_id("REQ-1a2b3c4d")
    logger = get_request_logger(__name__)
    logger.info("Booking created")  # record.request_id == "REQ-1a2b3c4d"
"""

import logging
import uuid
from contextvars import ContextVar

_request_id: ContextVar[str] = ContextVar("request_id", default="NO_REQUEST_ID")


def new_request_id() -> str:
    """Generate a short correlation ID."""
    return f"REQ-{uuid.uuid4().hex[:8]}"


def set_request_id(request_id: str) -> None:
    """Set the correlation ID for the current async context."""
    _request_id.set(request_id)


def get_request_id() -> str:
    """Retrieve the current correlation ID."""
    return _request_id.get()


class RequestIdFilter(logging.Filter):
    """Injects request_id into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = _request_id.get()  # type: ignore[attr-defined]
        return True


def get_request_logger(name: str) -> logging.Logger:
    """Return a logger with the RequestIdFilter attached.

    The filter adds ``request_id`` to each record so formatters can
    include ``%(request_id)s`` in their format string.
    """
    logger = logging.getLogger(name)
    if not any(isinstance(f, RequestIdFilter) for f in logger.filters):
        logger.addFilter(RequestIdFilter())
    return logger


def install_request_id_filter(logger: logging.Logger) -> None:
    """Attach a RequestIdFilter to every handler on ``logger``.

    Handler filters also see records propagated from child loggers, so
    installing on the root logger makes ``%(request_id)s`` safe in any
    format string used by those handlers.
    """
    for handler in logger.handlers:
        if not any(isinstance(f, RequestIdFilter) for f in handler.filters):
            handler.addFilter(RequestIdFilter())
