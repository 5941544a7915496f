"""Logging setup with a per-invocation correlation ID.

Handlers call ``set_correlation_id(context.aws_request_id)`` on entry; every
record emitted afterwards carries it so CloudWatch lines can be grepped per
request. Modules keep using ``logging.getLogger(__name__)``.
"""

import logging
import uuid
from contextvars import ContextVar

from core.config import get_config

_correlation_id: ContextVar[str | None] = ContextVar("correlation_id", default=None)

LOG_FORMAT = "%(levelname)s [%(correlation_id)s] %(name)s: %(message)s"


def set_correlation_id(correlation_id: str | None = None) -> str:
    cid = correlation_id or str(uuid.uuid4())
    _correlation_id.set(cid)
    return cid


def get_correlation_id() -> str | None:
    return _correlation_id.get()


def clear_correlation_id() -> None:
    _correlation_id.set(None)


class CorrelationIdFilter(logging.Filter):
    """Adds ``correlation_id`` to every record passing through a handler."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id() or "no-correlation-id"
        return True


def configure_logging() -> None:
    """Attach the correlation filter to the root handlers and apply LOG_LEVEL.

    The Lambda runtime installs its own root handler; locally one is added.
    Safe to call on every invocation.
    """
    root = logging.getLogger()
    root.setLevel(get_config().log_level.upper())

    if not root.handlers:
        root.addHandler(logging.StreamHandler())

    for handler in root.handlers:
        if not any(isinstance(f, CorrelationIdFilter) for f in handler.filters):
            handler.addFilter(CorrelationIdFilter())
            handler.setFormatter(logging.Formatter(LOG_FORMAT))
