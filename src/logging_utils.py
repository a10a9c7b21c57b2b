"""Root logging setup; each record carries the id of the HTTP request that emitted it."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] [req=%(request_id)s] %(message)s"

# The Anthropic, OpenAI, and Supabase clients all log every HTTP call at INFO.
TRANSPORT_LOGGERS = ("httpx", "httpcore", "hpack")

_request_id: ContextVar[str] = ContextVar("request_id", default="-")


class RequestIdFilter(logging.Filter):
    """Stamp ``record.request_id`` from the active :func:`request_context`."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "request_id", None):
            record.request_id = _request_id.get()
        return True


def _has_request_filter(handler: logging.Handler) -> bool:
    return any(isinstance(f, RequestIdFilter) for f in handler.filters)


def configure_logging(level: str = "INFO") -> None:
    """Install a stream handler on the root logger and set levels.

    Safe to call more than once: handlers that already carry a
    :class:`RequestIdFilter` are left alone. Transport loggers stay at
    WARNING unless ``level`` is DEBUG.
    """
    root = logging.getLogger()
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
    for handler in root.handlers:
        if not _has_request_filter(handler):
            handler.addFilter(RequestIdFilter())

    root.setLevel(numeric_level)
    transport_level = logging.DEBUG if numeric_level <= logging.DEBUG else logging.WARNING
    for name in TRANSPORT_LOGGERS:
        logging.getLogger(name).setLevel(transport_level)


@contextmanager
def request_context(request_id: str) -> Iterator[None]:
    """Tag every record logged inside the block with ``request_id``."""
    token = _request_id.set(request_id)
    try:
        yield
    finally:
        _request_id.reset(token)
