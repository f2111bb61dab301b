"""Logging setup with per-request trace correlation."""

from __future__ import annotations

import logging
import re
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterable, Iterator, Optional
from uuid import uuid4

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | trace_id=%(trace_id)s | %(message)s"

TRACE_HEADER = "X-Trace-Id"
TRACE_HEADER_CANDIDATES: tuple[str, ...] = (
    "x-trace-id",
    "x-request-id",
    "traceparent",
    "x-b3-traceid",
)

_trace_id: ContextVar[str] = ContextVar("trace_id", default="-")
_TRACE_ID_PATTERN = re.compile(r"^[a-fA-F0-9-]{8,64}$")


def _clean_trace_id(candidate: str) -> str:
    candidate = candidate.strip()
    if _TRACE_ID_PATTERN.match(candidate):
        return candidate.lower()
    return uuid4().hex


def trace_id_from_headers(headers: Optional[Iterable[tuple[str, str]]] = None) -> str:
    """Pick the caller's trace id out of request headers, or mint a new one."""

    for key, value in headers or ():
        if key.lower() in TRACE_HEADER_CANDIDATES and value:
            return _clean_trace_id(value)
    return uuid4().hex


def get_trace_id() -> str:
    return _trace_id.get()


@contextmanager
def trace_context(trace_id: str) -> Iterator[str]:
    token = _trace_id.set(_clean_trace_id(trace_id))
    try:
        yield _trace_id.get()
    finally:
        _trace_id.reset(token)


class TraceIdFilter(logging.Filter):
    """Injects the current trace identifier into log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.trace_id = get_trace_id()
        return True


def configure_logging(service_name: str, level: int | str = logging.INFO) -> logging.Logger:
    """Configure root logging with trace correlation."""

    formatter = logging.Formatter(LOG_FORMAT)
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    handler.addFilter(TraceIdFilter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level.upper() if isinstance(level, str) else level)

    return logging.getLogger(service_name)
