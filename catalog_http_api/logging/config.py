# catalog_http_api/logging/config.py

"""
Logging setup for the Catalog HTTP API.

structlog is the front end; the standard library is configured at the same
level so uvicorn and SQLAlchemy output lands on the same stream.

Typical usage in the app factory::

    from catalog_http_api.logging.config import configure_logging

    configure_logging(settings)
"""

from __future__ import annotations

import logging
import sys

import structlog
from opentelemetry import trace

from catalog_http_api.config import Settings


def add_open_telemetry_spans(_, __, event_dict):
    """
    Processor to inject the current TraceID and SpanID into the log entry.

    Without an active span (the usual case when no tracer provider is
    installed) both ids are ``None``.
    """
    span = trace.get_current_span()
    if not span.is_recording():
        event_dict["trace_id"] = None
        event_dict["span_id"] = None
        return event_dict

    ctx = span.get_span_context()
    event_dict["trace_id"] = format(ctx.trace_id, "032x")
    event_dict["span_id"] = format(ctx.span_id, "016x")
    return event_dict


def _parse_level(value: str) -> int:
    level = getattr(logging, (value or "").strip().upper(), None)
    return level if isinstance(level, int) else logging.INFO


def configure_logging(settings: Settings) -> None:
    """
    Configure structlog and the standard library logging.

    Emits JSON when ``LOG_FORMAT`` is "json", colored console lines
    otherwise. Safe to call more than once (the last call wins).
    """
    level = _parse_level(settings.LOG_LEVEL)

    processors = [
        structlog.contextvars.merge_contextvars,
        add_open_telemetry_spans,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if settings.LOG_FORMAT.lower() == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level,
    )


__all__ = ["add_open_telemetry_spans", "configure_logging"]
