"""
Structured logging for the watcher, the services, the API and the CLIs.

Each record carries event_type, level, an ISO timestamp, the logger name and
the call's key/value fields (address, signature, mint, error, ...). Output is
JSON (LOG_FORMAT=json, the default) or the structlog console renderer; the
threshold comes from LOG_LEVEL. Records go to stderr. String fields are
scrubbed of RPC api keys, so endpoints can be logged as-is.

Imports only stdlib logging and structlog; solwatch modules import this
package, never the reverse.
"""

from __future__ import annotations

import logging
import os
import re
import sys
from datetime import datetime, timezone
from typing import Any, TextIO

import structlog

_API_KEY_RE = re.compile(r"(api[-_]key=)[^&\s]+", re.IGNORECASE)


def _add_timestamp(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    event_dict.setdefault("timestamp", datetime.now(timezone.utc).isoformat())
    return event_dict


def _rename_event(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """structlog's positional 'event' is emitted as event_type."""
    event = event_dict.pop("event", None)
    if event is not None:
        event_dict.setdefault("event_type", event)
    return event_dict


def _scrub_api_keys(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    for key, value in event_dict.items():
        if isinstance(value, str) and "key=" in value.lower():
            event_dict[key] = _API_KEY_RE.sub(r"\1***", value)
    return event_dict


def _print_logger_factory(stream: TextIO | None):
    def factory(*args: Any) -> structlog.PrintLogger:
        return structlog.PrintLogger(file=stream if stream is not None else sys.stderr)

    return factory


def configure_logging(
    level: str | None = None,
    fmt: str | None = None,
    stream: TextIO | None = None,
) -> None:
    """
    (Re)configure structlog. level and fmt default to LOG_LEVEL / LOG_FORMAT;
    stream defaults to stderr, looked up when each logger is created, so
    command-line output on stdout stays clean. Loggers bound before a
    reconfigure keep the previous setup.
    """
    level_name = (level or os.getenv("LOG_LEVEL", "INFO")).strip().upper()
    fmt = (fmt or os.getenv("LOG_FORMAT", "json")).strip().lower()
    if fmt == "json":
        renderer: Any = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.format_exc_info,
            _add_timestamp,
            _rename_event,
            _scrub_api_keys,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level_name, logging.INFO)),
        context_class=dict,
        logger_factory=_print_logger_factory(stream),
        cache_logger_on_first_use=False,
    )


if not structlog.is_configured():
    configure_logging()


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Logger for a module, with its name bound as `logger`.

        logger = get_logger(__name__)
        logger.info("watch_new_signatures", address=addr, count=3)
    """
    return structlog.get_logger(name).bind(logger=name)

