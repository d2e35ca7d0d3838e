"""Logging setup for objectacl.

The client attaches request context to its records through ``extra=``. Both
formatters render that context: the JSON formatter as object keys, the text
formatter as trailing ``key=value`` pairs.
"""

import json
import logging
import sys
from datetime import datetime, timezone

# Record attributes the client sets, in output order.
CONTEXT_FIELDS = (
    "operation",
    "method",
    "host",
    "path",
    "version_id",
    "status",
    "code",
    "request_id",
    "duration_ms",
)

TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def record_context(record: logging.LogRecord) -> dict:
    """Return the request context fields present on a record."""
    context = {}
    for key in CONTEXT_FIELDS:
        val = getattr(record, key, None)
        if val is not None:
            context[key] = val
    return context


class JSONFormatter(logging.Formatter):
    """Formats log records as single-line JSON objects.

    Fields: timestamp, level, logger, message, exception when present, then
    any request context from ``CONTEXT_FIELDS``.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info and record.exc_info[1] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        entry.update(record_context(record))
        return json.dumps(entry, default=str)


class ContextFormatter(logging.Formatter):
    """Text formatter that appends request context as ``key=value`` pairs."""

    def __init__(self, fmt: str = TEXT_FORMAT) -> None:
        super().__init__(fmt)

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = record_context(record)
        if not context:
            return line
        pairs = " ".join(f"{key}={value}" for key, value in context.items())
        # Keep the traceback, if any, below the context.
        head, sep, tail = line.partition("\n")
        return f"{head} {pairs}{sep}{tail}"


def configure_logging(level: str = "INFO", fmt: str = "text") -> None:
    """Install a single stderr handler on the root logger.

    Args:
        level: Log level name; unknown names fall back to INFO.
        fmt: ``json`` for ``JSONFormatter``, anything else for
            ``ContextFormatter``.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    root = logging.getLogger()
    root.setLevel(numeric_level)

    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(numeric_level)
    handler.setFormatter(JSONFormatter() if fmt == "json" else ContextFormatter())
    root.addHandler(handler)
