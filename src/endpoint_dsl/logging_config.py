"""
Stderr-only JSON logging configuration for the CLI.

The export command may write the document to stdout, so log records never
go there.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

# Passed through ``extra=`` by the generator and CLI.
CONTEXT_FIELDS = ("endpoint", "source", "schema")


class JsonFormatter(logging.Formatter):
    """One JSON object per record, with the endpoint or source it concerns."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for field in CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                entry[field] = value
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def configure_logging(verbose: bool = False) -> None:
    """Send endpoint_dsl log records to stderr as JSON.

    Only the package logger is touched; the host application's root logger
    keeps its own handlers.
    """
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JsonFormatter())

    logger = logging.getLogger("endpoint_dsl")
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logger.propagate = False
