"""
Structured JSON logging for the tutor service.

Each log entry carries the service name so that lines from the API process
and its provider clients can be filtered together. Outputs to stdout.
Request-scoped fields (route, model, latency) travel in the "_extra"
attribute and land under "extra" in the JSON line.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

_NOISY_LOGGERS = ("uvicorn.access", "httpx", "httpcore", "openai")


class JSONFormatter(logging.Formatter):
    """One JSON object per record."""

    def __init__(self, service_name: str) -> None:
        super().__init__()
        self._service = service_name

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "service": self._service,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info and record.exc_info[1]:
            entry["exception"] = self.formatException(record.exc_info)

        extra = getattr(record, "_extra", None)
        if extra:
            entry["extra"] = extra

        return json.dumps(entry, default=str)


def log_extra(**fields: Any) -> dict[str, Any]:
    """Build the `extra=` argument for a structured log call."""
    return {"_extra": fields}


def setup_logging(service_name: str, level_name: str = "INFO") -> logging.Logger:
    """
    Route the root logger to stdout as JSON.

    Call once at startup, from the FastAPI lifespan. Unknown level names
    fall back to INFO. Returns the service logger.
    """
    level_name = level_name.upper()
    level = getattr(logging, level_name, None)
    if not isinstance(level, int):
        level_name, level = "INFO", logging.INFO

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter(service_name))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for noisy in _NOISY_LOGGERS:
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logger = logging.getLogger(service_name)
    logger.info("Logging initialized", extra=log_extra(level=level_name))
    return logger
