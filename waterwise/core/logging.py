"""WaterWise — Structured JSON Logging.

Every ``waterwise.*`` logger propagates to one ``waterwise`` parent that owns
the stdout handler, so each record is written exactly once.
"""

import json
import logging
import sys
from datetime import datetime, timezone

from waterwise.config import settings

ROOT_LOGGER = "waterwise"

# Keys passed through ``extra=`` that end up in the JSON line
EXTRA_FIELDS = ("endpoint", "status_code", "duration_ms", "cache_key", "job_id")


class JSONFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.levelno >= logging.ERROR:
            entry["source"] = f"{record.module}:{record.lineno}"
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        entry.update(
            {key: getattr(record, key) for key in EXTRA_FIELDS if hasattr(record, key)}
        )
        return json.dumps(entry, default=str, ensure_ascii=False)


def _root() -> logging.Logger:
    root = logging.getLogger(ROOT_LOGGER)
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JSONFormatter())
        root.addHandler(handler)
        root.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))
        root.propagate = False
    return root


def get_logger(name: str) -> logging.Logger:
    """``waterwise.<name>`` logger writing through the shared JSON handler."""
    _root()
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
