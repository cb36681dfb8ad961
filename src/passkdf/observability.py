"""
observability.py - Logging setup for the CLI.

Logs go to stderr so stdout carries only the hash or the ok line.
Records may carry 'algorithm' and 'elapsed_ms'; secrets, salts and keys are
never logged.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone


_EXTRA_FIELDS = ("algorithm", "elapsed_ms", "field")


class JSONFormatter(logging.Formatter):
    """One JSON object per log line."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in _EXTRA_FIELDS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False)


class TextFormatter(logging.Formatter):
    def __init__(self) -> None:
        super().__init__("%(asctime)s %(levelname)s %(name)s: %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        extras = [f"{k}={record.__dict__[k]}" for k in _EXTRA_FIELDS if record.__dict__.get(k) is not None]
        return f"{line} {' '.join(extras)}" if extras else line


def setup_logging(level: str = "WARNING", fmt: str = "text") -> None:
    """Install a single stderr handler on the passkdf logger."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JSONFormatter() if fmt == "json" else TextFormatter())

    logger = logging.getLogger("passkdf")
    for old in list(logger.handlers):
        logger.removeHandler(old)
    logger.addHandler(handler)
    logger.setLevel(getattr(logging, level.upper(), logging.WARNING))
    logger.propagate = False
