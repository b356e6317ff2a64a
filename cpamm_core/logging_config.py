"""
Logging configuration for the pool engine.

All engine loggers live under the ``cpamm`` namespace (``cpamm.swap``,
``cpamm.manager``, ...).  Records may carry pool context through
``extra={"pool": ..., "operation": ...}``; both formats print it when
present.

  - **human** – single line, ``HH:MM:SS LEVEL logger [pool op] message``
  - **json**  – newline-delimited JSON for log aggregators

Usage:
    from cpamm_core.logging_config import setup_logging
    setup_logging(level="DEBUG", fmt="json", log_file="cpamm.log")
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

LOGGER_NAME = "cpamm"

# record attributes copied from ``extra=`` into the output
CONTEXT_FIELDS = ("pool", "operation")


def _context(record: logging.LogRecord) -> dict:
    return {k: getattr(record, k) for k in CONTEXT_FIELDS if hasattr(record, k)}


class _JSONFormatter(logging.Formatter):
    """One JSON object per record, pool context as top-level keys."""

    def format(self, record: logging.LogRecord) -> str:
        log_obj = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        log_obj.update(_context(record))
        if record.exc_info and record.exc_info[1]:
            log_obj["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_obj, default=str)


class _HumanFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        ts = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        ctx = " ".join(str(v) for v in _context(record).values())
        prefix = f"[{ctx}] " if ctx else ""
        return f"{ts} {record.levelname:<7} {record.name}: {prefix}{record.getMessage()}"


def setup_logging(
    level: str = "INFO",
    fmt: str = "human",
    log_file: Optional[str] = None,
) -> logging.Logger:
    """
    Configure the ``cpamm`` logger tree and return its root.

    ``fmt`` selects the console format (``"human"`` or ``"json"``); the
    optional ``log_file`` always receives JSON.  Calling this again
    replaces the handlers installed by the previous call.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(_JSONFormatter() if fmt == "json" else _HumanFormatter())
    logger.addHandler(console)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(str(path))
        fh.setFormatter(_JSONFormatter())
        logger.addHandler(fh)

    return logger
