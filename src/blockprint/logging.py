"""Logging configuration for BlockPrint.

Loggers live under the ``blockprint`` namespace. Nothing is emitted until
the application (usually the CLI) calls :func:`setup_logging`; library
callers are free to attach their own handlers instead.
"""

from __future__ import annotations

import json
import logging
import os
import sys
import threading
from datetime import datetime, timezone
from typing import Any

ROOT_LOGGER = "blockprint"
DEFAULT_FORMAT = "%(levelname)-5s | %(name)-20s | %(message)s"
VERBOSE_FORMAT = "%(asctime)s | %(levelname)-5s | %(name)-20s | %(message)s"
_SETUP_LOCK = threading.Lock()


class JsonFormatter(logging.Formatter):
    """One JSON object per record, for log shipping."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def _make_formatter(fmt: str, json_logs: bool) -> logging.Formatter:
    return JsonFormatter() if json_logs else logging.Formatter(fmt)


def setup_logging(
    level: int = logging.INFO,
    verbose: bool = False,
    log_file: str | None = None,
    json_logs: bool = False,
) -> None:
    """Configure handlers on the ``blockprint`` root logger.

    Repeated calls reuse the existing stderr (and matching file) handler
    rather than stacking duplicates.

    Args:
        level: Logging level (default: INFO).
        verbose: If True, include timestamps in console output.
        log_file: Optional file path to write logs to (in addition to stderr).
        json_logs: Emit structured JSON log lines when True.
    """
    with _SETUP_LOCK:
        logger = logging.getLogger(ROOT_LOGGER)
        logger.setLevel(level)

        console = [
            h
            for h in logger.handlers
            if isinstance(h, logging.StreamHandler)
            and not isinstance(h, logging.FileHandler)
            and getattr(h, "stream", None) is sys.stderr
        ]
        if console:
            stream_handler = console[0]
            for extra in console[1:]:
                logger.removeHandler(extra)
        else:
            stream_handler = logging.StreamHandler(sys.stderr)
            logger.addHandler(stream_handler)
        stream_handler.setFormatter(
            _make_formatter(VERBOSE_FORMAT if verbose else DEFAULT_FORMAT, json_logs)
        )

        if log_file:
            target = os.path.abspath(str(log_file))
            existing = [
                h
                for h in logger.handlers
                if isinstance(h, logging.FileHandler)
                and getattr(h, "baseFilename", None) == target
            ]
            file_handler = existing[0] if existing else logging.FileHandler(log_file)
            if not existing:
                logger.addHandler(file_handler)
            file_handler.setFormatter(_make_formatter(VERBOSE_FORMAT, json_logs))


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a BlockPrint module.

    Accepts either a short name (``"palette"``) or a module ``__name__``
    (``"blockprint.palette"``); both resolve to ``blockprint.palette``.
    """
    prefix = ROOT_LOGGER + "."
    if name.startswith(prefix):
        name = name[len(prefix) :]
    return logging.getLogger(prefix + name)
