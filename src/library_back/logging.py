"""
Logging for the library backend.

``setup_logging()`` attaches two handlers to the ``library_back`` logger:

- console: one short line per record, ``12:00:01 [API] WARNING: ...``
- ``<log_dir>/library.log``: rotating JSONL, one object per record with
  timestamp, level, component, message and any structured context

Components are the API (resolvers) and the STORE (database connection).
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import UTC, datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

LOGGER_NAME = "library_back"
LOG_FILE_NAME = "library.log"
MAX_LOG_BYTES = 5 * 1024 * 1024
LOG_BACKUPS = 3

# ANSI colours for the level tag; disabled by NO_COLOR or a non-tty stdout
_USE_COLOR = not os.environ.get("NO_COLOR") and sys.stdout.isatty()
_LEVEL_COLORS = {
    logging.WARNING: "\033[33m",
    logging.ERROR: "\033[31m",
    logging.CRITICAL: "\033[35m",
}
_RESET = "\033[0m"


class JSONLFormatter(logging.Formatter):
    """One JSON object per line.

    Warnings and above also carry their source location, and records logged
    with ``exc_info`` carry the exception type and message.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "component": getattr(record, "component", "LIB"),
            "message": record.getMessage(),
        }
        context = getattr(record, "context", None)
        if context:
            entry["context"] = context
        if record.levelno >= logging.WARNING:
            entry["source"] = {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            }
        if record.exc_info and record.exc_info[0]:
            entry["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
            }
        return json.dumps(entry, default=str)


class ConsoleFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        line = f"{timestamp} [{getattr(record, 'component', 'LIB')}]"

        # INFO is the common case and stays untagged
        if record.levelno != logging.INFO:
            level = record.levelname
            color = _LEVEL_COLORS.get(record.levelno)
            if _USE_COLOR and color:
                level = f"{color}{level}{_RESET}"
            line = f"{line} {level}:"

        line = f"{line} {record.getMessage()}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def setup_logging(log_dir: Path | str = ".library/logs", level: int | str = logging.INFO) -> Path:
    """
    Install the console and JSONL file handlers.

    Calling it again replaces the handlers, so tests can point each run at
    its own directory.

    Args:
        log_dir: Directory for ``library.log``
        level: Minimum level, as a number or a name such as ``"INFO"``

    Returns:
        Path to the log file
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    directory = Path(log_dir)
    directory.mkdir(parents=True, exist_ok=True)
    log_file = directory / LOG_FILE_NAME

    root = logging.getLogger(LOGGER_NAME)
    root.setLevel(level)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    root.propagate = False

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(ConsoleFormatter())
    root.addHandler(console)

    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=MAX_LOG_BYTES,
        backupCount=LOG_BACKUPS,
        encoding="utf-8",
    )
    file_handler.setFormatter(JSONLFormatter())
    root.addHandler(file_handler)

    return log_file


class _ComponentFilter(logging.Filter):
    """Stamps records with the component tag the formatters print."""

    def __init__(self, component: str) -> None:
        super().__init__()
        self.component = component

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "component"):
            record.component = self.component
        return True


def get_logger(component: str) -> logging.Logger:
    """Logger for one component, e.g. ``get_logger("API")``."""
    logger = logging.getLogger(f"{LOGGER_NAME}.{component.lower()}")
    if not any(isinstance(f, _ComponentFilter) for f in logger.filters):
        logger.addFilter(_ComponentFilter(component))
    return logger


def log_with_context(logger: logging.Logger, level: int, message: str, **context: Any) -> None:
    """Log ``message`` with keyword arguments as structured JSONL context."""
    logger.log(level, message, extra={"context": context} if context else None)


def get_api_logger() -> logging.Logger:
    return get_logger("API")


def get_store_logger() -> logging.Logger:
    return get_logger("STORE")
