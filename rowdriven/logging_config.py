"""Logging configuration for the rowdriven test engine."""

import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Optional
import json
from datetime import datetime

# LogRecord attributes that are not structured "extra" fields
_RECORD_ATTRS = frozenset(
    (
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "getMessage",
        "exc_info",
        "exc_text",
        "stack_info",
        "taskName",
        "message",
        "asctime",
    )
)

_AREAS = ("loaders", "runner", "cli")


class JsonFormatter(logging.Formatter):
    """JSON formatter for structured logging (CI log collectors)."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        # Add extra fields from record
        for key, value in record.__dict__.items():
            if key not in _RECORD_ATTRS:
                log_entry[key] = value

        return json.dumps(log_entry, separators=(",", ":"), default=str)


def setup_logging(
    level: str = None,
    log_dir: Optional[str] = None,
    enable_console: bool = True,
    enable_file: bool = False,
    json_format: Optional[bool] = None,
    max_file_size_mb: int = 10,
    backup_count: int = 5,
) -> None:
    """
    Setup logging for rowdriven.

    Only the ``rowdriven`` logger hierarchy is configured so that the host
    test runner keeps control of the root logger.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_dir: Directory for log files (defaults to logs/)
        enable_console: Enable console logging
        enable_file: Enable rotating file logging
        json_format: Use JSON format for logs (defaults to ROWDRIVEN_LOG_JSON)
        max_file_size_mb: Maximum size per log file in MB
        backup_count: Number of backup files to keep
    """
    if level is None:
        level = os.getenv("ROWDRIVEN_LOG_LEVEL", "INFO").upper()

    if json_format is None:
        json_format = os.getenv("ROWDRIVEN_LOG_JSON", "").lower() in ("1", "true", "yes")

    logger = logging.getLogger("rowdriven")
    logger.setLevel(getattr(logging, level))
    logger.handlers.clear()

    if json_format:
        formatter = JsonFormatter()
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s "
            "[%(filename)s:%(lineno)d]"
        )

    if enable_console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(getattr(logging, level))
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    if enable_file:
        if log_dir is None:
            log_dir = os.getenv("ROWDRIVEN_LOG_DIR", "logs")
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            log_path / "rowdriven.log",
            maxBytes=max_file_size_mb * 1024 * 1024,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setLevel(getattr(logging, level))
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    _setup_area_loggers()


def _setup_area_loggers() -> None:
    """Apply per-area level overrides (ROWDRIVEN_LOG_LEVEL_LOADERS, ...)."""
    for area in _AREAS:
        level = os.getenv(f"ROWDRIVEN_LOG_LEVEL_{area.upper()}", None)
        if level:
            logging.getLogger(f"rowdriven.{area}").setLevel(getattr(logging, level.upper()))


def get_logger(name: str) -> logging.Logger:
    """Get logger for specific module."""
    if not name.startswith("rowdriven."):
        name = f"rowdriven.{name}"
    return logging.getLogger(name)
