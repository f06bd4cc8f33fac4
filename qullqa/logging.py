"""Logging setup for the Qullqa service.

Usage:
    from qullqa.logging import configure_logging

    configure_logging(settings)
"""

import json
import logging
import logging.handlers
import sys
from datetime import UTC, datetime

from qullqa.config import Settings

LOG_FILENAME = "qullqa.log"


class JsonFormatter(logging.Formatter):
    """Custom formatter that outputs one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        if hasattr(record, "extra_data"):
            log_entry["extra"] = record.extra_data

        return json.dumps(log_entry, default=str)


class PrettyFormatter(logging.Formatter):
    """Human-readable formatter with colors."""

    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def __init__(self, use_color: bool = True) -> None:
        super().__init__()
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, "") if self.use_color else ""
        reset = self.RESET if color else ""
        timestamp = datetime.fromtimestamp(record.created).strftime("%Y-%m-%d %H:%M:%S")

        msg = (
            f"{color}[{timestamp}] {record.levelname:8}{reset} "
            f"{record.name} - {record.getMessage()}"
        )

        if record.exc_info:
            msg += "\n" + self.formatException(record.exc_info)

        return msg


def _build_formatter(settings: Settings, stream_is_tty: bool) -> logging.Formatter:
    if settings.log_format == "json":
        return JsonFormatter()
    return PrettyFormatter(use_color=stream_is_tty)


def configure_logging(settings: Settings) -> list[logging.Handler]:
    """Configure root logging from settings and return the installed handlers.

    Console logging is always enabled. A rotating file handler in
    ``settings.logs_dir`` is added when enabled and the directory is writable.
    """
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(_build_formatter(settings, sys.stderr.isatty()))
    handlers: list[logging.Handler] = [console_handler]

    if settings.log_to_file:
        log_file = settings.logs_dir / LOG_FILENAME
        try:
            settings.logs_dir.mkdir(parents=True, exist_ok=True)
            file_handler = logging.handlers.RotatingFileHandler(
                log_file,
                maxBytes=10 * 1024 * 1024,  # 10MB
                backupCount=5,
                encoding="utf-8",
            )
            file_handler.setFormatter(_build_formatter(settings, stream_is_tty=False))
            handlers.append(file_handler)
        except OSError as e:
            # Keep the service usable with console logging only
            print(f"Warning: Could not create log file at {log_file}: {e}", file=sys.stderr)

    logging.basicConfig(
        level=settings.log_level.upper(),
        handlers=handlers,
        force=True,
    )
    return handlers
