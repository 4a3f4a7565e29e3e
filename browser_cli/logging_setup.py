"""Logging setup for browser-cli.

Logs always go to stderr so command results on stdout stay machine-readable.
Text and JSON record formats, with --quiet and --verbose overrides.

Note: Named logging_setup.py to avoid conflicts with Python's built-in logging module.
"""

import sys
import json
import logging
from typing import Optional, Dict, Any, Union
from datetime import datetime, timezone

PACKAGE_LOGGER = "browser_cli"


class JSONFormatter(logging.Formatter):
    """Formats log records as one JSON object per line.

    Example output:
        {"timestamp": "2026-10-18T09:30:00.123000+00:00", "level": "DEBUG",
         "logger": "browser_cli.connection", "message": "Sent command 3: Page.navigate",
         "extra": {"id": 3}}
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        context = getattr(record, "context", None)
        if isinstance(context, dict) and context:
            log_data["extra"] = context

        if record.levelno == logging.DEBUG:
            log_data["location"] = {
                "file": record.filename,
                "line": record.lineno,
                "function": record.funcName,
            }

        return json.dumps(log_data, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable format.

    Example output:
        2026-10-18 09:30:00 [WARNING] browser_cli.connection: WebSocket connection closed
    """

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )


def resolve_level(
    level: Optional[str] = None, quiet: bool = False, verbose: bool = False
) -> int:
    """Pick the effective level: quiet > verbose > explicit level > WARNING."""
    if quiet:
        return logging.ERROR
    if verbose:
        return logging.DEBUG
    if level:
        return getattr(logging, level.upper(), logging.WARNING)
    return logging.WARNING


def setup_logging(
    format_type: str = "text",
    level: Optional[str] = None,
    quiet: bool = False,
    verbose: bool = False,
) -> None:
    """Configure the root logger with a single stderr handler.

    Args:
        format_type: "json" or "text"
        level: "DEBUG", "INFO", "WARNING", "ERROR" or "CRITICAL"
        quiet: Only errors (wins over verbose)
        verbose: Debug output, including every CDP command id sent
    """
    log_level = resolve_level(level, quiet, verbose)

    formatter: Union[JSONFormatter, TextFormatter]
    if format_type == "json":
        formatter = JSONFormatter()
    else:
        formatter = TextFormatter()

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # websockets logs every frame at DEBUG; keep it one notch quieter
    logging.getLogger("websockets").setLevel(max(log_level, logging.INFO))
    logging.getLogger(PACKAGE_LOGGER).setLevel(log_level)


def log_with_context(
    logger: logging.Logger, level: int, message: str, **context_fields
) -> None:
    """Log a message with structured context fields.

    The fields appear under "extra" in JSON output and are ignored by the
    text formatter.

    Example:
        log_with_context(logger, logging.DEBUG, "Sent command", id=4, method="Page.reload")
    """
    if context_fields:
        logger.log(level, message, extra={"context": context_fields}, stacklevel=2)
    else:
        logger.log(level, message, stacklevel=2)
