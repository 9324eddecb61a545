#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Logging configuration for the haproxyStats package.

Standard output carries the converted documents, so every handler set up
here writes to stderr or to a file. Console output is colored for humans,
JSON output is for log collectors.
Uses Python 3.10+ type annotations.
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from haproxyStats.errors import ConfigurationError

# Determine if we're in a production environment
IS_PRODUCTION = os.environ.get("ENVIRONMENT", "").lower() == "production"

DEFAULT_LOG_LEVEL = logging.INFO

# Attributes every LogRecord has; anything else was passed through `extra`
STANDARD_ATTRIBUTES = frozenset(logging.makeLogRecord({}).__dict__) | {"message", "asctime"}


class Colors:
    RESET = "\033[0m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    MAGENTA = "\033[35m"
    GRAY = "\033[37m"


class JSONFormatter(logging.Formatter):
    """
    Log formatter that emits one JSON object per record.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info and record.exc_info[0] is not None:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info),
            }

        for key, value in record.__dict__.items():
            if key not in STANDARD_ATTRIBUTES:
                log_data[key] = value

        return json.dumps(log_data, default=str)


class ConsoleFormatter(logging.Formatter):
    """
    Log formatter for terminals, with the level name colored.
    """
    DEFAULT_FORMAT = "[%(asctime)s] %(levelname)s [%(name)s] %(message)s"

    LEVEL_COLORS = {
        "DEBUG": Colors.GRAY,
        "INFO": Colors.GREEN,
        "WARNING": Colors.YELLOW,
        "ERROR": Colors.RED,
        "CRITICAL": Colors.MAGENTA
    }

    def __init__(self, use_colors: bool = True) -> None:
        """
        Initialize the console formatter.

        Args:
            use_colors: Whether to use colors when stderr is a terminal
        """
        super().__init__(fmt=self.DEFAULT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
        self.use_colors = use_colors and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        if not self.use_colors:
            return super().format(record)

        # Color a copy so other handlers see the plain level name
        record_copy = logging.makeLogRecord(record.__dict__)
        color = self.LEVEL_COLORS.get(record_copy.levelname, "")
        if color:
            record_copy.levelname = f"{color}{record_copy.levelname}{Colors.RESET}"
        return super().format(record_copy)


def configure_logging(
    level: int | str = DEFAULT_LOG_LEVEL,
    json_output: bool = False,
    log_file: Optional[str] = None
) -> None:
    """
    Configure the logging system for the application.

    Args:
        level: Logging level (name or number)
        json_output: Whether to output logs in JSON format
        log_file: Optional file to write JSON logs to

    Raises:
        ConfigurationError: If the log file cannot be opened
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), DEFAULT_LOG_LEVEL)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    if json_output:
        console_handler.setFormatter(JSONFormatter())
    else:
        console_handler.setFormatter(ConsoleFormatter(use_colors=not IS_PRODUCTION))
    root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file).absolute()
        try:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(str(log_path))
        except OSError as e:
            raise ConfigurationError(f"Cannot open log file {log_path}: {e}") from e
        file_handler.setLevel(level)
        # Always use JSON for file logging for better analysis
        file_handler.setFormatter(JSONFormatter())
        root_logger.addHandler(file_handler)

    # Keep connection chatter out of per-request output
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("requests").setLevel(logging.WARNING)

    root_logger.debug(
        "Logging configured: level=%s, json=%s, file=%s",
        logging.getLevelName(level),
        json_output,
        log_file or "none"
    )
