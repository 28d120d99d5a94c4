"""
TBX Core Logging and Monitoring - Structured Logging and Timing

This module provides console and JSON log formatting, root logger
setup for the command line and server entry points, and a timing
context manager used around load, index and query operations.

University of Athens - Nikolaos Lavidas
"""

from __future__ import annotations
import sys
import json
import time
import logging
from pathlib import Path
from typing import Dict, Optional, Any, Union
from datetime import datetime
from contextlib import contextmanager


class StructuredFormatter(logging.Formatter):
    """Formatter for structured JSON logging"""

    def __init__(self, include_context: bool = True):
        super().__init__()
        self.include_context = include_context

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON"""
        log_data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno
        }

        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": self.formatException(record.exc_info)
            }

        if self.include_context and hasattr(record, "context"):
            log_data["context"] = record.context

        if hasattr(record, "duration_ms"):
            log_data["duration_ms"] = record.duration_ms

        return json.dumps(log_data, default=str)


class ConsoleFormatter(logging.Formatter):
    """Formatter for console output with colors"""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
        "RESET": "\033[0m"
    }

    def __init__(self, use_colors: bool = True):
        super().__init__()
        self.use_colors = use_colors and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        """Format log record for console"""
        timestamp = datetime.fromtimestamp(record.created).strftime("%Y-%m-%d %H:%M:%S")
        level = record.levelname

        if self.use_colors:
            color = self.COLORS.get(level, "")
            reset = self.COLORS["RESET"]
            level_str = f"{color}{level:8}{reset}"
        else:
            level_str = f"{level:8}"

        message = f"{timestamp} | {level_str} | {record.name} | {record.getMessage()}"

        if hasattr(record, "duration_ms"):
            message += f" ({record.duration_ms:.1f} ms)"

        if record.exc_info:
            message += "\n" + self.formatException(record.exc_info)

        return message


def setup_logging(
    verbose: bool = False,
    debug: bool = False,
    json_format: bool = False,
    log_file: Optional[Union[str, Path]] = None
):
    """Setup logging configuration"""
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(StructuredFormatter() if json_format else ConsoleFormatter())
    root.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        if json_format:
            file_handler.setFormatter(StructuredFormatter())
        else:
            file_handler.setFormatter(logging.Formatter(
                "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
            ))
        root.addHandler(file_handler)


@contextmanager
def timed(logger: logging.Logger, operation: str, level: int = logging.DEBUG, **context):
    """Context manager for timing operations"""
    start_time = time.perf_counter()
    logger.log(level, f"Starting: {operation}", extra={"context": context})

    try:
        yield
    except Exception as e:
        duration_ms = (time.perf_counter() - start_time) * 1000
        logger.error(
            f"Failed: {operation} - {e}",
            extra={"context": context, "duration_ms": duration_ms}
        )
        raise

    duration_ms = (time.perf_counter() - start_time) * 1000
    logger.log(
        level,
        f"Completed: {operation}",
        extra={"context": context, "duration_ms": duration_ms}
    )
