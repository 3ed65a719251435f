"""Logging configuration for rabbithole.

Provides:
- Configurable console log levels (WARNING, INFO, DEBUG)
- A persistent log file, since hotkey invocations have no terminal
- Subprocess call logging
- Operation timing logs
"""

import logging
import sys
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Optional


LOGGER_NAME = "rabbithole"

# Default log format
DEFAULT_FORMAT = "%(levelname)s: %(message)s"
VERBOSE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DEBUG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d: %(message)s"
FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class ColoredFormatter(logging.Formatter):
    """Colored log formatter for terminal output."""

    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
    }
    RESET = '\033[0m'

    def format(self, record):
        """Format log record with colors."""
        formatted = super().format(record)
        color = self.COLORS.get(record.levelname)
        if color:
            formatted = formatted.replace(
                record.levelname, f"{color}{record.levelname}{self.RESET}", 1
            )
        return formatted


def default_log_file() -> Path:
    """Location of the persistent log file."""
    return Path.home() / ".local" / "share" / "rabbithole" / "rabbithole.log"


def setup_logging(
    verbose: bool = False,
    debug: bool = False,
    log_file: Optional[Path] = None,
) -> logging.Logger:
    """Configure logging for the rabbithole CLI.

    Args:
        verbose: Enable verbose console logging (INFO level)
        debug: Enable debug logging (DEBUG level, console and file)
        log_file: Append log records to this file as well (optional)

    Returns:
        Configured package logger

    Examples:
        >>> logger = setup_logging(verbose=True)
        >>> logger.info("Starting operation")
        INFO: Starting operation
    """
    logger = logging.getLogger(LOGGER_NAME)

    # Remove existing handlers
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if debug:
        console_level = logging.DEBUG
        log_format = DEBUG_FORMAT
    elif verbose:
        console_level = logging.INFO
        log_format = VERBOSE_FORMAT
    else:
        console_level = logging.WARNING
        log_format = DEFAULT_FORMAT

    file_level = logging.DEBUG if debug else logging.INFO

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    if sys.stderr.isatty():
        console.setFormatter(ColoredFormatter(log_format))
    else:
        console.setFormatter(logging.Formatter(log_format))
    logger.addHandler(console)

    logger.setLevel(console_level)

    if log_file is not None:
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        except OSError as e:
            logger.warning(f"Cannot write log file {log_file}: {e}")
        else:
            file_handler.setLevel(file_level)
            file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
            logger.addHandler(file_handler)
            logger.setLevel(min(console_level, file_level))

    return logger


def log_subprocess_call(cmd: list, result: Any, logger: logging.Logger) -> None:
    """Log subprocess call with result.

    Args:
        cmd: Command list
        result: subprocess.CompletedProcess result
        logger: Logger instance
    """
    logger.debug(f"Subprocess call: {' '.join(cmd)}")
    logger.debug(f"  Return code: {result.returncode}")

    if getattr(result, 'stdout', None):
        stdout = result.stdout if isinstance(result.stdout, str) else result.stdout.decode()
        logger.debug(f"  stdout: {stdout[:200]}")

    if getattr(result, 'stderr', None):
        stderr = result.stderr if isinstance(result.stderr, str) else result.stderr.decode()
        if stderr:
            logger.debug(f"  stderr: {stderr[:200]}")


@contextmanager
def log_timing(operation: str, logger: logging.Logger):
    """Context manager for logging operation timing.

    Args:
        operation: Operation description
        logger: Logger instance

    Examples:
        >>> with log_timing("Close research window", logger):
        ...     orchestrator.close_if_tracked()
        INFO: Close research window completed in 15.32ms
    """
    start = time.perf_counter()
    logger.debug(f"Starting: {operation}")

    try:
        yield
    finally:
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(f"{operation} completed in {elapsed_ms:.2f}ms")
