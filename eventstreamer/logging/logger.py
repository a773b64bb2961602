"""
Centralized logging configuration for eventstreamer.

Uses rotating file handler with logs stored in a logs/ directory.
Includes colored console output for debug mode.
"""
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List, Optional

from eventstreamer.versioning import APP_NAME, APP_VERSION


_TRUE_VALUES = ("1", "true", "on", "yes")
_FALSE_VALUES = ("0", "false", "off", "no")

_TRACE_ENABLED: bool = False
_INSTALLED_HANDLERS: List[logging.Handler] = []

LOG_FORMAT = '%(asctime)s - %(name)-30s - %(levelname)-8s - %(message)s'
LOG_FILE_NAME = f"{APP_NAME}.log"


def _parse_flag(raw: Optional[str], default: bool) -> bool:
    if raw is None:
        return default
    value = str(raw).strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    return default


_TRACE_ENABLED = _parse_flag(os.getenv("EVENTSTREAMER_TRACE"), False)


class ColoredFormatter(logging.Formatter):
    """Formatter that adds colors to console output."""

    # ANSI color codes
    COLORS = {
        'DEBUG': '\033[36m',       # Cyan
        'INFO': '\033[32m',        # Green
        'WARNING': '\033[33m',     # Yellow
        'ERROR': '\033[31m',       # Red
        'CRITICAL': '\033[35m',    # Magenta
    }
    TRACE_COLOR = '\033[38;5;135m'   # Purple for dispatch tracing
    RESET = '\033[0m'
    BOLD = '\033[1m'

    def format(self, record):
        original_levelname = record.levelname

        if '[TRACE]' in str(record.msg):
            color = self.TRACE_COLOR
        else:
            color = self.COLORS.get(record.levelname)

        if color is None:
            return super().format(record)

        record.levelname = f"{self.BOLD}{color}{record.levelname}{self.RESET}"
        try:
            message = super().format(record)
        finally:
            record.levelname = original_levelname
        return f"{color}{message}{self.RESET}"


def get_log_dir() -> Path:
    """Return the default directory used for log files.

    ``EVENTSTREAMER_LOG_DIR`` overrides the default ``./logs`` location.
    """
    override = os.getenv("EVENTSTREAMER_LOG_DIR")
    if override:
        return Path(override)
    return Path.cwd() / "logs"


def teardown_logging() -> None:
    """Remove and close every handler installed by setup_logging().

    Safe to call repeatedly.
    """
    root_logger = logging.getLogger()
    while _INSTALLED_HANDLERS:
        handler = _INSTALLED_HANDLERS.pop()
        root_logger.removeHandler(handler)
        handler.close()


def setup_logging(
    debug: bool = False,
    verbose: bool = False,
    log_dir: Optional[Path] = None,
) -> Path:
    """
    Configure application logging with file rotation.

    Args:
        debug: If True, set log level to DEBUG and enable console output.
        verbose: Implies debug and also turns on dispatch tracing for
            emitters created afterwards without an explicit ``trace`` flag.
        log_dir: Directory for the rotating log file (defaults to get_log_dir()).

    Returns:
        Path of the active log file.
    """
    teardown_logging()

    debug_enabled = debug or verbose
    target_dir = Path(log_dir) if log_dir is not None else get_log_dir()
    target_dir.mkdir(parents=True, exist_ok=True)
    log_file = target_dir / LOG_FILE_NAME

    level = logging.DEBUG if debug_enabled else logging.INFO

    # File handler with rotation (1MB max, keep 5 backups)
    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=1 * 1024 * 1024,
        backupCount=5,
        encoding='utf-8'
    )
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
    file_handler.setLevel(level)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.addHandler(file_handler)
    _INSTALLED_HANDLERS.append(file_handler)

    if debug_enabled:
        console_handler = logging.StreamHandler(sys.stdout)
        if sys.stdout.isatty():
            console_handler.setFormatter(ColoredFormatter(LOG_FORMAT, datefmt='%H:%M:%S'))
        else:
            console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt='%H:%M:%S'))
        console_handler.setLevel(level)
        root_logger.addHandler(console_handler)
        _INSTALLED_HANDLERS.append(console_handler)

    if verbose:
        set_trace_enabled(True)

    root_logger.info(
        "%s %s logging initialized (debug=%s, verbose=%s, file=%s)",
        APP_NAME,
        APP_VERSION,
        debug_enabled,
        bool(verbose),
        log_file,
    )
    return log_file


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance."""
    return logging.getLogger(name)


def is_trace_enabled() -> bool:
    """Return True when per-consumer dispatch tracing is enabled globally."""

    return _TRACE_ENABLED


def set_trace_enabled(enabled: bool) -> None:
    global _TRACE_ENABLED
    _TRACE_ENABLED = bool(enabled)
