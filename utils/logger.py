"""Logging configuration for skillfactory."""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from .runtime import get_log_dir

# Module state: logging is opt-in (--verbose) and configured at most once
_logging_initialized = False
_log_file_path: Optional[str] = None

_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logger(
    log_dir: Optional[str] = None,
    log_level: Optional[str] = None,
    log_to_console: bool = False,
) -> None:
    """Route log records to a timestamped file under the runtime directory.

    Called once from main() when --verbose is given. Build and deploy tasks
    log subprocess invocations and step outcomes, which is the main use of
    these files when a deploy goes wrong.

    Args:
        log_dir: Directory to store log files (default: ~/.skillfactory/logs/)
        log_level: Logging level name (default: Config.LOG_LEVEL)
        log_to_console: Also echo WARNING and above to stderr. Leave off while
            the wizard owns the terminal.
    """
    global _logging_initialized, _log_file_path

    if _logging_initialized:
        return

    if log_dir is None:
        log_dir = get_log_dir()

    if log_level is None:
        from config import Config

        log_level = Config.LOG_LEVEL

    level = getattr(logging, log_level.upper(), logging.DEBUG)
    logging.root.setLevel(level)
    formatter = logging.Formatter(_LOG_FORMAT, datefmt=_DATE_FORMAT)

    log_path = Path(log_dir)
    log_path.mkdir(exist_ok=True, parents=True)
    log_file = log_path / f"skillfactory_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"
    _log_file_path = str(log_file)

    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(level)
    file_handler.setFormatter(formatter)
    logging.root.addHandler(file_handler)

    if log_to_console:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.WARNING)
        console_handler.setFormatter(formatter)
        logging.root.addHandler(console_handler)

    _logging_initialized = True
    logging.info(f"Logging initialized. Level: {log_level}, File: {_log_file_path}")


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a module.

    Without setup_logger() the records have no handler and are dropped.

    Args:
        name: Logger name (typically __name__)
    """
    return logging.getLogger(name)


def get_log_file_path() -> Optional[str]:
    """Return the active log file, or None when verbose logging is off."""
    return _log_file_path
