"""Utility modules for skillfactory."""

from .logger import get_log_file_path, get_logger, setup_logger
from . import terminal_ui  # noqa: E402  (terminal_ui pulls in config)

# Note: Runtime functions are NOT exported here to avoid circular imports.
# Import directly from utils.runtime when needed:
#   from utils.runtime import ensure_runtime_dirs, get_log_dir

__all__ = [
    "setup_logger",
    "get_logger",
    "get_log_file_path",
    "terminal_ui",
]
