"""
Core log utilities for pyqt-listsync.

Logging setup for the bundled apps and discovery of their log files.
Library modules only create module loggers; handlers are installed by
applications through setup_logging().
"""

import logging
import time
from pathlib import Path
from typing import List, Optional

from pyqt_listsync.protocols import get_listsync_config

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _get_log_dir() -> Path:
    """Return configured log directory or default."""
    config = get_listsync_config()
    if config.log_dir:
        return Path(config.log_dir)
    return Path.home() / ".local" / "share" / "pyqt_listsync" / "logs"


def _get_log_prefix() -> str:
    """Return the first configured log prefix or default."""
    prefixes = get_listsync_config().log_prefixes
    return prefixes[0] if prefixes else "pyqt_listsync_"


def setup_logging(app_name: str, level: int = logging.INFO, log_to_file: bool = True) -> Optional[Path]:
    """
    Install console and file handlers on the root logger.

    Args:
        app_name: Used in the log file name
        level: Root log level
        log_to_file: Also write to <log_dir>/<prefix><app_name>_<timestamp>.log

    Returns:
        Path of the log file, or None when only logging to console
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root_logger.addHandler(console_handler)

    if not log_to_file:
        return None

    log_dir = _get_log_dir()
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.warning(f"Cannot create log directory {log_dir}: {e}, logging to console only")
        return None

    log_path = log_dir / f"{_get_log_prefix()}{app_name}_{int(time.time())}.log"
    file_handler = logging.FileHandler(log_path)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root_logger.addHandler(file_handler)
    logger.info(f"Logging to {log_path}")
    return log_path


def get_current_log_file_path() -> Optional[str]:
    """Get the current log file path from the root logger, if any."""
    for handler in logging.getLogger().handlers:
        if isinstance(handler, logging.FileHandler):
            return handler.baseFilename
    return None


def discover_logs(log_directory: Optional[Path] = None) -> List[Path]:
    """Return app log files in the log directory, newest first."""
    log_directory = log_directory or _get_log_dir()
    if not log_directory.exists():
        return []
    prefixes = get_listsync_config().log_prefixes or [_get_log_prefix()]
    logs = [
        path for path in log_directory.glob("*.log")
        if any(path.name.startswith(prefix) for prefix in prefixes)
    ]
    return sorted(logs, key=lambda path: path.stat().st_mtime, reverse=True)
