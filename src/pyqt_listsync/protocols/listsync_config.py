"""Global configuration for list synchronization.

Provides hooks for applications to tune observers, reconcilers and the
bundled list widget without threading settings through every constructor.
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple


@dataclass
class ListSyncConfig:
    """Base configuration for list synchronization behavior.

    Applications can subclass this to provide custom configuration.

    Attributes:
        coalesce_ms: Trailing window for merging rapid store changes into one
            snapshot. 0 delivers one snapshot per committed transaction.
        background_fetch: Re-run fetches on a worker thread
        animate_differences: Default for reconciler passes driven by an observer
        highlight_rgb: Colour flashed over inserted and moved rows
        highlight_fade_ms: Duration of the highlight fade
        placeholder_text: Shown for items whose backing record is missing
        date_format: strftime format used by DateCellPresenter
        database_path: Store location for the bundled apps (None = in-memory)
        log_dir: Directory for app log files (None = ~/.local/share/pyqt_listsync/logs)
        log_prefixes: File name prefixes identifying app logs; the first names new files
        performance_logger_name: Logger receiving fetch and reconcile timings
        slow_apply_threshold_ms: Reconcile passes at least this long are logged
    """

    coalesce_ms: int = 0
    background_fetch: bool = False
    animate_differences: bool = True
    highlight_rgb: Tuple[int, int, int] = (255, 214, 102)
    highlight_fade_ms: int = 400
    placeholder_text: str = "—"
    date_format: str = "%x %X"
    database_path: Optional[str] = None
    log_dir: Optional[str] = None
    log_prefixes: list = field(default_factory=lambda: ["pyqt_listsync_"])
    performance_logger_name: str = "pyqt_listsync.performance"
    slow_apply_threshold_ms: float = 16.0


# Global config instance (set by application)
_listsync_config: Optional[ListSyncConfig] = None


def set_listsync_config(config: ListSyncConfig) -> None:
    """Set the global list synchronization configuration.

    Args:
        config: ListSyncConfig instance
    """
    global _listsync_config
    _listsync_config = config


def get_listsync_config() -> ListSyncConfig:
    """Get the current list synchronization configuration.

    Returns:
        Current ListSyncConfig or default if not set
    """
    if _listsync_config is None:
        return ListSyncConfig()
    return _listsync_config
