"""
Contracts and configuration.

ABC-based contracts for views and cell presenters, plus the global
configuration hook.
"""

from .cell_presenter import ALIGN_CENTER, ALIGN_LEFT, ALIGN_RIGHT, CellPresenter, VisualUnit
from .list_view import ListView
from .listsync_config import ListSyncConfig, get_listsync_config, set_listsync_config

__all__ = [
    "ALIGN_CENTER",
    "ALIGN_LEFT",
    "ALIGN_RIGHT",
    "CellPresenter",
    "VisualUnit",
    "ListView",
    "ListSyncConfig",
    "get_listsync_config",
    "set_listsync_config",
]
