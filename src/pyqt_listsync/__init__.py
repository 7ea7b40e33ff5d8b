"""
pyqt-listsync: incremental list reconciliation for PyQt6.

Keeps a list view in step with a changing data source by diffing immutable
snapshots and replaying the minimal set of inserts, deletes, moves and
reloads on the view.

Architecture:
- Tier 1 (Core): Snapshots, diffing, errors, timers and background tasks
- Tier 2 (Protocols): ListView and CellPresenter ABCs, global config
- Tier 3 (IO): SQLite record store with per-transaction change notification
- Tier 4 (Services): ChangeObserver, ListReconciler, presenters, commands
- Tier 5 (Widgets/Apps): DiffableListWidget and two example windows

Key Features:
- Moves instead of delete+insert for reordered items
- One snapshot per committed store transaction, optional coalescing
- Background fetching with stale results discarded
- Placeholders instead of crashes for unresolvable items
"""

__version__ = "0.1.0"

from pyqt_listsync.core import (
    DEFAULT_SECTION,
    ConfigurationError,
    DuplicateIdentifierError,
    IndexPath,
    ListSyncError,
    Snapshot,
    SnapshotBuilder,
    SnapshotDiff,
    StoreError,
    compute_diff,
)
from pyqt_listsync.protocols import CellPresenter, ListSyncConfig, ListView, VisualUnit
from pyqt_listsync.services import ChangeObserver, CreateItemCommand, ListReconciler

__all__ = [
    "__version__",
    "DEFAULT_SECTION",
    "ConfigurationError",
    "DuplicateIdentifierError",
    "IndexPath",
    "ListSyncError",
    "Snapshot",
    "SnapshotBuilder",
    "SnapshotDiff",
    "StoreError",
    "compute_diff",
    "CellPresenter",
    "ListSyncConfig",
    "ListView",
    "VisualUnit",
    "ChangeObserver",
    "CreateItemCommand",
    "ListReconciler",
]
