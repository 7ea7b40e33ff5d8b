"""
Core building blocks.

Snapshots, the diff algorithm, the exception hierarchy and small PyQt6
utilities (debounce timer, background task) with no list-view specifics.
"""

from .exceptions import (
    ListSyncError,
    ConfigurationError,
    DuplicateIdentifierError,
    DuplicateSectionError,
    UnknownSectionError,
    FetchRequestError,
    UnknownEntityError,
    StoreError,
    StoreUnavailableError,
    ThreadAffinityError,
)
from .snapshot import DEFAULT_SECTION, EMPTY_SNAPSHOT, IndexPath, Snapshot, SnapshotBuilder
from .diff import (
    ItemOperation,
    OperationKind,
    SectionOperation,
    SnapshotDiff,
    compute_diff,
    replay,
)
from .debounce_timer import DebounceTimer
from .background_task import BackgroundTask, BackgroundTaskManager

__all__ = [
    "ListSyncError",
    "ConfigurationError",
    "DuplicateIdentifierError",
    "DuplicateSectionError",
    "UnknownSectionError",
    "FetchRequestError",
    "UnknownEntityError",
    "StoreError",
    "StoreUnavailableError",
    "ThreadAffinityError",
    "DEFAULT_SECTION",
    "EMPTY_SNAPSHOT",
    "IndexPath",
    "Snapshot",
    "SnapshotBuilder",
    "ItemOperation",
    "OperationKind",
    "SectionOperation",
    "SnapshotDiff",
    "compute_diff",
    "replay",
    "DebounceTimer",
    "BackgroundTask",
    "BackgroundTaskManager",
]
