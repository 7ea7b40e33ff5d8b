"""
List reconciler: owns the rendered snapshot and drives a ListView.

apply() diffs the rendered snapshot against a new one, presents every
inserted or reloaded identifier exactly once, swaps the rendered snapshot,
and replays the edit script on the view inside one begin/end batch.

Calls must come from the thread that created the reconciler. A call made
while another apply() is running (for example from a presenter or a view
slot) is queued and runs as soon as the current one finishes.
"""

import logging
import threading
from collections import deque
from typing import Callable, Deque, Dict, Hashable, Optional, Tuple

from PyQt6.QtCore import QObject, pyqtSignal

from pyqt_listsync.core.diff import ItemOperation, OperationKind, SectionOperation, SnapshotDiff, compute_diff
from pyqt_listsync.core.exceptions import ThreadAffinityError
from pyqt_listsync.core.performance_monitor import PerformanceMonitor
from pyqt_listsync.core.snapshot import EMPTY_SNAPSHOT, Snapshot
from pyqt_listsync.protocols import CellPresenter, ListView, VisualUnit, get_listsync_config

logger = logging.getLogger(__name__)


class ListReconciler(QObject):
    """
    Applies Snapshots to a ListView with minimal insert/delete/move/reload calls.

    Signals:
        snapshot_applied(SnapshotDiff): emitted after the view received a batch

    Args:
        view: View receiving the operations
        presenter: Produces visual content for inserted and reloaded items
        placeholder_text: Text for items the presenter cannot resolve
    """

    snapshot_applied = pyqtSignal(object)

    def __init__(self, view: ListView, presenter: CellPresenter, placeholder_text: Optional[str] = None,
                 parent=None):
        super().__init__(parent)
        config = get_listsync_config()
        self._view = view
        self._presenter = presenter
        self._placeholder_text = config.placeholder_text if placeholder_text is None else placeholder_text
        self._monitor = PerformanceMonitor("Reconcile", threshold_ms=config.slow_apply_threshold_ms)
        self._rendered: Snapshot = EMPTY_SNAPSHOT
        self._queue: Deque[Tuple[Snapshot, bool]] = deque()
        self._applying = False
        self._owner_thread = threading.get_ident()
        self._observer_slots: Dict[int, Callable] = {}

    @property
    def rendered_snapshot(self) -> Snapshot:
        return self._rendered

    @property
    def view(self) -> ListView:
        return self._view

    @property
    def presenter(self) -> CellPresenter:
        return self._presenter

    @property
    def is_applying(self) -> bool:
        return self._applying

    @property
    def monitor(self) -> PerformanceMonitor:
        """Timings of every non-empty apply, slow ones logged to the performance logger."""
        return self._monitor

    def apply(self, snapshot: Snapshot, animated: bool = True) -> Optional[SnapshotDiff]:
        """
        Make the view show snapshot.

        Returns:
            The applied SnapshotDiff, or None if the call was queued behind a
            running apply()

        Raises:
            ThreadAffinityError: called off the owning thread
            DuplicateIdentifierError / DuplicateSectionError: snapshot is invalid;
                rendered state is unchanged
        """
        if threading.get_ident() != self._owner_thread:
            raise ThreadAffinityError("ListReconciler.apply() must be called from the UI thread")
        snapshot.validate()

        self._queue.append((snapshot, animated))
        if self._applying:
            logger.debug(f"apply() re-entered, queued ({len(self._queue)} pending)")
            return None

        self._applying = True
        applied: Optional[SnapshotDiff] = None
        try:
            while self._queue:
                next_snapshot, next_animated = self._queue.popleft()
                diff = self._apply_one(next_snapshot, next_animated)
                if applied is None:
                    applied = diff
        finally:
            self._applying = False
        return applied

    def _apply_one(self, snapshot: Snapshot, animated: bool) -> SnapshotDiff:
        diff = compute_diff(self._rendered, snapshot)
        # Reload marks are consumed by this pass; applying the same snapshot again is a no-op
        rendered = Snapshot(snapshot.sections)
        if diff.is_empty:
            self._rendered = rendered
            logger.debug("Snapshot unchanged, nothing to apply")
            return diff

        visuals: Dict[Hashable, VisualUnit] = {}
        for op in diff.operations:
            if isinstance(op, ItemOperation) and op.kind in (OperationKind.INSERT, OperationKind.RELOAD):
                visuals[op.identifier] = self._present(op.identifier)

        self._rendered = rendered

        with self._monitor.measure(inserted=len(diff.inserted), deleted=len(diff.deleted), moved=len(diff.moved)):
            self._view.begin_updates(animated)
            try:
                for op in diff.operations:
                    self._dispatch(op, visuals)
            finally:
                self._view.end_updates(animated)

        logger.debug(
            f"Applied snapshot: +{len(diff.inserted)} -{len(diff.deleted)} "
            f"~{len(diff.moved)} moved, {len(diff.reloaded)} reloaded, animated={animated}"
        )
        self.snapshot_applied.emit(diff)
        return diff

    def _present(self, identifier: Hashable) -> VisualUnit:
        visual = self._presenter.present(identifier)
        if visual is None:
            logger.warning(f"Presenter could not resolve {identifier}, showing placeholder")
            visual = self._presenter.placeholder(identifier, self._placeholder_text)
        return visual

    def _dispatch(self, op, visuals: Dict[Hashable, VisualUnit]) -> None:
        view = self._view
        if isinstance(op, SectionOperation):
            if op.kind is OperationKind.INSERT:
                view.insert_section(op.to_index, op.section)
            elif op.kind is OperationKind.DELETE:
                view.delete_section(op.from_index)
            elif op.kind is OperationKind.MOVE:
                view.move_section(op.from_index, op.to_index)
            return

        if op.kind is OperationKind.INSERT:
            view.insert_item(op.to_path.section, op.to_path.row, op.identifier, visuals[op.identifier])
        elif op.kind is OperationKind.DELETE:
            view.delete_item(op.from_path.section, op.from_path.row)
        elif op.kind is OperationKind.MOVE:
            view.move_item(op.from_path.section, op.from_path.row, op.to_path.section, op.to_path.row)
        elif op.kind is OperationKind.RELOAD:
            view.reload_item(op.to_path.section, op.to_path.row, visuals[op.identifier])

    # ========== OBSERVER BINDING ==========

    def connect_observer(self, observer, animated: Optional[bool] = None) -> None:
        """
        Apply every snapshot the observer emits.

        The observer's current snapshot, if any, is applied right away without
        animation.
        """
        if animated is None:
            animated = get_listsync_config().animate_differences

        def on_snapshot(snapshot: Snapshot) -> None:
            self.apply(snapshot, animated)

        observer.snapshot_changed.connect(on_snapshot)
        self._observer_slots[id(observer)] = on_snapshot
        if observer.snapshot is not None:
            self.apply(observer.snapshot, animated=False)

    def disconnect_observer(self, observer) -> None:
        slot = self._observer_slots.pop(id(observer), None)
        if slot is not None:
            observer.snapshot_changed.disconnect(slot)
