"""
Change observer: keeps a Snapshot in step with a fetch request.

Executes a FetchRequest against a RecordStore, turns the ordered result into
a Snapshot of ObjectIDs, and re-runs the request whenever a committed store
transaction touches the request's entity. Each relevant commit produces one
snapshot_changed emission; with coalescing enabled a burst of commits
produces one.

Fetch failures never reach the receiver of snapshot_changed: they are
logged, announced through fetch_failed, and the last snapshot stays in
effect.

Usage:
    observer = ChangeObserver(store, FetchRequest("DateItem", [SortDescriptor("date_created")]))
    observer.snapshot_changed.connect(lambda s: reconciler.apply(s, animated=True))
    observer.start()
"""

import logging
from typing import Hashable, Iterable, List, Optional, Set

from PyQt6.QtCore import QObject, pyqtSignal

from pyqt_listsync.core.background_task import BackgroundTaskManager
from pyqt_listsync.core.debounce_timer import DebounceTimer
from pyqt_listsync.core.exceptions import ConfigurationError, StoreError
from pyqt_listsync.core.performance_monitor import timer
from pyqt_listsync.core.snapshot import DEFAULT_SECTION, IndexPath, Snapshot
from pyqt_listsync.io.fetch_request import FetchRequest, ObjectID, Record, group_by_section
from pyqt_listsync.io.record_store import ChangeSet, RecordStore
from pyqt_listsync.protocols import get_listsync_config

logger = logging.getLogger(__name__)


class _FetchResult:
    """Records and snapshot produced by one fetch generation."""

    __slots__ = ("generation", "records", "snapshot")

    def __init__(self, generation: int, records: List[Record], snapshot: Snapshot):
        self.generation = generation
        self.records = records
        self.snapshot = snapshot


class ChangeObserver(QObject):
    """
    Watches a fetch request and emits Snapshots of its result.

    Signals:
        snapshot_changed(Snapshot): new desired list state
        fetch_failed(Exception): a fetch failed; the previous snapshot stays current

    Args:
        store: Store to query and listen to
        request: Filter and sort order
        section_key: Record field grouping results into sections, None for one section
        coalesce_ms: Merge commits arriving within this window (None = config default)
        background: Fetch on a worker thread (None = config default)
    """

    snapshot_changed = pyqtSignal(object)
    fetch_failed = pyqtSignal(Exception)

    def __init__(self, store: RecordStore, request: FetchRequest, section_key: Optional[str] = None,
                 coalesce_ms: Optional[int] = None, background: Optional[bool] = None, parent=None):
        super().__init__(parent)
        config = get_listsync_config()
        self._store = store
        self._request = request
        self._section_key = section_key
        self._coalesce_ms = config.coalesce_ms if coalesce_ms is None else coalesce_ms
        self._background = config.background_fetch if background is None else background

        self._snapshot: Optional[Snapshot] = None
        self._records: List[Record] = []
        self._by_id: dict = {}
        self._pending_reloads: Set[ObjectID] = set()
        self._generation = 0
        self._observing = False

        self._debounce: Optional[DebounceTimer] = None
        if self._coalesce_ms > 0:
            self._debounce = DebounceTimer(self._coalesce_ms, self._refresh, owner=self)
        self._tasks = BackgroundTaskManager()

    # ========== STATE ==========

    @property
    def request(self) -> FetchRequest:
        return self._request

    @property
    def snapshot(self) -> Optional[Snapshot]:
        """Last emitted snapshot, None before the first successful fetch."""
        return self._snapshot

    @property
    def fetched_records(self) -> List[Record]:
        return list(self._records)

    @property
    def is_observing(self) -> bool:
        return self._observing

    def object_for(self, identifier: Hashable) -> Optional[Record]:
        """Record from the last fetch for an identifier, or None."""
        return self._by_id.get(identifier)

    def object_at(self, path: IndexPath) -> Optional[Record]:
        if self._snapshot is None:
            return None
        try:
            identifier = self._snapshot.item_at(path)
        except IndexError:
            return None
        return self.object_for(identifier)

    # ========== LIFECYCLE ==========

    def start(self) -> Optional[Snapshot]:
        """Subscribe to store changes and perform the initial fetch."""
        if not self._observing:
            self._store.objects_changed.connect(self._on_objects_changed)
            self._observing = True
            logger.debug(f"Observing {self._request.entity!r}")
        return self.perform_fetch()

    def stop(self) -> None:
        """Unsubscribe and drop any pending or in-flight refresh."""
        if self._observing:
            self._store.objects_changed.disconnect(self._on_objects_changed)
            self._observing = False
        if self._debounce is not None:
            self._debounce.cancel()
        self._generation += 1
        self._tasks.cleanup()

    # ========== FETCHING ==========

    def perform_fetch(self) -> Optional[Snapshot]:
        """
        Synchronously execute the request and emit the resulting snapshot.

        Returns:
            The new snapshot, or None if the store could not be read

        Raises:
            ConfigurationError: the request is malformed
        """
        self._request.validate(self._section_key)
        self._generation += 1
        try:
            result = self._fetch(self._generation, frozenset(self._pending_reloads))
        except StoreError as e:
            self._report_failure(e)
            return None
        self._deliver(result)
        return result.snapshot

    def _fetch(self, generation: int, reloads: frozenset) -> _FetchResult:
        with timer("Fetch snapshot", entity=self._request.entity):
            records = self._store.fetch(self._request)
        snapshot = self.build_snapshot(records, reloads)
        return _FetchResult(generation, records, snapshot)

    def build_snapshot(self, records: Iterable[Record], reloads: Iterable[Hashable] = ()) -> Snapshot:
        """Group ordered records into a snapshot; reloads are kept only for present ids."""
        records = list(records)
        grouped = group_by_section(records, self._section_key, DEFAULT_SECTION)
        present = {record.object_id for record in records}
        return Snapshot(grouped, [oid for oid in reloads if oid in present])

    def _on_objects_changed(self, change_set: ChangeSet) -> None:
        if not change_set.affects(self._request.entity):
            return
        self._pending_reloads |= {oid for oid in change_set.updated if oid.entity == self._request.entity}
        if self._debounce is not None:
            self._debounce.trigger()
        else:
            self._refresh()

    def _refresh(self) -> None:
        self._generation += 1
        generation = self._generation
        reloads = frozenset(self._pending_reloads)

        if not self._background:
            try:
                result = self._fetch(generation, reloads)
            except (StoreError, ConfigurationError) as e:
                self._report_failure(e)
                return
            self._deliver(result)
            return

        self._tasks.run(
            target=self._fetch,
            args=(generation, reloads),
            on_success=self._deliver,
            on_error=self._report_failure,
        )

    def _deliver(self, result: _FetchResult) -> None:
        if result.generation != self._generation:
            logger.debug(f"Discarding stale fetch generation {result.generation}")
            return
        self._records = result.records
        self._by_id = {record.object_id: record for record in result.records}
        self._pending_reloads.clear()
        self._snapshot = result.snapshot
        logger.debug(
            f"Snapshot for {self._request.entity!r}: {result.snapshot.number_of_items} items "
            f"in {result.snapshot.number_of_sections} sections"
        )
        self.snapshot_changed.emit(result.snapshot)

    def _report_failure(self, error: Exception) -> None:
        logger.error(f"Fetch for {self._request.entity!r} failed, keeping previous snapshot: {error}")
        self.fetch_failed.emit(error)
