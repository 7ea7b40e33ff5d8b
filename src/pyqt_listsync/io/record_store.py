"""
SQLite-backed record store with change notification.

Records are grouped by entity and keep their field values as JSON. Mutations
are staged in an open SQLite transaction and become durable on save(), which
also emits exactly one objects_changed signal describing the whole
transaction.

Usage:
    store = RecordStore(entities=["DateItem"])
    store.objects_changed.connect(on_change)

    with store.transaction():
        store.insert("DateItem", date_created=time.time())
"""

import json
import logging
import sqlite3
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Set

from PyQt6.QtCore import QObject, pyqtSignal

from pyqt_listsync.core.exceptions import StoreError, StoreUnavailableError, UnknownEntityError
from pyqt_listsync.io.fetch_request import FetchRequest, ObjectID, Record

logger = logging.getLogger(__name__)

IN_MEMORY = ":memory:"

_SCHEMA = """
CREATE TABLE IF NOT EXISTS records (
    pk INTEGER PRIMARY KEY AUTOINCREMENT,
    entity TEXT NOT NULL,
    fields TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS records_entity ON records (entity);
"""


@dataclass(frozen=True)
class ChangeSet:
    """Object ids touched by one committed transaction."""
    inserted: frozenset = field(default_factory=frozenset)
    updated: frozenset = field(default_factory=frozenset)
    deleted: frozenset = field(default_factory=frozenset)

    @property
    def entities(self) -> Set[str]:
        return {oid.entity for oid in self.inserted | self.updated | self.deleted}

    def affects(self, entity: str) -> bool:
        return entity in self.entities

    def __bool__(self) -> bool:
        return bool(self.inserted or self.updated or self.deleted)


class _PendingChanges:
    """Accumulates object ids touched since the last save."""

    def __init__(self):
        self.inserted: Set[ObjectID] = set()
        self.updated: Set[ObjectID] = set()
        self.deleted: Set[ObjectID] = set()

    def record_insert(self, oid: ObjectID) -> None:
        self.inserted.add(oid)

    def record_update(self, oid: ObjectID) -> None:
        if oid not in self.inserted:
            self.updated.add(oid)

    def record_delete(self, oid: ObjectID) -> None:
        if oid in self.inserted:
            # Inserted and deleted within one transaction: never visible to observers
            self.inserted.discard(oid)
            return
        self.updated.discard(oid)
        self.deleted.add(oid)

    def freeze(self) -> ChangeSet:
        return ChangeSet(frozenset(self.inserted), frozenset(self.updated), frozenset(self.deleted))

    def __bool__(self) -> bool:
        return bool(self.inserted or self.updated or self.deleted)


class RecordStore(QObject):
    """
    Durable record store shared by commands and change observers.

    The store's lock is its only concurrency boundary: reads may come from a
    background fetch thread while the UI thread stages and saves changes.

    Signals:
        objects_changed(ChangeSet): emitted once per successful save()
    """

    objects_changed = pyqtSignal(object)

    def __init__(self, path: str = IN_MEMORY, entities: Iterable[str] = (), parent=None):
        super().__init__(parent)
        self._path = path
        self._entities = set(entities)
        self._lock = threading.RLock()
        self._pending = _PendingChanges()
        try:
            self._conn: Optional[sqlite3.Connection] = sqlite3.connect(path, check_same_thread=False)
            self._conn.executescript(_SCHEMA)
            self._conn.commit()
        except sqlite3.Error as e:
            raise StoreUnavailableError(f"Cannot open record store at {path!r}: {e}") from e
        logger.debug(f"Opened record store at {path!r} with entities {sorted(self._entities)}")

    # ========== SCHEMA ==========

    @property
    def path(self) -> str:
        return self._path

    @property
    def entities(self) -> Set[str]:
        return set(self._entities)

    def register_entity(self, entity: str) -> None:
        self._entities.add(entity)

    def _check_entity(self, entity: str) -> None:
        if entity not in self._entities:
            raise UnknownEntityError(entity)

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise StoreUnavailableError(f"Record store at {self._path!r} is closed")
        return self._conn

    # ========== MUTATION ==========

    def insert(self, entity: str, **fields: Any) -> Record:
        """Stage a new record. Visible to fetches immediately, announced on save()."""
        self._check_entity(entity)
        with self._lock:
            cursor = self._execute(
                "INSERT INTO records (entity, fields) VALUES (?, ?)",
                (entity, _encode(fields)),
            )
            oid = ObjectID(entity, cursor.lastrowid)
            self._pending.record_insert(oid)
        logger.debug(f"Staged insert of {oid}")
        return Record(oid, dict(fields))

    def update(self, object_id: ObjectID, **fields: Any) -> Record:
        """Stage field changes on an existing record."""
        with self._lock:
            current = self.get(object_id)
            if current is None:
                raise KeyError(f"No record {object_id}")
            merged = dict(current.fields)
            merged.update(fields)
            self._execute("UPDATE records SET fields = ? WHERE pk = ?", (_encode(merged), object_id.pk))
            self._pending.record_update(object_id)
        logger.debug(f"Staged update of {object_id}: {sorted(fields)}")
        return Record(object_id, merged)

    def delete(self, object_id: ObjectID) -> None:
        with self._lock:
            cursor = self._execute(
                "DELETE FROM records WHERE pk = ? AND entity = ?",
                (object_id.pk, object_id.entity),
            )
            if cursor.rowcount == 0:
                raise KeyError(f"No record {object_id}")
            self._pending.record_delete(object_id)
        logger.debug(f"Staged delete of {object_id}")

    @property
    def has_changes(self) -> bool:
        return bool(self._pending)

    def save(self) -> ChangeSet:
        """
        Commit staged changes and announce them.

        Returns:
            The committed ChangeSet (empty when nothing was staged)

        Raises:
            StoreError: commit failed; staged changes are kept
        """
        with self._lock:
            conn = self._connection()
            if not self._pending and not conn.in_transaction:
                return ChangeSet()
            try:
                conn.commit()
            except sqlite3.Error as e:
                raise StoreError(f"Commit to {self._path!r} failed: {e}") from e
            change_set = self._pending.freeze()
            self._pending = _PendingChanges()

        if not change_set:
            return change_set
        logger.debug(
            f"Committed {len(change_set.inserted)} inserts, {len(change_set.updated)} updates, "
            f"{len(change_set.deleted)} deletes"
        )
        self.objects_changed.emit(change_set)
        return change_set

    def rollback(self) -> None:
        """Discard staged changes."""
        with self._lock:
            try:
                self._connection().rollback()
            except sqlite3.Error as e:
                raise StoreError(f"Rollback on {self._path!r} failed: {e}") from e
            self._pending = _PendingChanges()

    @contextmanager
    def transaction(self):
        """Stage changes and save on success, roll back on error."""
        try:
            yield self
        except Exception:
            self.rollback()
            raise
        self.save()

    # ========== QUERIES ==========

    def get(self, object_id: ObjectID) -> Optional[Record]:
        with self._lock:
            row = self._execute(
                "SELECT fields FROM records WHERE pk = ? AND entity = ?",
                (object_id.pk, object_id.entity),
            ).fetchone()
        if row is None:
            return None
        return Record(object_id, _decode(row[0]))

    def fetch(self, request: FetchRequest) -> List[Record]:
        """
        Execute a fetch request.

        Raises:
            FetchRequestError: the request is malformed
            StoreError: the store could not be read
        """
        request.validate()
        self._check_entity(request.entity)
        with self._lock:
            rows = self._execute(
                "SELECT pk, fields FROM records WHERE entity = ?", (request.entity,)
            ).fetchall()
        records = [Record(ObjectID(request.entity, pk), _decode(data)) for pk, data in rows]
        return request.evaluate(records)

    def count(self, entity: str) -> int:
        self._check_entity(entity)
        with self._lock:
            (total,) = self._execute("SELECT COUNT(*) FROM records WHERE entity = ?", (entity,)).fetchone()
        return total

    # ========== LIFECYCLE ==========

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    def close(self) -> None:
        """Close the connection. Staged changes that were never saved are lost."""
        with self._lock:
            if self._conn is None:
                return
            if self._pending:
                logger.warning(f"Closing record store {self._path!r} with unsaved changes")
            self._conn.close()
            self._conn = None
            self._pending = _PendingChanges()

    def _execute(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        try:
            return self._connection().execute(sql, params)
        except sqlite3.Error as e:
            raise StoreError(f"Store query failed: {e}") from e


def _encode(fields: Dict[str, Any]) -> str:
    try:
        return json.dumps(fields, sort_keys=True)
    except TypeError as e:
        raise StoreError(f"Record fields are not serializable: {e}") from e


def _decode(data: str) -> Dict[str, Any]:
    return json.loads(data)
