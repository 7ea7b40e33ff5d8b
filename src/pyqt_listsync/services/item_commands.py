"""
Commands that mutate the backing store.

Commands only touch the store. Lists follow through the store's change
notification, never through the command itself.
"""

import logging
import time
from typing import Callable, Iterable, List, Optional

from pyqt_listsync.core.exceptions import StoreError
from pyqt_listsync.io.fetch_request import ObjectID, Record
from pyqt_listsync.io.record_store import RecordStore

logger = logging.getLogger(__name__)


class CreateItemCommand:
    """
    Appends one timestamped record and commits it.

    A failed commit is logged and the staged record is left in place;
    recovering from durability failures is up to the application.
    """

    def __init__(self, store: RecordStore, entity: str = "DateItem", timestamp_field: str = "date_created",
                 clock: Callable[[], float] = time.time):
        self._store = store
        self._entity = entity
        self._timestamp_field = timestamp_field
        self._clock = clock

    def execute(self) -> Record:
        record = self._store.insert(self._entity, **{self._timestamp_field: self._clock()})
        try:
            self._store.save()
        except StoreError as e:
            logger.error(f"Failed to save new {self._entity} {record.object_id}: {e}")
        else:
            logger.info(f"Created {record.object_id}")
        return record

    __call__ = execute


class DeleteItemCommand:
    """Deletes records by id and commits once for the whole batch."""

    def __init__(self, store: RecordStore):
        self._store = store

    def execute(self, object_ids: Iterable[ObjectID]) -> List[ObjectID]:
        deleted: List[ObjectID] = []
        for object_id in object_ids:
            try:
                self._store.delete(object_id)
            except KeyError:
                logger.warning(f"Cannot delete {object_id}: no such record")
                continue
            deleted.append(object_id)
        if not deleted:
            return deleted
        try:
            self._store.save()
        except StoreError as e:
            logger.error(f"Failed to save deletion of {len(deleted)} records: {e}")
        else:
            logger.info(f"Deleted {len(deleted)} records")
        return deleted


class UpdateItemCommand:
    """Changes fields of one record and commits."""

    def __init__(self, store: RecordStore):
        self._store = store

    def execute(self, object_id: ObjectID, **fields) -> Optional[Record]:
        try:
            record = self._store.update(object_id, **fields)
        except KeyError:
            logger.warning(f"Cannot update {object_id}: no such record")
            return None
        try:
            self._store.save()
        except StoreError as e:
            logger.error(f"Failed to save update of {object_id}: {e}")
        return record
