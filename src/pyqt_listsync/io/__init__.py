"""Backing store: records, fetch requests and the SQLite record store."""

from .fetch_request import FetchRequest, ObjectID, Record, SortDescriptor, group_by_section
from .record_store import IN_MEMORY, ChangeSet, RecordStore

__all__ = [
    "FetchRequest",
    "ObjectID",
    "Record",
    "SortDescriptor",
    "group_by_section",
    "IN_MEMORY",
    "ChangeSet",
    "RecordStore",
]
