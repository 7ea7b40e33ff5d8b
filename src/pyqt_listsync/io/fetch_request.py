"""Fetch requests: which records to read from a RecordStore and in what order."""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Hashable, List, Mapping, Optional, Tuple

from pyqt_listsync.core.exceptions import FetchRequestError


@dataclass(frozen=True, order=True)
class ObjectID:
    """Stable identifier of one stored record."""
    entity: str
    pk: int

    def __str__(self) -> str:
        return f"x-listsync://{self.entity}/p{self.pk}"


@dataclass(frozen=True)
class Record:
    """One stored record: identity plus a mapping of field values."""
    object_id: ObjectID
    fields: Mapping[str, Any] = field(default_factory=dict)

    @property
    def entity(self) -> str:
        return self.object_id.entity

    def get(self, key: str, default: Any = None) -> Any:
        return self.fields.get(key, default)

    def __getitem__(self, key: str) -> Any:
        return self.fields[key]


@dataclass(frozen=True)
class SortDescriptor:
    """Sort key on a record field."""
    key: str
    ascending: bool = True


@dataclass(frozen=True)
class FetchRequest:
    """
    Filter plus deterministic sort order against one entity.

    Attributes:
        entity: Entity name the store was configured with
        sort_descriptors: Sort keys applied in order; at least one is required
        predicate: Optional filter called with each Record
        fetch_limit: Optional cap on the number of returned records
    """
    entity: str
    sort_descriptors: Tuple[SortDescriptor, ...] = ()
    predicate: Optional[Callable[[Record], bool]] = None
    fetch_limit: Optional[int] = None

    def __post_init__(self):
        # Accept lists for convenience; stored as tuple so the request stays hashable
        object.__setattr__(self, "sort_descriptors", tuple(self.sort_descriptors))

    def validate(self, section_key: Optional[str] = None) -> "FetchRequest":
        """
        Raise FetchRequestError if the request cannot be executed.

        With a section_key, the first sort descriptor must order by that key so
        every section comes back as one contiguous run.
        """
        if not isinstance(self.entity, str) or not self.entity:
            raise FetchRequestError(f"Fetch request needs an entity name, got {self.entity!r}")
        if not self.sort_descriptors:
            raise FetchRequestError(f"Fetch request for {self.entity!r} has no sort descriptors")
        for descriptor in self.sort_descriptors:
            if not isinstance(descriptor, SortDescriptor):
                raise FetchRequestError(f"Expected SortDescriptor, got {type(descriptor).__name__}")
            if not isinstance(descriptor.key, str) or not descriptor.key.isidentifier():
                raise FetchRequestError(f"Invalid sort key {descriptor.key!r}")
        if self.predicate is not None and not callable(self.predicate):
            raise FetchRequestError(f"Predicate must be callable, got {type(self.predicate).__name__}")
        if self.fetch_limit is not None and (not isinstance(self.fetch_limit, int) or self.fetch_limit < 0):
            raise FetchRequestError(f"Invalid fetch limit {self.fetch_limit!r}")
        if section_key is not None and self.sort_descriptors[0].key != section_key:
            raise FetchRequestError(
                f"Sectioning {self.entity!r} by {section_key!r} needs {section_key!r} as the first sort key, "
                f"got {self.sort_descriptors[0].key!r}"
            )
        return self

    def evaluate(self, records: List[Record]) -> List[Record]:
        """Filter and order records according to this request."""
        selected = [r for r in records if self.predicate is None or self.predicate(r)]

        # Primary key first, then sort descriptors from last to first (stable sort)
        selected.sort(key=lambda r: r.object_id.pk)
        for descriptor in reversed(self.sort_descriptors):
            try:
                selected.sort(key=_sort_key(descriptor.key), reverse=not descriptor.ascending)
            except TypeError as e:
                raise FetchRequestError(
                    f"Cannot order {self.entity!r} by {descriptor.key!r}: {e}"
                ) from e

        if self.fetch_limit:
            selected = selected[:self.fetch_limit]
        return selected


def _sort_key(key: str) -> Callable[[Record], Tuple[bool, Any]]:
    """Sort key placing missing values first."""
    def extract(record: Record) -> Tuple[bool, Any]:
        value = record.get(key)
        return (value is not None, value if value is not None else 0)
    return extract


def group_by_section(records: List[Record], section_key: Optional[str],
                     default_section: Hashable) -> Dict[Hashable, List[ObjectID]]:
    """Group record ids into sections, sections ordered by first appearance."""
    grouped: Dict[Hashable, List[ObjectID]] = {}
    for record in records:
        section = default_section if section_key is None else record.get(section_key)
        try:
            grouped.setdefault(section, []).append(record.object_id)
        except TypeError as e:
            raise FetchRequestError(f"Section value {section!r} of {record.object_id} is not hashable") from e
    return grouped
