"""
Immutable list snapshots.

A Snapshot describes which items should be visible, grouped into sections,
and in what order. Snapshots are values: a new one is built for every change
and compared against the currently rendered one by the reconciler.

Usage:
    snapshot = Snapshot([("main", [1, 2, 3])])

    builder = SnapshotBuilder.from_snapshot(snapshot)
    builder.append_items([4])
    builder.reload_items([2])
    next_snapshot = builder.build()
"""

from typing import Any, Dict, Hashable, Iterable, Iterator, List, Mapping, NamedTuple, Optional, Tuple

from .exceptions import DuplicateIdentifierError, DuplicateSectionError, UnknownSectionError

# Section used when a list has no meaningful grouping
DEFAULT_SECTION = ""


class IndexPath(NamedTuple):
    """Position of one item: section index and row within that section."""
    section: int
    row: int


class Snapshot:
    """
    Immutable ordered sequence of sections, each holding ordered item identifiers.

    Reloaded identifiers mark items whose presented content changed without
    their position changing. They travel with the snapshot but take no part
    in equality, so two snapshots listing the same items compare equal.

    A Snapshot may be constructed with duplicate identifiers; validate()
    reports them. The reconciler validates before touching rendered state.
    """

    __slots__ = ("_sections", "_reloaded", "_locations")

    def __init__(self, sections: Any = (), reloaded: Iterable[Hashable] = ()):
        if isinstance(sections, Mapping):
            sections = sections.items()
        self._sections: Tuple[Tuple[Hashable, Tuple[Hashable, ...]], ...] = tuple(
            (section, tuple(items)) for section, items in sections
        )
        self._reloaded = frozenset(reloaded)
        self._locations: Optional[Dict[Hashable, IndexPath]] = None

    @classmethod
    def from_items(cls, items: Iterable[Hashable], section: Hashable = DEFAULT_SECTION) -> "Snapshot":
        """Build a single-section snapshot."""
        return cls([(section, items)])

    # ========== STRUCTURE ==========

    @property
    def sections(self) -> Tuple[Tuple[Hashable, Tuple[Hashable, ...]], ...]:
        return self._sections

    @property
    def section_identifiers(self) -> Tuple[Hashable, ...]:
        return tuple(section for section, _ in self._sections)

    @property
    def item_identifiers(self) -> Tuple[Hashable, ...]:
        return tuple(item for _, items in self._sections for item in items)

    @property
    def reloaded_identifiers(self) -> frozenset:
        return self._reloaded

    @property
    def number_of_sections(self) -> int:
        return len(self._sections)

    @property
    def number_of_items(self) -> int:
        return sum(len(items) for _, items in self._sections)

    def items_in(self, section: Hashable) -> Tuple[Hashable, ...]:
        """Return the items of one section, raising UnknownSectionError if absent."""
        for candidate, items in self._sections:
            if candidate == section:
                return items
        raise UnknownSectionError(section)

    def index_of_section(self, section: Hashable) -> Optional[int]:
        for index, (candidate, _) in enumerate(self._sections):
            if candidate == section:
                return index
        return None

    def index_path_of(self, identifier: Hashable) -> Optional[IndexPath]:
        return self._location_map().get(identifier)

    def section_for(self, identifier: Hashable) -> Optional[Hashable]:
        path = self.index_path_of(identifier)
        if path is None:
            return None
        return self._sections[path.section][0]

    def item_at(self, path: IndexPath) -> Hashable:
        return self._sections[path.section][1][path.row]

    def _location_map(self) -> Dict[Hashable, IndexPath]:
        if self._locations is None:
            self._locations = {
                item: IndexPath(section_index, row)
                for section_index, (_, items) in enumerate(self._sections)
                for row, item in enumerate(items)
            }
        return self._locations

    # ========== VALIDATION ==========

    def validate(self) -> "Snapshot":
        """Raise a configuration error if sections or items are duplicated."""
        seen_sections = set()
        for section, _ in self._sections:
            if section in seen_sections:
                raise DuplicateSectionError(section)
            seen_sections.add(section)

        seen_items = set()
        for _, items in self._sections:
            for item in items:
                if item in seen_items:
                    raise DuplicateIdentifierError(item)
                seen_items.add(item)
        return self

    def with_reloaded(self, identifiers: Iterable[Hashable]) -> "Snapshot":
        """Return a copy that additionally marks identifiers for reload."""
        return Snapshot(self._sections, self._reloaded | frozenset(identifiers))

    # ========== VALUE SEMANTICS ==========

    def __contains__(self, identifier: Hashable) -> bool:
        return identifier in self._location_map()

    def __iter__(self) -> Iterator[Tuple[Hashable, Tuple[Hashable, ...]]]:
        return iter(self._sections)

    def __len__(self) -> int:
        return self.number_of_items

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Snapshot):
            return NotImplemented
        return self._sections == other._sections

    def __hash__(self) -> int:
        return hash(self._sections)

    def __repr__(self) -> str:
        body = ", ".join(f"{section!r}: {list(items)!r}" for section, items in self._sections)
        return f"Snapshot({{{body}}})"


EMPTY_SNAPSHOT = Snapshot()


class SnapshotBuilder:
    """
    Mutable editor producing Snapshots.

    Mirrors the editing API of a diffable data source snapshot. Unlike
    Snapshot itself, the builder rejects duplicates as soon as they are
    added.
    """

    def __init__(self):
        self._sections: List[Hashable] = []
        self._items: Dict[Hashable, List[Hashable]] = {}
        self._owner: Dict[Hashable, Hashable] = {}
        self._reloaded: set = set()

    @classmethod
    def from_snapshot(cls, snapshot: Snapshot) -> "SnapshotBuilder":
        snapshot.validate()
        builder = cls()
        for section, items in snapshot:
            builder.append_sections([section])
            builder.append_items(items, section)
        builder._reloaded = set(snapshot.reloaded_identifiers)
        return builder

    def append_sections(self, sections: Iterable[Hashable]) -> "SnapshotBuilder":
        for section in sections:
            if section in self._items:
                raise DuplicateSectionError(section)
            self._sections.append(section)
            self._items[section] = []
        return self

    def append_items(self, items: Iterable[Hashable], section: Hashable = None) -> "SnapshotBuilder":
        """Append items to a section (the last section when none is given)."""
        target = self._resolve_section(section)
        for item in items:
            self._claim(item, target)
            self._items[target].append(item)
        return self

    def insert_items_before(self, items: Iterable[Hashable], before: Hashable) -> "SnapshotBuilder":
        return self._insert_relative(items, before, offset=0)

    def insert_items_after(self, items: Iterable[Hashable], after: Hashable) -> "SnapshotBuilder":
        return self._insert_relative(items, after, offset=1)

    def delete_items(self, items: Iterable[Hashable]) -> "SnapshotBuilder":
        for item in items:
            section = self._owner.pop(item, None)
            if section is not None:
                self._items[section].remove(item)
                self._reloaded.discard(item)
        return self

    def delete_sections(self, sections: Iterable[Hashable]) -> "SnapshotBuilder":
        for section in sections:
            if section not in self._items:
                continue
            self.delete_items(list(self._items[section]))
            self._sections.remove(section)
            del self._items[section]
        return self

    def reload_items(self, items: Iterable[Hashable]) -> "SnapshotBuilder":
        for item in items:
            if item not in self._owner:
                raise KeyError(f"Cannot reload {item!r}: not in snapshot")
            self._reloaded.add(item)
        return self

    def build(self) -> Snapshot:
        return Snapshot(
            [(section, self._items[section]) for section in self._sections],
            self._reloaded,
        )

    def _resolve_section(self, section: Hashable) -> Hashable:
        if section is None:
            if not self._sections:
                raise UnknownSectionError(None)
            return self._sections[-1]
        if section not in self._items:
            raise UnknownSectionError(section)
        return section

    def _claim(self, item: Hashable, section: Hashable) -> None:
        if item in self._owner:
            raise DuplicateIdentifierError(item)
        self._owner[item] = section

    def _insert_relative(self, items: Iterable[Hashable], anchor: Hashable, offset: int) -> "SnapshotBuilder":
        if anchor not in self._owner:
            raise KeyError(f"Anchor item {anchor!r} is not in snapshot")
        section = self._owner[anchor]
        position = self._items[section].index(anchor) + offset
        for item in items:
            self._claim(item, section)
            self._items[section].insert(position, item)
            position += 1
        return self
