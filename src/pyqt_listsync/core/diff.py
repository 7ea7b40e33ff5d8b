"""
Snapshot diffing.

compute_diff() turns two snapshots into an ordered edit script. Every
operation's indices are valid against the list state left by the operations
before it, so a view can replay the script one call at a time:

1. item deletes, bottom-up
2. deletes of sections that no longer hold anything
3. section moves, then section inserts
4. item moves, then item inserts
5. deletes of sections whose surviving items all moved elsewhere
6. reloads, at final positions

Survivors forming the longest run of unchanged relative order stay where they
are. Everything else that survives is a move, so removing one item never
causes moves and dragging one item produces exactly one move.
"""

from bisect import bisect_left
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Hashable, List, Optional, Sequence, Set, Tuple, Union

from .snapshot import IndexPath, Snapshot


class OperationKind(Enum):
    INSERT = "insert"
    DELETE = "delete"
    MOVE = "move"
    RELOAD = "reload"


@dataclass(frozen=True)
class SectionOperation:
    """Insert, delete or move of a whole section."""
    kind: OperationKind
    section: Hashable
    from_index: Optional[int] = None
    to_index: Optional[int] = None


@dataclass(frozen=True)
class ItemOperation:
    """Insert, delete, move or reload of one item.

    Moves take the item out at from_path, then put it at to_path in the
    resulting list.
    """
    kind: OperationKind
    identifier: Hashable
    from_path: Optional[IndexPath] = None
    to_path: Optional[IndexPath] = None


Operation = Union[SectionOperation, ItemOperation]


@dataclass(frozen=True)
class SnapshotDiff:
    """Ordered edit script transforming one snapshot into another."""
    operations: Tuple[Operation, ...] = field(default_factory=tuple)

    def _items_of(self, kind: OperationKind) -> List[Hashable]:
        return [
            op.identifier for op in self.operations
            if isinstance(op, ItemOperation) and op.kind is kind
        ]

    @property
    def inserted(self) -> List[Hashable]:
        return self._items_of(OperationKind.INSERT)

    @property
    def deleted(self) -> List[Hashable]:
        return self._items_of(OperationKind.DELETE)

    @property
    def moved(self) -> List[Hashable]:
        return self._items_of(OperationKind.MOVE)

    @property
    def reloaded(self) -> List[Hashable]:
        return self._items_of(OperationKind.RELOAD)

    @property
    def section_operations(self) -> List[SectionOperation]:
        return [op for op in self.operations if isinstance(op, SectionOperation)]

    @property
    def is_empty(self) -> bool:
        return not self.operations

    def __len__(self) -> int:
        return len(self.operations)


def longest_increasing_subsequence(values: Sequence[int]) -> List[int]:
    """Return positions (into values) of one longest strictly increasing subsequence."""
    tails: List[int] = []        # tails[k] = smallest tail value of a run of length k+1
    tail_positions: List[int] = []
    predecessors: List[int] = [-1] * len(values)

    for position, value in enumerate(values):
        k = bisect_left(tails, value)
        if k == len(tails):
            tails.append(value)
            tail_positions.append(position)
        else:
            tails[k] = value
            tail_positions[k] = position
        predecessors[position] = tail_positions[k - 1] if k > 0 else -1

    result: List[int] = []
    position = tail_positions[-1] if tail_positions else -1
    while position != -1:
        result.append(position)
        position = predecessors[position]
    result.reverse()
    return result


def _stable_members(current: Sequence[Hashable], target: Sequence[Hashable]) -> Set[Hashable]:
    """Members of current that can stay put while reaching target's order."""
    rank = {member: index for index, member in enumerate(current)}
    survivors = [member for member in target if member in rank]
    keep = longest_increasing_subsequence([rank[member] for member in survivors])
    return {survivors[index] for index in keep}


def _insertion_point(working: List[Hashable], target: Sequence[Hashable], index: int,
                     present: Callable[[Hashable], bool]) -> int:
    """Index right after the nearest preceding target member already in working."""
    for back in range(index - 1, -1, -1):
        candidate = target[back]
        if present(candidate):
            return working.index(candidate) + 1
    return 0


def _section_order_with_deferred(new_sections: Sequence[Hashable], old_sections: Sequence[Hashable],
                                 deferred: Set[Hashable]) -> List[Hashable]:
    """New section order with still-occupied obsolete sections kept beside their old neighbours."""
    order = list(new_sections)
    for index, section in enumerate(old_sections):
        if section not in deferred:
            continue
        position = 0
        for back in range(index - 1, -1, -1):
            neighbour = old_sections[back]
            if neighbour in order:
                position = order.index(neighbour) + 1
                break
        order.insert(position, section)
    return order


def compute_diff(old: Snapshot, new: Snapshot) -> SnapshotDiff:
    """
    Compute the edit script from old to new.

    Raises:
        DuplicateIdentifierError / DuplicateSectionError: new is invalid
    """
    new.validate()
    operations: List[Operation] = []

    sections: List[Hashable] = list(old.section_identifiers)
    rows: Dict[Hashable, List[Hashable]] = {section: list(items) for section, items in old}
    new_sections = set(new.section_identifiers)
    new_owner: Dict[Hashable, Hashable] = {
        item: section for section, items in new for item in items
    }
    old_items = set(old.item_identifiers)

    # 1. item deletes
    for section_index in range(len(sections) - 1, -1, -1):
        section_rows = rows[sections[section_index]]
        for row in range(len(section_rows) - 1, -1, -1):
            item = section_rows[row]
            if item not in new_owner:
                operations.append(ItemOperation(OperationKind.DELETE, item,
                                                from_path=IndexPath(section_index, row)))
                del section_rows[row]

    # 2. empty obsolete sections
    for section_index in range(len(sections) - 1, -1, -1):
        section = sections[section_index]
        if section not in new_sections and not rows[section]:
            operations.append(SectionOperation(OperationKind.DELETE, section, from_index=section_index))
            del sections[section_index]
            del rows[section]

    # 3. section moves and inserts
    deferred = {section for section in sections if section not in new_sections}
    target_sections = _section_order_with_deferred(new.section_identifiers, sections, deferred)
    present_sections = set(sections)
    stable_sections = _stable_members(sections, target_sections)

    for index, section in enumerate(target_sections):
        if section in stable_sections or section not in present_sections:
            continue
        from_index = sections.index(section)
        del sections[from_index]
        to_index = _insertion_point(sections, target_sections, index, present_sections.__contains__)
        sections.insert(to_index, section)
        operations.append(SectionOperation(OperationKind.MOVE, section, from_index, to_index))

    for index, section in enumerate(target_sections):
        if section in present_sections:
            continue
        sections.insert(index, section)
        rows[section] = []
        present_sections.add(section)
        operations.append(SectionOperation(OperationKind.INSERT, section, to_index=index))

    # 4. item moves and inserts
    stable_items: Set[Hashable] = set()
    for section, items in new:
        staying = [item for item in rows[section] if new_owner.get(item) == section]
        stable_items |= _stable_members(staying, items)

    location: Dict[Hashable, Hashable] = {
        item: section for section in sections for item in rows[section]
    }

    for section, items in new:
        section_rows = rows[section]
        for index, item in enumerate(items):
            if item not in old_items or item in stable_items:
                continue
            source = location[item]
            from_path = IndexPath(sections.index(source), rows[source].index(item))
            del rows[source][from_path.row]
            to_row = _insertion_point(
                section_rows, items, index,
                lambda candidate: candidate in old_items and location.get(candidate) == section,
            )
            section_rows.insert(to_row, item)
            location[item] = section
            operations.append(ItemOperation(OperationKind.MOVE, item, from_path,
                                            IndexPath(sections.index(section), to_row)))

    for section, items in new:
        section_rows = rows[section]
        section_index = sections.index(section)
        for index, item in enumerate(items):
            if item in old_items:
                continue
            section_rows.insert(index, item)
            operations.append(ItemOperation(OperationKind.INSERT, item,
                                            to_path=IndexPath(section_index, index)))

    # 5. obsolete sections emptied by moves
    for section_index in range(len(sections) - 1, -1, -1):
        section = sections[section_index]
        if section in deferred:
            operations.append(SectionOperation(OperationKind.DELETE, section, from_index=section_index))
            del sections[section_index]

    # 6. reloads
    for section_index, (section, items) in enumerate(new):
        for row, item in enumerate(items):
            if item in new.reloaded_identifiers and item in old_items:
                operations.append(ItemOperation(OperationKind.RELOAD, item,
                                                to_path=IndexPath(section_index, row)))

    return SnapshotDiff(tuple(operations))


def replay(old: Snapshot, diff: SnapshotDiff) -> List[Tuple[Hashable, List[Hashable]]]:
    """Apply an edit script to a plain copy of old and return the resulting sections."""
    state: List[Tuple[Hashable, List[Any]]] = [(section, list(items)) for section, items in old]
    for op in diff.operations:
        if isinstance(op, SectionOperation):
            if op.kind is OperationKind.DELETE:
                del state[op.from_index]
            elif op.kind is OperationKind.INSERT:
                state.insert(op.to_index, (op.section, []))
            elif op.kind is OperationKind.MOVE:
                state.insert(op.to_index, state.pop(op.from_index))
        elif op.kind is OperationKind.DELETE:
            del state[op.from_path.section][1][op.from_path.row]
        elif op.kind is OperationKind.INSERT:
            state[op.to_path.section][1].insert(op.to_path.row, op.identifier)
        elif op.kind is OperationKind.MOVE:
            item = state[op.from_path.section][1].pop(op.from_path.row)
            state[op.to_path.section][1].insert(op.to_path.row, item)
    return state
