"""Tests for snapshots, diffing and core utilities."""

import random

import pytest

from pyqt_listsync.core import (
    DEFAULT_SECTION,
    DuplicateIdentifierError,
    DuplicateSectionError,
    IndexPath,
    OperationKind,
    Snapshot,
    SnapshotBuilder,
    UnknownSectionError,
    compute_diff,
    replay,
)
from pyqt_listsync.core.diff import longest_increasing_subsequence


def as_lists(snapshot):
    return [(section, list(items)) for section, items in snapshot]


# ========== Snapshot ==========

def test_snapshot_from_items_uses_default_section():
    snapshot = Snapshot.from_items(range(3))
    assert snapshot.section_identifiers == (DEFAULT_SECTION,)
    assert snapshot.item_identifiers == (0, 1, 2)
    assert snapshot.number_of_items == 3
    assert len(snapshot) == 3


def test_snapshot_lookups():
    snapshot = Snapshot({"a": [1, 2], "b": [3]})
    assert snapshot.index_path_of(3) == IndexPath(1, 0)
    assert snapshot.section_for(2) == "a"
    assert snapshot.items_in("b") == (3,)
    assert snapshot.item_at(IndexPath(0, 1)) == 2
    assert snapshot.index_of_section("b") == 1
    assert 1 in snapshot
    assert 4 not in snapshot
    assert snapshot.index_path_of(4) is None
    with pytest.raises(UnknownSectionError):
        snapshot.items_in("missing")


def test_snapshot_equality_ignores_reloads():
    plain = Snapshot({"a": [1, 2]})
    reloaded = plain.with_reloaded([2])
    assert plain == reloaded
    assert hash(plain) == hash(reloaded)
    assert reloaded.reloaded_identifiers == frozenset({2})
    assert plain.reloaded_identifiers == frozenset()


def test_snapshot_validate_rejects_duplicates():
    with pytest.raises(DuplicateIdentifierError) as exc_info:
        Snapshot({"a": [1, 2], "b": [2]}).validate()
    assert exc_info.value.identifier == 2

    with pytest.raises(DuplicateSectionError):
        Snapshot([("a", [1]), ("a", [2])]).validate()


def test_builder_matches_editing_api():
    builder = SnapshotBuilder()
    builder.append_sections(["a", "b"])
    builder.append_items([1, 2], "a")
    builder.append_items([5])  # last section
    builder.insert_items_before([0], before=1)
    builder.insert_items_after([3, 4], after=2)
    builder.delete_items([5])
    builder.reload_items([3])
    snapshot = builder.build()

    assert as_lists(snapshot) == [("a", [0, 1, 2, 3, 4]), ("b", [])]
    assert snapshot.reloaded_identifiers == frozenset({3})


def test_builder_rejects_duplicates_and_unknown_sections():
    builder = SnapshotBuilder().append_sections(["a"]).append_items([1])
    with pytest.raises(DuplicateIdentifierError):
        builder.append_items([1])
    with pytest.raises(DuplicateSectionError):
        builder.append_sections(["a"])
    with pytest.raises(UnknownSectionError):
        builder.append_items([2], "missing")
    with pytest.raises(UnknownSectionError):
        SnapshotBuilder().append_items([1])


def test_builder_from_snapshot_and_delete_section():
    builder = SnapshotBuilder.from_snapshot(Snapshot({"a": [1], "b": [2, 3]}))
    builder.delete_sections(["a"])
    builder.append_items([1], "b")
    assert as_lists(builder.build()) == [("b", [2, 3, 1])]


# ========== Diff ==========

def test_longest_increasing_subsequence():
    values = [3, 1, 2, 5, 4, 6]
    positions = longest_increasing_subsequence(values)
    picked = [values[p] for p in positions]
    assert len(picked) == 4
    assert picked == sorted(picked)
    assert longest_increasing_subsequence([]) == []


def test_diff_identical_snapshots_is_empty():
    snapshot = Snapshot.from_items([1, 2, 3])
    diff = compute_diff(snapshot, Snapshot.from_items([1, 2, 3]))
    assert diff.is_empty
    assert len(diff) == 0


def test_diff_from_empty_inserts_section_and_items():
    diff = compute_diff(Snapshot(), Snapshot.from_items([1, 2]))
    assert [op.kind for op in diff.section_operations] == [OperationKind.INSERT]
    assert diff.inserted == [1, 2]
    assert diff.moved == []


def test_diff_to_empty_removes_everything():
    diff = compute_diff(Snapshot.from_items([1, 2]), Snapshot())
    assert sorted(diff.deleted) == [1, 2]
    assert [op.kind for op in diff.section_operations] == [OperationKind.DELETE]
    assert replay(Snapshot.from_items([1, 2]), diff) == []


def test_single_removal_causes_no_moves():
    old = Snapshot.from_items([1, 2, 3, 4])
    new = Snapshot.from_items([1, 3, 4])
    diff = compute_diff(old, new)
    assert diff.deleted == [2]
    assert diff.moved == []
    assert diff.inserted == []


def test_single_reorder_is_one_move():
    old = Snapshot.from_items(["A", "B", "C", "D"])
    new = Snapshot.from_items(["B", "C", "D", "A"])
    diff = compute_diff(old, new)
    assert diff.moved == ["A"]
    assert diff.deleted == []
    assert diff.inserted == []
    (move,) = diff.operations
    assert move.from_path == IndexPath(0, 0)
    assert move.to_path == IndexPath(0, 3)


def test_move_across_sections():
    old = Snapshot({"a": [1, 2], "b": [3]})
    new = Snapshot({"a": [1], "b": [2, 3]})
    diff = compute_diff(old, new)
    assert diff.moved == [2]
    assert diff.section_operations == []
    assert replay(old, diff) == as_lists(new)


def test_removed_section_survivor_moves_out_first():
    old = Snapshot({"a": [1], "b": [2]})
    new = Snapshot({"b": [2, 1]})
    diff = compute_diff(old, new)

    assert diff.moved == [1]
    assert diff.deleted == []
    kinds = [(type(op).__name__, op.kind) for op in diff.operations]
    assert kinds == [
        ("ItemOperation", OperationKind.MOVE),
        ("SectionOperation", OperationKind.DELETE),
    ]
    assert replay(old, diff) == as_lists(new)


def test_section_reorder_moves_section_only():
    old = Snapshot({"a": [1], "b": [2]})
    new = Snapshot({"b": [2], "a": [1]})
    diff = compute_diff(old, new)
    assert [op.kind for op in diff.section_operations] == [OperationKind.MOVE]
    assert diff.moved == []
    assert replay(old, diff) == as_lists(new)


def test_reloads_only_for_surviving_items():
    old = Snapshot.from_items([1, 2])
    new = Snapshot.from_items([1, 2, 3]).with_reloaded([2, 3])
    diff = compute_diff(old, new)
    assert diff.inserted == [3]
    assert diff.reloaded == [2]
    reload_op = [op for op in diff.operations if op.kind is OperationKind.RELOAD][0]
    assert reload_op.to_path == IndexPath(0, 1)


def test_diff_rejects_duplicate_identifiers():
    with pytest.raises(DuplicateIdentifierError):
        compute_diff(Snapshot(), Snapshot.from_items([1, 1]))


def test_replayed_script_always_reaches_target():
    rng = random.Random(20200331)
    sections = ["a", "b", "c", "d"]
    for _ in range(200):
        def random_snapshot():
            chosen = rng.sample(sections, rng.randint(0, len(sections)))
            pool = rng.sample(range(30), rng.randint(0, 20))
            layout = {section: [] for section in chosen}
            for item in pool:
                if chosen:
                    layout[rng.choice(chosen)].append(item)
            return Snapshot(layout)

        old, new = random_snapshot(), random_snapshot()
        diff = compute_diff(old, new)
        assert replay(old, diff) == as_lists(new)

        survivors = set(old.item_identifiers) & set(new.item_identifiers)
        assert set(diff.moved) <= survivors
        assert set(diff.inserted) == set(new.item_identifiers) - set(old.item_identifiers)
        assert set(diff.deleted) == set(old.item_identifiers) - set(new.item_identifiers)


# ========== DebounceTimer ==========

def test_debounce_timer_coalesces_triggers(qapp):
    from PyQt6.QtTest import QTest
    from pyqt_listsync.core import DebounceTimer

    called = []
    timer = DebounceTimer(delay_ms=20, handler=lambda: called.append(1))
    timer.trigger()
    timer.trigger()
    timer.trigger()
    assert timer.is_pending
    QTest.qWait(100)
    assert called == [1]
    assert not timer.is_pending


def test_debounce_timer_force_and_cancel(qapp):
    from PyQt6.QtTest import QTest
    from pyqt_listsync.core import DebounceTimer

    called = []
    timer = DebounceTimer(delay_ms=20, handler=lambda: called.append(1))
    timer.trigger()
    timer.cancel()
    QTest.qWait(60)
    assert called == []

    timer.trigger()
    timer.force()
    assert called == [1]
