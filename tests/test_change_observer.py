"""Tests for ChangeObserver."""

import pytest
from PyQt6.QtTest import QTest

from pyqt_listsync.apps.date_list_window import DATE_ENTITY, date_fetch_request
from pyqt_listsync.core import DEFAULT_SECTION, FetchRequestError, Snapshot, StoreError
from pyqt_listsync.io import FetchRequest, RecordStore, SortDescriptor
from pyqt_listsync.services import ChangeObserver


def wait_until(predicate, timeout_ms=2000):
    waited = 0
    while not predicate() and waited < timeout_ms:
        QTest.qWait(10)
        waited += 10
    return predicate()


@pytest.fixture
def observer(date_store):
    observer = ChangeObserver(date_store, date_fetch_request())
    yield observer
    observer.stop()


def test_initial_fetch_of_empty_store(observer):
    emitted = []
    observer.snapshot_changed.connect(emitted.append)
    snapshot = observer.start()
    assert snapshot == Snapshot()
    assert emitted == [Snapshot()]
    assert observer.is_observing


def test_concrete_scenario_ascending_timestamps(date_store, observer):
    emitted = []
    observer.snapshot_changed.connect(emitted.append)
    observer.start()

    t1 = date_store.insert(DATE_ENTITY, date_created=100.0)
    date_store.save()
    t2 = date_store.insert(DATE_ENTITY, date_created=200.0)
    date_store.save()

    assert emitted == [
        Snapshot(),
        Snapshot.from_items([t1.object_id]),
        Snapshot.from_items([t1.object_id, t2.object_id]),
    ]


def test_one_emission_per_transaction(date_store, observer):
    observer.start()
    emitted = []
    observer.snapshot_changed.connect(emitted.append)

    with date_store.transaction():
        for stamp in (3.0, 1.0, 2.0):
            date_store.insert(DATE_ENTITY, date_created=stamp)

    assert len(emitted) == 1
    stamps = [observer.object_for(oid)["date_created"] for oid in emitted[0].item_identifiers]
    assert stamps == [1.0, 2.0, 3.0]


def test_unrelated_entities_are_ignored(qapp):
    store = RecordStore(entities=[DATE_ENTITY, "Other"])
    observer = ChangeObserver(store, date_fetch_request())
    observer.start()
    emitted = []
    observer.snapshot_changed.connect(emitted.append)

    store.insert("Other", date_created=1.0)
    store.save()
    assert emitted == []
    observer.stop()
    store.close()


def test_updates_are_marked_for_reload(date_store, observer):
    record = date_store.insert(DATE_ENTITY, date_created=1.0)
    date_store.save()
    observer.start()

    emitted = []
    observer.snapshot_changed.connect(emitted.append)
    date_store.update(record.object_id, date_created=5.0)
    date_store.save()

    assert emitted[0].reloaded_identifiers == frozenset({record.object_id})
    assert observer.object_for(record.object_id)["date_created"] == 5.0


def test_sections_follow_section_key(qapp):
    store = RecordStore(entities=["Task"])
    request = FetchRequest("Task", [SortDescriptor("group"), SortDescriptor("rank")])
    observer = ChangeObserver(store, request, section_key="group")

    with store.transaction():
        b1 = store.insert("Task", group="b", rank=1)
        a1 = store.insert("Task", group="a", rank=2)
        a0 = store.insert("Task", group="a", rank=1)

    snapshot = observer.start()
    assert snapshot.section_identifiers == ("a", "b")
    assert snapshot.items_in("a") == (a0.object_id, a1.object_id)
    assert snapshot.items_in("b") == (b1.object_id,)
    observer.stop()
    store.close()


def test_default_section_without_section_key(date_store, observer):
    date_store.insert(DATE_ENTITY, date_created=1.0)
    date_store.save()
    assert observer.start().section_identifiers == (DEFAULT_SECTION,)


def test_malformed_request_raises_on_fetch(date_store):
    observer = ChangeObserver(date_store, FetchRequest(DATE_ENTITY, []))
    with pytest.raises(FetchRequestError):
        observer.perform_fetch()


def test_store_failure_keeps_previous_snapshot(date_store, observer):
    date_store.insert(DATE_ENTITY, date_created=1.0)
    date_store.save()
    first = observer.start()

    failures = []
    emitted = []
    observer.fetch_failed.connect(failures.append)
    observer.snapshot_changed.connect(emitted.append)
    date_store.close()

    assert observer.perform_fetch() is None
    assert observer.snapshot == first
    assert emitted == []
    assert len(failures) == 1
    assert isinstance(failures[0], StoreError)


def test_stop_unsubscribes(date_store, observer):
    observer.start()
    observer.stop()
    emitted = []
    observer.snapshot_changed.connect(emitted.append)
    date_store.insert(DATE_ENTITY, date_created=1.0)
    date_store.save()
    assert emitted == []
    assert not observer.is_observing


def test_coalescing_merges_bursts(date_store):
    observer = ChangeObserver(date_store, date_fetch_request(), coalesce_ms=30)
    observer.start()
    emitted = []
    observer.snapshot_changed.connect(emitted.append)

    for stamp in (1.0, 2.0, 3.0):
        date_store.insert(DATE_ENTITY, date_created=stamp)
        date_store.save()

    assert emitted == []
    assert wait_until(lambda: emitted)
    QTest.qWait(60)
    assert len(emitted) == 1
    assert emitted[0].number_of_items == 3
    observer.stop()


def test_background_fetch_delivers_latest_only(date_store):
    observer = ChangeObserver(date_store, date_fetch_request(), background=True)
    observer.start()
    emitted = []
    observer.snapshot_changed.connect(emitted.append)

    for stamp in (1.0, 2.0):
        date_store.insert(DATE_ENTITY, date_created=stamp)
        date_store.save()

    assert wait_until(lambda: emitted and emitted[-1].number_of_items == 2)
    QTest.qWait(50)
    # Earlier generations are either cancelled or discarded, never delivered after the latest
    assert emitted[-1].number_of_items == 2
    assert all(s.number_of_items <= 2 for s in emitted)
    assert observer.snapshot.number_of_items == 2
    observer.stop()


def test_object_at_resolves_index_paths(date_store, observer):
    record = date_store.insert(DATE_ENTITY, date_created=1.0)
    date_store.save()
    observer.start()
    from pyqt_listsync.core import IndexPath
    assert observer.object_at(IndexPath(0, 0)).object_id == record.object_id
    assert observer.object_at(IndexPath(0, 5)) is None


def test_section_key_must_lead_the_sort_order(qapp):
    store = RecordStore(entities=["Task"])
    request = FetchRequest("Task", [SortDescriptor("rank"), SortDescriptor("group")])
    observer = ChangeObserver(store, request, section_key="group")
    with pytest.raises(FetchRequestError):
        observer.perform_fetch()
    assert observer.snapshot is None
    store.close()


def test_unhashable_section_value_is_a_request_error(qapp):
    store = RecordStore(entities=["Task"])
    store.insert("Task", group=["a", "b"], rank=1)
    store.save()
    observer = ChangeObserver(store, FetchRequest("Task", [SortDescriptor("group")]), section_key="group")
    with pytest.raises(FetchRequestError):
        observer.perform_fetch()
    store.close()
