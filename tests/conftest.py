"""pytest configuration and fixtures for pyqt-listsync tests."""

import itertools
import os

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PyQt6.QtWidgets import QApplication

from pyqt_listsync.protocols import ListView


@pytest.fixture(scope="session")
def qapp():
    """Create QApplication instance for tests."""
    app = QApplication.instance() or QApplication([])
    yield app
    # Don't quit - may cause issues with other tests


class RecordingListView(ListView):
    """ListView that keeps plain lists and records every call."""

    def __init__(self):
        self.sections = []      # [[section, [identifier, ...]], ...]
        self.visuals = {}
        self.calls = []
        self.batches = 0

    def begin_updates(self, animated):
        self.batches += 1
        self.calls.append(("begin", animated))

    def end_updates(self, animated):
        self.calls.append(("end", animated))

    def insert_section(self, index, section):
        self.calls.append(("insert_section", index, section))
        self.sections.insert(index, [section, []])

    def delete_section(self, index):
        self.calls.append(("delete_section", index))
        assert not self.sections[index][1], "section deleted while holding items"
        del self.sections[index]

    def move_section(self, from_index, to_index):
        self.calls.append(("move_section", from_index, to_index))
        self.sections.insert(to_index, self.sections.pop(from_index))

    def insert_item(self, section, row, identifier, visual):
        self.calls.append(("insert_item", section, row, identifier))
        self.sections[section][1].insert(row, identifier)
        self.visuals[identifier] = visual

    def delete_item(self, section, row):
        identifier = self.sections[section][1].pop(row)
        self.calls.append(("delete_item", section, row, identifier))
        self.visuals.pop(identifier, None)

    def move_item(self, from_section, from_row, to_section, to_row):
        identifier = self.sections[from_section][1].pop(from_row)
        self.calls.append(("move_item", from_section, from_row, to_section, to_row, identifier))
        self.sections[to_section][1].insert(to_row, identifier)

    def reload_item(self, section, row, visual):
        identifier = self.sections[section][1][row]
        self.calls.append(("reload_item", section, row, identifier))
        self.visuals[identifier] = visual

    def as_tuples(self):
        return [(section, tuple(items)) for section, items in self.sections]

    def operations(self, name):
        return [call for call in self.calls if call[0] == name]

    def clear_calls(self):
        self.calls.clear()


@pytest.fixture
def recording_view():
    return RecordingListView()


class FixedClock:
    """Monotonic fake clock: each call returns the next timestamp."""

    def __init__(self, start=1_700_000_000.0, step=60.0):
        self._counter = itertools.count()
        self._start = start
        self._step = step

    def __call__(self):
        return self._start + next(self._counter) * self._step


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def date_store(qapp):
    from pyqt_listsync.apps.date_list_window import create_date_store

    store = create_date_store()
    yield store
    store.close()
