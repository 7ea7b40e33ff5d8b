"""Tests for DiffableListWidget."""

import pytest
from PyQt6.QtCore import Qt
from PyQt6.QtTest import QTest

from pyqt_listsync.core import Snapshot
from pyqt_listsync.protocols import CellPresenter, ListSyncConfig, ListView, VisualUnit, set_listsync_config
from pyqt_listsync.services import ListReconciler, TextCellPresenter
from pyqt_listsync.widgets import DiffableListWidget, GridLayoutSpec


@pytest.fixture
def widget(qapp):
    widget = DiffableListWidget()
    yield widget
    widget.deleteLater()


def test_widget_implements_list_view(widget):
    assert isinstance(widget, ListView)


def test_widget_follows_reconciler(widget):
    reconciler = ListReconciler(widget, TextCellPresenter())
    for items in ([1, 2, 3], [3, 1, 4], [4], []):
        reconciler.apply(Snapshot.from_items(items), animated=False)
        assert widget.identifiers() == items
        assert widget.count() == len(items)


def test_widget_sections_with_headers(qapp):
    widget = DiffableListWidget(show_section_headers=True)
    reconciler = ListReconciler(widget, TextCellPresenter())

    reconciler.apply(Snapshot({"a": [1, 2], "b": [3]}), animated=False)
    assert widget.count() == 5
    assert widget.item(0).text() == "a"
    assert widget.identifier_at(1) == 1
    assert widget.item(3).text() == "b"
    assert widget.identifiers() == [1, 2, 3]

    reconciler.apply(Snapshot({"b": [3, 2], "a": [1]}), animated=False)
    assert widget.section_identifiers == ["b", "a"]
    assert widget.identifiers() == [3, 2, 1]
    assert [widget.item(row).text() for row in range(widget.count())] == ["b", "3", "2", "a", "1"]

    reconciler.apply(Snapshot({"a": [1]}), animated=False)
    assert widget.section_identifiers == ["a"]
    assert widget.count() == 2


def test_move_keeps_selection(widget):
    reconciler = ListReconciler(widget, TextCellPresenter())
    reconciler.apply(Snapshot.from_items(["x", "y", "z"]), animated=False)
    widget.item(0).setSelected(True)

    reconciler.apply(Snapshot.from_items(["y", "z", "x"]), animated=False)
    assert widget.selected_identifiers() == ["x"]


def test_visual_attributes_reach_item(widget):
    widget.begin_updates(False)
    widget.insert_section(0, "")
    widget.insert_item(0, 0, "id", VisualUnit(text="hello", point_size=18.0, foreground_rgb=(255, 0, 0)))
    widget.end_updates(False)

    item = widget.item(0)
    assert item.text() == "hello"
    assert item.font().pointSizeF() == 18.0
    assert widget.visual_at(0).text == "hello"

    widget.reload_item(0, 0, VisualUnit(text="bye"))
    assert widget.item(0).text() == "bye"


def test_delete_non_empty_section_is_refused(widget):
    widget.insert_section(0, "")
    widget.insert_item(0, 0, 1, VisualUnit(text="1"))
    with pytest.raises(ValueError):
        widget.delete_section(0)


def test_animated_insert_highlights_then_fades(qapp):
    set_listsync_config(ListSyncConfig(highlight_fade_ms=300))
    try:
        widget = DiffableListWidget()
        reconciler = ListReconciler(widget, TextCellPresenter())
        reconciler.apply(Snapshot.from_items([1]), animated=True)
        QTest.qWait(5)
        assert widget.highlight_alpha(1) > 0
        QTest.qWait(700)
        assert widget.highlight_alpha(1) == 0
    finally:
        set_listsync_config(ListSyncConfig())


def test_unanimated_apply_does_not_highlight(widget):
    reconciler = ListReconciler(widget, TextCellPresenter())
    reconciler.apply(Snapshot.from_items([1]), animated=False)
    assert widget.highlight_alpha(1) == 0


def test_grid_layout_spec(qapp):
    spec = GridLayoutSpec(columns=2, item_height=44, spacing=10)
    assert spec.cell_width(440) == 200
    assert spec.cell_size(440).height() == 44
    with pytest.raises(ValueError):
        GridLayoutSpec(columns=0)

    widget = DiffableListWidget(spec)
    assert widget.viewMode() == widget.ViewMode.IconMode
    assert widget.spacing() == 10


class LateResolvingPresenter(CellPresenter):
    """Cannot resolve anything until `resolved` is set."""

    def __init__(self):
        self.resolved = False

    def present(self, identifier):
        if not self.resolved:
            return None
        return VisualUnit(text=f"item {identifier}")


def test_reload_replaces_placeholder_style(widget):
    presenter = LateResolvingPresenter()
    reconciler = ListReconciler(widget, presenter, placeholder_text="?")
    reconciler.apply(Snapshot.from_items([1]), animated=False)
    assert widget.visual_at(0).placeholder
    assert widget.item(0).foreground().color().getRgb()[:3] == (128, 128, 128)

    presenter.resolved = True
    reconciler.apply(Snapshot.from_items([1]).with_reloaded([1]), animated=False)

    item = widget.item(0)
    assert item.text() == "item 1"
    assert not widget.visual_at(0).placeholder
    assert item.data(Qt.ItemDataRole.ForegroundRole) is None


def test_reload_drops_previous_font_size(widget):
    widget.insert_section(0, "")
    widget.insert_item(0, 0, 1, VisualUnit(text="big", point_size=30.0))
    widget.reload_item(0, 0, VisualUnit(text="plain"))

    assert widget.item(0).data(Qt.ItemDataRole.FontRole) is None
    assert widget.item(0).font().pointSizeF() != 30.0
