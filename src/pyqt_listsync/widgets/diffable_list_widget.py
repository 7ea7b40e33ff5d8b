"""
QListWidget implementing the ListView contract.

Sections are laid out one after another in a single flat list, optionally
preceded by a non-selectable header row. The widget keeps only per-section
row counts; which items exist and in what order is decided by the
ListReconciler driving it.
"""

import logging
from abc import ABCMeta
from typing import Dict, Hashable, List, Optional

from PyQt6.QtCore import QObject, Qt, QVariantAnimation
from PyQt6.QtGui import QBrush, QColor, QFont
from PyQt6.QtWidgets import QListWidget, QListWidgetItem

from pyqt_listsync.protocols import ALIGN_LEFT, ALIGN_RIGHT, ListView, VisualUnit, get_listsync_config
from pyqt_listsync.widgets.cell_delegate import CellDelegate, HEADER_ROLE, IDENTIFIER_ROLE, VISUAL_ROLE
from pyqt_listsync.widgets.grid_layout import GridLayoutSpec

logger = logging.getLogger(__name__)

# PyQt-specific metaclass that combines Qt's metaclass with ABCMeta
_QtMetaclass = type(QObject)


class ListViewWidgetMeta(_QtMetaclass, ABCMeta):
    """Metaclass for PyQt widgets implementing ListView."""
    pass


_ALIGNMENTS = {
    ALIGN_LEFT: Qt.AlignmentFlag.AlignLeft | Qt.AlignmentFlag.AlignVCenter,
    ALIGN_RIGHT: Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter,
}
_CENTER = Qt.AlignmentFlag.AlignCenter


class DiffableListWidget(QListWidget, ListView, metaclass=ListViewWidgetMeta):
    """
    Flat list/grid view of a sectioned snapshot.

    Args:
        layout_spec: Grid geometry (columns, row height, spacing, insets)
        show_section_headers: Render a header row in front of every section
        parent: Parent widget
    """

    def __init__(self, layout_spec: Optional[GridLayoutSpec] = None, show_section_headers: bool = False,
                 parent=None):
        super().__init__(parent)
        config = get_listsync_config()
        self._layout_spec = layout_spec or GridLayoutSpec()
        self._show_headers = show_section_headers
        self._sections: List[Hashable] = []
        self._counts: List[int] = []

        self._animated = False
        self._batch_highlights: List[Hashable] = []
        self._highlight_alpha: Dict[Hashable, int] = {}
        self._fade_ms = config.highlight_fade_ms
        self._fade: Optional[QVariantAnimation] = None

        self.setItemDelegate(CellDelegate(config.highlight_rgb, self.highlight_alpha, self))
        self.setSelectionMode(QListWidget.SelectionMode.ExtendedSelection)
        self._layout_spec.configure(self)

    # ========== ACCESSORS ==========

    @property
    def layout_spec(self) -> GridLayoutSpec:
        return self._layout_spec

    @property
    def section_identifiers(self) -> List[Hashable]:
        return list(self._sections)

    def item_count(self, section: int) -> int:
        return self._counts[section]

    def identifier_at(self, row: int) -> Optional[Hashable]:
        item = self.item(row)
        return None if item is None else item.data(IDENTIFIER_ROLE)

    def visual_at(self, row: int) -> Optional[VisualUnit]:
        item = self.item(row)
        return None if item is None else item.data(VISUAL_ROLE)

    def identifiers(self) -> List[Hashable]:
        """Item identifiers in display order, headers excluded."""
        result = []
        for row in range(self.count()):
            item = self.item(row)
            if not item.data(HEADER_ROLE):
                result.append(item.data(IDENTIFIER_ROLE))
        return result

    def selected_identifiers(self) -> List[Hashable]:
        return [item.data(IDENTIFIER_ROLE) for item in self.selectedItems() if not item.data(HEADER_ROLE)]

    def highlight_alpha(self, identifier: Hashable) -> int:
        return self._highlight_alpha.get(identifier, 0)

    # ========== ROW MAPPING ==========

    def _section_start(self, section: int) -> int:
        """Flat row of a section's first row (its header when headers are shown)."""
        start = sum(self._counts[:section])
        if self._show_headers:
            start += section
        return start

    def _flat_row(self, section: int, row: int) -> int:
        return self._section_start(section) + (1 if self._show_headers else 0) + row

    # ========== ListView ==========

    def begin_updates(self, animated: bool) -> None:
        self._animated = animated
        self._batch_highlights = []
        if not animated:
            # Redraw the affected rows once, at end_updates()
            self.setUpdatesEnabled(False)

    def end_updates(self, animated: bool) -> None:
        if not animated:
            self.setUpdatesEnabled(True)
        elif self._batch_highlights:
            self._start_highlight(self._batch_highlights)
        self._batch_highlights = []
        self._animated = False

    def insert_section(self, index: int, section: Hashable) -> None:
        self._sections.insert(index, section)
        self._counts.insert(index, 0)
        if self._show_headers:
            self.insertItem(self._section_start(index), self._make_header(section))

    def delete_section(self, index: int) -> None:
        if self._counts[index]:
            raise ValueError(f"Section {self._sections[index]!r} still holds {self._counts[index]} items")
        if self._show_headers:
            self.takeItem(self._section_start(index))
        del self._sections[index]
        del self._counts[index]

    def move_section(self, from_index: int, to_index: int) -> None:
        start = self._section_start(from_index)
        length = self._counts[from_index] + (1 if self._show_headers else 0)
        rows = [self.takeItem(start) for _ in range(length)]

        section = self._sections.pop(from_index)
        count = self._counts.pop(from_index)
        self._sections.insert(to_index, section)
        self._counts.insert(to_index, count)

        target = self._section_start(to_index)
        for offset, item in enumerate(rows):
            self.insertItem(target + offset, item)

    def insert_item(self, section: int, row: int, identifier: Hashable, visual: VisualUnit) -> None:
        item = QListWidgetItem()
        item.setData(IDENTIFIER_ROLE, identifier)
        self._apply_visual(item, visual)
        self.insertItem(self._flat_row(section, row), item)
        self._counts[section] += 1
        self._note_changed(identifier)

    def delete_item(self, section: int, row: int) -> None:
        item = self.takeItem(self._flat_row(section, row))
        self._counts[section] -= 1
        if item is not None:
            self._highlight_alpha.pop(item.data(IDENTIFIER_ROLE), None)

    def move_item(self, from_section: int, from_row: int, to_section: int, to_row: int) -> None:
        source_row = self._flat_row(from_section, from_row)
        was_selected = self.item(source_row).isSelected()
        item = self.takeItem(source_row)
        self._counts[from_section] -= 1
        self.insertItem(self._flat_row(to_section, to_row), item)
        self._counts[to_section] += 1
        item.setSelected(was_selected)
        self._note_changed(item.data(IDENTIFIER_ROLE))

    def reload_item(self, section: int, row: int, visual: VisualUnit) -> None:
        item = self.item(self._flat_row(section, row))
        self._apply_visual(item, visual)
        self._note_changed(item.data(IDENTIFIER_ROLE))

    # ========== ITEMS ==========

    def _apply_visual(self, item: QListWidgetItem, visual: VisualUnit) -> None:
        item.setData(VISUAL_ROLE, visual)
        item.setText(visual.text)
        item.setTextAlignment(_ALIGNMENTS.get(visual.alignment, _CENTER))
        # A reloaded item keeps nothing from its previous visual
        if visual.point_size is not None:
            font = QFont(self.font())
            font.setPointSizeF(visual.point_size)
            item.setFont(font)
        else:
            item.setData(Qt.ItemDataRole.FontRole, None)
        if visual.foreground_rgb is not None:
            item.setForeground(QBrush(QColor(*visual.foreground_rgb)))
        else:
            item.setData(Qt.ItemDataRole.ForegroundRole, None)
        item.setSizeHint(self._layout_spec.cell_size(self.viewport().width()))

    def _make_header(self, section: Hashable) -> QListWidgetItem:
        item = QListWidgetItem(str(section))
        item.setData(HEADER_ROLE, True)
        item.setFlags(Qt.ItemFlag.NoItemFlags)
        font = QFont(self.font())
        font.setBold(True)
        item.setFont(font)
        item.setSizeHint(self._layout_spec.header_size(self.viewport().width()))
        return item

    def resizeEvent(self, event):
        """Recompute cell widths for the new viewport width."""
        super().resizeEvent(event)
        width = self.viewport().width()
        cell = self._layout_spec.cell_size(width)
        header = self._layout_spec.header_size(width)
        for row in range(self.count()):
            item = self.item(row)
            item.setSizeHint(header if item.data(HEADER_ROLE) else cell)

    # ========== HIGHLIGHT ==========

    def _note_changed(self, identifier: Hashable) -> None:
        if self._animated:
            self._batch_highlights.append(identifier)

    def _start_highlight(self, identifiers: List[Hashable]) -> None:
        if self._fade_ms <= 0:
            return
        if self._fade is not None:
            self._fade.stop()

        targets = list(dict.fromkeys(list(self._highlight_alpha) + identifiers))
        fade = QVariantAnimation(self)
        fade.setStartValue(255)
        fade.setEndValue(0)
        fade.setDuration(self._fade_ms)

        def on_value(value):
            for identifier in targets:
                self._highlight_alpha[identifier] = int(value)
            self.viewport().update()

        def on_finished():
            self._highlight_alpha.clear()
            self.viewport().update()

        fade.valueChanged.connect(on_value)
        fade.finished.connect(on_finished)
        self._fade = fade
        fade.start()
