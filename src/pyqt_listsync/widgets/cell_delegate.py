"""
Item delegate painting VisualUnit borders and the insert/move highlight.

Text, font, alignment and colours travel on the item itself; the delegate
adds what QListWidgetItem cannot express: a per-cell border and a fading
highlight behind the text.
"""

from typing import Callable, Hashable

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QColor, QPainter, QPen
from PyQt6.QtWidgets import QStyledItemDelegate, QStyleOptionViewItem

# Custom data roles (must match DiffableListWidget)
IDENTIFIER_ROLE = Qt.ItemDataRole.UserRole + 20
VISUAL_ROLE = Qt.ItemDataRole.UserRole + 21
HEADER_ROLE = Qt.ItemDataRole.UserRole + 22


class CellDelegate(QStyledItemDelegate):
    """Paints highlight, then the default item, then the VisualUnit border.

    Args:
        highlight_rgb: Highlight colour; alpha comes from highlight_alpha
        highlight_alpha: Returns current highlight alpha (0-255) for an identifier
        parent: Owning list widget
    """

    def __init__(self, highlight_rgb, highlight_alpha: Callable[[Hashable], int], parent=None):
        super().__init__(parent)
        self._highlight_rgb = highlight_rgb
        self._highlight_alpha = highlight_alpha

    def paint(self, painter: QPainter, option: QStyleOptionViewItem, index) -> None:
        identifier = index.data(IDENTIFIER_ROLE)
        if identifier is not None:
            alpha = self._highlight_alpha(identifier)
            if alpha > 0:
                painter.fillRect(option.rect, QColor(*self._highlight_rgb, alpha))

        super().paint(painter, option, index)

        visual = index.data(VISUAL_ROLE)
        if visual is None or visual.border_rgb is None or visual.border_width <= 0:
            return

        painter.save()
        pen = QPen(QColor(*visual.border_rgb))
        pen.setWidth(visual.border_width)
        painter.setPen(pen)
        painter.setBrush(Qt.BrushStyle.NoBrush)
        # Keep the whole stroke inside the cell
        inset = visual.border_width // 2
        rect = option.rect.adjusted(inset, inset, -inset - 1, -inset - 1)
        painter.drawRect(rect)
        painter.restore()
