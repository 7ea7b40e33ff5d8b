"""Declarative grid layout for DiffableListWidget."""

from dataclasses import dataclass
from typing import Tuple

from PyQt6.QtCore import QSize
from PyQt6.QtWidgets import QListView


@dataclass(frozen=True)
class GridLayoutSpec:
    """Fixed-height rows of equal-width cells.

    Attributes:
        columns: Cells per row; 1 gives a plain list
        item_height: Absolute cell height in pixels
        spacing: Gap between cells and between rows
        content_insets: (top, leading, bottom, trailing) margins around the grid
    """
    columns: int = 1
    item_height: int = 44
    spacing: int = 10
    content_insets: Tuple[int, int, int, int] = (0, 10, 0, 10)

    def __post_init__(self):
        if self.columns < 1:
            raise ValueError(f"GridLayoutSpec needs at least one column, got {self.columns}")
        if self.item_height < 1:
            raise ValueError(f"GridLayoutSpec needs a positive item height, got {self.item_height}")

    def cell_width(self, viewport_width: int) -> int:
        """Width of one cell for a given viewport width."""
        # QListView puts `spacing` around every cell, so each column costs 2*spacing
        usable = viewport_width - 2 * self.spacing * self.columns
        return max(1, usable // self.columns)

    def cell_size(self, viewport_width: int) -> QSize:
        return QSize(self.cell_width(viewport_width), self.item_height)

    def header_size(self, viewport_width: int) -> QSize:
        return QSize(max(1, viewport_width - 2 * self.spacing), self.item_height)

    def configure(self, view: QListView) -> None:
        """Apply view-level settings. Cell sizes are set per item by the widget."""
        top, leading, bottom, trailing = self.content_insets
        if self.columns > 1:
            view.setViewMode(QListView.ViewMode.IconMode)
            view.setFlow(QListView.Flow.LeftToRight)
            view.setWrapping(True)
        else:
            view.setViewMode(QListView.ViewMode.ListMode)
        view.setResizeMode(QListView.ResizeMode.Adjust)
        view.setMovement(QListView.Movement.Static)
        view.setSpacing(self.spacing)
        view.setViewportMargins(leading, top, trailing, bottom)
