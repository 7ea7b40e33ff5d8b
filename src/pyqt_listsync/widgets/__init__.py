"""
PyQt6 widgets implementing the ListView contract.
"""

from .cell_delegate import CellDelegate, HEADER_ROLE, IDENTIFIER_ROLE, VISUAL_ROLE
from .diffable_list_widget import DiffableListWidget, ListViewWidgetMeta
from .grid_layout import GridLayoutSpec

__all__ = [
    "CellDelegate",
    "HEADER_ROLE",
    "IDENTIFIER_ROLE",
    "VISUAL_ROLE",
    "DiffableListWidget",
    "ListViewWidgetMeta",
    "GridLayoutSpec",
]
