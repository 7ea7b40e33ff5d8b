"""Two-column grid filled once from an integer range."""

import logging
import sys
from typing import Iterable, Optional

from PyQt6.QtWidgets import QApplication, QMainWindow

from pyqt_listsync.core.log_utils import setup_logging
from pyqt_listsync.core.snapshot import Snapshot
from pyqt_listsync.services import ListReconciler, TextCellPresenter
from pyqt_listsync.widgets import DiffableListWidget, GridLayoutSpec

logger = logging.getLogger(__name__)

ITEM_COUNT = 94


class StaticGridWindow(QMainWindow):
    """Shows each integer of `items` in its own bordered cell, two per row."""

    def __init__(self, items: Optional[Iterable[int]] = None, parent=None):
        super().__init__(parent)
        self.setWindowTitle("Static Grid")
        self.list_widget = DiffableListWidget(GridLayoutSpec(columns=2, item_height=44, spacing=10))
        self.setCentralWidget(self.list_widget)

        self.reconciler = ListReconciler(self.list_widget, TextCellPresenter(), parent=self)
        values = range(ITEM_COUNT) if items is None else items
        self.reconciler.apply(Snapshot.from_items(values), animated=False)
        logger.debug(f"Static grid populated with {self.list_widget.count()} cells")


def main() -> int:
    setup_logging("static_grid")
    app = QApplication.instance() or QApplication(sys.argv)
    window = StaticGridWindow()
    window.resize(480, 640)
    window.show()
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
