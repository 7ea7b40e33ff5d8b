"""
Single-column list of timestamps kept in sync with a record store.

Pressing "Add" stores a record stamped with the current time; the change
observer picks up the commit and the reconciler inserts one cell. "Delete"
removes the selected records the same way.
"""

import logging
import sys
from typing import Optional

from PyQt6.QtGui import QAction, QKeySequence
from PyQt6.QtWidgets import QApplication, QMainWindow

from pyqt_listsync.core.log_utils import setup_logging
from pyqt_listsync.io import IN_MEMORY, FetchRequest, RecordStore, SortDescriptor
from pyqt_listsync.protocols import get_listsync_config
from pyqt_listsync.services import (
    ChangeObserver,
    CreateItemCommand,
    DateCellPresenter,
    DeleteItemCommand,
    ListReconciler,
)
from pyqt_listsync.widgets import DiffableListWidget, GridLayoutSpec

logger = logging.getLogger(__name__)

DATE_ENTITY = "DateItem"
DATE_FIELD = "date_created"


def create_date_store(path: Optional[str] = None) -> RecordStore:
    """Open a store with the DateItem entity registered."""
    return RecordStore(path or IN_MEMORY, entities=[DATE_ENTITY])


def date_fetch_request() -> FetchRequest:
    """All DateItems, oldest first."""
    return FetchRequest(DATE_ENTITY, [SortDescriptor(DATE_FIELD, ascending=True)])


class DateListWindow(QMainWindow):
    """
    Lists DateItem records oldest first.

    Args:
        store: Backing store; must have the DateItem entity registered
        create_command: Overrides the "Add" command (tests inject a fixed clock)
    """

    def __init__(self, store: RecordStore, create_command: Optional[CreateItemCommand] = None, parent=None):
        super().__init__(parent)
        self.setWindowTitle("Dates")
        self.store = store

        self.list_widget = DiffableListWidget(GridLayoutSpec(columns=1, item_height=44, spacing=10))
        self.setCentralWidget(self.list_widget)

        self.observer = ChangeObserver(store, date_fetch_request(), parent=self)
        self.reconciler = ListReconciler(
            self.list_widget,
            DateCellPresenter(self.observer.object_for, DATE_FIELD),
            parent=self,
        )
        self.create_command = create_command or CreateItemCommand(store, DATE_ENTITY, DATE_FIELD)
        self.delete_command = DeleteItemCommand(store)

        self._configure_actions()
        self.observer.fetch_failed.connect(self._on_fetch_failed)
        self.observer.start()
        self.reconciler.connect_observer(self.observer, get_listsync_config().animate_differences)

    def _configure_actions(self) -> None:
        toolbar = self.addToolBar("Items")
        self.add_action = QAction("Add", self)
        self.add_action.setShortcut(QKeySequence.StandardKey.New)
        self.add_action.triggered.connect(self.add_item)
        toolbar.addAction(self.add_action)

        self.delete_action = QAction("Delete", self)
        self.delete_action.setShortcut(QKeySequence.StandardKey.Delete)
        self.delete_action.triggered.connect(self.delete_selected)
        toolbar.addAction(self.delete_action)

    def add_item(self) -> None:
        self.create_command.execute()

    def delete_selected(self) -> None:
        selected = self.list_widget.selected_identifiers()
        if selected:
            self.delete_command.execute(selected)

    def _on_fetch_failed(self, error: Exception) -> None:
        self.statusBar().showMessage(f"Could not refresh list: {error}", 5000)

    def closeEvent(self, event):
        self.observer.stop()
        self.reconciler.disconnect_observer(self.observer)
        super().closeEvent(event)


def main() -> int:
    setup_logging("date_list")
    app = QApplication.instance() or QApplication(sys.argv)
    store = create_date_store(get_listsync_config().database_path)
    window = DateListWindow(store)
    window.resize(420, 640)
    window.show()
    try:
        return app.exec()
    finally:
        store.close()


if __name__ == "__main__":
    sys.exit(main())
