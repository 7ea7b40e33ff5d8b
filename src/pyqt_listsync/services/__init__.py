"""
Service layer.

Change observation, reconciliation, cell presentation and store commands.
"""

from .cell_presenters import (
    DEFAULT_STYLE,
    DateCellPresenter,
    FunctionCellPresenter,
    RecordCellPresenter,
    TextCellPresenter,
)
from .change_observer import ChangeObserver
from .item_commands import CreateItemCommand, DeleteItemCommand, UpdateItemCommand
from .list_reconciler import ListReconciler

__all__ = [
    "DEFAULT_STYLE",
    "DateCellPresenter",
    "FunctionCellPresenter",
    "RecordCellPresenter",
    "TextCellPresenter",
    "ChangeObserver",
    "CreateItemCommand",
    "DeleteItemCommand",
    "UpdateItemCommand",
    "ListReconciler",
]
