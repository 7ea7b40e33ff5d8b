"""
Stock cell presenters.

TextCellPresenter renders identifiers directly (the static integer grid).
RecordCellPresenter and DateCellPresenter resolve the identifier to a stored
record first and render one of its fields; an unresolvable identifier yields
None so the reconciler can substitute a placeholder.
"""

import logging
from dataclasses import replace
from datetime import datetime
from typing import Any, Callable, Hashable, Optional

from pyqt_listsync.io.fetch_request import Record
from pyqt_listsync.protocols import CellPresenter, VisualUnit, get_listsync_config

logger = logging.getLogger(__name__)

# Title-sized label with a thin black border
DEFAULT_STYLE = VisualUnit(text="", border_rgb=(0, 0, 0), border_width=1, point_size=20.0)


class FunctionCellPresenter(CellPresenter):
    """Adapts a plain callable to the CellPresenter contract."""

    def __init__(self, func: Callable[[Hashable], Optional[VisualUnit]]):
        self._func = func

    def present(self, identifier: Hashable) -> Optional[VisualUnit]:
        return self._func(identifier)


class TextCellPresenter(CellPresenter):
    """Shows str(identifier) with a fixed style."""

    def __init__(self, style: VisualUnit = DEFAULT_STYLE):
        self._style = style

    def present(self, identifier: Hashable) -> Optional[VisualUnit]:
        return replace(self._style, text=str(identifier))


class RecordCellPresenter(CellPresenter):
    """
    Shows one field of the record behind an identifier.

    Args:
        resolver: Maps identifier to Record, or None if it no longer exists
            (e.g. ChangeObserver.object_for or RecordStore.get)
        field_name: Record field to display
        style: Static style attributes copied onto every unit
    """

    def __init__(self, resolver: Callable[[Hashable], Optional[Record]], field_name: str,
                 style: VisualUnit = DEFAULT_STYLE):
        self._resolver = resolver
        self._field_name = field_name
        self._style = style

    def present(self, identifier: Hashable) -> Optional[VisualUnit]:
        record = self._resolver(identifier)
        if record is None:
            logger.debug(f"No record for {identifier}")
            return None
        value = record.get(self._field_name)
        if value is None:
            logger.debug(f"Record {identifier} has no {self._field_name!r}")
            return None
        return replace(self._style, text=self.format_value(value))

    def format_value(self, value: Any) -> str:
        return str(value)


class DateCellPresenter(RecordCellPresenter):
    """Shows an epoch-seconds field as a short date with medium time."""

    def __init__(self, resolver: Callable[[Hashable], Optional[Record]], field_name: str = "date_created",
                 style: VisualUnit = DEFAULT_STYLE, date_format: Optional[str] = None):
        super().__init__(resolver, field_name, style)
        self._date_format = date_format or get_listsync_config().date_format

    def format_value(self, value: Any) -> str:
        return datetime.fromtimestamp(float(value)).strftime(self._date_format)
