"""
List view contract driven by ListReconciler.

The reconciler replays a SnapshotDiff one call at a time between
begin_updates() and end_updates(). Indices passed to each call are valid
against the view state left by the previous call, so an implementation can
mutate its rows directly without precomputing anything.
"""

from abc import ABC, abstractmethod
from typing import Hashable

from pyqt_listsync.protocols.cell_presenter import VisualUnit


class ListView(ABC):
    """
    ABC for views that display a sectioned list of items.

    Design Philosophy:
    - The view never decides what to show; the reconciler does
    - The view never calls presenters; it receives VisualUnits
    - Moves are real moves so views can keep selection and animate them
    """

    @abstractmethod
    def begin_updates(self, animated: bool) -> None:
        """Start a batch of operations."""
        pass

    @abstractmethod
    def end_updates(self, animated: bool) -> None:
        """Finish a batch. Animated views start their transitions here."""
        pass

    @abstractmethod
    def insert_section(self, index: int, section: Hashable) -> None:
        pass

    @abstractmethod
    def delete_section(self, index: int) -> None:
        """Delete an (already empty) section."""
        pass

    @abstractmethod
    def move_section(self, from_index: int, to_index: int) -> None:
        pass

    @abstractmethod
    def insert_item(self, section: int, row: int, identifier: Hashable, visual: VisualUnit) -> None:
        pass

    @abstractmethod
    def delete_item(self, section: int, row: int) -> None:
        pass

    @abstractmethod
    def move_item(self, from_section: int, from_row: int, to_section: int, to_row: int) -> None:
        """Take the item out at (from_section, from_row), then put it at (to_section, to_row)."""
        pass

    @abstractmethod
    def reload_item(self, section: int, row: int, visual: VisualUnit) -> None:
        """Replace the visual content of an item that did not move."""
        pass
