"""Cell presentation contract.

A presenter maps one item identifier to the visual content shown for it.
Presenters are injected once into a ListReconciler and must be pure:
calling them twice for the same identifier and backing data gives the same
VisualUnit, and calling them changes nothing.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from typing import Hashable, Optional, Tuple

# Alignment names understood by the bundled widget
ALIGN_LEFT = "left"
ALIGN_CENTER = "center"
ALIGN_RIGHT = "right"


@dataclass(frozen=True)
class VisualUnit:
    """Renderable content of one cell: text plus static style attributes.

    Attributes:
        text: Label text
        border_rgb: Border colour, None for no border
        border_width: Border width in pixels
        alignment: One of ALIGN_LEFT / ALIGN_CENTER / ALIGN_RIGHT
        point_size: Font point size, None keeps the view's font
        foreground_rgb: Text colour, None keeps the palette colour
        placeholder: True when the unit stands in for unresolvable content
    """
    text: str
    border_rgb: Optional[Tuple[int, int, int]] = (0, 0, 0)
    border_width: int = 1
    alignment: str = ALIGN_CENTER
    point_size: Optional[float] = None
    foreground_rgb: Optional[Tuple[int, int, int]] = None
    placeholder: bool = False

    def as_placeholder(self, text: str) -> "VisualUnit":
        return replace(self, text=text, placeholder=True, foreground_rgb=(128, 128, 128))


class CellPresenter(ABC):
    """
    ABC for mapping item identifiers to visual content.

    Implementations return None when the identifier cannot be resolved
    (for example the backing record is gone). The reconciler logs that case
    and shows a placeholder instead of failing.
    """

    @abstractmethod
    def present(self, identifier: Hashable) -> Optional[VisualUnit]:
        """
        Produce the visual content for one identifier.

        Args:
            identifier: Item identifier from a Snapshot

        Returns:
            VisualUnit to display, or None if the identifier cannot be resolved
        """
        pass

    def placeholder(self, identifier: Hashable, text: str) -> VisualUnit:
        """Visual content used when present() returned None."""
        return VisualUnit(text=text).as_placeholder(text)
