"""Trailing debounce used to merge bursts of store commits into one refresh."""

from typing import Callable, Optional
from PyQt6.QtCore import QObject, QTimer


class DebounceTimer:
    """
    Fires handler once, delay_ms after the most recent trigger().

    A single QTimer is created lazily and restarted on every trigger. Passing
    an owner parents the timer to it, so the timer dies with the owner.

    Usage:
        self._debounce = DebounceTimer(delay_ms=50, handler=self._refresh, owner=self)

        def _on_objects_changed(self, change_set):
            self._debounce.trigger()
    """

    def __init__(self, delay_ms: int, handler: Callable[[], None], owner: Optional[QObject] = None):
        if delay_ms < 0:
            raise ValueError(f"delay_ms must not be negative, got {delay_ms}")
        self._delay_ms = delay_ms
        self._handler = handler
        self._owner = owner
        self._timer: Optional[QTimer] = None

    @property
    def delay_ms(self) -> int:
        return self._delay_ms

    @property
    def is_pending(self) -> bool:
        return self._timer is not None and self._timer.isActive()

    def trigger(self):
        if self._timer is None:
            self._timer = QTimer(self._owner)
            self._timer.setSingleShot(True)
            self._timer.timeout.connect(self._handler)
        self._timer.start(self._delay_ms)

    def cancel(self):
        """Drop a pending fire, if any."""
        if self._timer is not None:
            self._timer.stop()

    def force(self):
        """Fire now instead of waiting, whether or not a fire was pending."""
        self.cancel()
        self._handler()
