"""Background task with cancellation, used for off-thread store fetches."""

import logging
from typing import Any, Callable, Optional, Set, Tuple
from PyQt6.QtCore import QThread, pyqtSignal

logger = logging.getLogger(__name__)

# --- Module-level constants ---
CANCEL_WAIT_MS = 100      # Wait time when cancelling previous task
CLEANUP_WAIT_MS = 200     # Wait time during shutdown


class BackgroundTask(QThread):
    """
    Runs a callable on a worker thread and reports back through signals.

    Signals are delivered on the thread that connected to them, which for
    observers is the UI thread.

    Usage:
        task = BackgroundTask(target=store.fetch, args=(request,))
        task.result_ready.connect(on_success)
        task.error_occurred.connect(on_error)  # Receives Exception, not str
        task.start()

        # Later:
        task.cancel()  # Signals won't emit after this
    """

    result_ready = pyqtSignal(object)
    error_occurred = pyqtSignal(Exception)

    def __init__(
        self,
        target: Callable[..., Any],
        args: Tuple = (),
        kwargs: dict = None,
        parent=None
    ):
        super().__init__(parent)
        self._target = target
        self._args = args
        self._kwargs = kwargs or {}
        self.cancelled = False

    def run(self):
        """Execute target in background, respecting cancellation."""
        try:
            result = self._target(*self._args, **self._kwargs)
            if not self.cancelled:
                self.result_ready.emit(result)
        except Exception as e:
            if not self.cancelled:
                self.error_occurred.emit(e)

    def cancel(self):
        """Cancel task. Signals won't emit after this."""
        self.cancelled = True


class BackgroundTaskManager:
    """
    Keeps at most one live background task; starting a new one cancels the last.

    Cancelled tasks are retained until their thread finishes so Qt never
    destroys a running QThread.

    Usage:
        self._task_manager = BackgroundTaskManager()

        def refresh(self):
            self._task_manager.run(
                target=self._fetch_snapshot,
                on_success=self._deliver,
                on_error=self._on_fetch_error,
            )

        def stop(self):
            self._task_manager.cleanup()
    """

    def __init__(self):
        self._current_task: Optional[BackgroundTask] = None
        self._retired: Set[BackgroundTask] = set()

    @property
    def is_running(self) -> bool:
        return self._current_task is not None and self._current_task.isRunning()

    def run(
        self,
        target: Callable[..., Any],
        args: Tuple = (),
        kwargs: dict = None,
        on_success: Callable[[Any], None] = None,
        on_error: Callable[[Exception], None] = None,
    ) -> BackgroundTask:
        """
        Run a background task, cancelling any previous one.

        Args:
            target: Function to execute in background
            args: Positional arguments for target
            kwargs: Keyword arguments for target
            on_success: Callback for successful result
            on_error: Callback for error (receives Exception, not str)

        Returns:
            The started BackgroundTask
        """
        if self._current_task is not None and self._current_task.isRunning():
            logger.debug("Cancelling in-flight background task")
            self._current_task.cancel()
            self._current_task.wait(CANCEL_WAIT_MS)
            self._retire(self._current_task)

        task = BackgroundTask(target=target, args=args, kwargs=kwargs)
        if on_success:
            task.result_ready.connect(on_success)
        if on_error:
            task.error_occurred.connect(on_error)

        self._current_task = task
        task.start()
        return task

    def cleanup(self):
        """Cancel all tasks; any still running after the wait stays retired until it finishes."""
        tasks = [self._current_task, *self._retired]
        self._current_task = None
        self._retired.clear()
        for task in tasks:
            if task is not None and task.isRunning():
                task.cancel()
                task.wait(CLEANUP_WAIT_MS)
                self._retire(task)

    def _retire(self, task: BackgroundTask) -> None:
        if not task.isRunning():
            return
        self._retired.add(task)
        task.finished.connect(lambda: self._retired.discard(task))
