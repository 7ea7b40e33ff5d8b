"""Performance monitoring utilities for pyqt-listsync.

Fetches and reconciliation passes are timed here. Timings go to the
performance logger named in ListSyncConfig; applications decide where that
logger writes via setup_logging().
"""

import time
import functools
import logging
from contextlib import contextmanager
from typing import Callable, List, NamedTuple, Optional

from pyqt_listsync.protocols import get_listsync_config


def get_perf_logger() -> logging.Logger:
    """Return the performance logger named by the current config."""
    return logging.getLogger(get_listsync_config().performance_logger_name)


def _log_timing(operation_name: str, elapsed_ms: float, context: dict) -> None:
    details = ", ".join(f"{k}={v}" for k, v in context.items())
    suffix = f" ({details})" if details else ""
    get_perf_logger().debug(f"{operation_name}: {elapsed_ms:.2f}ms{suffix}")


@contextmanager
def timer(operation_name: str, threshold_ms: float = 0.0, **context):
    """Time a block and log it when it takes at least threshold_ms.

    Example:
        with timer("Fetch snapshot", entity="DateItem"):
            records = store.fetch(request)
    """
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed_ms = (time.perf_counter() - start) * 1000
        if elapsed_ms >= threshold_ms:
            _log_timing(operation_name, elapsed_ms, context)


def timed(operation_name: Optional[str] = None, threshold_ms: float = 0.0):
    """Decorator form of timer(); the name defaults to the function's qualified name."""
    def decorator(func: Callable) -> Callable:
        name = operation_name or f"{func.__module__}.{func.__qualname__}"

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            with timer(name, threshold_ms=threshold_ms):
                return func(*args, **kwargs)

        return wrapper
    return decorator


class TimingSummary(NamedTuple):
    count: int
    total_ms: float
    mean_ms: float
    min_ms: float
    max_ms: float


class PerformanceMonitor:
    """Keeps every timing of one recurring operation.

    Slow runs (at or above threshold_ms) are logged as they happen; report()
    logs the aggregate.

    Example:
        monitor = PerformanceMonitor("Reconcile", threshold_ms=16.0)

        with monitor.measure(inserted=3):
            view_updates()

        monitor.report()
    """

    def __init__(self, operation_name: str, threshold_ms: Optional[float] = None):
        self.operation_name = operation_name
        self.threshold_ms = threshold_ms
        self.timings: List[float] = []

    @contextmanager
    def measure(self, **context):
        start = time.perf_counter()
        try:
            yield
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            self.timings.append(elapsed_ms)
            if self.threshold_ms is not None and elapsed_ms >= self.threshold_ms:
                _log_timing(f"Slow {self.operation_name}", elapsed_ms, context)

    def summary(self) -> Optional[TimingSummary]:
        """Aggregate of the recorded timings, None before the first one."""
        if not self.timings:
            return None
        total = sum(self.timings)
        return TimingSummary(len(self.timings), total, total / len(self.timings),
                             min(self.timings), max(self.timings))

    def report(self) -> None:
        summary = self.summary()
        if summary is None:
            get_perf_logger().debug(f"{self.operation_name}: no measurements")
            return
        get_perf_logger().debug(
            f"{self.operation_name}: {summary.count} runs, total {summary.total_ms:.2f}ms, "
            f"mean {summary.mean_ms:.2f}ms, min {summary.min_ms:.2f}ms, max {summary.max_ms:.2f}ms"
        )

    def reset(self) -> None:
        self.timings.clear()
