# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
GeoConflate — Task Monitors
Progress and cancellation interface polled by the matching core.
Swap implementations with zero matching changes.

NullTaskMonitor      — library default, ignores everything
LoggingTaskMonitor   — emits structlog events, throttled
InMemoryTaskMonitor  — thread-safe progress record for hosts that poll
                       from another thread and may request cancellation

Cancellation is cooperative: the core calls is_cancel_requested() between
targets and stops early. It is never signalled with an exception.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod

from geoconflate.models.progress import TaskProgress
from geoconflate.utils.logger import get_logger

log = get_logger(__name__)


# ─── Abstract Interface ──────────────────────────────────────────────────────

class TaskMonitor(ABC):
    """
    Abstract base class for progress reporting.
    All methods are called from the thread running the matching pass.
    """

    @abstractmethod
    def report(self, description: str) -> None:
        """Announce the start of a named step ("Finding matches", ...)."""

    @abstractmethod
    def report_progress(self, done: int, total: int, unit: str) -> None:
        """Report that done of total items (labelled unit) are processed."""

    def is_cancel_requested(self) -> bool:
        """True once the host asked the current run to stop."""
        return False


# ─── Implementations ─────────────────────────────────────────────────────────

class NullTaskMonitor(TaskMonitor):
    """Discards all reports and never cancels."""

    def report(self, description: str) -> None:
        pass

    def report_progress(self, done: int, total: int, unit: str) -> None:
        pass


class LoggingTaskMonitor(TaskMonitor):
    """
    Writes progress to the structured log. Item progress is logged every
    log_every items and on the final item so large runs stay readable.
    """

    def __init__(self, log_every: int = 100) -> None:
        if log_every < 1:
            raise ValueError(f"log_every must be >= 1 (got {log_every})")
        self._log_every = log_every

    def report(self, description: str) -> None:
        log.info("task_step", description=description)

    def report_progress(self, done: int, total: int, unit: str) -> None:
        if done == total or done % self._log_every == 0:
            log.info("task_progress", done=done, total=total, unit=unit)


class InMemoryTaskMonitor(TaskMonitor):
    """
    Thread-safe in-memory progress record using an RLock.
    cancel() may be called from any thread; the running pass observes it
    at its next poll.
    """

    def __init__(self) -> None:
        self._progress = TaskProgress()
        self._steps: list[str] = []
        self._lock = threading.RLock()
        self._cancelled = threading.Event()

    def report(self, description: str) -> None:
        with self._lock:
            self._progress.description = description
            self._steps.append(description)

    def report_progress(self, done: int, total: int, unit: str) -> None:
        with self._lock:
            self._progress.done = done
            self._progress.total = total
            self._progress.unit = unit

    def is_cancel_requested(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self) -> None:
        """Request cooperative cancellation of the current run."""
        self._cancelled.set()
        log.info("task_cancel_requested")

    @property
    def steps(self) -> list[str]:
        """Every description reported so far, in order."""
        with self._lock:
            return list(self._steps)

    def snapshot(self) -> TaskProgress:
        """Copy of the current progress state."""
        with self._lock:
            return self._progress.model_copy(
                update={"cancel_requested": self._cancelled.is_set()}
            )
