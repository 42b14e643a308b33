from __future__ import annotations

import logging
import threading
from typing import Protocol

from regen_publisher.framework.errors import PublishCancelled


class ProgressCallback(Protocol):
    def save_started(self, total_tasks: int) -> None: ...

    def start_task(self, task_name: str) -> None: ...

    def check_cancel(self) -> None:
        """Raise `PublishCancelled` if the caller asked the pass to stop."""
        ...

    def done(self) -> None: ...


class NullProgressCallback:
    def save_started(self, total_tasks: int) -> None:
        return

    def start_task(self, task_name: str) -> None:
        return

    def check_cancel(self) -> None:
        return

    def done(self) -> None:
        return


class LoggingProgressCallback:
    """Reports progress through a logger and honours a cancellation flag.

    ``cancel()`` may be called from another thread; the pass stops before its
    next file write.
    """

    def __init__(self, logger: logging.Logger | None = None):
        self.logger = logger or logging.getLogger(__name__)
        self._cancelled = threading.Event()
        self._total = 0
        self._completed = 0

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self) -> None:
        self._cancelled.set()

    def save_started(self, total_tasks: int) -> None:
        self._total = int(total_tasks)
        self._completed = 0
        self.logger.info("Saving %d generated artifact(s)", self._total)

    def start_task(self, task_name: str) -> None:
        self._completed += 1
        self.logger.info("[%d/%d] %s", self._completed, self._total, task_name)

    def check_cancel(self) -> None:
        if self._cancelled.is_set():
            raise PublishCancelled("Publish pass cancelled by caller")

    def done(self) -> None:
        self.logger.info("Publish pass finished")
