"""
Cancellable background tasks polled from the tick loop.

A task runs its target on a daemon thread. The target receives a
threading.Event cancel token and should use ``cancel.wait(seconds)`` instead
of sleeping so cancellation takes effect at the next suspension point.

The tick loop never blocks on a task: it checks ``done`` and, if the task was
not cancelled, reads ``result()``. A cancelled task's result is never read.
"""

import logging
import threading
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


class TaskCancelled(Exception):
    """Raised inside a task target to abandon work after cancellation."""


class BackgroundTask:
    """
    One background operation.

    Usage:
        task = BackgroundTask("route_lookup", lambda cancel: client.fetch_route(...))
        task.start()

        # each tick
        if task.done and not task.cancelled:
            waypoints = task.result()   # re-raises the target's exception
    """

    def __init__(self, name: str, target: Callable[[threading.Event], Any]):
        self.name = name
        self._target = target
        self._cancel_event = threading.Event()
        self._done_event = threading.Event()
        self._result: Any = None
        self._error: Optional[BaseException] = None
        self._thread: Optional[threading.Thread] = None

    def start(self) -> "BackgroundTask":
        """Start the worker thread (no-op if already started)."""
        if self._thread is None:
            self._thread = threading.Thread(
                target=self._run, name=f"task-{self.name}", daemon=True
            )
            self._thread.start()
            logger.debug(f"Task started: {self.name}")
        return self

    def _run(self):
        try:
            self._result = self._target(self._cancel_event)
        except TaskCancelled:
            logger.debug(f"Task abandoned after cancel: {self.name}")
        except Exception as e:
            # Handed back to the tick loop through result()
            self._error = e
            if not self._cancel_event.is_set():
                logger.debug(f"Task {self.name} failed: {e}")
        finally:
            self._done_event.set()

    @property
    def started(self) -> bool:
        return self._thread is not None

    @property
    def done(self) -> bool:
        return self._done_event.is_set()

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    @property
    def is_outstanding(self) -> bool:
        """Started, not finished and not cancelled."""
        return self.started and not self.done and not self.cancelled

    def cancel(self):
        """Request cancellation. The result, if any arrives, is discarded."""
        if not self._cancel_event.is_set():
            self._cancel_event.set()
            logger.debug(f"Task cancelled: {self.name}")

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until finished. For drivers and tests, never the tick loop."""
        return self._done_event.wait(timeout)

    def result(self) -> Any:
        """
        Result of a finished task.

        Raises:
            RuntimeError: if the task is not finished or was cancelled
            Exception: whatever the target raised
        """
        if not self.done:
            raise RuntimeError(f"Task {self.name} has not finished")
        if self.cancelled:
            raise RuntimeError(f"Task {self.name} was cancelled")
        if self._error is not None:
            raise self._error
        return self._result


def check_cancelled(cancel: threading.Event):
    """Raise TaskCancelled if the token is set."""
    if cancel.is_set():
        raise TaskCancelled()
