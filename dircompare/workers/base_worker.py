"""
Request-scoped workers for background comparisons.

A worker serves exactly one request on a channel of a RequestTracker:
- The request id is drawn when the worker is created
- The outcome is wrapped in a WorkerResult carrying that id
- Only the latest request of a channel reports through `finished`;
  an older one reports through `superseded`
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Optional

from PyQt6.QtCore import QObject, QThread, pyqtSignal, pyqtSlot

from dircompare.services.comparison import RequestTracker


class WorkerState(Enum):
    PENDING = auto()
    RUNNING = auto()
    COMPLETED = auto()
    SUPERSEDED = auto()
    CANCELLED = auto()
    FAILED = auto()


@dataclass(frozen=True)
class WorkerResult:
    """A comparison result tagged with the request that produced it."""
    channel: str
    request_id: int
    value: Any


class WorkerSignals(QObject):
    """Signals emitted while a request is served."""
    status = pyqtSignal(str)

    started = pyqtSignal()

    # WorkerResult of the latest request on the channel
    finished = pyqtSignal(object)

    # WorkerResult of a request a newer one replaced
    superseded = pyqtSignal(object)

    cancelled = pyqtSignal()

    # (exception type name, message)
    error = pyqtSignal(str, str)


class WorkerMeta(type(QObject), type(ABC)):
    pass


class BaseWorker(QObject, ABC, metaclass=WorkerMeta):
    """
    Serves one request and reports its outcome through `signals`.

    Subclasses implement `compute`, which returns the plain result value.
    """

    def __init__(
        self,
        requests: RequestTracker,
        channel: str,
        parent: Optional[QObject] = None
    ):
        super().__init__(parent)
        self.signals = WorkerSignals()
        self.requests = requests
        self.channel = channel
        self.request_id = requests.next_id(channel)
        self._lock = threading.Lock()
        self._state = WorkerState.PENDING
        self._cancelled = False
        self._result: Optional[WorkerResult] = None
        self._error: Optional[tuple[str, str]] = None

    @property
    def state(self) -> WorkerState:
        with self._lock:
            return self._state

    @property
    def is_current(self) -> bool:
        """Whether no newer request was issued on this worker's channel."""
        return self.requests.is_current(self.channel, self.request_id)

    @property
    def result(self) -> Optional[WorkerResult]:
        return self._result

    @property
    def error(self) -> Optional[tuple[str, str]]:
        return self._error

    def cancel(self) -> None:
        """Drop this request's outcome; `cancelled` is emitted instead."""
        with self._lock:
            self._cancelled = True

    @pyqtSlot()
    def run(self) -> None:
        """Serve the request. Exceptions from `compute` become `error`."""
        self._set_state(WorkerState.RUNNING)
        self.signals.started.emit()

        try:
            value = self.compute()
        except Exception as e:
            self._error = (type(e).__name__, str(e))
            self._set_state(WorkerState.FAILED)
            self.signals.error.emit(*self._error)
            return

        with self._lock:
            cancelled = self._cancelled

        if cancelled:
            self._set_state(WorkerState.CANCELLED)
            self.signals.cancelled.emit()
            return

        self._result = WorkerResult(self.channel, self.request_id, value)
        if self.is_current:
            self._set_state(WorkerState.COMPLETED)
            self.signals.finished.emit(self._result)
        else:
            self._set_state(WorkerState.SUPERSEDED)
            self.signals.superseded.emit(self._result)

    @abstractmethod
    def compute(self) -> Any:
        """Produce the result value for this request."""

    def report_status(self, message: str) -> None:
        self.signals.status.emit(message)

    def _set_state(self, state: WorkerState) -> None:
        with self._lock:
            self._state = state


class WorkerThread(QThread):
    """
    Runs one worker on its own thread.

    Usage:
        thread = WorkerThread(worker)
        worker.signals.finished.connect(on_result)
        thread.start()
    """

    def __init__(self, worker: BaseWorker, parent: Optional[QObject] = None):
        super().__init__(parent)
        self.worker = worker

    def run(self) -> None:
        self.worker.run()

    def cancel(self) -> None:
        self.worker.cancel()
