# core/threads.py
from __future__ import annotations
import logging
from typing import Any, Callable

from PySide6.QtCore import QObject, QRunnable, QThreadPool, Signal

from app.state import AttemptRecord

logger = logging.getLogger(__name__)


class CallWorkerSignals(QObject):
    loaded = Signal(object)
    failed = Signal(str)


class CallWorker(QRunnable):
    """Runs a blocking call (HTTP request, file read) off the UI thread."""

    def __init__(self, fn: Callable[..., Any], *args: Any):
        super().__init__()
        self.fn = fn
        self.args = args
        self.signals = CallWorkerSignals()

    def run(self):
        try:
            result = self.fn(*self.args)
        except Exception as e:
            logger.warning("Background call %s failed: %s", getattr(self.fn, "__name__", self.fn), e)
            self.signals.failed.emit(str(e))
            return
        self.signals.loaded.emit(result)


class Workers:
    pool = QThreadPool.globalInstance()

    @classmethod
    def call(cls, fn: Callable[..., Any], *args: Any,
             on_loaded: Callable[[Any], None] | None = None,
             on_failed: Callable[[str], None] | None = None) -> CallWorker:
        worker = CallWorker(fn, *args)
        if on_loaded is not None:
            worker.signals.loaded.connect(on_loaded)
        if on_failed is not None:
            worker.signals.failed.connect(on_failed)
        cls.pool.start(worker)
        return worker


class BackgroundSubmitter:
    """
    Fire-and-forget wrapper around a submitter: the attempt is handed to the
    worker pool and the caller returns at once. Failures are only logged.
    """

    def __init__(self, submitter, pool: QThreadPool | None = None):
        self.submitter = submitter
        self.pool = pool or Workers.pool

    def submit_attempt(self, attempt: AttemptRecord) -> None:
        worker = CallWorker(self._submit, attempt)
        self.pool.start(worker)

    def _submit(self, attempt: AttemptRecord):
        outcome = self.submitter.submit_attempt(attempt)
        if outcome is not None and not outcome.success:
            logger.warning("Attempt for %s rejected: %s", attempt.problem_id, outcome.error)
        return outcome
