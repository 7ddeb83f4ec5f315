"""Queue Processor: single-worker loop driving tasks to a terminal state."""

from __future__ import annotations

import threading

from aaserver import log
from aaserver.executor import TaskExecutor
from aaserver.store import TaskStore
from aaserver.tasks.model import Task


class QueueProcessor:
    """Owns the "processing" gate and the one worker thread.

    State machine per task: ``queued -> in-progress -> completed | error``.
    At most one task runs at a time; submissions made while a task runs just
    extend the queue and are picked up when the worker rescans.

    Usage::

        processor = QueueProcessor(store, executor)
        processor.wake()          # after each submission, and once at startup
        processor.wait_idle(5.0)  # block until the backlog has drained
    """

    # Task dependencies are stored but not evaluated before a task starts.
    ENFORCES_DEPENDENCIES = False

    def __init__(self, store: TaskStore, executor: TaskExecutor) -> None:
        self.store = store
        self.executor = executor
        self._lock = threading.Lock()
        self._processing = False
        self._idle = threading.Event()
        self._idle.set()
        self._thread: threading.Thread | None = None

    @property
    def is_processing(self) -> bool:
        with self._lock:
            return self._processing

    def wake(self) -> None:
        """Start the worker unless it is already running."""
        with self._lock:
            if self._processing:
                return
            self._processing = True
            self._idle.clear()
            self._thread = threading.Thread(target=self._run, name="aaserver-queue", daemon=True)
            self._thread.start()

    def wait_idle(self, timeout: float | None = None) -> bool:
        """Return ``True`` once the worker has drained the queue, ``False`` on timeout."""
        return self._idle.wait(timeout)

    # ── worker ───────────────────────────────────────────────────

    def _run(self) -> None:
        try:
            while (task := self._claim_next()) is not None:
                self._process(task)
        except BaseException:
            self._release()
            raise

    def _claim_next(self) -> Task | None:
        # Claiming and releasing the gate share one lock so a submission that
        # lands between "queue empty" and "gate open" still gets a worker.
        with self._lock:
            task = self.store.next_queued()
            if task is None:
                self._processing = False
                self._idle.set()
                return None
            self.store.mark_in_progress(task)
            return task

    def _release(self) -> None:
        with self._lock:
            self._processing = False
            self._idle.set()

    def _process(self, task: Task) -> None:
        log.task(task.id, "Started")
        try:
            self.executor.execute(task)
        except Exception as exc:
            message = str(exc) or type(exc).__name__
            log.error(f"Error processing task {task.id}: {message}")
            self.store.mark_error(task, message)
