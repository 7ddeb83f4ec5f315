"""Task Store: the ordered task sequence and its JSON mirror on disk."""

from __future__ import annotations

import json
import threading
from pathlib import Path
from typing import Any

from aaserver import log
from aaserver.io_utils import read_json, write_json_atomic
from aaserver.tasks.model import Task, TaskStatus


class TaskStore:
    """Authoritative in-memory task list, persisted after every mutation.

    Persistence is best-effort: a failed write is logged and the in-memory
    change stands, so disk may lag memory until the next successful save.

    Usage::

        store = TaskStore(db_path)
        store.load()                       # in-progress -> queued
        task = store.submit("t1", "do it") # replace-by-id, then append
        store.mark_in_progress(task)
        store.mark_completed(task, sha)
    """

    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path
        self._tasks: list[Task] = []
        self._lock = threading.RLock()

    # ── load / save ──────────────────────────────────────────────

    def load(self) -> None:
        """Read the persisted document, resetting interrupted tasks to queued."""
        try:
            raw = read_json(self.db_path)
        except FileNotFoundError:
            log.debug(f"No database at {self.db_path}; starting empty")
            raw = []
        except (OSError, json.JSONDecodeError) as exc:
            log.error(f"Error reading database file {self.db_path}: {exc}")
            raw = []

        if not isinstance(raw, list):
            log.error(f"Database file {self.db_path} does not hold a task list; starting empty")
            raw = []

        tasks: list[Task] = []
        for item in raw:
            try:
                task = Task.from_dict(item)
            except (KeyError, TypeError, ValueError) as exc:
                log.warn(f"Skipping malformed task record {item!r}: {exc}")
                continue
            if task.status == TaskStatus.IN_PROGRESS:
                log.warn(f"Task {task.id} was interrupted; re-queueing")
                task.status = TaskStatus.QUEUED
            tasks.append(task)

        with self._lock:
            self._tasks = tasks
        log.debug(f"Loaded {len(tasks)} task(s) from {self.db_path}")

    def save(self) -> None:
        with self._lock:
            data = [t.to_dict() for t in self._tasks]
            try:
                write_json_atomic(self.db_path, data)
            except OSError as exc:
                log.error(f"Failed to persist tasks to {self.db_path}: {exc}")

    # ── queries ──────────────────────────────────────────────────

    def snapshot(self) -> list[dict[str, Any]]:
        with self._lock:
            return [t.to_dict() for t in self._tasks]

    def get(self, task_id: str) -> Task | None:
        with self._lock:
            for t in self._tasks:
                if t.id == task_id:
                    return t
        return None

    def next_queued(self) -> Task | None:
        """Earliest-submitted task still queued. Dependencies are not consulted."""
        with self._lock:
            for t in self._tasks:
                if t.status == TaskStatus.QUEUED:
                    return t
        return None

    def count(self, status: TaskStatus) -> int:
        with self._lock:
            return sum(1 for t in self._tasks if t.status == status)

    def __len__(self) -> int:
        with self._lock:
            return len(self._tasks)

    # ── mutations ────────────────────────────────────────────────

    def submit(self, task_id: str, prompt: str, dependencies: list[str] | None = None) -> Task:
        """Replace any task with the same id, then append a fresh queued one."""
        task = Task(id=task_id, prompt=prompt, dependencies=list(dependencies or []))
        with self._lock:
            existing = [t for t in self._tasks if t.id == task_id]
            for old in existing:
                # A running task is not interrupted; it finishes against a record
                # that is no longer in the list.
                log.debug(f"Task {task_id}: replacing previous record ({old.status.value})")
                self._tasks.remove(old)
            self._tasks.append(task)
            self.save()
        return task

    def mark_in_progress(self, task: Task) -> None:
        with self._lock:
            task.status = TaskStatus.IN_PROGRESS
            self.save()
        log.debug(f"Task {task.id}: queued -> in-progress")

    def mark_completed(self, task: Task, commit: str) -> None:
        with self._lock:
            task.status = TaskStatus.COMPLETED
            task.commit = commit
            task.error = None
            self.save()
        log.debug(f"Task {task.id}: in-progress -> completed ({commit})")

    def mark_error(self, task: Task, message: str) -> None:
        with self._lock:
            task.status = TaskStatus.ERROR
            task.error = message
            task.commit = None
            self.save()
        log.debug(f"Task {task.id}: in-progress -> error")
