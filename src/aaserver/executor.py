"""Task Executor: stash, run the configured command, commit the result."""

from __future__ import annotations

from pathlib import Path

from aaserver import git_ops, log
from aaserver.command import CommandRunner
from aaserver.errors import CommandFailed
from aaserver.store import TaskStore
from aaserver.tasks.model import Task


def build_commit_message(prompt: str) -> str:
    return f"Agent task: {prompt}"


class TaskExecutor:
    """Performs one task against the target repository.

    Failures raise :class:`~aaserver.errors.TaskExecutionError` subclasses;
    converting them into task state is the queue processor's job.
    """

    def __init__(self, store: TaskStore, runner: CommandRunner, repo_path: Path) -> None:
        self.store = store
        self.runner = runner
        self.repo_path = repo_path

    def execute(self, task: Task) -> None:
        self._stash_local_changes(task)

        log.task(task.id, f"Running {self.runner.command}")
        result = self.runner.run_sync(task.prompt, cwd=self.repo_path)
        log.debug(f"Task {task.id}: command exited {result.return_code} after {result.duration_ms}ms")
        if not result.ok:
            raise CommandFailed(result.return_code, result.stderr)

        git_ops.add_all(cwd=self.repo_path)
        git_ops.commit(build_commit_message(task.prompt), cwd=self.repo_path)
        sha = git_ops.rev_parse_head(cwd=self.repo_path)

        self.store.mark_completed(task, sha)
        log.success(f"Task {task.id} committed {sha[:12]}")

    def _stash_local_changes(self, task: Task) -> None:
        # The stash is never popped afterwards; each task starts from a clean tree
        # and earlier local edits stay in the stash list.
        if git_ops.has_dirty_worktree(cwd=self.repo_path):
            log.task(task.id, "Stashing uncommitted local changes")
        r = git_ops.stash(cwd=self.repo_path)
        if r.returncode != 0:
            log.warn(f"Task {task.id}: git stash failed, continuing: {r.stderr.strip()}")
