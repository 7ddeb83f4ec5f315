"""Typed failures raised by configuration loading and task execution."""

from __future__ import annotations


class ConfigError(Exception):
    """Fatal startup problem (missing secret, bad repository path)."""


class TaskExecutionError(Exception):
    """Base for failures caught at the task boundary and recorded on the task."""


class CommandFailed(TaskExecutionError):
    """The configured external command exited non-zero or could not start."""

    def __init__(self, return_code: int, stderr: str) -> None:
        self.return_code = return_code
        self.stderr = stderr
        super().__init__(f"Command failed with code {return_code}: {stderr}")


class GitError(TaskExecutionError):
    """A git step needed to record the task's result failed."""

    def __init__(self, step: str, stderr: str) -> None:
        self.step = step
        self.stderr = stderr
        super().__init__(f"git {step} failed: {stderr.strip()}")
