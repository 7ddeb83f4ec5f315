"""Shared fixtures for aaserver tests.

File handling in tests:
- Use tmp_path for any directory or file creation so tests are isolated and cleaned up.
- External commands are ``sys.executable -c`` scripts so tests do not depend on PATH.
"""

from __future__ import annotations

import subprocess
import sys
from pathlib import Path

import pytest

from aaserver.command import CommandRunner
from aaserver.config import PROMPT_PLACEHOLDER
from aaserver.executor import TaskExecutor
from aaserver.io_utils import write_text
from aaserver.processor import QueueProcessor
from aaserver.store import TaskStore

# Appends the prompt to out.txt so every task leaves something to commit.
APPEND_PROMPT_SCRIPT = (
    "import sys\n"
    "with open('out.txt', 'a', encoding='utf-8') as f:\n"
    "    f.write(sys.argv[1] + '\\n')\n"
)

FAIL_SCRIPT = "import sys; sys.stderr.write('agent exploded'); sys.exit(1)"


@pytest.fixture
def git_repo(tmp_path: Path) -> Path:
    """Create a minimal git repo for testing."""
    repo = tmp_path / "repo"
    repo.mkdir()
    subprocess.run(["git", "init"], cwd=repo, capture_output=True, check=True)
    subprocess.run(["git", "config", "user.name", "Test"], cwd=repo, capture_output=True)
    subprocess.run(["git", "config", "user.email", "test@test"], cwd=repo, capture_output=True)
    write_text(repo / "README.md", "# Test")
    subprocess.run(["git", "add", "README.md"], cwd=repo, capture_output=True)
    subprocess.run(["git", "commit", "-m", "Initial"], cwd=repo, capture_output=True)
    return repo


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "db" / "db-test.json"


@pytest.fixture
def store(db_path: Path) -> TaskStore:
    s = TaskStore(db_path)
    s.load()
    return s


def _python_runner(script: str) -> CommandRunner:
    return CommandRunner(sys.executable, ["-c", script, PROMPT_PLACEHOLDER])


@pytest.fixture
def append_runner() -> CommandRunner:
    return _python_runner(APPEND_PROMPT_SCRIPT)


@pytest.fixture
def failing_runner() -> CommandRunner:
    return _python_runner(FAIL_SCRIPT)


@pytest.fixture
def make_processor(store: TaskStore, git_repo: Path):
    """Factory building a real executor + processor around *store* and *git_repo*."""

    def _make(runner: CommandRunner) -> QueueProcessor:
        return QueueProcessor(store, TaskExecutor(store, runner, git_repo))

    return _make
