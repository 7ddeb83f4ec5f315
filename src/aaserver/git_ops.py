"""Git operations on the target repository: stash, stage, commit, resolve HEAD."""

from __future__ import annotations

import subprocess
from pathlib import Path

from aaserver.errors import GitError


def _git(*args: str, cwd: Path | None = None) -> subprocess.CompletedProcess[str]:
    """Run a git command and capture its output."""
    return subprocess.run(
        ["git", *args],
        capture_output=True,
        text=True,
        encoding="utf-8",
        errors="replace",
        cwd=cwd,
    )


def is_work_tree(cwd: Path | None = None) -> bool:
    try:
        r = _git("rev-parse", "--is-inside-work-tree", cwd=cwd)
    except FileNotFoundError:
        return False
    return r.returncode == 0 and r.stdout.strip() == "true"


def has_dirty_worktree(cwd: Path | None = None) -> bool:
    r = _git("status", "--porcelain", cwd=cwd)
    return bool(r.stdout.strip())


def stash(cwd: Path | None = None) -> subprocess.CompletedProcess[str]:
    """Stash local changes. Returns the raw result; callers decide if failure matters."""
    return _git("stash", cwd=cwd)


def add_all(cwd: Path | None = None) -> None:
    r = _git("add", ".", cwd=cwd)
    if r.returncode != 0:
        raise GitError("add", r.stderr)


def commit(message: str, cwd: Path | None = None) -> None:
    """Record a commit even when the working tree is unchanged."""
    r = _git("commit", "--allow-empty", "-m", message, cwd=cwd)
    if r.returncode != 0:
        raise GitError("commit", r.stderr.strip() or r.stdout)


def rev_parse_head(cwd: Path | None = None) -> str:
    r = _git("rev-parse", "HEAD", cwd=cwd)
    if r.returncode != 0:
        raise GitError("rev-parse", r.stderr)
    return r.stdout.strip()


def commit_message(sha: str, cwd: Path | None = None) -> str:
    r = _git("log", "-1", "--format=%B", sha, cwd=cwd)
    return r.stdout.strip() if r.returncode == 0 else ""


def stash_count(cwd: Path | None = None) -> int:
    r = _git("stash", "list", cwd=cwd)
    if r.returncode != 0 or not r.stdout.strip():
        return 0
    return len(r.stdout.strip().splitlines())
