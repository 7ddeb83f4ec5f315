"""The externally configured command that performs a task's work."""

from __future__ import annotations

import shutil
import subprocess
import time
from dataclasses import dataclass, field
from pathlib import Path

from aaserver.config import PROMPT_PLACEHOLDER


@dataclass
class CommandResult:
    """Exit code and captured output of one command invocation."""

    return_code: int = 0
    stdout: str = ""
    stderr: str = ""
    duration_ms: int = 0

    @property
    def ok(self) -> bool:
        return self.return_code == 0


@dataclass
class CommandRunner:
    """Runs ``command args...`` with the prompt placeholder substituted."""

    command: str
    args: list[str] = field(default_factory=list)
    placeholder: str = PROMPT_PLACEHOLDER

    def build_cmd(self, prompt: str) -> list[str]:
        """Return the argv for *prompt*; every argument equal to the placeholder is replaced."""
        return [self.command, *(prompt if arg == self.placeholder else arg for arg in self.args)]

    def check_available(self) -> str | None:
        """Return an error message if the command is not on PATH, else None."""
        if Path(self.command).is_file() or shutil.which(self.command):
            return None
        return f"{self.command} not found in PATH"

    def run_sync(self, prompt: str, *, cwd: Path | None = None) -> CommandResult:
        """Run to completion and return the captured result. No timeout is applied."""
        cmd = self.build_cmd(prompt)
        start = time.monotonic()

        try:
            proc = subprocess.run(
                cmd,
                stdin=subprocess.DEVNULL,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                cwd=cwd,
            )
        except FileNotFoundError:
            return CommandResult(return_code=-1, stderr=f"{cmd[0]} not found")
        except PermissionError as exc:
            return CommandResult(return_code=-1, stderr=str(exc))

        return CommandResult(
            return_code=proc.returncode,
            stdout=proc.stdout or "",
            stderr=proc.stderr or "",
            duration_ms=int((time.monotonic() - start) * 1000),
        )
