"""Console logging with colored output via Rich."""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape

console = Console(highlight=False, log_path=False)
_err_console = Console(highlight=False, stderr=True, log_path=False)

_verbose = False


def set_verbose(enabled: bool) -> None:
    global _verbose
    _verbose = enabled


def info(msg: str) -> None:
    console.log(f"[blue]\\[INFO][/blue] {escape(msg)}")


def success(msg: str) -> None:
    console.log(f"[green]\\[OK][/green] {escape(msg)}")


def warn(msg: str) -> None:
    console.log(f"[yellow]\\[WARN][/yellow] {escape(msg)}")


def error(msg: str) -> None:
    _err_console.log(f"[red]\\[ERROR][/red] {escape(msg)}")


def debug(msg: str) -> None:
    if _verbose:
        console.log(f"[dim]\\[DEBUG] {escape(msg)}[/dim]")


def task(task_id: str, msg: str) -> None:
    """Info line scoped to one task."""
    console.log(f"[blue]\\[INFO][/blue] [bold]{escape(task_id)}[/bold]: {escape(msg)}")
