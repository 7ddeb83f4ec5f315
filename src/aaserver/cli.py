"""aaserver CLI: start the local agent assignment server.

Installed as the ``aaserver`` console_script.
"""

from __future__ import annotations

import sys
from pathlib import Path

import click

from aaserver import __version__
from aaserver.config import (
    DEFAULT_BIND_HOST,
    DEFAULT_ENV_FILE,
    DEFAULT_HOSTNAME,
    DEFAULT_PORT,
    PROMPT_PLACEHOLDER,
    Config,
    load_bearer_token,
    resolve_repo_path,
)
from aaserver.errors import ConfigError


CONTEXT_SETTINGS = dict(
    help_option_names=["-h", "--help"],
    ignore_unknown_options=True,
    allow_interspersed_args=False,
)


@click.command(context_settings=CONTEXT_SETTINGS)
@click.argument("repo_path")
@click.argument("command_and_args", nargs=-1, type=click.UNPROCESSED)
@click.option("--host", default=DEFAULT_BIND_HOST, show_default=True, help="Address to bind")
@click.option("--port", type=int, default=DEFAULT_PORT, show_default=True, help="Port to listen on")
@click.option("--hostname", default=DEFAULT_HOSTNAME, show_default=True, help="Required Host header value")
@click.option("--env-file", default=DEFAULT_ENV_FILE, show_default=True, help="File holding BEARER_TOKEN")
@click.option("--db-dir", default=".", show_default=True, help="Directory for the task database")
@click.option("-v", "--verbose", is_flag=True, help="Show debug output")
@click.version_option(__version__, prog_name="aaserver")
def main(
    repo_path: str,
    command_and_args: tuple[str, ...],
    host: str,
    port: int,
    hostname: str,
    env_file: str,
    db_dir: str,
    verbose: bool,
) -> None:
    """Local Agent Assignment Server.

    Accepts task prompts over HTTP and, one at a time, runs COMMAND inside
    REPO_PATH, then commits whatever it changed. Every argument equal to
    AA_PROMPT is replaced with the task's prompt.

    \b
    EXAMPLES:
      aaserver ~/src/app -- claude -p AA_PROMPT
      aaserver --port 8080 ~/src/app -- ./agent.sh AA_PROMPT

    \b
    The bearer token is read from BEARER_TOKEN in the environment or .env.local.
    """
    from aaserver import log

    log.set_verbose(verbose)

    args = list(command_and_args)
    if args and args[0] == "--":
        args = args[1:]
    if not args:
        raise click.UsageError("Missing COMMAND to run for each task.")

    try:
        token = load_bearer_token(env_file)
        repo = resolve_repo_path(repo_path)
    except ConfigError as exc:
        log.error(str(exc))
        sys.exit(1)

    cfg = Config(
        repo_path=repo,
        command=args[0],
        args=args[1:],
        bearer_token=token,
        host=host,
        port=port,
        hostname=hostname,
        db_dir=Path(db_dir).expanduser().resolve(),
        verbose=verbose,
    )
    _serve(cfg)


def _serve(cfg: Config) -> None:
    """Wire store, executor, processor and HTTP app, then run uvicorn."""
    import uvicorn

    from aaserver import log
    from aaserver.command import CommandRunner
    from aaserver.executor import TaskExecutor
    from aaserver.processor import QueueProcessor
    from aaserver.server import create_app
    from aaserver.store import TaskStore

    runner = CommandRunner(cfg.command, cfg.args)
    err = runner.check_available()
    if err:
        log.warn(err)
    if PROMPT_PLACEHOLDER not in cfg.args:
        log.warn(f"No {PROMPT_PLACEHOLDER} argument given; the prompt will not reach {cfg.command}")

    store = TaskStore(cfg.db_path)
    store.load()
    processor = QueueProcessor(store, TaskExecutor(store, runner, cfg.repo_path))
    app = create_app(store, processor, bearer_token=cfg.bearer_token, hostname=cfg.hostname)

    log.info(f"Repository: {cfg.repo_path}")
    log.info(f"Database: {cfg.db_path}")
    log.info(f"Server running at {cfg.server_url}")
    uvicorn.run(
        app,
        host=cfg.host,
        port=cfg.port,
        log_level="debug" if cfg.verbose else "warning",
    )
