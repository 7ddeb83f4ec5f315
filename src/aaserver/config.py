"""Configuration defaults, secret loading and runtime options for aaserver."""

from __future__ import annotations

import base64
import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import dotenv_values

from aaserver.errors import ConfigError


SERVER_NAME = "Local Agent Assignment Server"

PROMPT_PLACEHOLDER = "AA_PROMPT"

DEFAULT_BIND_HOST = "127.0.0.1"
DEFAULT_PORT = 1337
DEFAULT_HOSTNAME = "aa.localhost"

TOKEN_ENV_VAR = "BEARER_TOKEN"
DEFAULT_ENV_FILE = ".env.local"


@dataclass
class Config:
    """Runtime configuration assembled by the CLI at startup."""

    repo_path: Path
    command: str
    args: list[str] = field(default_factory=list)
    bearer_token: str = ""

    # HTTP
    host: str = DEFAULT_BIND_HOST
    port: int = DEFAULT_PORT
    hostname: str = DEFAULT_HOSTNAME

    # Persistence
    db_dir: Path = field(default_factory=Path.cwd)

    # Misc
    verbose: bool = False

    @property
    def db_path(self) -> Path:
        return self.db_dir / db_filename(self.repo_path)

    @property
    def server_url(self) -> str:
        return f"http://{self.hostname}:{self.port}/"


def db_filename(repo_path: Path | str) -> str:
    """Deterministic database name for a repository path.

    URL-safe base64 keeps path separators out of the file name.
    """
    encoded = base64.urlsafe_b64encode(str(repo_path).encode("utf-8")).decode("ascii")
    return f"db-{encoded.rstrip('=')}.json"


def load_bearer_token(env_file: Path | str = DEFAULT_ENV_FILE) -> str:
    """Return the shared secret from the environment, else from *env_file*.

    Raises ``ConfigError`` when neither source provides a non-empty value.
    """
    token = os.environ.get(TOKEN_ENV_VAR, "").strip()
    if token:
        return token

    env_path = Path(env_file)
    if env_path.is_file():
        token = (dotenv_values(env_path).get(TOKEN_ENV_VAR) or "").strip()
        if token:
            return token

    raise ConfigError(f"{TOKEN_ENV_VAR} is not set in the environment or {env_path} file.")


def resolve_repo_path(raw: str) -> Path:
    """Absolute path of the target repository; must be a git work tree."""
    from aaserver import git_ops

    path = Path(raw).expanduser().resolve()
    if not path.is_dir():
        raise ConfigError(f"Repository path does not exist: {path}")
    if not git_ops.is_work_tree(cwd=path):
        raise ConfigError(f"Not a git repository: {path}")
    return path
