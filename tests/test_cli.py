"""CLI tests: argument handling, startup configuration errors, server wiring."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from aaserver import __version__
from aaserver.cli import main
from aaserver.config import TOKEN_ENV_VAR, db_filename
from aaserver.io_utils import write_text


@pytest.fixture
def cli_runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def token_env(monkeypatch):
    monkeypatch.setenv(TOKEN_ENV_VAR, "secret")


class TestHelpAndVersion:
    def test_help(self, cli_runner: CliRunner):
        r = cli_runner.invoke(main, ["--help"])
        assert r.exit_code == 0
        assert "AA_PROMPT" in r.output
        assert "REPO_PATH" in r.output

    def test_version(self, cli_runner: CliRunner):
        r = cli_runner.invoke(main, ["--version"])
        assert r.exit_code == 0
        assert __version__ in r.output


class TestStartupErrors:
    def test_missing_repo_argument(self, cli_runner: CliRunner):
        r = cli_runner.invoke(main, [])
        assert r.exit_code == 2

    def test_missing_command(self, cli_runner: CliRunner, git_repo: Path, token_env):
        r = cli_runner.invoke(main, [str(git_repo)])
        assert r.exit_code == 2
        assert "Missing COMMAND" in r.output

    def test_missing_token_exits_1(self, cli_runner: CliRunner, git_repo: Path, tmp_path: Path, monkeypatch):
        monkeypatch.delenv(TOKEN_ENV_VAR, raising=False)
        with patch("aaserver.cli._serve") as mock_serve:
            r = cli_runner.invoke(
                main,
                ["--env-file", str(tmp_path / "absent.env"), str(git_repo), "--", "agent", "AA_PROMPT"],
            )
        assert r.exit_code == 1
        mock_serve.assert_not_called()

    def test_non_git_repo_exits_1(self, cli_runner: CliRunner, tmp_path: Path, token_env):
        plain = tmp_path / "plain"
        plain.mkdir()
        with patch("aaserver.cli._serve") as mock_serve:
            r = cli_runner.invoke(main, [str(plain), "--", "agent"])
        assert r.exit_code == 1
        mock_serve.assert_not_called()


class TestConfigAssembly:
    def test_command_and_args_after_double_dash(self, cli_runner: CliRunner, git_repo: Path, token_env):
        with patch("aaserver.cli._serve") as mock_serve:
            r = cli_runner.invoke(
                main, [str(git_repo), "--", "claude", "-p", "AA_PROMPT", "--verbose"]
            )
        assert r.exit_code == 0, r.output
        cfg = mock_serve.call_args[0][0]
        assert cfg.command == "claude"
        assert cfg.args == ["-p", "AA_PROMPT", "--verbose"]
        assert cfg.repo_path == git_repo.resolve()
        assert cfg.bearer_token == "secret"
        assert cfg.verbose is False

    def test_options_before_repo(self, cli_runner: CliRunner, git_repo: Path, tmp_path: Path, token_env):
        with patch("aaserver.cli._serve") as mock_serve:
            r = cli_runner.invoke(
                main,
                [
                    "--port", "4000",
                    "--hostname", "agents.local",
                    "--db-dir", str(tmp_path),
                    "-v",
                    str(git_repo), "--", "agent", "AA_PROMPT",
                ],
            )
        assert r.exit_code == 0, r.output
        cfg = mock_serve.call_args[0][0]
        assert cfg.port == 4000
        assert cfg.hostname == "agents.local"
        assert cfg.verbose is True
        assert cfg.db_path == tmp_path.resolve() / db_filename(git_repo.resolve())

    def test_token_from_env_file(self, cli_runner: CliRunner, git_repo: Path, tmp_path: Path, monkeypatch):
        monkeypatch.delenv(TOKEN_ENV_VAR, raising=False)
        env_file = tmp_path / ".env.local"
        write_text(env_file, f"{TOKEN_ENV_VAR}=from-file\n")
        with patch("aaserver.cli._serve") as mock_serve:
            r = cli_runner.invoke(main, ["--env-file", str(env_file), str(git_repo), "--", "agent"])
        assert r.exit_code == 0, r.output
        assert mock_serve.call_args[0][0].bearer_token == "from-file"


class TestServe:
    def test_loads_store_and_runs_uvicorn(self, cli_runner: CliRunner, git_repo: Path, tmp_path: Path, token_env):
        with patch("uvicorn.run") as mock_run:
            r = cli_runner.invoke(
                main,
                ["--db-dir", str(tmp_path), "--port", "4321", str(git_repo), "--", "agent", "AA_PROMPT"],
            )
        assert r.exit_code == 0, r.output
        mock_run.assert_called_once()
        app = mock_run.call_args[0][0]
        assert app.state.store.db_path == tmp_path.resolve() / db_filename(git_repo.resolve())
        assert mock_run.call_args.kwargs["host"] == "127.0.0.1"
        assert mock_run.call_args.kwargs["port"] == 4321

    def test_warns_when_command_missing_or_no_placeholder(
        self, cli_runner: CliRunner, git_repo: Path, tmp_path: Path, token_env
    ):
        with (
            patch("uvicorn.run"),
            patch("aaserver.log.warn") as mock_warn,
        ):
            r = cli_runner.invoke(
                main,
                ["--db-dir", str(tmp_path), str(git_repo), "--", "definitely-not-a-real-agent-binary"],
            )
        assert r.exit_code == 0, r.output
        warnings = " ".join(c[0][0] for c in mock_warn.call_args_list)
        assert "not found in PATH" in warnings
        assert "AA_PROMPT" in warnings
