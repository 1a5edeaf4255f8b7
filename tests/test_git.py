"""Tests for the git wrapper and its argument builders."""

import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from commitlog.git import (
    GitCommandError,
    file_log_args,
    get_config_value,
    get_current_user,
    get_repo_root,
    is_git_repo,
    log_args,
    run_git,
)
from commitlog.models import GitUser, LineRange
from commitlog.parsers.log import DEFAULT_FORMAT


# ===================================================================
# run_git
# ===================================================================

class TestRunGit:
    """Tests for running git in a repository."""

    def test_returns_stdout(self, tmp_path: Path):
        completed = MagicMock(stdout="abc\n")
        with patch("commitlog.git.subprocess.run", return_value=completed) as mock_run:
            assert run_git(tmp_path, "rev-parse", "HEAD") == "abc\n"
        cmd = mock_run.call_args[0][0]
        assert cmd == ["git", "-C", str(tmp_path), "rev-parse", "HEAD"]
        assert mock_run.call_args[1]["check"] is True

    def test_custom_executable(self, tmp_path: Path):
        with patch("commitlog.git.subprocess.run", return_value=MagicMock(stdout="")) as mock_run:
            run_git(tmp_path, "status", git_path="/usr/local/bin/git")
        assert mock_run.call_args[0][0][0] == "/usr/local/bin/git"

    def test_missing_executable(self, tmp_path: Path):
        with patch("commitlog.git.subprocess.run", side_effect=FileNotFoundError):
            with pytest.raises(GitCommandError, match="not found"):
                run_git(tmp_path, "status")

    def test_failed_command(self, tmp_path: Path):
        error = subprocess.CalledProcessError(128, ["git"], stderr="fatal: bad revision\n")
        with patch("commitlog.git.subprocess.run", side_effect=error):
            with pytest.raises(GitCommandError) as exc_info:
                run_git(tmp_path, "log", "nope")
        assert str(exc_info.value) == "fatal: bad revision"
        assert exc_info.value.returncode == 128
        assert exc_info.value.args_list[-1] == "nope"

    def test_is_git_repo(self, tmp_path: Path):
        with patch("commitlog.git.run_git", return_value=".git\n"):
            assert is_git_repo(tmp_path) is True
        with patch("commitlog.git.run_git", side_effect=GitCommandError([], "no", 128)):
            assert is_git_repo(tmp_path) is False


# ===================================================================
# Repository queries
# ===================================================================

class TestRepoQueries:
    """Tests for repo root and config lookups."""

    def test_repo_root_from_file(self, tmp_path: Path):
        source = tmp_path / "a.txt"
        source.write_text("x")
        with patch("commitlog.git.run_git", return_value=f"{tmp_path}\n") as mock_run:
            assert get_repo_root(source) == tmp_path
        assert mock_run.call_args[0][0] == tmp_path

    def test_config_value_unset(self, tmp_path: Path):
        with patch("commitlog.git.run_git", side_effect=GitCommandError([], "", 1)):
            assert get_config_value(tmp_path, "user.name") is None

    def test_config_value_other_errors_propagate(self, tmp_path: Path):
        with patch("commitlog.git.run_git", side_effect=GitCommandError([], "boom", 128)):
            with pytest.raises(GitCommandError):
                get_config_value(tmp_path, "user.name")

    def test_current_user(self, tmp_path: Path):
        values = {"user.name": "Jane\n", "user.email": "jane@example.com\n"}

        def fake_run(repo_path, *args, git_path="git"):
            return values[args[-1]]

        with patch("commitlog.git.run_git", side_effect=fake_run):
            assert get_current_user(tmp_path) == GitUser("Jane", "jane@example.com")


# ===================================================================
# Argument builders
# ===================================================================

class TestLogArgs:
    """Tests for git log argument lists."""

    def test_log_args(self):
        assert log_args(limit=5, ref="main") == [
            "log",
            f"--format={DEFAULT_FORMAT}",
            "--name-status",
            "-M",
            "--full-history",
            "-m",
            "--max-count=6",
            "main",
            "--",
        ]

    def test_log_args_lists_merge_files(self):
        """Without -m git prints no file list for merges."""
        assert "-m" in log_args()
        assert "-m" in log_args(reverse=True)

    def test_log_args_reverse_has_no_max_count(self):
        args = log_args(limit=5, reverse=True)
        assert "--reverse" in args
        assert not any(a.startswith("--max-count") for a in args)

    def test_file_log_args(self):
        args = file_log_args("src/app.py", limit=3)
        assert args[:2] == ["log", f"--format={DEFAULT_FORMAT}"]
        assert "--numstat" in args and "--summary" in args and "--follow" in args
        assert "--max-count=4" in args
        assert args[-2:] == ["--", "src/app.py"]

    def test_file_log_args_reverse_does_not_follow(self):
        args = file_log_args("a.txt", reverse=True)
        assert "--follow" not in args
        assert "--reverse" in args

    def test_file_log_args_line_range(self):
        args = file_log_args("a.txt", line_range=LineRange(4, 9), ref="v1.0")
        assert "-L4,9:a.txt" in args
        assert "--numstat" not in args
        assert args[-1] == "v1.0"
