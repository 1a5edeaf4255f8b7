"""Tests for the commitlog command line interface."""

import typing
from pathlib import Path
from unittest.mock import patch

import click
import pytest
from click.testing import CliRunner

from commitlog.cli import _parse_line_range, main, parse_command
from commitlog.config import Config, UserConfig
from commitlog.git import GitCommandError
from commitlog.models import LineRange
from commitlog.parsers.log import DEFAULT_FORMAT

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

SHA = "abcdef1" + "0" * 33

OUTPUT = "\n".join(
    [
        "</f>",
        f"<r> {SHA}",
        "<a> Jane",
        "<e> jane@example.com",
        "<d> 1700000000",
        "<n> Jane",
        "<m> jane@example.com",
        "<c> 1700000000",
        "<p> ",
        "<s>",
        "Initial commit",
        "",
        "</s>",
        "<f>",
        "",
        "A\tREADME.md",
        "",
    ]
)


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def default_config():
    with patch("commitlog.cli.load_config", return_value=Config()) as mock_load:
        yield mock_load


@pytest.fixture(autouse=True)
def inside_repo():
    with patch("commitlog.cli.is_git_repo", return_value=True) as mock_is_repo:
        yield mock_is_repo


# ===================================================================
# Commands
# ===================================================================

class TestCommands:
    """Tests for the history and parse commands."""

    def test_format(self, runner):
        result = runner.invoke(main, ["format"])
        assert result.exit_code == 0
        assert result.output.strip() == DEFAULT_FORMAT

    def test_parse_stdin(self, runner):
        result = runner.invoke(main, ["parse"], input=OUTPUT)
        assert result.exit_code == 0, result.output
        assert "abcdef1" in result.output
        assert "1 commit(s)" in result.output

    def test_parse_empty(self, runner):
        result = runner.invoke(main, ["parse"], input="")
        assert result.exit_code == 0
        assert "No commits found." in result.output

    def test_parse_uses_configured_user(self, runner, default_config):
        default_config.return_value = Config(user=UserConfig(name="Jane"), you_label="Me")
        result = runner.invoke(main, ["parse"], input=OUTPUT)
        assert result.exit_code == 0, result.output
        assert "Me" in result.output

    def test_log(self, runner, tmp_path: Path):
        with patch(
            "commitlog.services.log_service.LogService.get_log", return_value=None
        ) as mock_get_log:
            result = runner.invoke(main, ["log", str(tmp_path), "-n", "5", "--reverse"])
        assert result.exit_code == 0, result.output
        assert "No commits found." in result.output
        kwargs = mock_get_log.call_args[1]
        assert kwargs["limit"] == 5
        assert kwargs["reverse"] is True

    def test_log_git_error(self, runner, tmp_path: Path):
        with patch(
            "commitlog.services.log_service.LogService.get_log",
            side_effect=GitCommandError(["git"], "not a git repository", 128),
        ):
            result = runner.invoke(main, ["log", str(tmp_path)])
        assert result.exit_code == 1
        assert "Error: not a git repository" in result.output

    def test_log_outside_repository(self, runner, tmp_path: Path, inside_repo):
        inside_repo.return_value = False
        with patch("commitlog.services.log_service.LogService.get_log") as mock_get_log:
            result = runner.invoke(main, ["log", str(tmp_path)])
        assert result.exit_code == 1
        assert "not a git repository" in result.output
        mock_get_log.assert_not_called()
        inside_repo.assert_called_once_with(tmp_path, git_path="git")

    def test_file_passes_line_range(self, runner, tmp_path: Path):
        source = tmp_path / "a.txt"
        source.write_text("x\n")
        with patch(
            "commitlog.services.log_service.LogService.get_file_log", return_value=None
        ) as mock_get_file_log:
            result = runner.invoke(main, ["file", str(source), "--lines", "3:7"])
        assert result.exit_code == 0, result.output
        assert mock_get_file_log.call_args[1]["line_range"] == LineRange(3, 7)

    def test_file_rejects_bad_range(self, runner, tmp_path: Path):
        source = tmp_path / "a.txt"
        source.write_text("x\n")
        result = runner.invoke(main, ["file", str(source), "--lines", "7-3"])
        assert result.exit_code == 2
        assert "START:END" in result.output


# ===================================================================
# Config commands
# ===================================================================

class TestConfigCommands:
    """Tests for config show and set-user."""

    def test_show(self, runner):
        result = runner.invoke(main, ["config", "show"])
        assert result.exit_code == 0
        assert "default_limit" in result.output
        assert "200" in result.output

    def test_set_user(self, runner):
        with patch("commitlog.services.config_service.ConfigService.set_user") as mock_set:
            result = runner.invoke(main, ["config", "set-user", "--email", "jane@example.com"])
        assert result.exit_code == 0, result.output
        mock_set.assert_called_once_with(None, "jane@example.com")
        assert "User set to" in result.output

    def test_clear_user(self, runner):
        with patch("commitlog.services.config_service.ConfigService.set_user"):
            result = runner.invoke(main, ["config", "set-user"])
        assert "User cleared" in result.output


class TestParseLineRange:
    def test_valid(self):
        assert _parse_line_range("10:20") == LineRange(10, 20)
        assert _parse_line_range(None) is None

    @pytest.mark.parametrize("value", ["10", "a:b", "0:3", "9:2"])
    def test_invalid(self, value):
        with pytest.raises(click.BadParameter):
            _parse_line_range(value)


class TestSignatures:
    def test_parse_source_is_text_stream(self):
        hints = typing.get_type_hints(parse_command.callback)
        assert hints["source"] is typing.TextIO
