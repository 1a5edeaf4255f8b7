"""Tests for result models, identity matching and call tracing."""

import logging

from commitlog.config import load_config
from commitlog.models import (
    FileStatus,
    GitLog,
    GitUser,
    LineRange,
    is_user_match,
)
from commitlog.tracing import traced


class TestFileStatus:
    def test_codes(self):
        assert FileStatus.from_code("A") is FileStatus.ADDED
        assert FileStatus.from_code("R087") is FileStatus.RENAMED
        assert FileStatus.from_code("C100") is FileStatus.COPIED

    def test_unknown_code_is_modified(self):
        assert FileStatus.from_code("T") is FileStatus.MODIFIED

    def test_empty_code(self):
        assert FileStatus.from_code("") is None
        assert FileStatus.from_code(None) is None


class TestIdentity:
    """Tests for is_user_match."""

    def test_unknown_user_never_matches(self):
        assert is_user_match(None, "Jane", "jane@example.com") is False
        assert is_user_match(GitUser(), "Jane", "jane@example.com") is False

    def test_all_set_fields_must_match(self):
        user = GitUser(name="Jane", email="jane@example.com")
        assert user.matches("Jane", "jane@example.com") is True
        assert user.matches("Jane", "other@example.com") is False

    def test_partial_identity(self):
        assert GitUser(email="jane@example.com").matches("J. Doe", "jane@example.com") is True
        assert GitUser(name="Jane").matches("Jane", None) is True


class TestGitLog:
    def test_str(self):
        log = GitLog(repo_path="/repo", count=3, has_more=True)
        assert str(log) == "3 commit(s) in /repo, more available"

    def test_line_range_str(self):
        assert str(LineRange(3, 8)) == "3,8"


class TestTraced:
    """Tests for the tracing decorator."""

    def test_passes_through(self):
        @traced()
        def add(a, b):
            return a + b

        assert add(1, 2) == 3
        assert add.__name__ == "add"

    def test_logs_at_debug(self, caplog):
        @traced(args=True)
        def shout(word):
            return word.upper()

        with caplog.at_level(logging.DEBUG, logger=__name__):
            assert shout("hi") == "HI"

        messages = [r.getMessage() for r in caplog.records]
        assert any("shout(('hi',), {})" in m for m in messages)
        assert any("completed in" in m for m in messages)

    def test_silent_above_debug(self, caplog):
        @traced()
        def noop():
            return None

        with caplog.at_level(logging.INFO, logger=__name__):
            noop()
        assert caplog.records == []


class TestLoadConfig:
    def test_invalid_default_limit(self, tmp_path, caplog):
        config_path = tmp_path / "config.json"
        config_path.write_text('{"default_limit": "lots"}')
        with caplog.at_level(logging.WARNING):
            cfg = load_config(config_path)
        assert cfg.default_limit == 200
        assert "Invalid default_limit" in caplog.text
