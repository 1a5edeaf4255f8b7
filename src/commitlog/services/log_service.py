"""Log service for commitlog.

Runs git log queries and parses their output into GitLog results, for use
by the CLI or any other front end.
"""

import logging
from pathlib import Path

from commitlog.config import Config
from commitlog.git import (
    file_log_args,
    get_current_user,
    get_repo_root,
    log_args,
    run_git,
)
from commitlog.models import GitLog, GitUser, LineRange
from commitlog.parsers.log import LogType, parse_log

logger = logging.getLogger(__name__)


class LogService:
    """Service for querying repository, file and line history."""

    def resolve_user(self, repo_path: Path, config: Config) -> GitUser:
        """Get the identity that counts as the querying user.

        The configured user wins; otherwise git's own configuration is
        used.

        Args:
            repo_path: Repository to read git configuration from.
            config: Application configuration.

        Returns:
            GitUser, possibly with neither name nor email.
        """
        if config.user.is_set():
            return config.user.to_git_user()
        return get_current_user(repo_path, git_path=config.git_path)

    def get_log(
        self,
        repo_path: Path,
        config: Config,
        limit: int | None = None,
        reverse: bool = False,
        ref: str | None = None,
    ) -> GitLog | None:
        """Get the commit history of a repository.

        Args:
            repo_path: Any path inside the repository.
            config: Application configuration.
            limit: Maximum number of commits. Defaults to config.default_limit.
            reverse: If True, return oldest commits first.
            ref: Revision to start from instead of HEAD.

        Returns:
            GitLog, or None if the repository has no matching commits.

        Raises:
            GitCommandError: If git fails.
        """
        if limit is None:
            limit = config.default_limit
        root = get_repo_root(repo_path, git_path=config.git_path)
        user = self.resolve_user(root, config)

        output = run_git(
            root, *log_args(limit, reverse, ref), git_path=config.git_path
        )
        log = parse_log(
            output,
            LogType.LOG,
            repo_path=root.as_posix(),
            sha=ref,
            is_current_user=user.matches,
            limit=limit,
            reverse=reverse,
            you_label=config.you_label,
        )
        if log is not None:
            logger.info("Parsed %s", log)
        return log

    def get_file_log(
        self,
        file_path: Path,
        config: Config,
        limit: int | None = None,
        reverse: bool = False,
        line_range: LineRange | None = None,
        ref: str | None = None,
    ) -> GitLog | None:
        """Get the history of a single file, or of a line range within it.

        Args:
            file_path: Path to the file.
            config: Application configuration.
            limit: Maximum number of commits. Defaults to config.default_limit.
            reverse: If True, return oldest commits first.
            line_range: Restrict history to these lines.
            ref: Revision to start from instead of HEAD.

        Returns:
            GitLog, or None if the file has no history.

        Raises:
            GitCommandError: If git fails.
        """
        if limit is None:
            limit = config.default_limit
        file_path = file_path.resolve()
        root = get_repo_root(file_path, git_path=config.git_path)
        relative_path = file_path.relative_to(root).as_posix()
        user = self.resolve_user(root, config)

        args = file_log_args(
            relative_path,
            limit=limit,
            reverse=reverse,
            line_range=line_range,
            follow=config.follow_renames,
            ref=ref,
        )
        output = run_git(root, *args, git_path=config.git_path)
        return parse_log(
            output,
            LogType.LOG_FILE,
            repo_path=root.as_posix(),
            file_name=file_path.as_posix(),
            sha=ref,
            is_current_user=user.matches,
            limit=limit,
            reverse=reverse,
            line_range=line_range,
            you_label=config.you_label,
        )

    def parse_text(
        self,
        data: str,
        config: Config,
        log_type: LogType = LogType.LOG,
        file_name: str | None = None,
        limit: int | None = None,
        reverse: bool = False,
    ) -> GitLog | None:
        """Parse previously captured ``git log --format=DEFAULT_FORMAT`` output.

        Only the configured user is recognised, since there is no
        repository to read git's identity from.

        Args:
            data: Captured git output.
            config: Application configuration.
            log_type: Shape of the file section in the output.
            file_name: Absolute path of the queried file for LOG_FILE output.
            limit: The limit the output was produced with, if any.
            reverse: Whether the output was produced with --reverse.

        Returns:
            GitLog, or None for empty input.
        """
        user = config.user.to_git_user()
        return parse_log(
            data,
            log_type,
            file_name=file_name,
            is_current_user=user.matches,
            limit=limit,
            reverse=reverse,
            you_label=config.you_label,
        )
