"""Thin wrapper around the git executable.

Builds ``git log`` argument lists that match the parsers' formats and runs
git in a repository directory.
"""

import logging
import subprocess
from pathlib import Path

from commitlog.models import GitUser, LineRange
from commitlog.parsers.log import DEFAULT_FORMAT

logger = logging.getLogger(__name__)


class GitCommandError(Exception):
    """Git could not be run or exited with a non-zero status."""

    def __init__(self, args: list[str], message: str, returncode: int | None = None):
        super().__init__(message)
        self.args_list = args
        self.returncode = returncode


def run_git(repo_path: Path, *args: str, git_path: str = "git") -> str:
    """Run a git command in the given repo directory.

    Args:
        repo_path: Path to the git repository.
        *args: Git subcommand and arguments.
        git_path: Git executable to run.

    Returns:
        The command's standard output.

    Raises:
        GitCommandError: If git is missing or the command fails.
    """
    cmd = [git_path, "-C", str(repo_path), *args]
    logger.debug("Running %s", " ".join(cmd[:4]))
    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            check=True,
        )
    except FileNotFoundError as e:
        raise GitCommandError(cmd, f"git executable not found: {git_path}") from e
    except subprocess.CalledProcessError as e:
        stderr = (e.stderr or "").strip()
        raise GitCommandError(
            cmd, stderr or f"git exited with status {e.returncode}", e.returncode
        ) from e
    return result.stdout


def is_git_repo(repo_path: Path, git_path: str = "git") -> bool:
    """Check if a path is inside a git repository."""
    try:
        run_git(repo_path, "rev-parse", "--git-dir", git_path=git_path)
        return True
    except GitCommandError:
        return False


def get_repo_root(path: Path, git_path: str = "git") -> Path:
    """Get the top-level directory of the repository containing ``path``."""
    directory = path if path.is_dir() else path.parent
    output = run_git(directory, "rev-parse", "--show-toplevel", git_path=git_path)
    return Path(output.strip())


def get_config_value(repo_path: Path, key: str, git_path: str = "git") -> str | None:
    """Read a git config value, returning None when it is unset."""
    try:
        value = run_git(repo_path, "config", "--get", key, git_path=git_path).strip()
    except GitCommandError as e:
        # "git config --get" exits with 1 for a missing key
        if e.returncode == 1:
            return None
        raise
    return value or None


def get_current_user(repo_path: Path, git_path: str = "git") -> GitUser:
    """Get the identity git would record for new commits in the repository."""
    return GitUser(
        name=get_config_value(repo_path, "user.name", git_path=git_path),
        email=get_config_value(repo_path, "user.email", git_path=git_path),
    )


def log_args(
    limit: int | None = None,
    reverse: bool = False,
    ref: str | None = None,
) -> list[str]:
    """Arguments for a repository log parsed with ``LogType.LOG``.

    One commit more than ``limit`` is requested so the parser can tell
    whether more results exist. Merges are diffed against each parent
    (``-m``), so they are listed once per parent and the parser keeps the
    first.
    """
    args = [
        "log",
        f"--format={DEFAULT_FORMAT}",
        "--name-status",
        "-M",
        "--full-history",
        "-m",
    ]
    # With --reverse git applies --max-count before reversing, so the
    # parser enforces the limit instead
    if limit and not reverse:
        args.append(f"--max-count={limit + 1}")
    if reverse:
        args.append("--reverse")
    if ref:
        args.append(ref)
    args.append("--")
    return args


def file_log_args(
    relative_path: str,
    limit: int | None = None,
    reverse: bool = False,
    line_range: LineRange | None = None,
    follow: bool = True,
    ref: str | None = None,
) -> list[str]:
    """Arguments for a file or line history parsed with ``LogType.LOG_FILE``.

    Line history uses ``-L`` and yields a patch per commit; file history
    yields ``--numstat --summary`` lines.
    """
    args = ["log", f"--format={DEFAULT_FORMAT}"]
    if line_range is not None:
        args.append(f"-L{line_range.start},{line_range.end}:{relative_path}")
    else:
        args.extend(["--numstat", "--summary", "-M"])
        if follow and not reverse:
            args.append("--follow")
    if limit and not reverse:
        args.append(f"--max-count={limit + 1}")
    if reverse:
        args.append("--reverse")
    if ref:
        args.append(ref)
    if line_range is None:
        args.extend(["--", relative_path])
    return args
