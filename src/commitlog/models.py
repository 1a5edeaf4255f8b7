"""Commit, file-change and log result models for commitlog."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

UNCOMMITTED_SHA = "0" * 40


class FileStatus(str, Enum):
    """Git file status codes as reported by --name-status."""

    ADDED = "A"
    DELETED = "D"
    MODIFIED = "M"
    RENAMED = "R"
    COPIED = "C"
    UNMERGED = "U"
    UNTRACKED = "?"
    IGNORED = "!"

    @classmethod
    def from_code(cls, code: str | None) -> "FileStatus | None":
        """Map a git status token to a FileStatus.

        Only the first character is significant (``R100`` is a rename).
        Codes outside the known set, such as ``T`` for a type change,
        are treated as modifications.

        Args:
            code: Raw status token, possibly empty.

        Returns:
            The matching FileStatus, or None for an empty token.
        """
        if not code:
            return None
        try:
            return cls(code[0])
        except ValueError:
            return cls.MODIFIED


@dataclass(frozen=True)
class FileChangeStats:
    """Line counts for a single changed file."""

    additions: int = 0
    deletions: int = 0
    changes: int = 0


@dataclass(frozen=True)
class FileChange:
    """A single file change within a commit."""

    repo_path: str | None
    path: str
    status: FileStatus | None
    original_path: str | None = None
    stats: FileChangeStats | None = None


@dataclass(frozen=True)
class CommitIdentity:
    """Author or committer of a commit."""

    name: str | None
    email: str | None
    date: datetime | None  # Always UTC, timezone-aware


@dataclass(frozen=True)
class CommitLine:
    """Maps a line in the original file version to the new version."""

    sha: str
    original_line: int
    line: int


@dataclass(frozen=True)
class CommitFiles:
    """Files touched by a commit.

    ``file`` is the focused change of a per-file query, ``files`` is the
    full change set of a repository log query.
    """

    file: FileChange | None = None
    files: tuple[FileChange, ...] | None = None


@dataclass(frozen=True)
class Commit:
    """A parsed git commit."""

    repo_path: str | None
    sha: str
    author: CommitIdentity
    committer: CommitIdentity
    title: str
    parents: tuple[str, ...]
    message: str
    files: CommitFiles = field(default_factory=CommitFiles)
    lines: tuple[CommitLine, ...] = ()

    @property
    def short_sha(self) -> str:
        return self.sha[:7]

    @property
    def is_merge(self) -> bool:
        return len(self.parents) > 1

    @property
    def is_uncommitted(self) -> bool:
        return self.sha == UNCOMMITTED_SHA


@dataclass(frozen=True)
class LineRange:
    """Inclusive 1-based line range used to filter line history."""

    start: int
    end: int

    def __str__(self) -> str:
        return f"{self.start},{self.end}"


@dataclass(frozen=True)
class GitUser:
    """The user running the query, as configured in git."""

    name: str | None = None
    email: str | None = None

    def matches(self, name: str | None, email: str | None) -> bool:
        return is_user_match(self, name, email)


def is_user_match(user: GitUser | None, name: str | None, email: str | None) -> bool:
    """Check whether a commit identity belongs to the given user.

    A user with neither name nor email never matches. Fields that are set
    on the user must be equal to the corresponding identity field.

    Args:
        user: The querying user, or None when unknown.
        name: Identity name from the commit.
        email: Identity email from the commit.

    Returns:
        True if the identity is the user.
    """
    if user is None or (user.name is None and user.email is None):
        return False
    if user.name is not None and user.name != name:
        return False
    if user.email is not None and user.email != email:
        return False
    return True


@dataclass
class GitLog:
    """Result of parsing one git log query."""

    repo_path: str | None
    commits: dict[str, Commit] = field(default_factory=dict)
    sha: str | None = None
    count: int = 0
    limit: int | None = None
    range: LineRange | None = None
    has_more: bool = False

    def __str__(self) -> str:
        more = ", more available" if self.has_more else ""
        return f"{self.count} commit(s) in {self.repo_path or '<unknown>'}{more}"
