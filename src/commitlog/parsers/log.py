"""Parser for sentinel-formatted ``git log`` output.

Git is asked for ``DEFAULT_FORMAT``, which emits one tagged line per commit
field::

    </f>
    <r> 3f1c9e0...
    <a> Jane Doe
    ...
    <s>
    free-form commit message
    </s>
    <f>

    M\tsrc/app.py

The ``<f>`` section holds whatever git appends after the format: a
``--name-status`` list for repository logs, or ``--numstat --summary``
lines or a patch for single-file and line history. Each commit's file
section is closed by the ``</f>`` that opens the next commit.
"""

import logging
import posixpath
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum, IntEnum

from commitlog.models import (
    UNCOMMITTED_SHA,
    Commit,
    CommitFiles,
    CommitIdentity,
    CommitLine,
    FileChange,
    FileChangeStats,
    FileStatus,
    GitLog,
    LineRange,
)
from commitlog.parsers.base import FILE_STATUS_RE, ParsedFile, iter_lines
from commitlog.parsers.diff import (
    parse_diff_header,
    parse_diff_range,
    parse_file_stat,
)
from commitlog.tracing import traced

logger = logging.getLogger(__name__)

# Angle brackets, slashes and spaces are written as %x escapes so no shell
# between us and git tries to expand them
_LB = "%x3c"
_RB = "%x3e"
_SL = "%x2f"
_SP = "%x20"

DEFAULT_FORMAT = "%n".join(
    [
        f"{_LB}{_SL}f{_RB}",
        f"{_LB}r{_RB}{_SP}%H",  # ref
        f"{_LB}a{_RB}{_SP}%aN",  # author
        f"{_LB}e{_RB}{_SP}%aE",  # author email
        f"{_LB}d{_RB}{_SP}%at",  # author date
        f"{_LB}n{_RB}{_SP}%cN",  # committer
        f"{_LB}m{_RB}{_SP}%cE",  # committer email
        f"{_LB}c{_RB}{_SP}%ct",  # committer date
        f"{_LB}p{_RB}{_SP}%P",  # parents
        f"{_LB}s{_RB}",
        "%B",  # summary
        f"{_LB}{_SL}s{_RB}",
        f"{_LB}f{_RB}",
    ]
)

SIMPLE_FORMAT = f"{_LB}r{_RB}{_SP}%H"

END_OF_SUMMARY = "</s>"
END_OF_FILES = "</f>"

# Tagged lines are "<t> value"
_VALUE_OFFSET = 4

IdentityMatcher = Callable[[str | None, str | None], bool]


class LogType(IntEnum):
    """Shape of the file section git was asked to produce."""

    LOG = 0
    LOG_FILE = 1


class LineToken(str, Enum):
    """The tag character at index 1 of every sentinel line."""

    REF = "r"
    AUTHOR = "a"
    AUTHOR_EMAIL = "e"
    AUTHOR_DATE = "d"
    COMMITTER = "n"
    COMMITTER_EMAIL = "m"
    COMMITTER_DATE = "c"
    PARENTS = "p"
    SUMMARY = "s"
    FILES = "f"

    @classmethod
    def of(cls, line: str) -> "LineToken | None":
        if len(line) < 2:
            return None
        try:
            return cls(line[1])
        except ValueError:
            return None


def normalize_path(path: str) -> str:
    """Use forward slashes and drop any trailing slash."""
    path = path.replace("\\", "/")
    if len(path) > 1 and path.endswith("/"):
        path = path.rstrip("/") or "/"
    return path


def _to_datetime(epoch: str | None) -> datetime | None:
    if not epoch:
        return None
    try:
        return datetime.fromtimestamp(int(epoch), tz=timezone.utc)
    except (ValueError, OverflowError, OSError):
        logger.debug("Ignoring unparseable commit date: %r", epoch)
        return None


@dataclass
class LogEntry:
    """A commit under construction, filled in one tagged line at a time."""

    sha: str | None = None

    author: str | None = None
    author_email: str | None = None
    author_date: str | None = None

    committer: str | None = None
    committer_email: str | None = None
    committed_date: str | None = None

    parent_shas: list[str] = field(default_factory=list)

    # Single-file queries
    path: str | None = None
    original_path: str | None = None
    status: FileStatus | None = None
    file_stats: FileChangeStats | None = None

    # Repository queries
    files: list[ParsedFile] | None = None

    summary: str | None = None
    line: CommitLine | None = None

    @property
    def is_merge(self) -> bool:
        return len(self.parent_shas) > 1

    def finalize(
        self,
        commits: dict[str, Commit],
        log_type: LogType,
        repo_path: str | None,
        relative_file_name: str | None,
        is_current_user: IdentityMatcher | None = None,
        you_label: str = "You",
    ) -> Commit:
        """Convert the entry into a Commit and add it to ``commits``.

        The first sighting of a sha wins: if ``commits`` already holds it,
        nothing is changed and the existing commit is returned.

        Args:
            commits: Commits parsed so far, keyed by sha.
            log_type: Whether this is a repository or single-file query.
            repo_path: Repository root, if known.
            relative_file_name: Queried file relative to the repository.
            is_current_user: Answers whether (name, email) is the querying
                user; matching names are replaced by ``you_label``.
            you_label: Display name for the querying user.

        Returns:
            The commit stored under this entry's sha.
        """
        sha = self.sha or ""
        existing = commits.get(sha)
        if existing is not None:
            return existing

        author = self.author
        committer = self.committer
        if is_current_user is not None:
            if author is not None and is_current_user(author, self.author_email):
                author = you_label
            if committer is not None and is_current_user(
                committer, self.committer_email
            ):
                committer = you_label

        original_file_name = self.original_path
        if original_file_name is None and relative_file_name != self.path:
            original_file_name = self.path

        files = None
        if self.files is not None:
            files = tuple(
                FileChange(
                    repo_path=repo_path,
                    path=f.path,
                    status=FileStatus.from_code(f.status),
                    original_path=f.original_path,
                )
                for f in self.files
            )

        file = None
        if log_type == LogType.LOG_FILE:
            file = FileChange(
                repo_path=repo_path,
                path=relative_file_name or "",
                status=self.status,
                original_path=original_file_name,
                stats=self.file_stats,
            )

        summary = self.summary or ""
        commit = Commit(
            repo_path=repo_path,
            sha=sha,
            author=CommitIdentity(
                author, self.author_email, _to_datetime(self.author_date)
            ),
            committer=CommitIdentity(
                committer, self.committer_email, _to_datetime(self.committed_date)
            ),
            title=summary.split("\n", 1)[0],
            parents=tuple(self.parent_shas),
            message=summary,
            files=CommitFiles(file=file, files=files),
            lines=(self.line,) if self.line is not None else (),
        )
        commits[sha] = commit
        return commit


class _LogStreamParser:
    """Single pass over the tagged lines of one git log query."""

    def __init__(
        self,
        data: str,
        log_type: LogType,
        repo_path: str | None,
        file_name: str | None,
        is_current_user: IdentityMatcher | None,
        limit: int | None,
        reverse: bool,
        you_label: str,
    ) -> None:
        self.lines: Iterator[str] = iter_lines(f"{data}{END_OF_FILES}")
        self.log_type = log_type
        self.repo_path = normalize_path(repo_path) if repo_path is not None else None
        self.file_name = file_name
        self.is_current_user = is_current_user
        self.limit = limit
        self.reverse = reverse
        self.you_label = you_label

        self.commits: dict[str, Commit] = {}
        self.truncation_count = limit
        self.discovered = 0
        self.first = True
        self.done = False
        self.entry = LogEntry()

        self._handlers: dict[LineToken, Callable[[str], None]] = {
            LineToken.REF: self._on_ref,
            LineToken.AUTHOR: self._on_author,
            LineToken.AUTHOR_EMAIL: self._on_author_email,
            LineToken.AUTHOR_DATE: self._on_author_date,
            LineToken.COMMITTER: self._on_committer,
            LineToken.COMMITTER_EMAIL: self._on_committer_email,
            LineToken.COMMITTER_DATE: self._on_committer_date,
            LineToken.PARENTS: self._on_parents,
            LineToken.SUMMARY: self._on_summary,
            LineToken.FILES: self._on_files,
        }

    def run(self) -> None:
        # The format starts with the closing tag of a (nonexistent) previous commit
        next(self.lines, None)

        for line in self.lines:
            # git log --reverse ignores --max-count, so enforce it here
            if self.reverse and self.limit and self.discovered >= self.limit:
                logger.debug("Reached limit of %d in reverse log", self.limit)
                break

            token = LineToken.of(line)
            if token is None:
                continue
            self._handlers[token](line)
            if self.done:
                break

    def _decrement_truncation(self) -> None:
        if self.truncation_count:
            self.truncation_count -= 1

    def _on_ref(self, line: str) -> None:
        self.entry = LogEntry(sha=line[_VALUE_OFFSET:])
        if self.entry.sha == UNCOMMITTED_SHA:
            self.entry.author = self.you_label

    def _on_author(self, line: str) -> None:
        if self.entry.sha != UNCOMMITTED_SHA:
            self.entry.author = line[_VALUE_OFFSET:]

    def _on_author_email(self, line: str) -> None:
        self.entry.author_email = line[_VALUE_OFFSET:]

    def _on_author_date(self, line: str) -> None:
        self.entry.author_date = line[_VALUE_OFFSET:]

    def _on_committer(self, line: str) -> None:
        self.entry.committer = line[_VALUE_OFFSET:]

    def _on_committer_email(self, line: str) -> None:
        self.entry.committer_email = line[_VALUE_OFFSET:]

    def _on_committer_date(self, line: str) -> None:
        self.entry.committed_date = line[_VALUE_OFFSET:]

    def _on_parents(self, line: str) -> None:
        self.entry.parent_shas = line[_VALUE_OFFSET:].split(" ")

    def _on_summary(self, line: str) -> None:
        summary: list[str] = []
        for body_line in self.lines:
            if body_line == END_OF_SUMMARY:
                break
            summary.append(body_line)

        if not summary:
            return
        text = "\n".join(summary)
        if text.endswith("\n"):
            text = text[:-1]
        self.entry.summary = text

    def _on_files(self, line: str) -> None:
        entry = self.entry

        # Skip the blank line git adds before the files
        separator = next(self.lines, None)
        if separator is None or separator == END_OF_FILES:
            if entry.is_merge:
                # A merge without changes to the queried path is dropped, but it
                # still counts against the limit git applied
                logger.debug("Skipping merge commit %s without files", entry.sha)
                self._decrement_truncation()
                return
        elif self.log_type == LogType.LOG:
            self._read_file_list(entry)
        else:
            self._read_file_stat(entry)

        self._complete(entry)

    def _read_file_list(self, entry: LogEntry) -> None:
        for line in self.lines:
            if line == END_OF_FILES:
                return
            if line.startswith("warning:"):
                logger.debug("git: %s", line)
                continue

            match = FILE_STATUS_RE.search(line)
            if match is None:
                continue

            if entry.files is None:
                entry.files = []
            status, path, renamed = match.groups()
            if renamed is not None:
                entry.files.append(ParsedFile(status, renamed, original_path=path))
            else:
                entry.files.append(ParsedFile(status, path))

    def _read_file_stat(self, entry: LogEntry) -> None:
        for line in self.lines:
            if line == END_OF_FILES:
                return
            if line.startswith("warning:"):
                logger.debug("git: %s", line)
                continue

            paths = parse_diff_header(line)
            if paths is not None:
                original_path, path = paths
                entry.path = path
                if path == original_path:
                    entry.original_path = None
                    entry.status = FileStatus.MODIFIED
                else:
                    entry.original_path = original_path
                    entry.status = FileStatus.RENAMED

                # Skip the index and mode lines to get to the hunk header
                next(self.lines, None)
                next(self.lines, None)
                entry.line = parse_diff_range(entry.sha or "", next(self.lines, None))
                self._drain_files()
                return

            following = next(self.lines, None)
            stat = parse_file_stat(f"{line}\n{following or ''}")
            if stat is None:
                if following is not None and following != END_OF_FILES:
                    self._drain_files()
                return

            entry.file_stats = stat.stats
            entry.status = stat.status
            entry.path = stat.path
            if stat.original_path is not None:
                entry.original_path = stat.original_path

            if following is None or following == END_OF_FILES:
                return

    def _drain_files(self) -> None:
        for line in self.lines:
            if line == END_OF_FILES:
                return

    def _complete(self, entry: LogEntry) -> None:
        if entry.files is not None:
            entry.path = ", ".join(f.path for f in entry.files if f.path)

        if (
            self.first
            and self.repo_path is None
            and self.log_type == LogType.LOG_FILE
            and self.file_name is not None
            and entry.path
        ):
            # Derive the repository root from the most recent commit's path
            suffix = f"/{entry.path}" if self.file_name.startswith("/") else entry.path
            self.repo_path = normalize_path(self.file_name.replace(suffix, "", 1))
            relative_file_name = normalize_path(
                posixpath.relpath(normalize_path(self.file_name), self.repo_path)
            )
        else:
            relative_file_name = entry.path
        self.first = False

        if (entry.sha or "") not in self.commits:
            self.discovered += 1
            if self.limit and self.discovered > self.limit:
                logger.debug("Reached limit of %d commits", self.limit)
                self.done = True
                return
        else:
            # Duplicates are skipped, so they must not count toward truncation
            logger.debug("Skipping duplicate commit %s", entry.sha)
            self._decrement_truncation()

        entry.finalize(
            self.commits,
            self.log_type,
            self.repo_path,
            relative_file_name,
            is_current_user=self.is_current_user,
            you_label=self.you_label,
        )

    @property
    def has_more(self) -> bool:
        # A budget of exactly 1 never reports more results
        return bool(
            self.truncation_count
            and self.discovered > self.truncation_count
            and self.truncation_count != 1
        )


@traced()
def parse_log(
    data: str,
    log_type: LogType = LogType.LOG,
    repo_path: str | None = None,
    file_name: str | None = None,
    sha: str | None = None,
    is_current_user: IdentityMatcher | None = None,
    limit: int | None = None,
    reverse: bool = False,
    line_range: LineRange | None = None,
    you_label: str = "You",
) -> GitLog | None:
    """Parse the output of ``git log --format=DEFAULT_FORMAT``.

    Args:
        data: Raw git output.
        log_type: LOG for ``--name-status`` output, LOG_FILE for
            ``--numstat --summary`` or patch output of a single file.
        repo_path: Repository root. For single-file queries it is derived
            from ``file_name`` when omitted.
        file_name: The queried file (single-file queries only).
        sha: The ref the query was anchored at, echoed into the result.
        is_current_user: Callable answering whether (name, email) is the
            querying user.
        limit: Maximum number of commits requested from git.
        reverse: Whether git was asked for ``--reverse`` ordering.
        line_range: Line range of a line-history query, echoed into the result.
        you_label: Display name substituted for the querying user.

    Returns:
        GitLog with commits in the order they appear, or None if ``data``
        is empty.
    """
    if not data:
        return None

    parser = _LogStreamParser(
        data,
        log_type,
        repo_path,
        file_name,
        is_current_user,
        limit,
        reverse,
        you_label,
    )
    parser.run()

    return GitLog(
        repo_path=parser.repo_path,
        commits=parser.commits,
        sha=sha,
        count=len(parser.commits),
        limit=limit,
        range=line_range,
        has_more=parser.has_more,
    )
