"""Interpreters for diff hunk headers and numstat/shortstat lines."""

import re
from dataclasses import dataclass

from commitlog.models import CommitLine, FileChangeStats, FileStatus

DIFF_HEADER_RE = re.compile(r"diff --git a/(.*) b/(.*)")
DIFF_RANGE_RE = re.compile(r"^@@ -(\d+?),(\d+?) \+(\d+?),(\d+?) @@")

FILE_STAT_RE = re.compile(
    r"^(\d+?|-)\s+?(\d+?|-)\s+?(.*)(?:\n\s*(delete|rename|copy|create))?"
)
RENAMED_PATH_RE = re.compile(r"(.*?){(.+?)\s=>\s(.*?)}(.*)")
RENAMED_FILE_RE = re.compile(r"(.+)\s=>\s(.+)")

SHORTSTAT_RE = re.compile(
    r"(?P<files>\d+) files? changed"
    r"(?:, (?P<additions>\d+) insertions?\(\+\))?"
    r"(?:, (?P<deletions>\d+) deletions?\(-\))?"
)

_MARKER_STATUS = {
    None: FileStatus.MODIFIED,
    "create": FileStatus.ADDED,
    "delete": FileStatus.DELETED,
    "rename": FileStatus.RENAMED,
    "copy": FileStatus.COPIED,
}


@dataclass
class FileStat:
    """A numstat line interpreted as a single file change."""

    stats: FileChangeStats
    status: FileStatus
    path: str
    original_path: str | None = None


@dataclass
class ShortStat:
    """Totals from a ``--shortstat`` summary line."""

    files: int
    additions: int
    deletions: int


def parse_diff_header(line: str) -> tuple[str, str] | None:
    """Extract (old path, new path) from a ``diff --git`` header line."""
    match = DIFF_HEADER_RE.search(line)
    if match is None:
        return None
    return match[1], match[2]


def parse_diff_range(sha: str, line: str | None) -> CommitLine | None:
    """Map the start of a hunk's old range to the start of its new range.

    Args:
        sha: Commit the hunk belongs to.
        line: Hunk header such as ``@@ -10,4 +12,5 @@ def foo():``.

    Returns:
        CommitLine with the two start lines, or None if the line is not a
        hunk header.
    """
    if line is None:
        return None
    match = DIFF_RANGE_RE.match(line)
    if match is None:
        return None
    return CommitLine(sha=sha, original_line=int(match[1]), line=int(match[3]))


def _count(value: str) -> int:
    # Binary files report "-" for both counts
    return int(value) if value.isdigit() else 0


def split_renamed_path(spec: str) -> tuple[str, str | None]:
    """Resolve a numstat rename spec into (path, original path).

    Handles both ``dir/{old => new}/file`` and ``old/path => new/path``.
    Anything else is returned as the path with no original path.
    """
    match = RENAMED_PATH_RE.match(spec)
    if match is not None:
        prefix, old, new, suffix = match.groups()
        if new == "":
            # The segment was removed, so don't leave "dir//file" behind
            path = f"{prefix}{suffix}".replace("//", "/", 1)
        else:
            path = f"{prefix}{new}{suffix}"
        return path, f"{prefix}{old}{suffix}"

    match = RENAMED_FILE_RE.match(spec)
    if match is not None:
        return match[2], match[1]

    return spec, None


def parse_file_stat(text: str) -> FileStat | None:
    """Interpret a numstat line, optionally followed by a summary line.

    Args:
        text: ``"<adds>\\t<dels>\\t<path>"``, optionally followed by a newline
            and a ``--summary`` line such as ``" rename a => b (100%)"``.

    Returns:
        FileStat, or None if the first line is not a numstat line.
    """
    match = FILE_STAT_RE.match(text)
    if match is None:
        return None

    additions, deletions, spec, marker = match.groups()
    stats = FileChangeStats(
        additions=_count(additions), deletions=_count(deletions), changes=0
    )
    status = _MARKER_STATUS.get(marker, FileStatus.MODIFIED)

    if status in (FileStatus.RENAMED, FileStatus.COPIED):
        path, original_path = split_renamed_path(spec)
        return FileStat(stats, status, path, original_path)
    return FileStat(stats, status, spec)


def parse_shortstat(text: str) -> ShortStat | None:
    """Parse ``N files changed, A insertions(+), D deletions(-)``."""
    match = SHORTSTAT_RE.search(text)
    if match is None:
        return None
    return ShortStat(
        files=int(match["files"]),
        additions=int(match["additions"] or 0),
        deletions=int(match["deletions"] or 0),
    )
