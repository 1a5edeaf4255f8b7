"""Fast extractors for ``SIMPLE_FORMAT`` output.

These only recover a (ref, path, status) triple and skip the full commit
header. Each call iterates its own matches, so no cursor is shared between
calls.
"""

import re

from commitlog.models import FileStatus
from commitlog.tracing import traced

LOG_FILE_SIMPLE_RE = re.compile(
    r"^<r> (.*)\s*(?:(?:diff --git a/(.*) b/(.*))|(?:(\S)\S*\t([^\t\n]+)(?:\t(.+))?))",
    re.MULTILINE,
)
LOG_FILE_SIMPLE_RENAMED_RE = re.compile(r"^<r> (\S+)\s*(.*)$", re.DOTALL)
LOG_FILE_SIMPLE_RENAMED_FILES_RE = re.compile(
    r"^(\S)\S*\t([^\t\n]+)(?:\t(.+)?)?$", re.MULTILINE
)

SimpleResult = tuple[str | None, str | None, FileStatus | None]


@traced()
def parse_simple(data: str, skip: int, skip_ref: str | None = None) -> SimpleResult:
    """Find the ref, file and status of the nth commit in a file log.

    Args:
        data: Output of ``git log --format=SIMPLE_FORMAT`` with either
            ``--name-status`` or patch output.
        skip: Number of commits to pass over before taking one.
        skip_ref: Commits with this ref are passed over without counting
            toward ``skip``.

    Returns:
        Tuple of (ref, path, status); entries are None when not found.
    """
    for match in LOG_FILE_SIMPLE_RE.finditer(data):
        ref, diff_file, diff_renamed, status, file, renamed = match.groups()
        if ref == skip_ref:
            continue
        if skip > 0:
            skip -= 1
            continue

        path = diff_renamed or diff_file or renamed or file
        return ref or None, path, FileStatus.from_code(status)

    return None, None, None


@traced()
def parse_simple_renamed(data: str, original_file_name: str) -> SimpleResult:
    """Find where a file was renamed to in a single-commit name-status log.

    Args:
        data: Output of ``git log --format=SIMPLE_FORMAT --name-status`` for
            one commit.
        original_file_name: Path the file had before the commit.

    Returns:
        Tuple of (ref, new path, status); all None when no entry in the
        file list starts from ``original_file_name``.
    """
    match = LOG_FILE_SIMPLE_RENAMED_RE.match(data)
    if match is None:
        return None, None, None

    ref, files = match.groups()
    for file_match in LOG_FILE_SIMPLE_RENAMED_FILES_RE.finditer(files):
        status, file, renamed = file_match.groups()
        if file != original_file_name:
            continue
        return ref or None, renamed or file, FileStatus.from_code(status)

    return None, None, None
