"""Shared building blocks for git output parsers."""

import re
from collections.abc import Iterator
from dataclasses import dataclass

# "M\tpath" or "R100\told\tnew" as printed by --name-status
FILE_STATUS_RE = re.compile(r"(\S)\S*\t([^\t\n]+)(?:\t(.+))?")


@dataclass
class ParsedFile:
    """A file entry as reported by git, before conversion to a FileChange."""

    status: str
    path: str
    original_path: str | None = None


def iter_lines(data: str, separator: str = "\n") -> Iterator[str]:
    """Lazily split text on a separator.

    Behaves like ``data.split(separator)`` but yields each segment as it is
    found, so callers that stop early never scan the rest of the buffer.

    Args:
        data: Text to split.
        separator: Non-empty separator string.

    Yields:
        Each segment between separators, including a trailing empty one.
    """
    start = 0
    size = len(separator)
    while True:
        end = data.find(separator, start)
        if end == -1:
            yield data[start:]
            return
        yield data[start:end]
        start = end + size
