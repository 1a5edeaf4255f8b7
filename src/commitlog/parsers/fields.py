"""Field-format builder and NUL-delimited record parsers.

A parser is created from an ordered mapping of field name to git placeholder
code. It carries the git arguments that produce matching output, and a
``parse`` generator that re-assembles that output into one dict per commit.
"""

import functools
import logging
from collections.abc import Callable, Iterator, Mapping
from typing import Any

from commitlog.parsers.base import ParsedFile, iter_lines
from commitlog.tracing import traced

logger = logging.getLogger(__name__)

FIELD_SEPARATOR = "\0"
RECORD_SEPARATOR = "\0\0\0\0"

DEFAULT_FIELDS: dict[str, str] = {
    "sha": "%H",
    "author": "%aN",
    "author_email": "%aE",
    "author_date": "%at",
    "committer": "%cN",
    "committer_email": "%cE",
    "committer_date": "%ct",
    "message": "%B",
    "parents": "%P",
}

EntryCallback = Callable[[Iterator[str], dict[str, str]], None]


def build_format(
    field_mapping: Mapping[str, str],
    prefix: str = "",
    field_prefix: str | None = None,
    field_suffix: str | None = None,
) -> tuple[str, list[str]]:
    """Build a git format string and its field keys for fixed fields.

    Each placeholder is wrapped as ``field_prefix + code + field_suffix``.
    When neither is given, every field is terminated by ``%x00``.

    Args:
        field_mapping: Ordered mapping of field name to placeholder code.
        prefix: Text placed before the first field.
        field_prefix: Text placed before each placeholder.
        field_suffix: Text placed after each placeholder.

    Returns:
        Tuple of (format string, ordered field keys).
    """
    if field_suffix is None:
        field_suffix = "%x00" if field_prefix is None else ""
    field_prefix = field_prefix or ""

    keys = list(field_mapping)
    fmt = prefix + "".join(
        f"{field_prefix}{field_mapping[key]}{field_suffix}" for key in keys
    )
    return fmt, keys


def build_file_list_format(field_mapping: Mapping[str, str]) -> tuple[str, list[str]]:
    """Build a git format string for fixed fields followed by a file list.

    Every record starts with three NULs so that, together with the NUL git
    writes after the previous record's file list, records are separated by
    four NULs. Commit messages may contain single NULs but not a run of four.

    Args:
        field_mapping: Ordered mapping of field name to placeholder code.

    Returns:
        Tuple of (format string, ordered field keys).
    """
    keys = list(field_mapping)
    fmt = "%x00%x00" + "".join(f"%x00{field_mapping[key]}" for key in keys)
    return fmt, keys


class RecordParser:
    """Re-assembles groups of separator-delimited tokens into records."""

    def __init__(
        self,
        fields: list[str],
        arguments: list[str],
        parse_entry: EntryCallback | None = None,
        separator: str = FIELD_SEPARATOR,
        skip: int = 0,
    ) -> None:
        self.fields = fields
        self.arguments = arguments
        self.parse_entry = parse_entry
        self.separator = separator
        self.skip = skip

    def parse(self, data: str) -> Iterator[dict[str, str]]:
        """Yield one record per group of ``len(fields)`` tokens.

        The token following each group is the record terminator and is
        consumed before ``parse_entry`` sees the shared token iterator.
        A trailing group too short to fill a record is dropped.

        Args:
            data: Raw git output.

        Yields:
            Dict mapping each field key to its raw string value.
        """
        tokens = iter_lines(data, self.separator)
        for _ in range(self.skip):
            next(tokens, None)

        record: dict[str, str] = {}
        for token in tokens:
            record[self.fields[len(record)]] = token
            if len(record) < len(self.fields):
                continue

            next(tokens, None)
            if self.parse_entry is not None:
                self.parse_entry(tokens, record)
            yield record
            record = {}

        if record:
            logger.debug("Dropping incomplete trailing record (%d fields)", len(record))


class SingleFieldParser:
    """Yields every value of a single-placeholder ``-z`` format."""

    def __init__(self, arguments: list[str]) -> None:
        self.arguments = arguments

    def parse(self, data: str) -> Iterator[str]:
        if data.endswith(FIELD_SEPARATOR):
            data = data[:-1]
        if not data:
            return
        yield from iter_lines(data, FIELD_SEPARATOR)


class FileListParser:
    """Parses fixed fields plus a ``--name-status`` file list per commit."""

    def __init__(self, fields: list[str], arguments: list[str]) -> None:
        self.fields = fields
        self.arguments = arguments

    def parse(self, data: str) -> Iterator[dict[str, Any]]:
        """Yield one record per commit with its fixed fields and files.

        Args:
            data: Raw git output.

        Yields:
            Dict with one key per field plus ``files``, a list of
            ParsedFile.
        """
        first = True
        for record in iter_lines(data, RECORD_SEPARATOR):
            if first:
                first = False
                # The first record only has the three NULs of its own prefix
                record = record[3:]
            if not record:
                continue

            tokens = iter_lines(record, FIELD_SEPARATOR)
            entry: dict[str, Any] = dict(zip(self.fields, tokens))
            if len(entry) < len(self.fields):
                logger.debug("Dropping incomplete record (%d fields)", len(entry))
                continue

            entry["files"] = _parse_files(tokens)
            yield entry


def _parse_files(tokens: Iterator[str]) -> list[ParsedFile]:
    """Consume (status, path[, new path]) runs from a token iterator."""
    files: list[ParsedFile] = []
    for token in tokens:
        status = token.strip()
        if not status:
            continue

        if status[0] in ("R", "C"):
            original_path = next(tokens, None)
            path = next(tokens, None)
            if original_path is None or path is None:
                break
            files.append(ParsedFile(status, path, original_path))
        else:
            path = next(tokens, None)
            if path is None:
                break
            files.append(ParsedFile(status, path))
    return files


@traced()
def create_parser(
    field_mapping: Mapping[str, str],
    additional_args: list[str] | None = None,
    parse_entry: EntryCallback | None = None,
    prefix: str = "",
    field_prefix: str | None = None,
    field_suffix: str | None = None,
    separator: str = FIELD_SEPARATOR,
    skip: int = 0,
) -> RecordParser:
    """Create a record parser and its git arguments for fixed fields.

    Args:
        field_mapping: Ordered mapping of field name to placeholder code.
        additional_args: Extra git arguments appended after the format.
        parse_entry: Optional callback consuming trailing tokens per record.
        prefix: Text placed before the first field.
        field_prefix: Text placed before each placeholder.
        field_suffix: Text placed after each placeholder.
        separator: Token separator in the output.
        skip: Number of leading tokens to discard.

    Returns:
        RecordParser ready to parse git output.
    """
    fmt, keys = build_format(
        field_mapping,
        prefix=prefix,
        field_prefix=field_prefix,
        field_suffix=field_suffix,
    )
    arguments = ["-z", f"--format={fmt}"]
    if additional_args:
        arguments.extend(additional_args)
    return RecordParser(
        keys, arguments, parse_entry=parse_entry, separator=separator, skip=skip
    )


def create_single_parser(field: str) -> SingleFieldParser:
    """Create a parser for a format made of one placeholder."""
    return SingleFieldParser(["-z", f"--format={field}"])


def create_file_list_parser(field_mapping: Mapping[str, str]) -> FileListParser:
    """Create a parser for fixed fields followed by a name-status file list."""
    fmt, keys = build_file_list_format(field_mapping)
    return FileListParser(keys, ["-z", f"--format={fmt}", "--name-status"])


@functools.cache
def default_parser() -> FileListParser:
    """File-list parser for the full commit header."""
    return create_file_list_parser(DEFAULT_FIELDS)
