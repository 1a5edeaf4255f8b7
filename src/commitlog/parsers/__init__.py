"""Parsers for git log output.

Every parser here works on an in-memory text buffer produced by git with a
matching format string, and never raises on malformed input.
"""

from commitlog.parsers.base import ParsedFile, iter_lines
from commitlog.parsers.diff import (
    FileStat,
    ShortStat,
    parse_diff_range,
    parse_file_stat,
    parse_shortstat,
)
from commitlog.parsers.fields import (
    FileListParser,
    RecordParser,
    SingleFieldParser,
    build_file_list_format,
    build_format,
    create_file_list_parser,
    create_parser,
    create_single_parser,
    default_parser,
)
from commitlog.parsers.log import (
    DEFAULT_FORMAT,
    SIMPLE_FORMAT,
    LogType,
    parse_log,
)
from commitlog.parsers.simple import parse_simple, parse_simple_renamed

__all__ = [
    "DEFAULT_FORMAT",
    "SIMPLE_FORMAT",
    "FileListParser",
    "FileStat",
    "LogType",
    "ParsedFile",
    "RecordParser",
    "ShortStat",
    "SingleFieldParser",
    "build_file_list_format",
    "build_format",
    "create_file_list_parser",
    "create_parser",
    "create_single_parser",
    "default_parser",
    "iter_lines",
    "parse_diff_range",
    "parse_file_stat",
    "parse_log",
    "parse_shortstat",
    "parse_simple",
    "parse_simple_renamed",
]
