"""Click CLI entry point for commitlog."""

import logging
import signal
import sys
from pathlib import Path
from typing import TextIO

import click
from rich.console import Console
from rich.table import Table
from rich.text import Text

from commitlog.config import load_config
from commitlog.git import GitCommandError, is_git_repo
from commitlog.models import Commit, GitLog, LineRange
from commitlog.parsers.log import LogType

console = Console()


def _handle_sigint(_sig: int, _frame: object) -> None:
    """Handle Ctrl+C gracefully."""
    click.echo("\nInterrupted.", err=True)
    sys.exit(130)


signal.signal(signal.SIGINT, _handle_sigint)

logger = logging.getLogger(__name__)


def _setup_logging(verbose: bool) -> None:
    """Configure logging level."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _require_repo(path: Path, git_path: str) -> None:
    """Exit with an error unless path is inside a git repository."""
    if not is_git_repo(path, git_path=git_path):
        click.echo(f"Error: not a git repository: {path}", err=True)
        sys.exit(1)


def _parse_line_range(value: str | None) -> LineRange | None:
    """Parse a START:END option into a LineRange."""
    if value is None:
        return None
    start, sep, end = value.partition(":")
    if not sep or not start.isdigit() or not end.isdigit():
        raise click.BadParameter("expected START:END, e.g. 10:20", param_hint="--lines")
    line_range = LineRange(int(start), int(end))
    if line_range.start < 1 or line_range.end < line_range.start:
        raise click.BadParameter("expected 1 <= START <= END", param_hint="--lines")
    return line_range


def _file_summary(commit: Commit) -> str:
    """Describe the files of a commit in one short cell."""
    if commit.files.file is not None:
        change = commit.files.file
        status = change.status.value if change.status else "?"
        if change.original_path:
            return f"{status} {change.original_path} -> {change.path}"
        return f"{status} {change.path}"
    files = commit.files.files or ()
    if len(files) == 1:
        return f"{files[0].status.value if files[0].status else '?'} {files[0].path}"
    return f"{len(files)} files"


def _print_log(log: GitLog | None, title: str) -> None:
    """Print a parsed log as a table."""
    if log is None or not log.commits:
        console.print("[dim]No commits found.[/dim]")
        return

    table = Table(title=title)
    table.add_column("Commit", style="yellow", no_wrap=True)
    table.add_column("Author", style="bold")
    table.add_column("Date", style="dim", no_wrap=True)
    table.add_column("Title")
    table.add_column("Files", style="cyan")
    if log.range is not None:
        table.add_column("Line", justify="right")

    for commit in log.commits.values():
        date = commit.author.date.strftime("%Y-%m-%d %H:%M") if commit.author.date else "-"
        row: list[str | Text] = [
            commit.short_sha,
            commit.author.name or "-",
            date,
            Text(commit.title),
            _file_summary(commit),
        ]
        if log.range is not None:
            row.append(
                f"{commit.lines[0].original_line} -> {commit.lines[0].line}"
                if commit.lines
                else "-"
            )
        table.add_row(*row)

    console.print(table)
    more = " [yellow](more available)[/yellow]" if log.has_more else ""
    console.print(f"[bold]{log.count}[/bold] commit(s){more}")


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """commitlog: structured git history for repositories, files and lines."""
    _setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


# ── History commands ────────────────────────────────────────────────────


@main.command("log")
@click.argument("repo", required=False, default=".", type=click.Path(exists=True, path_type=Path))
@click.option("--limit", "-n", type=int, help="Maximum number of commits (default from config).")
@click.option("--reverse", is_flag=True, help="Show oldest commits first.")
@click.option("--ref", help="Revision to start from instead of HEAD.")
def log_command(repo: Path, limit: int | None, reverse: bool, ref: str | None) -> None:
    """Show the commit history of a repository."""
    from commitlog.services.log_service import LogService

    config = load_config()
    _require_repo(repo, config.git_path)
    try:
        log = LogService().get_log(repo, config, limit=limit, reverse=reverse, ref=ref)
    except GitCommandError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    _print_log(log, f"History of {log.repo_path if log else repo}")


@main.command("file")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--limit", "-n", type=int, help="Maximum number of commits (default from config).")
@click.option("--reverse", is_flag=True, help="Show oldest commits first.")
@click.option("--lines", "lines", help="Only commits touching lines START:END.")
@click.option("--ref", help="Revision to start from instead of HEAD.")
def file_command(
    path: Path, limit: int | None, reverse: bool, lines: str | None, ref: str | None
) -> None:
    """Show the history of a file, or of a range of its lines."""
    from commitlog.services.log_service import LogService

    line_range = _parse_line_range(lines)
    config = load_config()
    _require_repo(path.parent, config.git_path)
    try:
        log = LogService().get_file_log(
            path, config, limit=limit, reverse=reverse, line_range=line_range, ref=ref
        )
    except GitCommandError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    _print_log(log, f"History of {path.name}")


@main.command("parse")
@click.argument("source", type=click.File("r"), default="-")
@click.option("--file-mode", "file_name", help="Parse file-history output for this absolute file path.")
@click.option("--limit", "-n", type=int, help="Limit the output was produced with.")
@click.option("--reverse", is_flag=True, help="Output was produced with --reverse.")
def parse_command(
    source: TextIO, file_name: str | None, limit: int | None, reverse: bool
) -> None:
    """Parse saved `git log` output produced with the commitlog format.

    Print the format with `commitlog format`.
    """
    from commitlog.services.log_service import LogService

    config = load_config()
    log_type = LogType.LOG_FILE if file_name else LogType.LOG
    log = LogService().parse_text(
        source.read(), config, log_type=log_type, file_name=file_name, limit=limit, reverse=reverse
    )
    _print_log(log, "Parsed history")


@main.command("format")
def format_command() -> None:
    """Print the --format string the parser expects."""
    from commitlog.parsers.log import DEFAULT_FORMAT

    click.echo(DEFAULT_FORMAT)


# ── Config commands ─────────────────────────────────────────────────────


@main.group()
def config() -> None:
    """Show or change configuration."""


@config.command("show")
def config_show() -> None:
    """Show the current configuration."""
    cfg = load_config()

    table = Table(title="Configuration", show_header=False)
    table.add_column("Key", style="bold")
    table.add_column("Value")
    table.add_row("git_path", cfg.git_path)
    table.add_row("default_limit", str(cfg.default_limit))
    table.add_row("you_label", cfg.you_label)
    table.add_row("follow_renames", str(cfg.follow_renames))
    table.add_row("user.name", cfg.user.name or "[dim](from git)[/dim]")
    table.add_row("user.email", cfg.user.email or "[dim](from git)[/dim]")
    console.print(table)


@config.command("set-user")
@click.option("--name", help="Author name to show as the you-label.")
@click.option("--email", help="Author email to show as the you-label.")
def config_set_user(name: str | None, email: str | None) -> None:
    """Set the identity whose commits are shown as yours.

    Without options, clears it so git's user.name/user.email are used.
    """
    from commitlog.services.config_service import ConfigService

    ConfigService().set_user(name, email)
    if name or email:
        console.print(f"[green]User set to[/green] {name or '-'} <{email or '-'}>")
    else:
        console.print("[green]User cleared[/green], using git configuration.")


if __name__ == "__main__":
    main()
