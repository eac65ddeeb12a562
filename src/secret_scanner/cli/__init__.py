"""
CLI for secret-scanner.

Scans a source tree for values taken from local .env files and optionally
redacts them in place.

Exit codes:
    0  nothing found / nothing to redact
    1  secrets found / redacted, or a runtime error
    2  usage error (conflicting flags, not a git repository, ...)
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from secret_scanner import __version__
from secret_scanner.cli.output import (
    OutputMode,
    render_redaction_summary,
    render_scan_summary,
)
from secret_scanner.core.config import ScannerConfig, load_config, write_default_config
from secret_scanner.core.errors import NotARepositoryError, SecretScannerError
from secret_scanner.infrastructure.git_client import GitClient
from secret_scanner.services import RedactionService, ScanService

EXIT_USAGE = 2

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

app = typer.Typer(
    name="secret-scanner",
    help="Prevent committing secrets by scanning files for values found in .env files.",
    add_completion=False,
)


@dataclass
class CLIState:
    """Global options shared by every command."""

    cwd: Path
    config_path: Optional[Path]
    output_mode: OutputMode
    quiet: bool
    verbose: bool
    color: bool

    @property
    def console(self) -> Console:
        return Console(no_color=not self.color, highlight=False, soft_wrap=True)

    @property
    def err_console(self) -> Console:
        return Console(stderr=True, no_color=not self.color, highlight=False, soft_wrap=True)


def _configure_logging(verbose: bool) -> None:
    level_name = os.environ.get("SECRET_SCANNER_LOG_LEVEL", "DEBUG" if verbose else "WARNING")
    level = getattr(logging, level_name.upper(), logging.WARNING)
    logging.basicConfig(level=level, format=LOG_FORMAT, force=True)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit()


def _usage_error(state: CLIState, message: str) -> typer.Exit:
    state.err_console.print(f"[bold red]Error:[/bold red] {escape(message)}")
    return typer.Exit(EXIT_USAGE)


def _load(state: CLIState) -> ScannerConfig:
    config = load_config(state.cwd, state.config_path).config
    # --verbose wins over the configured level
    if not state.verbose:
        logging.getLogger().setLevel(getattr(logging, config.log_level.upper(), logging.WARNING))
    return config


def _run_scan(
    state: CLIState,
    staged: bool = False,
    all_files: bool = False,
    history: bool = False,
    everything: bool = False,
    paths: Optional[list[str]] = None,
    include_untracked: bool = False,
    since: Optional[str] = None,
) -> None:
    """Resolve the scan mode, run it and exit with the rendered result's code."""
    wants_paths = bool(paths)
    if sum([staged, all_files, history, everything, wants_paths]) > 1:
        raise _usage_error(
            state, "Use only one of --staged, --all, --history, --everything, or --paths."
        )

    try:
        config = _load(state)
        service = ScanService(state.cwd, config)

        if staged:
            summary = service.scan_staged()
        elif all_files:
            summary = service.scan_working_tree(include_untracked=include_untracked)
        elif history:
            summary = service.scan_history(since=since)
        elif everything:
            summary = service.scan_all(include_untracked=include_untracked, since=since)
        elif wants_paths:
            summary = service.scan_paths(paths or [])
        elif GitClient().repo_root(state.cwd) is not None:
            summary = service.scan_staged()
        else:
            raise _usage_error(state, "Not in a git repo. Use --paths to scan specific files.")

    except NotARepositoryError as e:
        raise _usage_error(state, str(e))
    except SecretScannerError as e:
        state.err_console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)

    exit_code = render_scan_summary(
        summary,
        state.console,
        output_mode=state.output_mode,
        quiet=state.quiet,
        verbose=state.verbose,
    )
    raise typer.Exit(exit_code)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to config file"),
    cwd: Path = typer.Option(Path("."), "--cwd", help="Working directory"),
    json_output: bool = typer.Option(False, "--json", help="JSON output"),
    plain: bool = typer.Option(False, "--plain", help="Plain output (one finding per line)"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress non-essential output"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    no_color: bool = typer.Option(False, "--no-color", help="Disable ANSI colors"),
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version and exit"
    ),
):
    """Prevent committing secrets by scanning files for values found in .env files."""
    _configure_logging(verbose)

    state = CLIState(
        cwd=cwd.resolve(),
        config_path=config,
        output_mode=OutputMode.JSON if json_output else OutputMode.PLAIN if plain else OutputMode.HUMAN,
        quiet=quiet,
        verbose=verbose,
        color=not no_color,
    )
    ctx.obj = state

    if json_output and plain:
        raise _usage_error(state, "Choose either --json or --plain, not both.")

    if ctx.invoked_subcommand is None:
        _run_scan(state)


@app.command()
def scan(
    ctx: typer.Context,
    targets: Optional[list[str]] = typer.Argument(None, help="Paths or globs to scan"),
    staged: bool = typer.Option(False, "--staged", help="Scan staged files (git)"),
    all_files: bool = typer.Option(False, "--all", help="Scan all tracked files (git)"),
    history: bool = typer.Option(False, "--history", help="Scan every commit reachable from HEAD (git)"),
    everything: bool = typer.Option(
        False, "--everything", help="Scan staged files, tracked files and history (git)"
    ),
    include_untracked: bool = typer.Option(
        False, "--include-untracked", help="Include untracked files with --all or --everything"
    ),
    since: Optional[str] = typer.Option(
        None, "--since", help="Only scan commits newer than this date (with --history)"
    ),
    paths: Optional[list[str]] = typer.Option(
        None, "--paths", "-p", help="Scan specific paths or globs (repeatable)"
    ),
):
    """Scan files for secrets (default: staged files)."""
    state: CLIState = ctx.obj
    _run_scan(
        state,
        staged=staged,
        all_files=all_files,
        history=history,
        everything=everything,
        paths=list(paths or []) + list(targets or []),
        include_untracked=include_untracked,
        since=since,
    )


@app.command()
def redact(
    ctx: typer.Context,
    targets: Optional[list[str]] = typer.Argument(None, help="Paths or globs to redact"),
    all_files: bool = typer.Option(False, "--all", help="Redact all tracked files (git)"),
    include_untracked: bool = typer.Option(
        False, "--include-untracked", help="Include untracked files with --all"
    ),
    paths: Optional[list[str]] = typer.Option(
        None, "--paths", "-p", help="Redact specific paths or globs (repeatable)"
    ),
    apply: bool = typer.Option(False, "--apply", help="Apply changes to files"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show what would change (default)"),
):
    """Replace secrets in files with safe placeholders."""
    state: CLIState = ctx.obj
    patterns = list(paths or []) + list(targets or [])

    if all_files and patterns:
        raise _usage_error(state, "Use only one of --all or --paths.")
    if apply and dry_run:
        raise _usage_error(state, "Use either --apply or --dry-run, not both.")

    try:
        config = _load(state)
        service = RedactionService(state.cwd, config)
        if patterns:
            summary = service.redact_paths(patterns, apply=apply)
        else:
            summary = service.redact_working_tree(apply=apply, include_untracked=include_untracked)
    except NotARepositoryError as e:
        raise _usage_error(state, str(e))
    except SecretScannerError as e:
        state.err_console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)

    exit_code = render_redaction_summary(
        summary,
        state.console,
        output_mode=state.output_mode,
        quiet=state.quiet,
    )
    raise typer.Exit(exit_code)


@app.command()
def init(
    ctx: typer.Context,
    path: Path = typer.Option(
        Path("secret-scanner.config.json"), "--path", "-p", help="Config file path"
    ),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite if the config file already exists"),
):
    """Create a default config file."""
    state: CLIState = ctx.obj
    target = path if path.is_absolute() else state.cwd / path

    try:
        written = write_default_config(target, force=force)
    except FileExistsError as e:
        raise _usage_error(state, str(e))
    except OSError as e:
        state.err_console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)

    if not state.quiet:
        state.console.print(f"[green]Wrote config to[/green] {escape(str(written))}")


if __name__ == "__main__":
    app()
