"""
Report rendering for scan and redaction summaries.

Three output modes: rich-styled human output, tab-separated plain lines for
scripts, and JSON for CI. Each renderer returns the process exit code the
summary implies: 0 when nothing was found, 1 otherwise.
"""

import json
from enum import Enum

import typer
from rich.console import Console
from rich.markup import escape

from secret_scanner.core.models import SourceKind
from secret_scanner.services.models import Finding, RedactionSummary, ScanSummary

EXIT_OK = 0
EXIT_FINDINGS = 1


class OutputMode(str, Enum):
    HUMAN = "human"
    PLAIN = "plain"
    JSON = "json"


def _finding_label(finding: Finding, mode: str) -> str:
    label = f"[yellow]{escape(str(finding.file_path))}[/yellow]"
    if finding.commit:
        label += f" [dim](commit {finding.commit[:12]})[/dim]"
    elif mode == "all" and finding.source is not SourceKind.PATHS:
        label += f" [dim]({finding.source.value})[/dim]"
    return label


def render_scan_summary(
    summary: ScanSummary,
    console: Console,
    output_mode: OutputMode = OutputMode.HUMAN,
    quiet: bool = False,
    verbose: bool = False,
) -> int:
    """Render a scan summary and return the matching exit code."""
    exit_code = EXIT_OK if summary.ok else EXIT_FINDINGS

    if output_mode is OutputMode.JSON:
        typer.echo(json.dumps(summary.to_dict(), indent=2))
        return exit_code

    if output_mode is OutputMode.PLAIN:
        for finding in summary.findings:
            for match in finding.matches:
                typer.echo(f"{finding.file_path}\t{match.key}\t{match.env_file}")
        return exit_code

    if summary.ok:
        if not quiet:
            console.print("[green]No secrets found.[/green]")
            if verbose:
                console.print(
                    f"[dim]Mode: {summary.mode} | Files scanned: {summary.files_scanned} | "
                    f"Secrets: {summary.secret_count} from {summary.env_file_count} env file(s)[/dim]"
                )
        return exit_code

    console.print("[bold red]Secrets detected.[/bold red]")
    console.print(f"[dim]Mode: {summary.mode}[/dim]")
    console.print(f"[dim]Files scanned: {summary.files_scanned}[/dim]")
    if verbose:
        console.print(
            f"[dim]Secrets: {summary.secret_count} from {summary.env_file_count} env file(s)[/dim]"
        )

    for finding in summary.findings:
        console.print()
        console.print(_finding_label(finding, summary.mode))
        for match in finding.matches:
            console.print(f"  - {escape(match.key)} ({escape(match.env_file)})")

    return exit_code


def render_redaction_summary(
    summary: RedactionSummary,
    console: Console,
    output_mode: OutputMode = OutputMode.HUMAN,
    quiet: bool = False,
) -> int:
    """Render a redaction summary and return the matching exit code."""
    exit_code = EXIT_OK if summary.ok else EXIT_FINDINGS

    if output_mode is OutputMode.JSON:
        typer.echo(json.dumps(summary.to_dict(), indent=2))
        return exit_code

    if output_mode is OutputMode.PLAIN:
        for result in summary.results:
            typer.echo(f"{result.file_path}\t{','.join(result.keys)}")
        return exit_code

    if summary.ok:
        if not quiet:
            console.print("[green]No secrets to redact.[/green]")
        return exit_code

    console.print("[bold red]Secrets redacted:[/bold red]")
    for result in summary.results:
        console.print(f"- [yellow]{escape(str(result.file_path))}[/yellow]")
        for key in result.keys:
            console.print(f"  - {escape(key)}")

    if not summary.applied:
        console.print()
        console.print("[bold yellow]Dry run only.[/bold yellow] Re-run with --apply to write changes.")

    return exit_code
