"""CLI output and error rendering helpers.

This module centralizes user-facing CLI presentation for command diagnostics,
batch summaries, hazard counts, and per-file result rows.
"""

from __future__ import annotations

from pathlib import PurePath
from typing import NoReturn

import typer

from .config import BatchConfig
from .errors import CommandStageError
from .models.datatypes import BatchSummary, FileResult, HazardCategory
from .text.hazards import has_significant_hazards

_HAZARD_LABELS = {
    HazardCategory.INVISIBLE_BIDI: "Invisible/bidirectional chars",
    HazardCategory.SMART_QUOTES_IN_ATTRIBUTE: "Smart quotes in attributes",
    HazardCategory.CONSECUTIVE_NBSP: "Consecutive &nbsp; entities",
}


def exit_with_command_error(command_name: str, exc: Exception) -> NoReturn:
    """Report a failed command on stderr and exit with code 1.

    Stage errors name the failing stage and may add a hint line.
    """

    hint = None
    if isinstance(exc, CommandStageError):
        headline = f"{command_name} failed at stage `{exc.stage}`: {exc.detail}"
        hint = exc.hint
    else:
        headline = f"{command_name} failed: {exc}"
    typer.secho(headline, fg=typer.colors.RED, err=True)
    if hint:
        typer.secho(f"Hint: {hint}", fg=typer.colors.YELLOW, err=True)
    raise typer.Exit(code=1) from exc


def echo_run_settings(config: BatchConfig) -> None:
    """Print the effective batch settings before files are scanned."""

    typer.echo(f"Patterns: {', '.join(config.patterns)}")
    typer.echo(f"Aggressive mode: {_yes_no(config.aggressive)}")
    typer.echo(f"Create backups: {_yes_no(config.create_backup)}")
    typer.echo(f"Max concurrency: {config.max_concurrency}")
    typer.echo(f"Fail on hazards: {_yes_no(config.fail_on_hazards)}")
    if config.dry_run:
        typer.echo("Dry run: files will not be modified")


def echo_batch_summary(summary: BatchSummary) -> None:
    """Print aggregate counters for a finished batch."""

    typer.echo(f"Processed: {summary.processed_count}/{summary.total_files}")
    typer.echo(f"Modified: {summary.changed_count}")
    typer.echo(f"Total changes: {summary.total_changes}")
    typer.echo(f"Errors: {summary.error_count}")


def echo_hazard_totals(counts: dict[HazardCategory, int], err: bool = False) -> None:
    """Print nonzero hazard counts, one labelled line per category."""

    if not any(counts.values()):
        return
    typer.echo("Hazards detected:", err=err)
    for category, label in _HAZARD_LABELS.items():
        count = counts.get(category, 0)
        if count > 0:
            typer.echo(f"  {label}: {count}", err=err)


def echo_batch_report(summary: BatchSummary, config: BatchConfig, verbose: bool) -> None:
    """Print the full batch report: summary, hazards, backups, hints, errors, details."""

    if summary.message:
        typer.echo(summary.message)
    echo_batch_summary(summary)
    echo_hazard_totals(dict(summary.hazard_totals))

    backed_up = sum(1 for result in summary.results if result.was_backed_up)
    if backed_up:
        typer.echo(f"Backups created: {backed_up} files (.bak)")

    if config.dry_run and summary.changed_count > 0:
        command = "humantouch run" + (" --aggressive" if config.aggressive else "")
        typer.echo(f"To apply changes, rerun without --dry-run: {command}")

    errored = [result for result in summary.results if result.error is not None]
    if errored:
        typer.echo("Errors:")
        for result in errored:
            typer.echo(f"  - {PurePath(result.path).name}: {result.error}")

    if verbose or any(summary.hazard_totals.values()):
        typer.echo("Detailed results:")
        for result in summary.results:
            typer.echo(f"  {format_file_result(result)}")


def format_file_result(result: FileResult) -> str:
    """Return one deterministic status row for a file result."""

    name = PurePath(result.path).name
    if result.error is not None:
        return f"{name} - ERROR: {result.error}"
    if result.change_count == 0 and not has_significant_hazards(result.hazards):
        return f"{name} - OK"
    label = {"previewed": "PREVIEW", "written": "MODIFIED"}.get(result.status, "UNCHANGED")
    hazard_flag = " [hazards]" if has_significant_hazards(result.hazards) else ""
    return f"{name} - {label} ({result.change_count} changes){hazard_flag}"


def _yes_no(value: bool) -> str:
    return "yes" if value else "no"
