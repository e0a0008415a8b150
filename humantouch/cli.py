"""Command-line interface for humantouch.

Responsibilities:
- Expose batch file normalization and one-off text normalization commands.
- Convert CLI arguments and optional YAML config into `BatchConfig`.

Key public functions:
- `app`: Typer application instance.
- `main`: invoke the Typer application.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from . import __version__
from .cli_rendering import (
    echo_batch_report,
    echo_hazard_totals,
    echo_run_settings,
    exit_with_command_error,
)
from .config import BatchConfig, ConfigLoader, ConfigOverrides, NormalizerConfig
from .errors import CommandStageError
from .parsing import parse_string_list
from .pipeline import BatchOrchestrator
from .telemetry.logger import RunLogger
from .text.document import normalize_html
from .text.normalizer import normalize_text

app = typer.Typer(
    name="humantouch",
    no_args_is_help=True,
    help="Normalize typographic artifacts in text and HTML files.",
)


def _version_callback(value: bool) -> None:
    """Print the package version and exit when `--version` is passed."""

    if value:
        typer.echo(f"humantouch {__version__}")
        raise typer.Exit()


@app.callback()
def root(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show the humantouch version and exit.",
        ),
    ] = False,
) -> None:
    """humantouch command group."""


def _load_yaml_config(config_path: Path | None) -> BatchConfig | None:
    """Load a YAML config file when requested and map failures to stage errors."""

    if config_path is None:
        return None

    try:
        return ConfigLoader.from_yaml(config_path)
    except FileNotFoundError as exc:
        raise CommandStageError(
            stage="config",
            detail=f"Config file not found: `{config_path}`.",
            hint="Provide an existing path via `--config <path.yaml>`.",
        ) from exc
    except ValueError as exc:
        raise CommandStageError(
            stage="config",
            detail=f"Invalid config file `{config_path}`: {exc}",
            hint="Fix config schema/values and rerun.",
        ) from exc
    except OSError as exc:
        raise CommandStageError(
            stage="config",
            detail=f"Failed to load config file `{config_path}`: {exc}",
            hint="Verify file permissions.",
        ) from exc


def _resolve_run_config(
    config_file: Path | None,
    patterns: list[str] | None,
    concurrency: int | None,
    backup: bool | None,
    aggressive: bool | None,
    dry_run: bool | None,
    fail_on_hazards: bool | None,
) -> BatchConfig:
    """Resolve effective run config from YAML defaults and explicit CLI overrides."""

    base_config = _load_yaml_config(config_file) or BatchConfig()
    parsed_patterns: tuple[str, ...] = ()
    for raw in patterns or []:
        parsed_patterns += parse_string_list(raw, "patterns")

    config = ConfigOverrides(
        patterns=parsed_patterns or None,
        max_concurrency=concurrency,
        create_backup=backup,
        aggressive=aggressive,
        dry_run=dry_run,
        fail_on_hazards=fail_on_hazards,
    ).apply(base_config)

    try:
        config.validate()
    except ValueError as exc:
        raise CommandStageError(
            stage="config",
            detail=str(exc),
            hint="Pass `--concurrency` as a positive integer and non-empty patterns.",
        ) from exc
    return config


@app.command("run")
def run_command(
    patterns: Annotated[
        list[str] | None,
        typer.Argument(
            help="Glob patterns (or comma-separated lists of them). Defaults to `**/*.html`."
        ),
    ] = None,
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Optional YAML config file with run defaults."),
    ] = None,
    concurrency: Annotated[
        int | None,
        typer.Option("--concurrency", help="Maximum number of files processed at once."),
    ] = None,
    backup: Annotated[
        bool | None,
        typer.Option("--backup/--no-backup", help="Copy changed files to `<path>.bak` first."),
    ] = None,
    aggressive: Annotated[
        bool | None,
        typer.Option(
            "--aggressive/--no-aggressive",
            help="Also replace symbols, currency signs, and guillemets.",
        ),
    ] = None,
    dry_run: Annotated[
        bool | None,
        typer.Option("--dry-run/--no-dry-run", help="Report changes without writing files."),
    ] = None,
    fail_on_hazards: Annotated[
        bool | None,
        typer.Option(
            "--fail-on-hazards/--no-fail-on-hazards",
            help="Exit with code 1 when invisible/bidirectional characters are found.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Print per-file results and debug run events."),
    ] = False,
) -> None:
    """Normalize every file matching the given glob patterns."""

    try:
        config = _resolve_run_config(
            config_file=config_file,
            patterns=patterns,
            concurrency=concurrency,
            backup=backup,
            aggressive=aggressive,
            dry_run=dry_run,
            fail_on_hazards=fail_on_hazards,
        )
        echo_run_settings(config)
        orchestrator = BatchOrchestrator(
            config,
            run_logger=RunLogger(level="DEBUG" if verbose else "INFO"),
        )
        summary = orchestrator.process_patterns()
    except Exception as exc:
        exit_with_command_error("run", exc)

    echo_batch_report(summary, config, verbose=verbose)

    if summary.should_fail:
        typer.secho(
            "run failed: invisible/bidirectional characters found.",
            fg=typer.colors.RED,
            err=True,
        )
        typer.secho(
            "Hint: rerun without `--fail-on-hazards` to review and fix them.",
            fg=typer.colors.YELLOW,
            err=True,
        )
        raise typer.Exit(code=1)
    if not summary.success:
        raise typer.Exit(code=1)


@app.command("text")
def text_command(
    text: Annotated[
        str | None,
        typer.Argument(help="Text to normalize. Reads standard input when omitted."),
    ] = None,
    html: Annotated[
        bool,
        typer.Option("--html", help="Treat input as markup and keep excluded zones intact."),
    ] = False,
    aggressive: Annotated[
        bool,
        typer.Option("--aggressive", help="Also apply the aggressive replacement tier."),
    ] = False,
) -> None:
    """Normalize a single string and print the result; counts go to stderr."""

    source = text if text is not None else typer.get_text_stream("stdin").read()
    try:
        if html:
            document = normalize_html(source, NormalizerConfig(aggressive=aggressive))
            output, changes, hazards = document.markup, document.change_count, document.hazards
        else:
            result = normalize_text(source, aggressive=aggressive)
            output, changes, hazards = result.text, result.change_count, result.hazards
    except Exception as exc:
        exit_with_command_error("text", exc)

    typer.echo(output, nl=not output.endswith("\n"))
    typer.echo(f"Changes: {changes}", err=True)
    echo_hazard_totals(hazards.counts(), err=True)


def main() -> None:
    """CLI entrypoint for console scripts."""
    app()


if __name__ == "__main__":
    main()
