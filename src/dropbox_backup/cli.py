"""Command-line interface for dropbox_backup."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import NoReturn

import click

from dropbox_backup import (
    AuthError,
    CandidateResult,
    CandidateState,
    ConfigError,
    DropboxBackup,
    RunReport,
    Settings,
    StorageError,
)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def configure_logging(level: str = "INFO", log_file: Path | None = None) -> None:
    """Log to the console and, if given, to a file as well."""
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
        force=True,
    )


def get_backup(env_file: Path | None = None) -> DropboxBackup:
    """Load settings from the environment and build a DropboxBackup."""
    return DropboxBackup(Settings.from_env(env_file))


def _fail(prefix: str, error: Exception) -> NoReturn:
    click.echo(click.style(f"{prefix}: {error}", fg="red"), err=True)
    sys.exit(1)


def _print_result(result: CandidateResult) -> None:
    name = result.candidate.path.name
    if result.state is CandidateState.SUCCEEDED:
        click.echo(click.style("✓ ", fg="green") + f"{name} -> {result.remote_path}")
    elif result.state is CandidateState.SKIPPED:
        click.echo(click.style("- ", fg="blue") + f"{name} (already uploaded)")
    elif result.state is CandidateState.PARTIAL_SUCCESS:
        click.echo(
            click.style("! ", fg="yellow") + f"{name} -> {result.remote_path}: {result.error}",
            err=True,
        )
    else:
        click.echo(click.style("✗ ", fg="red") + f"{name}: {result.error}", err=True)


def _print_summary(report: RunReport) -> None:
    counts = report.counts()
    summary = (
        f"\nUploaded {counts[CandidateState.SUCCEEDED]}, "
        f"skipped {counts[CandidateState.SKIPPED]}, "
        f"failed {counts[CandidateState.PERMANENT_FAILURE]}, "
        f"left in place {counts[CandidateState.PARTIAL_SUCCESS]}."
    )
    if report.ok:
        click.echo(click.style(summary, fg="green"))
    else:
        click.echo(summary, err=True)


@click.group()
@click.version_option(package_name="dropbox-backup")
@click.option(
    "--env-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Read settings from this .env file (default: ./.env if present)",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="INFO",
    show_default=True,
    help="Logging verbosity",
)
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Also write log messages to this file",
)
@click.pass_context
def main(
    ctx: click.Context, env_file: Path | None, log_level: str, log_file: Path | None
) -> None:
    """Dropbox Backup - upload new local files to Dropbox and move them aside."""
    configure_logging(log_level, log_file)
    ctx.obj = {"env_file": env_file}


@main.command()
@click.option(
    "--workers",
    "-w",
    type=click.IntRange(min=1),
    default=1,
    show_default=True,
    help="Number of files to upload in parallel",
)
@click.pass_context
def run(ctx: click.Context, workers: int) -> None:
    """Upload every matching file that hasn't been uploaded yet.

    Uploaded files are recorded in the upload log and moved to
    UPLOADED_DIRECTORY.

    Examples:

        dropbox-backup run

        dropbox-backup --env-file /etc/backup.env run --workers 4
    """
    try:
        with get_backup(ctx.obj["env_file"]) as backup:
            backup.prepare()
            report = backup.run(workers=workers)
    except ConfigError as e:
        _fail("Configuration error", e)
    except AuthError as e:
        _fail("Authentication failed", e)
    except StorageError as e:
        _fail("Upload log error", e)

    if not report.results:
        click.echo("No files matched the provided extensions.")
        return

    for result in report.results:
        _print_result(result)
    _print_summary(report)

    if not report.ok:
        sys.exit(1)


@main.command()
@click.pass_context
def scan(ctx: click.Context) -> None:
    """List matching files without uploading anything.

    Files already present in the upload log are marked.
    """
    try:
        with get_backup(ctx.obj["env_file"]) as backup:
            backup.ledger.load()
            found = 0
            for candidate in backup.discover():
                found += 1
                remote_path = backup.orchestrator.remote_path(candidate)
                if candidate.path in backup.ledger:
                    click.echo(
                        click.style("- ", fg="blue") + f"{candidate.path} (already uploaded)"
                    )
                else:
                    click.echo(f"  {candidate.path} -> {remote_path}")
    except ConfigError as e:
        _fail("Configuration error", e)
    except StorageError as e:
        _fail("Upload log error", e)

    if not found:
        click.echo("No files matched the provided extensions.")


@main.command("refresh-token")
@click.pass_context
def refresh_token(ctx: click.Context) -> None:
    """Request a new access token and save it to SHORT_TOKEN_FILE."""
    try:
        with get_backup(ctx.obj["env_file"]) as backup:
            backup.credentials.refresh()
            click.echo(
                click.style(
                    f"Access token refreshed and saved to {backup.settings.short_token_file}",
                    fg="green",
                )
            )
    except ConfigError as e:
        _fail("Configuration error", e)
    except AuthError as e:
        _fail("Authentication failed", e)


if __name__ == "__main__":
    main()
