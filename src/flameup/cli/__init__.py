"""Command-line interface for :mod:`flameup`.

This module exposes the Typer application behind the ``flameup`` console
script. It turns flags into a validated :class:`BackupConfig` and dispatches
to the snapshot service or the daemon scheduler.

Example:
    >>> import typer
    >>> from flameup.cli import create_app
    >>> app = create_app()
    >>> isinstance(app, typer.Typer)
    True
"""

from __future__ import annotations

import time
from pathlib import Path
from typing import NoReturn

import typer

from flameup.core.config import (
    BackupConfig,
    env_overrides,
    load_config,
    render_config,
)
from flameup.core.logging import Logger, configure_logging, get_logger
from flameup.core.paths import ensure_backup_root
from flameup.errors import FlameUpError
from flameup.snapshots import (
    BackupScheduler,
    OperationResult,
    RootLock,
    SnapshotService,
    build_lock_path,
)

_app_help = (
    "FlameUp - command line backup utility."
    "\n\n"
    "Copies a source directory into timestamped snapshots, keeps the most "
    "recent ones, and restores or deletes them on request."
)

_EPILOG = (
    "Examples:\n\n"
    "  flameup --now\n\n"
    "  flameup --path ~/MyFiles --now\n\n"
    "  flameup --daemon --interval 60\n\n"
    "  flameup --list\n\n"
    "  flameup --restore Backup_2024-01-01_12-00-00 --restore-to ~/Restored\n\n"
    "  flameup --delete Backup_2024-01-01_12-00-00"
)


def _fail(message: str, *, code: int = 1) -> NoReturn:
    typer.secho(message, fg=typer.colors.RED, err=True)
    raise typer.Exit(code=code)


def _report_failure(
    logger: Logger,
    result: OperationResult,
    *,
    label: str,
) -> NoReturn:
    logger.bind(action=result.action).info(
        "command-failed",
        kind=result.kind.value if result.kind else None,
        error=result.message,
    )
    _fail(f"{label}: {result.message}")


def _emit_catalog(service: SnapshotService) -> None:
    """Print the catalog newest first with per-snapshot sizes."""

    catalog = service.list()
    root = service.backup_root
    if not len(catalog):
        typer.echo(f"No backups found in: {root}")
        return

    typer.secho(f"Available backups in {root}:", bold=True)
    for snapshot in catalog.newest_first():
        typer.echo(f"  {snapshot.name} (Size: {snapshot.size_bytes()} bytes)")


def _prepare_root(config: BackupConfig) -> None:
    created = ensure_backup_root(config.backup_root)
    if created and config.verbose:
        typer.echo(f"Created backup directory: {config.backup_root}")


def _run_locked(
    config: BackupConfig,
    service: SnapshotService,
    logger: Logger,
) -> None:
    """Dispatch one-shot mutations while holding the root lock."""

    with RootLock(build_lock_path(config.backup_root)):
        if config.restore_name is not None:
            result = service.restore(config.restore_name, config.restore_to)
            if not result.ok:
                _report_failure(logger, result, label="Error during restore")
            typer.secho(
                f"Restored backup '{result.snapshot}' to: {result.path}",
                fg=typer.colors.GREEN,
            )
            return

        if config.delete_name is not None:
            result = service.delete(config.delete_name)
            if not result.ok:
                _report_failure(logger, result, label="Error deleting backup")
            typer.secho(
                f"Deleted backup: {result.snapshot}",
                fg=typer.colors.GREEN,
            )
            return

        if config.verbose:
            typer.echo("Performing instant backup...")
        result = service.perform_backup()
        for name in result.evicted:
            if config.verbose:
                typer.echo(f"Deleted old backup: {name}")
        if not result.ok:
            _report_failure(logger, result, label="Error during backup")
        typer.secho(f"Created backup: {result.snapshot}", fg=typer.colors.GREEN)


def _run_daemon(
    config: BackupConfig,
    service: SnapshotService,
    logger: Logger,
) -> None:
    """Run backup cycles until the process is interrupted."""

    typer.secho("Starting backup daemon...", bold=True)
    typer.echo(f"Backup interval: {config.interval_minutes} minutes")
    typer.echo(f"Max backups: {config.max_backups}")
    typer.echo(f"Backup directory: {config.backup_root}")
    typer.echo("Press Ctrl+C to stop...")

    def _cycle() -> OperationResult:
        result = service.perform_backup()
        if result.ok:
            typer.secho(
                f"Created backup: {result.snapshot}",
                fg=typer.colors.GREEN,
            )
        else:
            typer.secho(
                f"Backup failed, will retry in {config.interval_minutes} "
                f"minutes: {result.message}",
                fg=typer.colors.YELLOW,
                err=True,
            )
        return result

    scheduler = BackupScheduler(
        _cycle,
        config.interval,
        clock=time.monotonic,
        sleep=time.sleep,
        logger=logger.bind(component="scheduler"),
    )
    with RootLock(build_lock_path(config.backup_root)):
        try:
            scheduler.run()
        except KeyboardInterrupt:
            logger.info("daemon-stopped", cycles=scheduler.cycles)
            typer.echo("Backup daemon stopped.")


def create_app() -> "typer.Typer":
    """Return the Typer application powering the ``flameup`` CLI.

    Example:
        >>> from typer.testing import CliRunner
        >>> result = CliRunner().invoke(create_app(), ["--help"])
        >>> result.exit_code
        0
    """

    app = typer.Typer(
        help=_app_help,
        epilog=_EPILOG,
        add_completion=False,
        rich_markup_mode="rich",
    )

    @app.command(help=_app_help, epilog=_EPILOG)
    def main(  # noqa: PLR0913 - CLI surface area intentionally explicit
        ctx: typer.Context,
        path: Path | None = typer.Option(
            None,
            "--path",
            "-p",
            help="Source path to back up (overrides the config file).",
        ),
        config_file: Path | None = typer.Option(
            None,
            "--config",
            "-c",
            help="File whose first path line names the source (default: paths.txt).",
        ),
        output: Path | None = typer.Option(
            None,
            "--output",
            "-o",
            help="Backup output directory (default: CopiedFiles).",
        ),
        max_backups: int | None = typer.Option(
            None,
            "--max",
            "-m",
            help="Maximum number of backups to keep (default: 10).",
        ),
        interval: int | None = typer.Option(
            None,
            "--interval",
            "-i",
            help="Backup interval in minutes for daemon mode (default: 30).",
        ),
        daemon: bool = typer.Option(
            False,
            "--daemon",
            "-d",
            help="Run continuously, backing up every interval.",
        ),
        now: bool = typer.Option(
            False,
            "--now",
            "-n",
            help="Perform one backup and exit.",
        ),
        list_backups: bool = typer.Option(
            False,
            "--list",
            "-l",
            help="List all available backups.",
        ),
        restore: str | None = typer.Option(
            None,
            "--restore",
            "-r",
            metavar="NAME",
            help="Restore a specific backup by name.",
        ),
        restore_to: Path | None = typer.Option(
            None,
            "--restore-to",
            help="Target path for restore (required with --restore).",
        ),
        delete: str | None = typer.Option(
            None,
            "--delete",
            metavar="NAME",
            help="Delete a specific backup by name.",
        ),
        verbose: bool = typer.Option(
            False,
            "--verbose",
            "-v",
            help="Report progress and evictions.",
        ),
        log_level: str | None = typer.Option(
            None,
            "--log-level",
            help="Override the logging level (DEBUG/INFO/WARNING/ERROR).",
        ),
        show_config: bool = typer.Option(
            False,
            "--show-config",
            help="Print the effective configuration as TOML and exit.",
        ),
    ) -> None:
        cli_overrides = {
            "source_path": path,
            "config_file": config_file,
            "backup_root": output,
            "max_backups": max_backups,
            "interval_minutes": interval,
            "verbose": verbose or None,
            "log_level": log_level,
            "daemon": daemon,
            "instant": now,
            "list_backups": list_backups,
            "restore_name": restore,
            "restore_to": restore_to,
            "delete_name": delete,
        }
        try:
            config = load_config(
                env_config=env_overrides(),
                cli_overrides=cli_overrides,
            )
        except FlameUpError as exc:
            _fail(f"Error: {exc}")

        configure_logging(
            level=config.effective_log_level,
            log_dir=config.log_dir,
        )
        logger = get_logger(__name__, command="flameup")

        if show_config:
            typer.echo(render_config(config), nl=False)
            return

        service = SnapshotService(config, logger=logger)

        if config.list_backups:
            try:
                _emit_catalog(service)
            except FlameUpError as exc:
                _fail(f"Error listing backups: {exc}")
            return

        if config.restore_name is not None and config.restore_to is None:
            _fail("Error: --restore-to <path> is required when using --restore")

        mutating = (
            config.restore_name is not None
            or config.delete_name is not None
            or config.instant
        )
        if not mutating and not config.daemon:
            typer.echo(ctx.get_help())
            raise typer.Exit(code=1)

        try:
            _prepare_root(config)
            if mutating:
                _run_locked(config, service, logger)
            else:
                _run_daemon(config, service, logger)
        except FlameUpError as exc:
            logger.info("command-failed", kind=exc.kind.value, error=str(exc))
            _fail(f"Error: {exc}")

    return app


__all__ = ["create_app"]
