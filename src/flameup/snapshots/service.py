"""Service layer coordinating snapshot lifecycle operations."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable

from flameup.core.config import BackupConfig
from flameup.core.logging import Logger, get_logger
from flameup.core.paths import resolve_source_path
from flameup.errors import CopyError, ErrorKind, FlameUpError, SourceMissingError
from flameup.snapshots.catalog import SnapshotCatalog, scan_catalog
from flameup.snapshots.naming import local_now, make_name
from flameup.snapshots.operations import (
    create_snapshot,
    delete_snapshot,
    restore_snapshot,
)
from flameup.snapshots.retention import enforce_retention

__all__ = ["OperationResult", "SnapshotService"]


@dataclass(frozen=True, slots=True)
class OperationResult:
    """Outcome of a snapshot operation.

    Example:
        >>> OperationResult(action="backup", ok=True).kind is None
        True
    """

    action: str
    ok: bool
    snapshot: str | None = None
    path: Path | None = None
    error: FlameUpError | None = None
    evicted: tuple[str, ...] = ()

    @property
    def kind(self) -> ErrorKind | None:
        return None if self.error is None else self.error.kind

    @property
    def message(self) -> str:
        return "" if self.error is None else str(self.error)


class SnapshotService:
    """Run backups, listings, restores, and deletions for one config."""

    def __init__(
        self,
        config: BackupConfig,
        *,
        now: Callable[[], datetime] | None = None,
        logger: Logger | None = None,
    ) -> None:
        self._config = config
        self._now = now or local_now
        self._logger = logger or get_logger(
            __name__,
            component="snapshot-service",
        )

    @property
    def config(self) -> BackupConfig:
        return self._config

    @property
    def backup_root(self) -> Path:
        return self._config.backup_root

    def resolve_source(self) -> Path:
        """Return the source directory, re-reading the path file each call."""

        return resolve_source_path(self._config)

    def perform_backup(self) -> OperationResult:
        """Evict old snapshots then copy the source into a new one."""

        config = self._config
        log = self._logger.bind(action="backup")
        evicted: list[str] = []
        name: str | None = None
        try:
            source = self.resolve_source()
            if not source.is_dir():
                raise SourceMissingError(
                    f"Source directory does not exist: {source}"
                )
            evicted = enforce_retention(
                config.backup_root,
                config.max_backups,
                verbose=config.verbose,
                logger=log,
            )
            name = make_name(self._now())
            destination = config.backup_root / name
            log.info(
                "snapshot-copy-started",
                source=str(source),
                destination=str(destination),
            )
            create_snapshot(source, destination)
        except FlameUpError as exc:
            return self._failure(log, "backup", exc, name, evicted)
        except OSError as exc:
            wrapped = CopyError(f"Backup failed: {exc}")
            wrapped.__cause__ = exc
            return self._failure(log, "backup", wrapped, name, evicted)

        log.info("snapshot-created", snapshot=name, evicted=evicted)
        return OperationResult(
            action="backup",
            ok=True,
            snapshot=name,
            path=destination,
            evicted=tuple(evicted),
        )

    def list(self) -> SnapshotCatalog:
        """Return a fresh scan of the backup root."""

        return scan_catalog(self._config.backup_root)

    def restore(self, name: str, target: Path) -> OperationResult:
        """Restore snapshot ``name`` into ``target``."""

        log = self._logger.bind(action="restore")
        try:
            restored = restore_snapshot(name, self._config.backup_root, target)
        except FlameUpError as exc:
            return self._failure(log, "restore", exc, name)
        log.info("snapshot-restored", snapshot=name, target=str(restored))
        return OperationResult(
            action="restore",
            ok=True,
            snapshot=name,
            path=restored,
        )

    def delete(self, name: str) -> OperationResult:
        """Delete snapshot ``name``."""

        log = self._logger.bind(action="delete")
        try:
            removed = delete_snapshot(name, self._config.backup_root)
        except FlameUpError as exc:
            return self._failure(log, "delete", exc, name)
        log.info("snapshot-deleted", snapshot=name)
        return OperationResult(
            action="delete",
            ok=True,
            snapshot=name,
            path=removed,
        )

    @staticmethod
    def _failure(
        log: Logger,
        action: str,
        error: FlameUpError,
        name: str | None,
        evicted: list[str] | None = None,
    ) -> OperationResult:
        log.info(
            f"{action}-failed",
            snapshot=name,
            kind=error.kind.value,
            error=str(error),
        )
        return OperationResult(
            action=action,
            ok=False,
            snapshot=name,
            error=error,
            evicted=tuple(evicted or ()),
        )
