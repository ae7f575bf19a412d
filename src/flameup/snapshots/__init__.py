"""Snapshot lifecycle package for :mod:`flameup`."""

from __future__ import annotations

from .catalog import Snapshot, SnapshotCatalog, filter_snapshot_names, scan_catalog
from .locks import RootLock, build_lock_path
from .naming import (
    SNAPSHOT_PREFIX,
    is_snapshot_name,
    local_now,
    make_name,
    parse_name,
)
from .operations import create_snapshot, delete_snapshot, restore_snapshot
from .retention import enforce_retention
from .scheduler import BackupScheduler, CycleReport, SchedulerState
from .service import OperationResult, SnapshotService

__all__ = [
    "BackupScheduler",
    "CycleReport",
    "OperationResult",
    "RootLock",
    "SNAPSHOT_PREFIX",
    "SchedulerState",
    "Snapshot",
    "SnapshotCatalog",
    "SnapshotService",
    "build_lock_path",
    "create_snapshot",
    "delete_snapshot",
    "enforce_retention",
    "filter_snapshot_names",
    "is_snapshot_name",
    "local_now",
    "make_name",
    "parse_name",
    "restore_snapshot",
    "scan_catalog",
]
