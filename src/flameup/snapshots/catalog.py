"""Snapshot catalog built from a live scan of the backup root."""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterable, Iterator

from flameup.errors import CatalogError
from flameup.snapshots.naming import is_snapshot_name, parse_name

__all__ = [
    "Snapshot",
    "SnapshotCatalog",
    "filter_snapshot_names",
    "scan_catalog",
]


@dataclass(frozen=True, slots=True)
class Snapshot:
    """A snapshot directory under the backup root.

    Example:
        >>> from pathlib import Path
        >>> snap = Snapshot(
        ...     name="Backup_2024-01-01_00-00-00",
        ...     path=Path("/tmp/CopiedFiles/Backup_2024-01-01_00-00-00"),
        ... )
        >>> snap.timestamp.year
        2024
    """

    name: str
    path: Path

    @property
    def timestamp(self) -> datetime | None:
        """Return the creation time encoded in the snapshot name."""

        return parse_name(self.name)

    def size_bytes(self) -> int:
        """Return the total size of regular files inside the snapshot."""

        total = 0
        for directory, _, files in os.walk(self.path):
            for filename in files:
                candidate = Path(directory) / filename
                if candidate.is_symlink():
                    continue
                try:
                    total += candidate.stat().st_size
                except FileNotFoundError:  # pragma: no cover - raced removal
                    continue
        return total


@dataclass(frozen=True, slots=True)
class SnapshotCatalog:
    """Materialized view over the snapshots found in ``root``."""

    root: Path
    snapshots: tuple[Snapshot, ...] = ()

    def __len__(self) -> int:
        return len(self.snapshots)

    def __iter__(self) -> Iterator[Snapshot]:
        return iter(self.oldest_first())

    def oldest_first(self) -> list[Snapshot]:
        """Return snapshots sorted by ascending name."""

        return sorted(self.snapshots, key=lambda snap: snap.name)

    def newest_first(self) -> list[Snapshot]:
        """Return snapshots sorted by descending name."""

        return sorted(self.snapshots, key=lambda snap: snap.name, reverse=True)

    def names(self) -> list[str]:
        """Return snapshot names, oldest first."""

        return [snap.name for snap in self.oldest_first()]

    def get(self, name: str) -> Snapshot | None:
        """Return the snapshot called ``name`` if it is catalogued."""

        for snap in self.snapshots:
            if snap.name == name:
                return snap
        return None


def filter_snapshot_names(names: Iterable[str]) -> list[str]:
    """Keep only the entry names that identify snapshots.

    Example:
        >>> filter_snapshot_names(["Backup_2024-01-01_00-00-00", "notes.txt"])
        ['Backup_2024-01-01_00-00-00']
    """

    return [name for name in names if is_snapshot_name(name)]


def scan_catalog(root: Path) -> SnapshotCatalog:
    """Scan ``root`` and return the snapshots it contains.

    A missing root yields an empty catalog: the root is only created by the
    first backup, so listing before then is a normal state. A ``Backup_*``
    symlink pointing at a directory is listed like any other snapshot.

    Raises:
        CatalogError: If the root exists but cannot be listed.
    """

    root = Path(root)
    if not root.exists():
        return SnapshotCatalog(root=root)
    if not root.is_dir():
        raise CatalogError(f"Backup root is not a directory: {root}")

    try:
        entries = [entry for entry in root.iterdir() if entry.is_dir()]
    except OSError as exc:
        raise CatalogError(f"Failed listing backup root {root}: {exc}") from exc

    by_name = {entry.name: entry for entry in entries}
    snapshots = tuple(
        Snapshot(name=name, path=by_name[name])
        for name in filter_snapshot_names(sorted(by_name))
    )
    return SnapshotCatalog(root=root, snapshots=snapshots)
